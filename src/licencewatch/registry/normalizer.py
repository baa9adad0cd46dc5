"""Normalization of raw registry responses into LicenceRecord.

The registry has shipped several response shapes over time: entitlements
arrive as ``categories`` or ``entitlement``, category codes as
``categoryCode`` or ``code``, expiry as ``expiryDate`` or ``validToDate``.
All of that is resolved here, once, so that risk rules never branch on
field names. Dates that cannot be parsed are logged and treated as absent.
"""

import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from dateutil.parser import isoparse

from licencewatch.core.logging import get_logger
from licencewatch.registry.types import (
    CpcDetails,
    Disqualification,
    Endorsement,
    EntitlementCategory,
    LicenceRecord,
    MalformedRegistryResponseError,
    TachographDetails,
)

logger = get_logger(__name__)

LICENCE_NUMBER_PATTERN = re.compile(r"^[A-Z]{5}[0-9]{6}[A-Z]{2}[0-9]{2}$")


def normalize_licence_number(licence_number: str) -> str:
    """Upper-case a licence number and strip all whitespace."""
    return re.sub(r"\s", "", licence_number).upper()


def is_valid_licence_number(licence_number: str) -> bool:
    """Check a licence number against the UK format.

    Args:
        licence_number: Licence number in any case, possibly spaced.

    Returns:
        True if the cleaned number matches the expected format.
    """
    return bool(LICENCE_NUMBER_PATTERN.match(normalize_licence_number(licence_number)))


def parse_registry_date(value: Any, field_name: str) -> date | None:
    """Parse an ISO-8601 date or timestamp from the registry.

    Args:
        value: Raw value (string, date, or None).
        field_name: Field path used in the warning when parsing fails.

    Returns:
        The calendar date, or None when absent or unparseable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        logger.warning("Unparseable registry date", field=field_name, value=repr(value))
        return None
    try:
        return isoparse(value.strip()).date()
    except (ValueError, OverflowError):
        logger.warning("Unparseable registry date", field=field_name, value=value)
        return None


def normalize_licence_response(raw: Any) -> LicenceRecord:
    """Convert a raw registry response into a LicenceRecord.

    Missing collections become empty tuples and missing or unreadable
    dates become None.

    Args:
        raw: Decoded JSON body of a licence enquiry.

    Returns:
        Normalized licence record.

    Raises:
        MalformedRegistryResponseError: If the response is not an object.
    """
    if not isinstance(raw, Mapping):
        raise MalformedRegistryResponseError(
            "Registry response is not a licence record",
            details={"type": type(raw).__name__},
        )

    licence = _mapping(raw.get("licence"))
    details = _mapping(raw.get("licenceDetails"))
    driver = _mapping(raw.get("driver"))

    raw_expiry = details.get("expiryDate")
    expiry_date = parse_registry_date(raw_expiry, "licenceDetails.expiryDate")

    record = LicenceRecord(
        driving_licence_number=(
            raw.get("drivingLicenceNumber")
            or driver.get("drivingLicenceNumber")
            or details.get("licenceNumber")
        ),
        status_code=_status_code(raw, licence),
        licence_type=licence.get("type") or raw.get("licenceType"),
        categories=tuple(_categories(raw)),
        endorsements=tuple(_endorsement(e) for e in _list(raw.get("endorsements"))),
        disqualifications=tuple(
            _disqualification(d) for d in _list(raw.get("disqualifications"))
        ),
        restrictions=_restriction_codes(raw.get("restrictions"), "restrictions"),
        cpc=_cpc(raw.get("cpcDetails")),
        tachograph=_tachograph(raw.get("tachographDetails")),
        issue_date=parse_registry_date(details.get("issueDate"), "licenceDetails.issueDate"),
        expiry_date=expiry_date,
        unparsed_expiry_date=(
            str(raw_expiry) if raw_expiry not in (None, "") and expiry_date is None else None
        ),
        penalty_points=_int_or_none(raw.get("penaltyPoints")),
    )

    logger.debug(
        "Registry response normalized",
        status_code=record.status_code,
        categories=len(record.categories),
        endorsements=len(record.endorsements),
        disqualifications=len(record.disqualifications),
    )

    return record


# =============================================================================
# Field helpers
# =============================================================================


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list | tuple) else []


def _int_or_none(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Unparseable penalty points", value=repr(value))
        return None


def _status_code(raw: Mapping[str, Any], licence: Mapping[str, Any]) -> str | None:
    status = raw.get("statusCode") or licence.get("status") or raw.get("status")
    return str(status).upper() if status else None


def _categories(raw: Mapping[str, Any]) -> list[EntitlementCategory]:
    entries = raw.get("categories")
    if not isinstance(entries, list):
        entries = raw.get("entitlement")
    categories: list[EntitlementCategory] = []
    for entry in _list(entries):
        if not isinstance(entry, Mapping):
            continue
        code = entry.get("categoryCode") or entry.get("code")
        if not code:
            continue
        category_type = entry.get("categoryType")
        categories.append(
            EntitlementCategory(
                code=str(code).upper(),
                category_type=category_type,
                provisional=(
                    category_type == "Provisional" or entry.get("provisionalEntitlement") is True
                ),
                valid_from=parse_registry_date(
                    entry.get("validFromDate") or entry.get("fromDate"),
                    f"categories.{code}.validFromDate",
                ),
                valid_to=parse_registry_date(
                    entry.get("expiryDate") or entry.get("validToDate"),
                    f"categories.{code}.validToDate",
                ),
                restriction_codes=_restriction_codes(
                    entry.get("restrictions"), f"categories.{code}.restrictions"
                ),
            )
        )
    return categories


def _restriction_codes(values: Any, field_name: str) -> tuple[str, ...]:
    codes: list[str] = []
    for value in _list(values):
        if isinstance(value, Mapping):
            value = value.get("restrictionCode") or value.get("restrictionLiteral")
        code = str(value).strip() if value is not None else ""
        if not code:
            logger.warning("Restriction without a code ignored", field=field_name)
            continue
        codes.append(code)
    return tuple(codes)


def _endorsement(entry: Any) -> Endorsement:
    entry = _mapping(entry)
    code = entry.get("code") or entry.get("offenceCode")
    return Endorsement(
        code=str(code).upper() if code else None,
        conviction_date=parse_registry_date(
            entry.get("dateOfConviction") or entry.get("convictionDate"),
            "endorsements.dateOfConviction",
        ),
        offence_date=parse_registry_date(
            entry.get("dateOfOffence") or entry.get("offenceDate"),
            "endorsements.dateOfOffence",
        ),
        penalty_points=_int_or_none(entry.get("penaltyPoints")) or 0,
        description=entry.get("description"),
    )


def _disqualification(entry: Any) -> Disqualification:
    entry = _mapping(entry)
    return Disqualification(
        start_date=parse_registry_date(entry.get("startDate"), "disqualifications.startDate"),
        end_date=parse_registry_date(entry.get("endDate"), "disqualifications.endDate"),
    )


def _cpc(value: Any) -> CpcDetails | None:
    if not isinstance(value, Mapping):
        return None
    return CpcDetails(
        cpc_number=value.get("cpcNumber"),
        expiry_date=parse_registry_date(value.get("expiryDate"), "cpcDetails.expiryDate"),
        categories=tuple(str(c) for c in _list(value.get("categories"))),
    )


def _tachograph(value: Any) -> TachographDetails | None:
    if not isinstance(value, Mapping):
        return None
    return TachographDetails(
        card_number=value.get("cardNumber"),
        expiry_date=parse_registry_date(
            value.get("expiryDate"), "tachographDetails.expiryDate"
        ),
        card_type=value.get("cardType"),
    )
