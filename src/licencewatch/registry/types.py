"""Type definitions for licensing registry data.

The registry returns loosely shaped JSON whose field names vary between
API versions. Everything in this module is the normalized, immutable form
produced by :mod:`licencewatch.registry.normalizer`; rule code only ever
sees these types.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any

from licencewatch.utils.exceptions import LicenceWatchError

# Goods (C) and passenger (D) categories subject to stricter medical and
# currency rules.
PROFESSIONAL_CATEGORIES: frozenset[str] = frozenset(
    {"C", "C1", "CE", "C1E", "D", "D1", "DE", "D1E"}
)


# =============================================================================
# Record Components
# =============================================================================


@dataclass(frozen=True, slots=True)
class EntitlementCategory:
    """A single entitlement category held on the licence.

    Attributes:
        code: Category code (e.g. "B", "C", "D1E").
        category_type: Registry type literal, "Full" or "Provisional".
        provisional: Whether the entitlement is provisional.
        valid_from: Date the entitlement became valid.
        valid_to: Date the entitlement expires, if it does.
        restriction_codes: Restriction codes attached to this category.
    """

    code: str
    category_type: str | None = None
    provisional: bool = False
    valid_from: date | None = None
    valid_to: date | None = None
    restriction_codes: tuple[str, ...] = ()

    @property
    def is_professional(self) -> bool:
        """Check if this is a goods or passenger vehicle category."""
        return self.code in PROFESSIONAL_CATEGORIES


@dataclass(frozen=True, slots=True)
class Endorsement:
    """A penalty endorsement on the licence."""

    code: str | None
    conviction_date: date | None = None
    offence_date: date | None = None
    penalty_points: int = 0
    description: str | None = None


@dataclass(frozen=True, slots=True)
class Disqualification:
    """A disqualification period.

    A disqualification without an end date is open-ended.
    """

    start_date: date | None = None
    end_date: date | None = None

    def is_active(self, today: date) -> bool:
        """Check if the disqualification is still in force on ``today``."""
        return self.end_date is None or self.end_date > today


@dataclass(frozen=True, slots=True)
class CpcDetails:
    """Driver Certificate of Professional Competence details."""

    cpc_number: str | None = None
    expiry_date: date | None = None
    categories: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TachographDetails:
    """Driver tachograph card details."""

    card_number: str | None = None
    expiry_date: date | None = None
    card_type: str | None = None


@dataclass(frozen=True, slots=True)
class LicenceRecord:
    """Immutable snapshot of a licence holder's registry record.

    Attributes:
        driving_licence_number: Licence number as returned by the registry.
        status_code: Upper-cased licence status code (e.g. "VALID", "REVOKED").
        licence_type: Licence type literal ("Full", "Provisional").
        categories: Entitlement categories currently held.
        endorsements: Penalty endorsements.
        disqualifications: Disqualification periods.
        restrictions: Licence-level restriction codes.
        cpc: CPC details, if requested and present.
        tachograph: Tachograph card details, if requested and present.
        issue_date: Licence issue date.
        expiry_date: Licence (photocard) expiry date.
        unparsed_expiry_date: Raw expiry value the registry sent when it could not be parsed.
        penalty_points: Total penalty points reported by the registry.
    """

    driving_licence_number: str | None = None
    status_code: str | None = None
    licence_type: str | None = None
    categories: tuple[EntitlementCategory, ...] = ()
    endorsements: tuple[Endorsement, ...] = ()
    disqualifications: tuple[Disqualification, ...] = ()
    restrictions: tuple[str, ...] = ()
    cpc: CpcDetails | None = None
    tachograph: TachographDetails | None = None
    issue_date: date | None = None
    expiry_date: date | None = None
    unparsed_expiry_date: str | None = None
    penalty_points: int | None = None

    @property
    def expiry_unreadable(self) -> bool:
        """The registry sent an expiry date that could not be parsed."""
        return self.unparsed_expiry_date is not None

    @property
    def total_penalty_points(self) -> int:
        """Reported penalty point total, else the sum over endorsements."""
        if self.penalty_points is not None:
            return self.penalty_points
        return sum(e.penalty_points for e in self.endorsements)

    @property
    def category_codes(self) -> list[str]:
        """Codes of all categories held, in registry order."""
        return [c.code for c in self.categories]

    @property
    def professional_categories(self) -> list[EntitlementCategory]:
        """Goods and passenger categories held, in registry order."""
        return [c for c in self.categories if c.is_professional]


# =============================================================================
# Requests
# =============================================================================


@dataclass(frozen=True, slots=True)
class LicenceEnquiry:
    """A request for a licence holder's full record."""

    driving_licence_number: str
    include_cpc: bool = False
    include_tacho: bool = False
    accept_partial_response: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Convert to the registry request body."""
        return {
            "drivingLicenceNumber": self.driving_licence_number,
            "includeCPC": self.include_cpc,
            "includeTacho": self.include_tacho,
            "acceptPartialResponse": str(self.accept_partial_response).lower(),
        }


# =============================================================================
# Exceptions
# =============================================================================


class RegistryError(LicenceWatchError):
    """Base exception for licensing registry failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RegistryRequestError(RegistryError):
    """Raised when the registry rejects the request as malformed."""


class RegistryAuthenticationError(RegistryError):
    """Raised when registry credentials are rejected."""


class RegistryAccessDeniedError(RegistryError):
    """Raised when the API key lacks permission for the enquiry."""


class LicenceNotFoundError(RegistryError):
    """Raised when the registry has no record for the licence number."""


class RegistryRateLimitError(RegistryError):
    """Raised when the registry rate limit is exceeded."""


class RegistryServerError(RegistryError):
    """Raised when the registry fails internally."""


class RegistryUnavailableError(RegistryError):
    """Raised when the registry is temporarily unavailable."""


class RegistryConnectionError(RegistryError):
    """Raised when no response was received from the registry."""


class MalformedRegistryResponseError(RegistryError):
    """Raised when the registry response is not a licence record."""


@dataclass(frozen=True, slots=True)
class _StatusMapping:
    error_class: type[RegistryError]
    message: str
    include_detail: bool = False


_STATUS_ERRORS: dict[int, _StatusMapping] = {
    400: _StatusMapping(RegistryRequestError, "Invalid request", include_detail=True),
    401: _StatusMapping(
        RegistryAuthenticationError, "Registry authentication failed - check credentials"
    ),
    403: _StatusMapping(
        RegistryAccessDeniedError, "Registry access forbidden - check API key and permissions"
    ),
    404: _StatusMapping(LicenceNotFoundError, "Licence not found - check the licence number"),
    429: _StatusMapping(RegistryRateLimitError, "Registry rate limit exceeded - try again later"),
    500: _StatusMapping(RegistryServerError, "Registry server error - try again later"),
    502: _StatusMapping(RegistryUnavailableError, "Registry temporarily unavailable"),
    503: _StatusMapping(RegistryUnavailableError, "Registry temporarily unavailable"),
    504: _StatusMapping(RegistryUnavailableError, "Registry temporarily unavailable"),
}


def error_for_status(status: int, payload: Any = None) -> RegistryError:
    """Map a registry HTTP error status to a typed failure.

    Args:
        status: HTTP status code returned by the registry.
        payload: Decoded error body, if any.

    Returns:
        The RegistryError subclass instance for the status.
    """
    detail = None
    if isinstance(payload, dict):
        detail = payload.get("message") or payload.get("error")

    details: dict[str, Any] = {"status": status}
    if detail:
        details["detail"] = detail

    mapping = _STATUS_ERRORS.get(status)
    if mapping is None:
        return RegistryError(
            f"Registry error ({status}): {detail or 'Unknown error'}", details=details
        )

    message = mapping.message
    if mapping.include_detail:
        message = f"{message}: {detail or 'Bad request to registry'}"
    return mapping.error_class(message, details=details)
