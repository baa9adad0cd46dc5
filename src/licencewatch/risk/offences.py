"""Offence code lookup tables.

Severity levels, the serious-offence set, offence group names and
invalidating licence statuses are defined once here and shared by every
rule, so the validity check and the scoring rules cannot drift apart.
"""

from enum import IntEnum


class OffenceSeverity(IntEnum):
    """Severity of an endorsement's offence code."""

    MINOR = 1  # Standard speeding, documentation and everything else
    MODERATE = 2  # High-speed, mobile phone, vehicle condition
    SERIOUS = 3  # Careless driving, insurance, construction & use, taking without consent
    MOST_SERIOUS = 4  # Drink/drug driving, dangerous driving, causing death


OFFENCE_SEVERITY: dict[str, OffenceSeverity] = {
    # Drink/drug driving
    "DR10": OffenceSeverity.MOST_SERIOUS,
    "DR20": OffenceSeverity.MOST_SERIOUS,
    "DR30": OffenceSeverity.MOST_SERIOUS,
    "DR40": OffenceSeverity.MOST_SERIOUS,
    "DR50": OffenceSeverity.MOST_SERIOUS,
    "DR60": OffenceSeverity.MOST_SERIOUS,
    "DR70": OffenceSeverity.MOST_SERIOUS,
    "DR80": OffenceSeverity.MOST_SERIOUS,
    # Dangerous driving
    "DD40": OffenceSeverity.MOST_SERIOUS,
    "DD60": OffenceSeverity.MOST_SERIOUS,
    "DD80": OffenceSeverity.MOST_SERIOUS,
    # Causing death by careless driving
    "CD40": OffenceSeverity.MOST_SERIOUS,
    "CD50": OffenceSeverity.MOST_SERIOUS,
    "CD60": OffenceSeverity.MOST_SERIOUS,
    # Careless driving
    "CD10": OffenceSeverity.SERIOUS,
    "CD20": OffenceSeverity.SERIOUS,
    "CD30": OffenceSeverity.SERIOUS,
    # Insurance
    "IN10": OffenceSeverity.SERIOUS,
    "IN20": OffenceSeverity.SERIOUS,
    "IN30": OffenceSeverity.SERIOUS,
    # Construction & use
    "LC20": OffenceSeverity.SERIOUS,
    "LC30": OffenceSeverity.SERIOUS,
    "LC40": OffenceSeverity.SERIOUS,
    "LC50": OffenceSeverity.SERIOUS,
    # Taking without consent
    "UT50": OffenceSeverity.SERIOUS,
    # High speed, mobile phone, vehicle condition
    "SP50": OffenceSeverity.MODERATE,
    "SP60": OffenceSeverity.MODERATE,
    "CU80": OffenceSeverity.MODERATE,
    "CU40": OffenceSeverity.MODERATE,
}

# Serious offences are exactly the most-serious severity tier.
SERIOUS_OFFENCE_CODES: frozenset[str] = frozenset(
    code for code, level in OFFENCE_SEVERITY.items() if level == OffenceSeverity.MOST_SERIOUS
)

OFFENCE_GROUP_NAMES: dict[str, str] = {
    "SP": "speeding",
    "DR": "drink/drug driving",
    "DD": "dangerous driving",
    "CD": "careless driving",
    "IN": "insurance",
    "LC": "construction & use",
    "CU": "mobile phone/seatbelt",
    "MS": "failure to provide information",
    "UT": "unauthorized taking",
}

INVALID_STATUS_CODES: frozenset[str] = frozenset(
    {"REVOKED", "SURRENDERED", "REFUSED", "DISQUALIFIED"}
)

# Trailer entitlements and the base category left behind when one is lost.
TRAILER_DOWNGRADES: tuple[tuple[str, str], ...] = (
    ("CE", "C"),
    ("C1E", "C1"),
    ("DE", "D"),
    ("D1E", "D1"),
)


def offence_severity(code: str | None) -> OffenceSeverity:
    """Classify an offence code; unknown or missing codes are MINOR."""
    if not code:
        return OffenceSeverity.MINOR
    return OFFENCE_SEVERITY.get(code.upper(), OffenceSeverity.MINOR)


def is_serious_offence(code: str | None) -> bool:
    """Check if an offence code is in the serious-offence set."""
    return bool(code) and code.upper() in SERIOUS_OFFENCE_CODES


def offence_group(code: str) -> str:
    """Group key of an offence code (its two-letter prefix)."""
    return code[:2].upper()


def offence_group_name(group: str) -> str:
    """Readable name for an offence group, falling back to the prefix."""
    return OFFENCE_GROUP_NAMES.get(group, group)
