"""Licensing registry records, ingestion and client protocol."""

from licencewatch.registry.normalizer import (
    is_valid_licence_number,
    normalize_licence_number,
    normalize_licence_response,
    parse_registry_date,
)
from licencewatch.registry.protocol import RegistryClient
from licencewatch.registry.types import (
    PROFESSIONAL_CATEGORIES,
    CpcDetails,
    Disqualification,
    Endorsement,
    EntitlementCategory,
    LicenceEnquiry,
    LicenceNotFoundError,
    LicenceRecord,
    MalformedRegistryResponseError,
    RegistryAccessDeniedError,
    RegistryAuthenticationError,
    RegistryConnectionError,
    RegistryError,
    RegistryRateLimitError,
    RegistryRequestError,
    RegistryServerError,
    RegistryUnavailableError,
    TachographDetails,
    error_for_status,
)

__all__ = [
    # Records
    "LicenceRecord",
    "EntitlementCategory",
    "Endorsement",
    "Disqualification",
    "CpcDetails",
    "TachographDetails",
    "PROFESSIONAL_CATEGORIES",
    # Ingestion
    "normalize_licence_response",
    "normalize_licence_number",
    "is_valid_licence_number",
    "parse_registry_date",
    # Client
    "RegistryClient",
    "LicenceEnquiry",
    # Errors
    "RegistryError",
    "RegistryRequestError",
    "RegistryAuthenticationError",
    "RegistryAccessDeniedError",
    "LicenceNotFoundError",
    "RegistryRateLimitError",
    "RegistryServerError",
    "RegistryUnavailableError",
    "RegistryConnectionError",
    "MalformedRegistryResponseError",
    "error_for_status",
]
