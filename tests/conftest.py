"""Pytest fixtures for Licencewatch tests."""

from datetime import UTC, date, datetime, timedelta

import pytest
import structlog

from licencewatch.config.settings import Settings
from licencewatch.registry.types import (
    CpcDetails,
    Disqualification,
    Endorsement,
    EntitlementCategory,
    LicenceRecord,
)
from licencewatch.risk.types import DriverProfile

NOW = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)
TODAY = NOW.date()


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Clock and Settings Fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation timestamp."""
    return NOW


@pytest.fixture
def today() -> date:
    """Calendar date of the fixed evaluation timestamp."""
    return TODAY


@pytest.fixture
def test_settings() -> Settings:
    """Create settings for testing."""
    return Settings(ENVIRONMENT="test", log_level="DEBUG")


# =============================================================================
# Record Builders
# =============================================================================


def days_ago(days: int) -> date:
    """Date ``days`` before the fixed evaluation date."""
    return TODAY - timedelta(days=days)


def days_ahead(days: int) -> date:
    """Date ``days`` after the fixed evaluation date."""
    return TODAY + timedelta(days=days)


def make_endorsement(
    code: str | None = "SP30",
    days_old: int | None = 400,
    points: int = 3,
) -> Endorsement:
    """Helper to create an endorsement convicted ``days_old`` days ago."""
    return Endorsement(
        code=code,
        conviction_date=days_ago(days_old) if days_old is not None else None,
        penalty_points=points,
    )


def make_category(
    code: str,
    provisional: bool = False,
    valid_to: date | None = None,
    restriction_codes: tuple[str, ...] = (),
) -> EntitlementCategory:
    """Helper to create an entitlement category."""
    return EntitlementCategory(
        code=code,
        category_type="Provisional" if provisional else "Full",
        provisional=provisional,
        valid_to=valid_to,
        restriction_codes=restriction_codes,
    )


def make_record(
    categories: tuple[str, ...] | tuple[EntitlementCategory, ...] = ("B",),
    endorsements: tuple[Endorsement, ...] = (),
    disqualifications: tuple[Disqualification, ...] = (),
    restrictions: tuple[str, ...] = (),
    status_code: str = "VALID",
    expiry_date: date | None = None,
    issue_date: date | None = None,
    cpc: CpcDetails | None = None,
    penalty_points: int | None = None,
    unparsed_expiry_date: str | None = None,
) -> LicenceRecord:
    """Helper to create a licence record that is clean unless told otherwise."""
    return LicenceRecord(
        driving_licence_number="MORGA657054SM9IJ",
        status_code=status_code,
        licence_type="Full",
        categories=tuple(
            make_category(c) if isinstance(c, str) else c for c in categories
        ),
        endorsements=endorsements,
        disqualifications=disqualifications,
        restrictions=restrictions,
        cpc=cpc,
        issue_date=issue_date,
        expiry_date=expiry_date if expiry_date is not None else days_ahead(3650),
        unparsed_expiry_date=unparsed_expiry_date,
        penalty_points=penalty_points,
    )


@pytest.fixture
def clean_record() -> LicenceRecord:
    """A valid car licence with nothing on it."""
    return make_record()


@pytest.fixture
def empty_profile() -> DriverProfile:
    """A driver profile with nothing recorded."""
    return DriverProfile()
