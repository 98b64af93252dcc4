"""Unit tests for the document catalog and validity computation."""

from datetime import date

import pytest

from backend.compliance.catalog.documents import (
    A1_CERTIFICATE,
    DEFAULT_CATALOG,
    LIABILITY_INSURANCE,
    SOKA_BAU,
    TRADE_REGISTRATION,
    get_document_type,
)
from backend.compliance.catalog.validity import compute_valid_to, is_expired, is_expiring
from backend.compliance.errors import ErrorKind, UnknownDocumentType
from backend.compliance.models import EndOfYear, FixedDays, NoExpiry


def test_fixed_days_adds_calendar_days() -> None:
    """Test that FixedDays(365) from 2025-03-01 ends on 2026-03-01."""
    assert compute_valid_to(FixedDays(days=365), date(2025, 3, 1)) == date(2026, 3, 1)


def test_fixed_days_crosses_leap_day() -> None:
    """Test that day arithmetic counts February 29."""
    assert compute_valid_to(FixedDays(days=365), date(2024, 1, 1)) == date(2024, 12, 31)


def test_end_of_year() -> None:
    """Test that EndOfYear ends on December 31 of the start year."""
    assert compute_valid_to(EndOfYear(), date(2025, 3, 1)) == date(2025, 12, 31)
    assert compute_valid_to(EndOfYear(), date(2025, 12, 31)) == date(2025, 12, 31)


def test_no_expiry() -> None:
    """Test that NoExpiry yields no end date."""
    assert compute_valid_to(NoExpiry(), date(2025, 3, 1)) is None


def test_fixed_days_must_be_positive() -> None:
    """Test that a zero-day validity is rejected at construction."""
    with pytest.raises(ValueError):
        FixedDays(days=0)


def test_is_expired_is_strictly_after_valid_to() -> None:
    """Test that a document is still valid on its last day."""
    valid_to = date(2025, 3, 31)

    assert not is_expired(valid_to, date(2025, 3, 31))
    assert is_expired(valid_to, date(2025, 4, 1))
    assert not is_expired(None, date(2099, 1, 1))


def test_is_expiring_window_is_inclusive() -> None:
    """Test the warning window boundaries."""
    valid_to = date(2025, 3, 31)

    assert is_expiring(valid_to, date(2025, 3, 1), 30)
    assert not is_expiring(valid_to, date(2025, 2, 28), 30)
    assert is_expiring(valid_to, date(2025, 3, 31), 30)
    assert not is_expiring(valid_to, date(2025, 4, 1), 30)
    assert not is_expiring(None, date(2025, 3, 1), 30)


def test_catalog_lookup() -> None:
    """Test catalog lookups and validity strategies."""
    assert get_document_type(TRADE_REGISTRATION).validity == NoExpiry()
    assert DEFAULT_CATALOG.get(LIABILITY_INSURANCE).validity == FixedDays(days=365)
    assert DEFAULT_CATALOG.get(SOKA_BAU).validity == EndOfYear()
    assert DEFAULT_CATALOG.get(A1_CERTIFICATE).validity == FixedDays(days=180)
    assert A1_CERTIFICATE in DEFAULT_CATALOG
    assert len(DEFAULT_CATALOG.codes()) == len(DEFAULT_CATALOG.all()) == 12


def test_catalog_unknown_code_raises() -> None:
    """Test that unknown codes raise UnknownDocumentType."""
    with pytest.raises(UnknownDocumentType) as exc_info:
        DEFAULT_CATALOG.get("passport")

    assert exc_info.value.kind == ErrorKind.unknown_document_type
    assert exc_info.value.code == "passport"
    assert "passport" not in DEFAULT_CATALOG
