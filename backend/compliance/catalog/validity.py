"""Validity window arithmetic for approved documents."""

from datetime import date, timedelta

from backend.compliance.models.catalog import EndOfYear, FixedDays, NoExpiry, ValidityStrategy


def compute_valid_to(strategy: ValidityStrategy, valid_from: date) -> date | None:
    """Compute the last valid day of a document approved as of valid_from.

    Returns:
        None for documents that never expire, otherwise the valid_to date
    """
    if isinstance(strategy, FixedDays):
        return valid_from + timedelta(days=strategy.days)
    if isinstance(strategy, EndOfYear):
        return date(valid_from.year, 12, 31)
    if isinstance(strategy, NoExpiry):
        return None
    raise TypeError(f"Unsupported validity strategy: {strategy!r}")


def is_expired(valid_to: date | None, today: date) -> bool:
    """True once valid_to lies in the past."""
    return valid_to is not None and valid_to < today


def is_expiring(valid_to: date | None, today: date, warning_days: int) -> bool:
    """True while valid_to is still ahead but within the warning window."""
    if valid_to is None:
        return False
    days_left = (valid_to - today).days
    return 0 <= days_left <= warning_days
