"""Expiration risk classification and the summaries built on it."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from operator import attrgetter
from typing import Any, Callable, Iterable, TypeVar

from udi_inventory.core.models import ExpirationTier

T = TypeVar("T")

DateLike = str | date | datetime

_ONE_DAY = timedelta(days=1)


class InvalidExpirationDateError(ValueError):
    """Raised when an expiration date cannot be interpreted."""

    pass


@dataclass(frozen=True)
class ExpirationThresholds:
    """Inclusive upper bounds, in days, of the CRITICAL and WARNING tiers."""

    critical_days: int = 7
    warning_days: int = 30

    def __post_init__(self) -> None:
        if not 0 <= self.critical_days < self.warning_days:
            raise ValueError(
                f"Expected 0 <= critical_days < warning_days, "
                f"got {self.critical_days} and {self.warning_days}"
            )


DEFAULT_THRESHOLDS = ExpirationThresholds()


def _to_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise InvalidExpirationDateError(f"Missing date: {value!r}")
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise InvalidExpirationDateError(f"Unparseable date: {value!r}") from e


def days_until_expiration(expiration_date: DateLike, now: datetime | None = None) -> int:
    """Whole days from ``now`` until ``expiration_date``, rounded up.

    ``now`` is compared as-is, time of day included, so a scan in the
    afternoon sees the same expiration date as a day closer than one in
    the morning. A date without an offset is read as UTC midnight when
    ``now`` is timezone-aware.

    Args:
        expiration_date: ISO date/datetime string, date or datetime
        now: Reference instant. Defaults to the current UTC time.

    Returns:
        Signed day count, negative once expired

    Raises:
        InvalidExpirationDateError: If the date is empty or unparseable
    """
    expires_at = _to_datetime(expiration_date)
    if now is None:
        now = datetime.now(timezone.utc)

    if now.tzinfo is not None and expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    elif now.tzinfo is None and expires_at.tzinfo is not None:
        now = now.replace(tzinfo=timezone.utc)

    return math.ceil((expires_at - now) / _ONE_DAY)


def tier_for_days(days: int, thresholds: ExpirationThresholds = DEFAULT_THRESHOLDS) -> ExpirationTier:
    """Map a day count onto its tier."""
    if days < 0:
        return ExpirationTier.EXPIRED
    if days <= thresholds.critical_days:
        return ExpirationTier.CRITICAL
    if days <= thresholds.warning_days:
        return ExpirationTier.WARNING
    return ExpirationTier.GOOD


def classify_expiration(
    expiration_date: DateLike,
    now: datetime | None = None,
    thresholds: ExpirationThresholds = DEFAULT_THRESHOLDS,
) -> ExpirationTier:
    """Classify an expiration date relative to ``now``.

    Callers must filter out empty or unknown dates first; they are not
    GOOD, they are unknown.

    Examples:
        >>> classify_expiration("2024-01-08", now=datetime(2024, 1, 1))
        <ExpirationTier.CRITICAL: 'CRITICAL'>
        >>> classify_expiration("2024-01-09", now=datetime(2024, 1, 1))
        <ExpirationTier.WARNING: 'WARNING'>
    """
    return tier_for_days(days_until_expiration(expiration_date, now), thresholds)


def expiry_warnings(
    expiration_date: DateLike | None,
    now: datetime | None = None,
    soon_days: int = 30,
) -> list[str]:
    """Warnings shown while reviewing a draft before it is saved."""
    if not expiration_date:
        return []
    try:
        days = days_until_expiration(expiration_date, now)
    except InvalidExpirationDateError:
        return ["Expiration date is not a valid date."]

    if days < 0:
        return ["This item is already EXPIRED."]
    if days < soon_days:
        return [f"Expiring soon ({days} days remaining)."]
    return []


# Aggregates


_expiration_of = attrgetter("expiration_date")
_added_at_of = attrgetter("added_at")


def count_by_tier(
    records: Iterable[T],
    now: datetime | None = None,
    thresholds: ExpirationThresholds = DEFAULT_THRESHOLDS,
    key: Callable[[T], Any] = _expiration_of,
) -> dict[ExpirationTier, int]:
    """Count records per tier. Every tier is present, possibly with 0."""
    if now is None:
        now = datetime.now(timezone.utc)
    counts = {tier: 0 for tier in ExpirationTier}
    for record in records:
        counts[classify_expiration(key(record), now, thresholds)] += 1
    return counts


def partition_by_tier(
    records: Iterable[T],
    now: datetime | None = None,
    thresholds: ExpirationThresholds = DEFAULT_THRESHOLDS,
    key: Callable[[T], Any] = _expiration_of,
) -> dict[ExpirationTier, list[T]]:
    """Split records into the four tiers, keeping input order in each bucket.

    The returned dict iterates EXPIRED, CRITICAL, WARNING, GOOD, so
    chaining its values gives back every input record exactly once.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    buckets: dict[ExpirationTier, list[T]] = {tier: [] for tier in ExpirationTier}
    for record in records:
        buckets[classify_expiration(key(record), now, thresholds)].append(record)
    return buckets


def _added_timestamp(value: DateLike) -> datetime:
    try:
        added_at = _to_datetime(value)
    except InvalidExpirationDateError as e:
        raise ValueError(f"Invalid added timestamp: {value!r}") from e
    if added_at.tzinfo is None:
        added_at = added_at.replace(tzinfo=timezone.utc)
    return added_at


def sort_by_recency(
    records: Iterable[T],
    added_key: Callable[[T], Any] = _added_at_of,
) -> list[T]:
    """Newest first by added timestamp; ties keep input order.

    Timestamps without an offset are read as UTC so naive and aware
    values can be mixed.

    Raises:
        ValueError: If an added timestamp is empty or unparseable
    """
    return sorted(records, key=lambda record: _added_timestamp(added_key(record)), reverse=True)
