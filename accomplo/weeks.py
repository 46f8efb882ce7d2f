"""
Week bucketing and the Sunday-evening reveal gate.

Accomplishments are grouped into Sunday..Saturday weeks in the wall-clock
time of ``now``. Past weeks are always revealed; the current week stays
locked (count visible, content hidden) until Sunday 18:00.
"""
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, timezone
from typing import Iterable

REVEAL_WEEKDAY = 6   # datetime.weekday(): Monday=0 .. Sunday=6
REVEAL_HOUR = 18


@dataclass
class WeekBucket:
    week_start: datetime
    week_end: datetime
    accomplishments: list = field(default_factory=list)
    is_current_week: bool = False
    is_revealed: bool = True

    @property
    def count(self) -> int:
        return len(self.accomplishments)


# ---------- helpers ----------

def month_year(created_at: datetime) -> str:    # 2025-09-13T.. -> "2025-09"
    return created_at.isoformat()[:7]

def week_start(instant: datetime) -> datetime:
    """Sunday 00:00 of the week containing ``instant`` (tzinfo preserved)."""
    days_since_sunday = (instant.weekday() + 1) % 7
    day = instant.date() - timedelta(days=days_since_sunday)
    return datetime.combine(day, time.min, tzinfo=instant.tzinfo)

def week_end(start: datetime) -> datetime:
    """Saturday 23:59:59.999 of the week beginning at ``start``."""
    day = start.date() + timedelta(days=6)
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=start.tzinfo)

def is_reveal_time(now: datetime) -> bool:
    return now.weekday() == REVEAL_WEEKDAY and now.hour >= REVEAL_HOUR

def _local(created_at: datetime, now: datetime) -> datetime:
    # bring created_at onto now's wall clock
    if now.tzinfo is not None:
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return created_at.astimezone(now.tzinfo)
    if created_at.tzinfo is not None:
        return created_at.astimezone().replace(tzinfo=None)
    return created_at


# ---------- bucketing ----------

def bucket_by_week(accomplishments: Iterable, now: datetime) -> list[WeekBucket]:
    """
    Group records (anything with a ``created_at`` datetime) into week buckets,
    most recent week first. Records keep their input order inside a bucket.
    """
    grouped: dict[datetime, list] = {}
    for acc in accomplishments:
        key = week_start(_local(acc.created_at, now))
        grouped.setdefault(key, []).append(acc)

    reveal_now = is_reveal_time(now)
    buckets = []
    for start in sorted(grouped, reverse=True):
        end = week_end(start)
        current = start <= now <= end
        buckets.append(WeekBucket(
            week_start=start,
            week_end=end,
            accomplishments=grouped[start],
            is_current_week=current,
            is_revealed=(not current) or reveal_now,
        ))
    return buckets
