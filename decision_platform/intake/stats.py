from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Literal, Tuple

from decision_platform.policy.types import AggregatedStats, Intent

CommitmentStatus = Literal["pending", "confirmed", "completed", "cancelled"]

ACTIVE_STATUSES: Tuple[str, ...] = ("pending", "confirmed")


@dataclass(frozen=True)
class CommitmentRecord:
    intent: Intent
    status: CommitmentStatus
    created_at: datetime


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    # Weeks start on Sunday.
    days_since_sunday = (now.weekday() + 1) % 7
    return start_of_day(now) - timedelta(days=days_since_sunday)


def aggregate_stats(commitments: Iterable[CommitmentRecord], now: datetime) -> AggregatedStats:
    """
    Count active commitments in the current day and week windows.

    `now` and every `created_at` must agree on tz-awareness; windows are
    computed in whatever timezone `now` carries.
    """
    day_start = start_of_day(now)
    week_start = start_of_week(now)

    daily = 0
    weekly = {"money": 0, "time": 0, "work-change": 0, "support": 0}

    for c in commitments:
        if c.status not in ACTIVE_STATUSES:
            continue
        if c.created_at >= day_start:
            daily += 1
        if c.created_at >= week_start and c.intent in weekly:
            weekly[c.intent] += 1

    return AggregatedStats(
        daily_commitments=daily,
        weekly_money_requests=weekly["money"],
        weekly_time_blocks=weekly["time"],
        concurrent_projects=weekly["work-change"],
        weekly_support=weekly["support"],
    )
