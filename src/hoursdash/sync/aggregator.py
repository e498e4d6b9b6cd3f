from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Sequence

from hoursdash.clockify.durations import duration_hours
from hoursdash.clockify.models import TimeEntry
from hoursdash.sync.resolver import ClientRef


@dataclass
class ClientAggregate:
    client_id: Optional[str]
    client_name: str
    hours_total: float = 0.0
    entry_count: int = 0


@dataclass
class UsageSummary:
    total_hours: float = 0.0
    billable_hours: float = 0.0
    non_billable_hours: float = 0.0
    entries: int = 0
    project_hours: Dict[str, float] = field(default_factory=dict)


def _has_billable_tag(entry: TimeEntry, billable_tag_ids: Sequence[str]) -> bool:
    if not billable_tag_ids:
        return True
    return any(tag_id in entry.tag_ids for tag_id in billable_tag_ids)


def aggregate(
    entries: Iterable[TimeEntry],
    resolve: Callable[[TimeEntry], Optional[ClientRef]],
    to_hours: Callable[..., float] = duration_hours,
    billable_tag_ids: Sequence[str] = (),
    now: Optional[datetime] = None,
) -> Dict[str, ClientAggregate]:
    """Sum billable hours per client name.

    Non-billable entries and entries without a resolvable client are left out.
    When ``billable_tag_ids`` is given an entry must also carry one of those tags.
    Hours are kept at full precision; rounding happens when they are stored.
    """
    by_client: Dict[str, ClientAggregate] = {}
    for entry in entries:
        if not entry.billable:
            continue
        if not _has_billable_tag(entry, billable_tag_ids):
            continue
        ref = resolve(entry)
        if ref is None:
            continue
        agg = by_client.get(ref.client_name)
        if agg is None:
            agg = ClientAggregate(client_id=ref.client_id, client_name=ref.client_name)
            by_client[ref.client_name] = agg
        agg.hours_total += to_hours(entry.duration, now=now)
        agg.entry_count += 1
    return by_client


def summarize_entries(entries: Iterable[TimeEntry], now: Optional[datetime] = None) -> UsageSummary:
    total = 0.0
    billable = 0.0
    count = 0
    project_hours: Dict[str, float] = defaultdict(float)
    for entry in entries:
        count += 1
        hours = duration_hours(entry.duration, now=now)
        total += hours
        if entry.billable:
            billable += hours
        if entry.project_id:
            project_hours[entry.project_id] += hours

    return UsageSummary(
        total_hours=round(total, 2),
        billable_hours=round(billable, 2),
        non_billable_hours=round(total - billable, 2),
        entries=count,
        project_hours={k: round(v, 2) for k, v in project_hours.items()},
    )
