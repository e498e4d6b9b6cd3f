from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Mapping, Optional
from sqlalchemy import text
from sqlalchemy.engine import Engine
from hoursdash.db.queries import fetch_customers_for_matching
from hoursdash.sync.aggregator import ClientAggregate

log = logging.getLogger("applier")

@dataclass(frozen=True)
class CustomerUpdate:
    customer_id: int
    client_name: str
    hours_used: float

@dataclass
class SyncReport:
    updated_count: int = 0
    unmatched_client_names: List[str] = field(default_factory=list)
    ambiguous_client_names: List[str] = field(default_factory=list)
    updates: List[CustomerUpdate] = field(default_factory=list)
    dry_run: bool = False

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def fold_name(name: Optional[str]) -> str:
    return (name or "").lower()

def round_hours(hours: float) -> float:
    # half away from zero on the decimal representation: 12.345 -> 12.35
    return float(Decimal(repr(float(hours))).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))

def _index_customers(customers: List[dict]) -> Dict[str, List[int]]:
    index: Dict[str, List[int]] = {}
    for c in customers:
        keys = {fold_name(c.get("customer_name")), fold_name(c.get("company_name"))}
        keys.discard("")
        for key in keys:
            index.setdefault(key, []).append(int(c["id"]))
    for ids in index.values():
        ids.sort()
    return index

def apply_aggregates(
    engine: Engine,
    aggregates: Mapping[str, ClientAggregate],
    now: Optional[datetime] = None,
    dry_run: bool = False,
) -> SyncReport:
    """Write each matched client's synced total to ``customers.hours_used``.

    All writes share one transaction: either every matched customer gets its
    new total or, on any error, none do. ``hours_used`` is overwritten with
    the absolute total, never incremented.
    """
    report = SyncReport(dry_run=dry_run)
    updated_at = (now or _utcnow()).isoformat()

    with engine.begin() as conn:
        index = _index_customers(fetch_customers_for_matching(conn))

        for client_name in sorted(aggregates):
            agg = aggregates[client_name]
            candidates = index.get(fold_name(client_name), [])
            if not candidates:
                log.info("No customer matches Clockify client %r (%.2f h)", client_name, agg.hours_total)
                report.unmatched_client_names.append(client_name)
                continue
            if len(candidates) > 1:
                log.warning(
                    "Clockify client %r matches customers %s; using lowest id %s",
                    client_name, candidates, candidates[0],
                )
                report.ambiguous_client_names.append(client_name)

            customer_id = candidates[0]
            if any(u.customer_id == customer_id for u in report.updates):
                log.warning("Customer %s already updated in this run; %r overwrites it", customer_id, client_name)
            hours = round_hours(agg.hours_total)
            log.info("Updating %s: %s hours from %s entries (customer_id=%s)",
                     client_name, hours, agg.entry_count, customer_id)
            if not dry_run:
                conn.execute(text("""
                    UPDATE customers
                    SET hours_used = :hours, updated_at = :updated_at
                    WHERE id = :id
                """), {"hours": hours, "updated_at": updated_at, "id": customer_id})
            report.updates.append(CustomerUpdate(customer_id=customer_id, client_name=client_name, hours_used=hours))

    report.updated_count = len({u.customer_id for u in report.updates})
    return report
