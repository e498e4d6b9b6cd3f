from __future__ import annotations
import logging, time
from dataclasses import dataclass
from datetime import datetime, timezone
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from hoursdash.clockify.client import ClockifyClient
from hoursdash.errors import ClockifyApiError, NoWorkspaceError, NotConfiguredError
from hoursdash.sync.aggregator import aggregate
from hoursdash.sync.applier import SyncReport, apply_aggregates
from hoursdash.sync.resolver import ClientResolver

@dataclass
class SyncOutcome:
    ok: bool
    message: str
    report: SyncReport | None = None

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def year_to_date_window(now: datetime) -> tuple[datetime, datetime]:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    start = datetime(now.year, 1, 1, tzinfo=now.tzinfo)
    return start, now

def pick_workspace(workspaces: list[dict], preferred_id: str | None = None) -> str:
    if not workspaces:
        raise NoWorkspaceError("No Clockify workspace found")
    if preferred_id:
        for ws in workspaces:
            if ws.get("id") == preferred_id:
                return preferred_id
        raise NoWorkspaceError(f"Configured Clockify workspace {preferred_id} not found")
    workspace_id = workspaces[0].get("id")
    if not workspace_id:
        raise NoWorkspaceError("No Clockify workspace found")
    return workspace_id

def run_sync(client: ClockifyClient, engine: Engine, now: datetime | None = None, dry_run: bool = False) -> SyncReport:
    """Fetch year-to-date billable hours and write them to the matching customers.

    Remote and database failures propagate; nothing is written unless every
    fetch succeeded, and the writes themselves are all-or-nothing.
    """
    log = logging.getLogger("sync")
    if not client.is_configured():
        raise NotConfiguredError("Clockify not configured")

    now = now or _utcnow()
    t0 = time.time()

    user = client.get_current_user()
    workspace_id = pick_workspace(client.list_workspaces(), client.settings.workspace_id)
    start, end = year_to_date_window(now)
    log.info("Syncing billable hours from %s to %s workspace=%s", start.date(), end.date(), workspace_id)

    projects = client.list_projects(workspace_id)
    clients = client.list_clients(workspace_id)
    entries = client.fetch_all_entries(workspace_id, user["id"], start, end)

    resolver = ClientResolver(projects, clients)
    aggregates = aggregate(
        entries,
        resolver.resolve,
        billable_tag_ids=client.settings.billable_tag_ids,
        now=now,
    )
    log.info("Aggregated entries=%s projects=%s clients_with_hours=%s", len(entries), len(projects), len(aggregates))

    report = apply_aggregates(engine, aggregates, now=now, dry_run=dry_run)
    log.info(
        "Sync completed. updated=%s unmatched=%s dry_run=%s elapsed=%ss",
        report.updated_count, len(report.unmatched_client_names), dry_run, int(time.time() - t0),
    )
    return report

def sync_and_report(client: ClockifyClient, engine: Engine, now: datetime | None = None, dry_run: bool = False) -> SyncOutcome:
    """Run the sync and turn any failure into an operator-facing message."""
    log = logging.getLogger("sync")
    try:
        report = run_sync(client, engine, now=now, dry_run=dry_run)
    except NotConfiguredError:
        return SyncOutcome(ok=False, message="Clockify not configured")
    except NoWorkspaceError as exc:
        return SyncOutcome(ok=False, message=str(exc))
    except ClockifyApiError as exc:
        log.error("Clockify sync error: %s", exc)
        return SyncOutcome(ok=False, message=f"Failed to sync: {exc}")
    except SQLAlchemyError as exc:
        log.exception("Clockify sync error while writing customers: %s", exc)
        return SyncOutcome(ok=False, message="Failed to sync: database error")

    verb = "Would sync" if dry_run else "Synced"
    message = f"{verb} {report.updated_count} customers with billable hours from Clockify"
    if report.unmatched_client_names:
        message += f" (unmatched clients: {', '.join(report.unmatched_client_names)})"
    return SyncOutcome(ok=True, message=message, report=report)
