#!/usr/bin/env python3
"""Clockify -> customers.hours_used sync.

Reads the year-to-date billable time entries of the Clockify account owning
the API key, totals them per client and writes the totals onto the matching
customers in one transaction.

Examples:
  python scripts/run_clockify_sync.py
  python scripts/run_clockify_sync.py --dry-run
  python scripts/run_clockify_sync.py --config config/config.example.yaml --report
"""

from __future__ import annotations

import argparse
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from hoursdash.clockify.client import ClockifyClient
from hoursdash.config import ClockifySettings, load_config
from hoursdash.db.connection import get_engine
from hoursdash.db.queries import fetch_customer_usage
from hoursdash.errors import SyncError
from hoursdash.sync.aggregator import summarize_entries
from hoursdash.sync.sync_runner import pick_workspace, sync_and_report, year_to_date_window
from hoursdash.utils.logging import configure_logging


def print_summary(client: ClockifyClient) -> None:
    user = client.get_current_user()
    workspace_id = pick_workspace(client.list_workspaces(), client.settings.workspace_id)
    start, end = year_to_date_window(datetime.now(timezone.utc))
    entries = client.fetch_all_entries(workspace_id, user["id"], start, end)
    summary = summarize_entries(entries, now=end)
    print(f"Range: {start.date()} .. {end.date()} | Entries: {summary.entries}")
    print(
        f"Total: {summary.total_hours}h | Billable: {summary.billable_hours}h"
        f" | Non-billable: {summary.non_billable_hours}h"
    )
    for project_id, hours in sorted(summary.project_hours.items(), key=lambda kv: kv[1], reverse=True):
        print(f"  {project_id}: {hours}h")


def print_usage(engine) -> None:
    with engine.connect() as conn:
        rows = fetch_customer_usage(conn)
    for r in rows:
        pct = "n/a" if r["usage_percentage"] is None else f"{r['usage_percentage']}%"
        print(
            f"{r['customer_name']}: used {r['hours_used']}h of {r['hours_purchased']}h"
            f" | remaining {r['hours_remaining']}h | {pct}"
        )


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync Clockify billable hours into customers.hours_used")
    parser.add_argument("--config", default=os.path.join("config", "config.example.yaml"), help="YAML config path")
    parser.add_argument("--env-file", default=".env", help="Path to .env file")
    parser.add_argument("--dry-run", action="store_true", help="Compute matches without writing")
    parser.add_argument("--summary", action="store_true", help="Print total/billable hours before syncing")
    parser.add_argument("--report", action="store_true", help="Print customer hour balances after syncing")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    args = parser.parse_args()

    load_dotenv(Path(args.env_file))
    configure_logging(args.log_level)
    log = logging.getLogger("run_clockify_sync")

    cfg = load_config(args.config) if Path(args.config).exists() else {}
    client = ClockifyClient(ClockifySettings.from_config(cfg))
    engine = get_engine()

    if args.summary and client.is_configured():
        try:
            print_summary(client)
        except SyncError as exc:
            log.error("Summary failed: %s", exc)

    outcome = sync_and_report(client, engine, dry_run=args.dry_run)
    print(outcome.message)
    if outcome.report and outcome.report.ambiguous_client_names:
        print(f"Ambiguous matches (lowest id used): {', '.join(outcome.report.ambiguous_client_names)}")

    if args.report:
        try:
            print_usage(engine)
        except SQLAlchemyError as exc:
            log.error("Could not read customer usage: %s", exc)

    return 0 if outcome.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
