"""Run the daily obligation sync and deadline reminder sweep.

Usage:
    python scripts/run_deadline_sweep.py [--company ID ...] [--sync-only | --notify-only]
                                         [--today YYYY-MM-DD] [--dry-run]

Without ``--company`` every company in the database is synced. Prints a JSON
summary of the sync and sweep results to stdout.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import select

from modules.bzr.obligations import detector, notifier, repository
from modules.bzr.obligations.models import Company
from notifications.services.email import get_email_sender

logger = logging.getLogger("run_deadline_sweep")


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--company", type=int, action="append", dest="companies", help="Company id (repeatable)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--sync-only", action="store_true", help="Only detect and expire obligations")
    mode.add_argument("--notify-only", action="store_true", help="Only send deadline reminders")
    parser.add_argument("--today", type=_parse_day, help="Override today's date")
    parser.add_argument("--dry-run", action="store_true", help="Log emails instead of sending them")
    return parser


def _all_company_ids() -> List[int]:
    with repository.with_session() as session:
        return list(session.scalars(select(Company.id).order_by(Company.id)))


def run(argv: Optional[Sequence[str]] = None) -> dict:
    args = build_parser().parse_args(argv)
    summary: dict = {}
    if not args.notify_only:
        company_ids = args.companies or _all_company_ids()
        summary["sync"] = [asdict(detector.sync_obligations(cid, today=args.today)) for cid in company_ids]
    if not args.sync_only:
        sender = get_email_sender(dry_run=args.dry_run)
        summary["sweep"] = asdict(notifier.check_and_send_notifications(today=args.today, sender=sender))
    return summary


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    summary = run(argv)
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    errors = sum(len(s["errors"]) for s in summary.get("sync", []))
    sweep = summary.get("sweep", {})
    errors += len(sweep.get("errors", [])) + sweep.get("failed", 0)
    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
