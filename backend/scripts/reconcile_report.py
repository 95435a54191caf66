#!/usr/bin/env python3
"""Reconcile a repeat-issues report (CSV export) against the QA matrix ledger.

Usage locally:
    python -m scripts.reconcile_report report.csv              # match only, print summary
    python -m scripts.reconcile_report report.csv --apply      # match and apply to the ledger
    python -m scripts.reconcile_report report.csv --threshold 0.25
    python -m scripts.reconcile_report report.csv --show-unmatched

Steps:
    1. read   — Load the CSV rows and resolve columns from the header row
    2. match  — Fuzzy-match every defect against the ledger concerns
    3. apply  — (optional) Add repeat counts to each concern's most recent week

The ledger lives in the database named by DATABASE_URL (see backend/.env).
"""

import argparse
import csv
import logging
import sys
import time
from pathlib import Path

# Ensure the project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from qa_matrix.config import Settings
from qa_matrix.facade import QAMatrixFacade
from qa_matrix.schemas.diff import ApplyOutcome

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("reconcile")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile a repeat-issues report against the QA matrix.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("report", type=Path, help="CSV export of the repeat-issues report")
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Apply the matched repeats to the ledger (default: dry run)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Override the minimum match score (default: MATCH_THRESHOLD setting)",
    )
    parser.add_argument(
        "--show-unmatched",
        action="store_true",
        help="List every defect that matched no concern",
    )
    parser.add_argument("--encoding", default="utf-8-sig", help="CSV file encoding")
    return parser.parse_args()


def read_rows(path: Path, encoding: str) -> list:
    with path.open(newline="", encoding=encoding) as fh:
        return [row for row in csv.reader(fh)]


def main():
    args = parse_args()
    if not args.report.is_file():
        logger.error("Report file not found: %s", args.report)
        sys.exit(1)

    settings = Settings()
    if args.threshold is not None:
        settings.match_threshold = args.threshold

    logger.info("=" * 60)
    logger.info("QA MATRIX — Repeat-issue reconciliation")
    logger.info("  Report:    %s", args.report)
    logger.info("  Threshold: %.2f", settings.match_threshold)
    logger.info("  Mode:      %s", "apply" if args.apply else "dry run")
    logger.info("=" * 60)

    t0 = time.time()
    rows = read_rows(args.report, args.encoding)

    with QAMatrixFacade(settings=settings) as facade:
        if not facade.list_concerns():
            logger.warning("Ledger is empty: every defect will be unmatched")

        count = facade.load_report_rows(rows, args.report.name)
        groups = facade.matched_groups()
        unmatched = facade.unmatched_entries()

        for g in groups:
            logger.info(
                "  #%-4d x%-3d %s", g.qa_s_no, g.repeat_count, g.qa_concern[:60],
            )
        if args.show_unmatched:
            for u in unmatched:
                logger.info(
                    "  unmatched %s: [%s] %s", u.id, u.entry.location, u.entry.description[:60],
                )

        if args.apply:
            result = facade.apply()
            if result.outcome == ApplyOutcome.APPLIED:
                for d in result.diffs:
                    logger.info("  #%d %s: %s → %s", d.s_no, d.field.value, d.before, d.after)
            else:
                logger.warning("Apply was blocked")

    logger.info("=" * 60)
    logger.info("RECONCILIATION COMPLETE in %.1fs", time.time() - t0)
    logger.info("  Entries:   %d", count)
    logger.info("  Groups:    %d", len(groups))
    logger.info("  Unmatched: %d", len(unmatched))
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
