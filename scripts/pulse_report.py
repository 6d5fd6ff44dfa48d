#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HealthPulse report summary
Prints the latest report per project, PM compliance and the underperformance
tally for a JSON dump of project reports, optionally exporting the tables.

Usage:
    python scripts/pulse_report.py <reports.json> [--period YYYY-MM] [--pm NAME ...] [--export [DIR]]

The JSON file holds either a list of reports or an object with ``reports``
and, optionally, ``registry`` (project names) and ``pmNames``.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from healthpulse import settings
from healthpulse.compliance import evaluate_compliance
from healthpulse.date_utils import format_period
from healthpulse.delta_engine import compare_latest
from healthpulse.export import export_compliance, export_latest, export_underperformance
from healthpulse.latest_resolver import available_periods, missing_for_period, resolve_latest
from healthpulse.models import UNASSIGNED, group_by_project, reports_from_dicts
from healthpulse.score_aggregator import display_score, overall_score
from healthpulse.underperformance import tally_underperformance


def load_dump(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        return {"reports": data}
    if isinstance(data, dict):
        return data
    raise ValueError("expected a list of reports or an object with 'reports'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarise project-health reports.")
    parser.add_argument("dump", type=Path, help="JSON file with report records")
    parser.add_argument("--period", help="reporting period (YYYY-MM) for the tally and missing list")
    parser.add_argument("--pm", action="append", dest="pm_names", help="project manager to evaluate (repeatable)")
    parser.add_argument(
        "--export",
        type=Path,
        nargs="?",
        const=Path(settings.EXPORT_PATH),
        help="directory to write CSV exports into (default: HEALTHPULSE_EXPORT_DIR)",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if not args.dump.exists():
        print(f"[ERROR] File not found: {args.dump}")
        return 1
    try:
        data = load_dump(args.dump)
    except (OSError, ValueError) as e:
        print(f"[ERROR] Failed to load {args.dump}: {e}")
        return 1

    reports, rejected = reports_from_dicts(data.get("reports") or [])
    registry = data.get("registry") or sorted({r.project_name for r in reports})
    print("=" * 80)
    print("HealthPulse report summary")
    print("=" * 80)
    print(f"Reports loaded: {len(reports)} ({len(rejected)} skipped)")

    periods = available_periods(reports)
    period = args.period or (periods[0] if periods else None)
    print(f"Selected period: {format_period(period)}")
    print()

    print("[LATEST REPORTS]")
    resolved = resolve_latest(reports, registry)
    for name in sorted(resolved.latest):
        report = resolved.latest[name]
        score = display_score(overall_score(report))
        print(f"  - {name}: {format_period(report.reporting_period)}, PM {report.assigned_pm}, overall {score}")
    for name in resolved.without_reports:
        print(f"  - {name}: no reports")
    print()

    print("[TRENDS]")
    for name, history in sorted(group_by_project(reports).items()):
        comparison = compare_latest(history)
        if not comparison.sufficient_data:
            print(f"  - {name}: {comparison.message}")
            continue
        moves = [f"{d.name} {d.change:+.1f}" for d in comparison.improved + comparison.declined]
        print(f"  - {name}: {', '.join(moves) or 'no change'}")
    print()

    print("[MISSING REPORTS]")
    missing = missing_for_period(reports, registry, period)
    if not missing:
        print("  None")
    for item in missing:
        print(f"  - {item.project_name} ({item.assigned_pm})")
    print()

    print("[COMPLIANCE]")
    pm_names = args.pm_names or data.get("pmNames") or sorted(
        {r.assigned_pm for r in reports if r.assigned_pm != UNASSIGNED}
    )
    compliance = evaluate_compliance(reports, pm_names)
    for row in compliance:
        cells = ", ".join(f"{format_period(s.period)}: {s.status}" for s in row.period_statuses)
        print(f"  - {row.pm_name}: {row.compliance_score}% ({row.tier}) [{cells}]")
    print()

    print("[UNDERPERFORMANCE]")
    selected = [r for r in reports if r.reporting_period == period] if period else reports
    tally = tally_underperformance(selected)
    if not tally:
        print("  None")
    for row in tally:
        print(f"  - {row.dimension}: {row.count} ({row.severity})")
    print()

    if args.export:
        export_latest(args.export / "latest_reports.csv", resolved.latest)
        export_compliance(args.export / "compliance.csv", compliance)
        export_underperformance(args.export / "underperformance.csv", tally)
        print(f"Exports written to {args.export}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
