"""Tabular exports of computed summaries.

Rows are flattened into a ``pandas.DataFrame`` and written as CSV or Excel
depending on the target suffix (``.xlsx`` uses the openpyxl engine).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Union

import pandas as pd

from .compliance import PMCompliance
from .date_utils import format_period
from .models import Report
from .score_aggregator import display_score, overall_score
from .underperformance import UnderperformanceCount

logger = logging.getLogger("healthpulse.export")

PathLike = Union[str, Path]


def _write(frame: pd.DataFrame, path: PathLike) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.suffix.lower() in {".xlsx", ".xlsm"}:
        with pd.ExcelWriter(target, engine="openpyxl", mode="w") as writer:
            frame.to_excel(writer, index=False)
    else:
        frame.to_csv(target, index=False, encoding="utf-8")
    logger.info("Exported %d rows to %s", len(frame), target)
    return target


def compliance_frame(rows: Iterable[PMCompliance]) -> pd.DataFrame:
    rows = list(rows)
    periods: List[str] = []
    for row in rows:
        for status in row.period_statuses:
            if status.period not in periods:
                periods.append(status.period)

    records: List[Dict[str, object]] = []
    for row in rows:
        record: Dict[str, object] = {"Project Manager": row.pm_name}
        by_period = {s.period: s.status for s in row.period_statuses}
        for period in periods:
            record[format_period(period)] = by_period.get(period, "")
        record["Compliance %"] = row.compliance_score
        record["Tier"] = row.tier
        records.append(record)
    columns = ["Project Manager"] + [format_period(p) for p in periods] + ["Compliance %", "Tier"]
    return pd.DataFrame(records, columns=columns)


def underperformance_frame(rows: Iterable[UnderperformanceCount]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"KPI": r.dimension, "Projects": r.count, "Severity": r.severity} for r in rows],
        columns=["KPI", "Projects", "Severity"],
    )


def latest_frame(latest: Mapping[str, Report]) -> pd.DataFrame:
    records = []
    for name in sorted(latest):
        report = latest[name]
        records.append(
            {
                "Project": name,
                "Period": format_period(report.reporting_period),
                "PM": report.assigned_pm,
                "Risk Level": report.risk_level,
                "Financial Health": report.financial_health,
                "Overall Score": display_score(overall_score(report)),
            }
        )
    return pd.DataFrame(
        records,
        columns=["Project", "Period", "PM", "Risk Level", "Financial Health", "Overall Score"],
    )


def export_compliance(path: PathLike, rows: Iterable[PMCompliance]) -> Path:
    return _write(compliance_frame(rows), path)


def export_underperformance(path: PathLike, rows: Iterable[UnderperformanceCount]) -> Path:
    return _write(underperformance_frame(rows), path)


def export_latest(path: PathLike, latest: Mapping[str, Report]) -> Path:
    return _write(latest_frame(latest), path)


__all__ = [
    "compliance_frame",
    "underperformance_frame",
    "latest_frame",
    "export_compliance",
    "export_underperformance",
    "export_latest",
]
