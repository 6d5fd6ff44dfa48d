"""Collapse a report history into one current report per project."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .date_utils import timestamp_sort_key
from .models import UNASSIGNED, Report

logger = logging.getLogger("healthpulse.latest_resolver")


@dataclass
class LatestReports:
    latest: Dict[str, Report] = field(default_factory=dict)
    without_reports: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "latest": {name: report.to_dict() for name, report in self.latest.items()},
            "withoutReports": list(self.without_reports),
        }


@dataclass
class MissingReport:
    project_name: str
    assigned_pm: str

    def to_dict(self) -> Dict[str, str]:
        return {"projectName": self.project_name, "assignedPM": self.assigned_pm}


def recency_key(report: Report) -> Tuple[str, Tuple[int, float], str]:
    """Greater key means more recent.

    Period first, submission time second, id last so identical inputs in any
    order always pick the same report. Absent values rank lowest.
    """

    return (
        report.reporting_period or "",
        timestamp_sort_key(report.submission_date),
        report.id,
    )


def latest_by_project(reports: Iterable[Report]) -> Dict[str, Report]:
    latest: Dict[str, Report] = {}
    for report in reports or []:
        current = latest.get(report.project_name)
        if current is None or recency_key(report) > recency_key(current):
            latest[report.project_name] = report
    return latest


def _unique(names: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for name in names:
        if name and name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def resolve_latest(reports: Iterable[Report], registry: Iterable[str] = ()) -> LatestReports:
    """Latest report per project plus registry projects that never reported."""

    latest = latest_by_project(reports)
    without = [name for name in _unique(registry or ()) if name not in latest]
    logger.debug(
        "Resolved %d projects, %d registered projects without reports",
        len(latest),
        len(without),
    )
    return LatestReports(latest=latest, without_reports=without)


def missing_for_period(
    reports: Sequence[Report],
    registry: Iterable[str],
    period: Optional[str],
) -> List[MissingReport]:
    """Registered projects with no report for ``period``.

    The PM shown is the one on the project's latest report in the whole
    history, or ``Unassigned`` for a project that never reported.
    """

    if not period:
        return []
    reported = {r.project_name for r in reports or [] if r.reporting_period == period}
    latest = latest_by_project(reports or [])
    missing: List[MissingReport] = []
    for name in _unique(registry or ()):
        if name in reported:
            continue
        last = latest.get(name)
        missing.append(MissingReport(project_name=name, assigned_pm=last.assigned_pm if last else UNASSIGNED))
    return missing


def available_periods(reports: Iterable[Report]) -> List[str]:
    """Distinct reporting periods, most recent first."""

    return sorted({r.reporting_period for r in reports or [] if r.reporting_period}, reverse=True)


__all__ = [
    "LatestReports",
    "MissingReport",
    "recency_key",
    "latest_by_project",
    "resolve_latest",
    "missing_for_period",
    "available_periods",
]
