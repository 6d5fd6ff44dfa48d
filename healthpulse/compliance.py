from __future__ import annotations

"""Reporting compliance per project manager.

Each (PM, period) cell is classified on its own:

* ``N/A``     - no report ever attributes a project to the PM.
* ``Missing`` - the PM has projects but no report for the period.
* ``Late``    - a report for the period was submitted inside the last
  ``late_window_days`` days of that month.
* ``On Time`` - reports exist and none is late.

The compliance score weights On Time as 1 and Late as 0.5 over the cells
that are not ``N/A``.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .date_utils import days_in_period
from .latest_resolver import available_periods
from .models import Report
from .score_aggregator import round_half_up
from .settings import COMPLIANCE_PERIOD_COUNT, LATE_WINDOW_DAYS

logger = logging.getLogger("healthpulse.compliance")


# --------------------
# Data structures
# --------------------

ON_TIME = "On Time"
LATE = "Late"
MISSING = "Missing"
NOT_APPLICABLE = "N/A"


@dataclass
class PeriodStatus:
    period: str
    status: str

    def to_dict(self) -> Dict[str, str]:
        return {"period": self.period, "status": self.status}


@dataclass
class PMCompliance:
    pm_name: str
    period_statuses: List[PeriodStatus] = field(default_factory=list)
    compliance_score: int = 0
    tier: str = "critical"

    def to_dict(self) -> Dict[str, object]:
        return {
            "pmName": self.pm_name,
            "periodStatuses": [s.to_dict() for s in self.period_statuses],
            "complianceScore": self.compliance_score,
            "tier": self.tier,
        }


# --------------------
# Constants
# --------------------

_STATUS_WEIGHTS: Dict[str, float] = {
    ON_TIME: 1.0,
    LATE: 0.5,
    MISSING: 0.0,
}

_TIER_THRESHOLDS = [
    (80, "good"),
    (50, "warning"),
]


# --------------------
# Core calculations
# --------------------


def recent_periods(reports: Iterable[Report], count: int = COMPLIANCE_PERIOD_COUNT) -> List[str]:
    """The ``count`` most recent distinct periods, newest first."""
    if count <= 0:
        return []
    return available_periods(reports)[:count]


def is_late(report: Report, late_window_days: int = LATE_WINDOW_DAYS) -> bool:
    """True when the submission day falls in the last ``late_window_days`` of the period's month."""
    if report.submission_date is None:
        return False
    last_day = days_in_period(report.reporting_period)
    if last_day is None:
        logger.debug("Report %s has a malformed period %r; not judged late", report.id, report.reporting_period)
        return False
    return report.submission_date.day > last_day - late_window_days


def cell_status(
    pm_reports: Sequence[Report],
    period: str,
    has_projects: bool,
    late_window_days: int = LATE_WINDOW_DAYS,
) -> str:
    in_period = [r for r in pm_reports if r.reporting_period == period]
    if not in_period:
        return MISSING if has_projects else NOT_APPLICABLE
    if any(is_late(r, late_window_days) for r in in_period):
        return LATE
    return ON_TIME


def compliance_score(statuses: Iterable[str]) -> int:
    """Percentage (0-100, rounded) over the non-``N/A`` cells; 0 when there are none."""
    counted = [s for s in statuses if s != NOT_APPLICABLE]
    if not counted:
        return 0
    earned = sum(_STATUS_WEIGHTS.get(s, 0.0) for s in counted)
    # 62.5 reads as 63.
    return int(round_half_up(100 * earned / len(counted)))


def compliance_tier(score: float) -> str:
    for threshold, tier in _TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return "critical"


# --------------------
# Public API
# --------------------


def evaluate_compliance(
    reports: Sequence[Report],
    pm_names: Iterable[str],
    periods: Optional[Sequence[str]] = None,
    *,
    late_window_days: int = LATE_WINDOW_DAYS,
    period_count: int = COMPLIANCE_PERIOD_COUNT,
) -> List[PMCompliance]:
    """Compliance rows for ``pm_names`` over ``periods``.

    ``periods`` defaults to the ``period_count`` most recent periods present
    in ``reports``.
    """

    reports = list(reports or [])
    if periods is None:
        periods = recent_periods(reports, period_count)

    by_pm: Dict[str, List[Report]] = {}
    for report in reports:
        by_pm.setdefault(report.assigned_pm, []).append(report)

    rows: List[PMCompliance] = []
    seen: Set[str] = set()
    for pm in pm_names or []:
        if pm in seen:
            continue
        seen.add(pm)
        pm_reports = by_pm.get(pm, [])
        has_projects = bool({r.project_name for r in pm_reports})
        statuses = [
            PeriodStatus(period=period, status=cell_status(pm_reports, period, has_projects, late_window_days))
            for period in periods
        ]
        score = compliance_score(s.status for s in statuses)
        rows.append(
            PMCompliance(
                pm_name=pm,
                period_statuses=statuses,
                compliance_score=score,
                tier=compliance_tier(score),
            )
        )

    logger.debug("Evaluated compliance for %d PMs over %d periods", len(rows), len(periods))
    return rows


__all__ = [
    "ON_TIME",
    "LATE",
    "MISSING",
    "NOT_APPLICABLE",
    "PeriodStatus",
    "PMCompliance",
    "recent_periods",
    "is_late",
    "cell_status",
    "compliance_score",
    "compliance_tier",
    "evaluate_compliance",
]
