"""Cross-period movement of a project's scores.

Compares a project's two most recent reports on six fixed metrics and sorts
each metric into improved / declined / unchanged. All metrics are on the
same "higher is better" 0-4 scale after normalization (a low risk rating
scores high), so no metric needs its direction inverted.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .date_utils import timestamp_sort_key
from .models import Report
from .ratings import RATED_DIMENSIONS, Dimension, normalize
from .score_aggregator import (
    departmental_score,
    overall_score,
    round_half_up,
    round_score,
    team_kpi_score,
)

logger = logging.getLogger("healthpulse.delta_engine")

IMPROVED = "improved"
DECLINED = "declined"
NO_CHANGE = "no-change"

INSUFFICIENT_DATA = "Insufficient data: at least two reports are needed to show a trend."
MIXED_PROJECTS = "Reports span several projects: select one project to show a trend."


@dataclass
class MetricDelta:
    name: str
    previous: float
    current: float
    change: float
    status: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class TrendComparison:
    project_name: Optional[str]
    sufficient_data: bool
    previous_period: Optional[str] = None
    current_period: Optional[str] = None
    improved: List[MetricDelta] = field(default_factory=list)
    declined: List[MetricDelta] = field(default_factory=list)
    unchanged: List[MetricDelta] = field(default_factory=list)
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "projectName": self.project_name,
            "sufficientData": self.sufficient_data,
            "previousPeriod": self.previous_period,
            "currentPeriod": self.current_period,
            "improved": [d.to_dict() for d in self.improved],
            "declined": [d.to_dict() for d in self.declined],
            "unchanged": [d.to_dict() for d in self.unchanged],
            "message": self.message,
        }


@dataclass
class TrendPoint:
    report_id: str
    period: Optional[str]
    values: Dict[str, float]

    def to_dict(self) -> Dict[str, object]:
        return {"reportId": self.report_id, "period": self.period, **self.values}


def _dimension_metric(dimension: Dimension) -> Callable[[Report], Optional[float]]:
    def metric(report: Report) -> Optional[float]:
        return normalize(dimension, getattr(report, dimension.attribute))

    return metric


# The only metrics the trend view tracks; order fixes tie-breaks in sorting.
TRACKED_METRICS: Tuple[Tuple[str, Callable[[Report], Optional[float]]], ...] = (
    ("Overall Score", overall_score),
    ("Risk Level", _dimension_metric(Dimension.RISK_LEVEL)),
    ("Financial Health", _dimension_metric(Dimension.FINANCIAL_HEALTH)),
    ("Customer Satisfaction", _dimension_metric(Dimension.CUSTOMER_SATISFACTION)),
    ("Team KPIs", team_kpi_score),
    ("Departmental Score", departmental_score),
)


def chronological(reports: Iterable[Report]) -> List[Report]:
    """Sort oldest first by period, then submission time, then id.

    A missing period sorts before every real one.
    """

    return sorted(
        reports,
        key=lambda r: (
            r.reporting_period or "",
            timestamp_sort_key(r.submission_date),
            r.id,
        ),
    )


def classify_change(change: float) -> str:
    if change > 0:
        return IMPROVED
    if change < 0:
        return DECLINED
    return NO_CHANGE


def compare_reports(previous: Report, current: Report) -> List[MetricDelta]:
    """Per-metric deltas for the tracked metrics rated in both reports."""

    deltas: List[MetricDelta] = []
    for name, metric in TRACKED_METRICS:
        before = round_score(metric(previous))
        after = round_score(metric(current))
        if not before or not after:
            # Unrated on either side: drop the metric rather than report "no change".
            continue
        change = round_half_up(after - before, 1)
        deltas.append(
            MetricDelta(
                name=name,
                previous=before,
                current=after,
                change=change,
                status=classify_change(change),
            )
        )
    return deltas


def compare_latest(reports: Sequence[Report]) -> TrendComparison:
    """Compare the two most recent reports of one project.

    Input order does not matter. With fewer than two reports an explicit
    insufficient-data result is returned, and reports from more than one
    project are refused the same way.
    """

    ordered = chronological(reports or [])
    projects = {r.project_name for r in ordered}
    if len(projects) > 1:
        logger.warning("compare_latest received reports for %d projects; no trend computed", len(projects))
        return TrendComparison(project_name=None, sufficient_data=False, message=MIXED_PROJECTS)

    project_name = ordered[-1].project_name if ordered else None
    if len(ordered) < 2:
        return TrendComparison(
            project_name=project_name,
            sufficient_data=False,
            message=INSUFFICIENT_DATA,
        )

    previous, current = ordered[-2], ordered[-1]
    deltas = compare_reports(previous, current)

    def by_magnitude(items: List[MetricDelta]) -> List[MetricDelta]:
        return sorted(items, key=lambda d: abs(d.change), reverse=True)

    return TrendComparison(
        project_name=project_name,
        sufficient_data=True,
        previous_period=previous.reporting_period,
        current_period=current.reporting_period,
        improved=by_magnitude([d for d in deltas if d.status == IMPROVED]),
        declined=by_magnitude([d for d in deltas if d.status == DECLINED]),
        unchanged=[d for d in deltas if d.status == NO_CHANGE],
    )


def kpi_trend_series(reports: Sequence[Report]) -> List[TrendPoint]:
    """Chart series: normalized value of every dimension per report, oldest first."""

    points: List[TrendPoint] = []
    for report in chronological(reports or []):
        values = {"Overall Score": round_score(overall_score(report)) or 0.0}
        for dimension in RATED_DIMENSIONS:
            values[dimension.label] = normalize(dimension, getattr(report, dimension.attribute))
        points.append(TrendPoint(report_id=report.id, period=report.reporting_period, values=values))
    return points


__all__ = [
    "IMPROVED",
    "DECLINED",
    "NO_CHANGE",
    "INSUFFICIENT_DATA",
    "MIXED_PROJECTS",
    "MetricDelta",
    "TrendComparison",
    "TrendPoint",
    "TRACKED_METRICS",
    "chronological",
    "classify_change",
    "compare_reports",
    "compare_latest",
    "kpi_trend_series",
]
