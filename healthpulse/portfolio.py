"""Portfolio-level statistics for the dashboard summary cards."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .models import Report
from .ratings import RISK_VALUES, Dimension, rated_value, rating_label
from .score_aggregator import DEPARTMENTAL_DIMENSIONS, round_half_up
from .underperformance import UnderperformanceCount, tally_underperformance


@dataclass
class DepartmentAverage:
    name: str
    score: float
    label: str
    rated_reports: int

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "score": self.score, "label": self.label, "ratedReports": self.rated_reports}


@dataclass
class PortfolioSummary:
    period: Optional[str]
    total_reports: int
    risk_distribution: Dict[str, int] = field(default_factory=dict)
    department_averages: List[DepartmentAverage] = field(default_factory=list)
    underperformance: List[UnderperformanceCount] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "period": self.period,
            "totalReports": self.total_reports,
            "riskDistribution": dict(self.risk_distribution),
            "departmentAverages": [d.to_dict() for d in self.department_averages],
            "underperformance": [u.to_dict() for u in self.underperformance],
        }


def risk_distribution(reports: Iterable[Report]) -> Dict[str, int]:
    """Reports per risk label; unrated and unknown labels are not counted."""
    folded = {label.casefold(): label for label in RISK_VALUES}
    counts = {label: 0 for label in RISK_VALUES}
    for report in reports or []:
        label = folded.get((report.risk_level or "").strip().casefold())
        if label:
            counts[label] += 1
    return counts


def department_averages(reports: Iterable[Report]) -> List[DepartmentAverage]:
    reports = list(reports or [])
    averages: List[DepartmentAverage] = []
    for dimension in DEPARTMENTAL_DIMENSIONS:
        values = [
            v for v in (rated_value(dimension, getattr(r, dimension.attribute)) for r in reports)
            if v is not None
        ]
        score = round_half_up(sum(values) / len(values), 2) if values else 0.0
        averages.append(
            DepartmentAverage(
                name=Dimension(dimension).label,
                score=score,
                label=rating_label(score),
                rated_reports=len(values),
            )
        )
    return averages


def portfolio_summary(reports: Iterable[Report], period: Optional[str] = None) -> PortfolioSummary:
    """Summary for one period, or across all periods when ``period`` is empty."""
    selected = [r for r in reports or [] if not period or r.reporting_period == period]
    return PortfolioSummary(
        period=period,
        total_reports=len(selected),
        risk_distribution=risk_distribution(selected),
        department_averages=department_averages(selected),
        underperformance=tally_underperformance(selected),
    )


__all__ = [
    "DepartmentAverage",
    "PortfolioSummary",
    "risk_distribution",
    "department_averages",
    "portfolio_summary",
]
