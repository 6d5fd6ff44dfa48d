from __future__ import annotations

"""Composite score aggregation for a single report.

Composite scores average the normalized values of a fixed group of rated
dimensions. Only real ratings take part: a dimension left at ``N.A.`` is
skipped rather than counted as zero, and a composite whose dimensions are
all unrated is ``None`` ("No Data"), never ``0``.
"""

import logging
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .models import Report
from .ratings import (
    DIMENSION_LABELS,
    RATED_DIMENSIONS,
    Dimension,
    is_sentinel,
    rated_value,
    rating_label,
)

logger = logging.getLogger("healthpulse.score_aggregator")


# --------------------
# Data structures
# --------------------


@dataclass
class ReportScores:
    report_id: str
    project_name: str
    reporting_period: Optional[str]
    project_health: Optional[float]
    team_kpis: Optional[float]
    departmental: Optional[float]
    overall: Optional[float]
    overall_source: str
    labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class KPIHighlights:
    doing_well: List[str] = field(default_factory=list)
    needs_attention: List[str] = field(default_factory=list)


# --------------------
# Constants
# --------------------

PROJECT_HEALTH_DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension.RISK_LEVEL,
    Dimension.FINANCIAL_HEALTH,
    Dimension.CUSTOMER_SATISFACTION,
)

TEAM_KPI_DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension.TEAM_MORALE,
    Dimension.PM_EVALUATION,
)

DEPARTMENTAL_DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension.FRONT_END_QUALITY,
    Dimension.BACK_END_QUALITY,
    Dimension.TESTING_QUALITY,
    Dimension.DESIGN_QUALITY,
)

_MAX_SCORE = 4.0
_DOING_WELL_FLOOR = 3.0
_ATTENTION_CEILING = 2.0

# Names used on the report detail view for the strengths/attention lists.
_HIGHLIGHT_NAMES: Dict[Dimension, str] = {
    Dimension.RISK_LEVEL: "Risk Management",
    Dimension.FINANCIAL_HEALTH: "Financial Health",
    Dimension.CUSTOMER_SATISFACTION: "Customer Satisfaction",
    Dimension.TEAM_MORALE: "Team Morale",
    Dimension.COMPLETION: "Work Completion",
    Dimension.PM_EVALUATION: "Project Management",
    Dimension.FRONT_END_QUALITY: "Front-End Quality",
    Dimension.BACK_END_QUALITY: "Back-End Quality",
    Dimension.TESTING_QUALITY: "Testing Quality",
    Dimension.DESIGN_QUALITY: "Design Quality",
}


# --------------------
# Core calculations
# --------------------


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves away from zero (0.25 -> 0.3, -0.25 -> -0.3).

    Shared by scores, trend deltas and compliance percentages.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_score(value: Optional[float]) -> Optional[float]:
    """Storage/comparison precision (2 dp)."""
    return None if value is None else round_half_up(value, 2)


def display_score(value: Optional[float]) -> str:
    """Display precision (1 dp); unrated scores render as ``N/A``."""
    return "N/A" if value is None else f"{value:.1f}"


def _mean(values: Iterable[Optional[float]]) -> Optional[float]:
    rated = [v for v in values if v is not None]
    if not rated:
        return None
    return sum(rated) / len(rated)


def _dimension_value(report: Report, dimension: Dimension) -> Optional[float]:
    return rated_value(dimension, getattr(report, dimension.attribute))


def composite_score(report: Report, dimensions: Iterable[Dimension]) -> Optional[float]:
    """Mean of the rated values of ``dimensions``; ``None`` if none is rated."""
    return _mean(_dimension_value(report, dim) for dim in dimensions)


def project_health_score(report: Report) -> Optional[float]:
    return composite_score(report, PROJECT_HEALTH_DIMENSIONS)


def team_kpi_score(report: Report) -> Optional[float]:
    return composite_score(report, TEAM_KPI_DIMENSIONS)


def departmental_score(report: Report) -> Optional[float]:
    return composite_score(report, DEPARTMENTAL_DIMENSIONS)


def parse_supplied_score(raw: Optional[str]) -> Optional[float]:
    """Read a pre-supplied overall score.

    A known quality label wins over a numeric reading; numeric strings must
    fall in ``(0, 4]``. Anything else yields ``None``.
    """
    if is_sentinel(raw):
        return None
    labelled = rated_value(Dimension.OVERALL_PROJECT_SCORE, raw)
    if labelled is not None:
        return labelled
    try:
        numeric = float(str(raw).strip())
    except ValueError:
        logger.debug("Overall score %r is neither a label nor a number", raw)
        return None
    if 0 < numeric <= _MAX_SCORE:
        return numeric
    logger.debug("Overall score %r outside (0, 4]", raw)
    return None


def computed_overall_score(report: Report) -> Optional[float]:
    """Mean over every rated dimension of the ten, not over the composites."""
    return composite_score(report, RATED_DIMENSIONS)


def overall_score_with_source(report: Report) -> Tuple[Optional[float], str]:
    supplied = parse_supplied_score(report.overall_project_score)
    if supplied is not None:
        return supplied, "supplied"
    return computed_overall_score(report), "computed"


def overall_score(report: Report) -> Optional[float]:
    return overall_score_with_source(report)[0]


def kpi_highlights(report: Report) -> KPIHighlights:
    """Split rated dimensions into strengths (>= 3) and concerns (<= 2)."""
    highlights = KPIHighlights()
    for dimension, name in _HIGHLIGHT_NAMES.items():
        value = _dimension_value(report, dimension)
        if value is None:
            continue
        if value >= _DOING_WELL_FLOOR:
            highlights.doing_well.append(name)
        elif value <= _ATTENTION_CEILING:
            highlights.needs_attention.append(name)
    return highlights


# --------------------
# Public API
# --------------------


def score_report(report: Report) -> ReportScores:
    overall, source = overall_score_with_source(report)
    scores = ReportScores(
        report_id=report.id,
        project_name=report.project_name,
        reporting_period=report.reporting_period,
        project_health=round_score(project_health_score(report)),
        team_kpis=round_score(team_kpi_score(report)),
        departmental=round_score(departmental_score(report)),
        overall=round_score(overall),
        overall_source=source,
    )
    scores.labels = {
        "project_health": rating_label(scores.project_health),
        "team_kpis": rating_label(scores.team_kpis),
        "departmental": rating_label(scores.departmental),
        "overall": rating_label(scores.overall),
    }
    return scores


def dimension_values(report: Report) -> Dict[str, float]:
    """Normalized value (0 for unrated) of each rated dimension, keyed by display label."""
    return {
        DIMENSION_LABELS[dim]: _dimension_value(report, dim) or 0.0
        for dim in RATED_DIMENSIONS
    }


__all__ = [
    "ReportScores",
    "KPIHighlights",
    "PROJECT_HEALTH_DIMENSIONS",
    "TEAM_KPI_DIMENSIONS",
    "DEPARTMENTAL_DIMENSIONS",
    "round_half_up",
    "round_score",
    "display_score",
    "composite_score",
    "project_health_score",
    "team_kpi_score",
    "departmental_score",
    "parse_supplied_score",
    "computed_overall_score",
    "overall_score_with_source",
    "overall_score",
    "kpi_highlights",
    "score_report",
    "dimension_values",
]
