"""Count underperforming reports per KPI dimension.

Risk is judged on the raw label (``High`` or ``Critical``); every other
dimension counts a report when its normalized value sits in the Fair/Poor
band, ``0 < value <= 2``. Unrated reports never count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import Report
from .ratings import DIMENSION_LABELS, Dimension, rated_value
from .score_aggregator import overall_score

logger = logging.getLogger("healthpulse.underperformance")

UNDERPERFORMING_CEILING = 2.0

_RISK_FLAGS = {"high", "critical"}

DEFAULT_DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension.OVERALL_PROJECT_SCORE,
    Dimension.RISK_LEVEL,
    Dimension.FINANCIAL_HEALTH,
    Dimension.COMPLETION,
    Dimension.TEAM_MORALE,
    Dimension.CUSTOMER_SATISFACTION,
)

# Departmental quality ratings, tracked by the dashboard's low-performing chart.
QUALITY_DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension.FRONT_END_QUALITY,
    Dimension.BACK_END_QUALITY,
    Dimension.TESTING_QUALITY,
    Dimension.DESIGN_QUALITY,
    Dimension.PM_EVALUATION,
)

_SEVERITY_THRESHOLDS = [
    (5, "critical"),
    (3, "warning"),
    (1, "caution"),
]


@dataclass
class UnderperformanceCount:
    dimension: str
    count: int
    severity: str

    def to_dict(self) -> Dict[str, object]:
        return {"dimension": self.dimension, "count": self.count, "severityTier": self.severity}


def severity_tier(count: int) -> Optional[str]:
    """``critical`` (>= 5), ``warning`` (3-4), ``caution`` (1-2); ``None`` for zero."""
    for threshold, tier in _SEVERITY_THRESHOLDS:
        if count >= threshold:
            return tier
    return None


def _value(report: Report, dimension: Dimension) -> Optional[float]:
    if dimension is Dimension.OVERALL_PROJECT_SCORE:
        return overall_score(report)
    return rated_value(dimension, getattr(report, dimension.attribute))


def is_underperforming(report: Report, dimension: Dimension) -> bool:
    dimension = Dimension(dimension)
    if dimension is Dimension.RISK_LEVEL:
        return (report.risk_level or "").strip().casefold() in _RISK_FLAGS
    value = _value(report, dimension)
    return value is not None and 0 < value <= UNDERPERFORMING_CEILING


def tally_underperformance(
    reports: Iterable[Report],
    dimensions: Optional[Sequence[Dimension]] = None,
) -> List[UnderperformanceCount]:
    """Ranked per-dimension counts, most underperforming first.

    Dimensions with no underperforming report are left out. Equal counts keep
    the order of ``dimensions``.
    """

    reports = list(reports or [])
    tracked = [Dimension(d) for d in (dimensions or DEFAULT_DIMENSIONS)]

    counts: List[UnderperformanceCount] = []
    for dimension in tracked:
        count = sum(1 for report in reports if is_underperforming(report, dimension))
        if count == 0:
            continue
        counts.append(
            UnderperformanceCount(
                dimension=DIMENSION_LABELS[dimension],
                count=count,
                severity=severity_tier(count),
            )
        )

    counts.sort(key=lambda c: c.count, reverse=True)
    logger.debug("Underperformance tally over %d reports: %s", len(reports), [(c.dimension, c.count) for c in counts])
    return counts


__all__ = [
    "UNDERPERFORMING_CEILING",
    "DEFAULT_DIMENSIONS",
    "QUALITY_DIMENSIONS",
    "UnderperformanceCount",
    "severity_tier",
    "is_underperforming",
    "tally_underperformance",
]
