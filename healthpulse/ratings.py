from __future__ import annotations

"""Rating vocabularies and the categorical-to-numeric normalization table.

Every rated dimension of a report draws its value from a closed vocabulary.
This module is the single source of truth for what each label is worth on
the shared 0-4 scale. Zero is reserved for "no data": sentinel and unknown
labels normalize to ``0.0`` but are *excluded* from averages, which is why
callers that aggregate use :func:`rated_value` (``None`` for unrated) rather
than :func:`normalize`.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger("healthpulse.ratings")


# --------------------
# Dimensions
# --------------------


class Dimension(str, Enum):
    RISK_LEVEL = "risk_level"
    FINANCIAL_HEALTH = "financial_health"
    COMPLETION = "completion_of_planned_work"
    TEAM_MORALE = "team_morale"
    CUSTOMER_SATISFACTION = "customer_satisfaction"
    PM_EVALUATION = "project_manager_evaluation"
    FRONT_END_QUALITY = "front_end_quality"
    BACK_END_QUALITY = "back_end_quality"
    TESTING_QUALITY = "testing_quality"
    DESIGN_QUALITY = "design_quality"
    OVERALL_PROJECT_SCORE = "overall_project_score"

    @property
    def attribute(self) -> str:
        """Name of the :class:`~healthpulse.models.Report` attribute holding the raw label."""
        return self.value

    @property
    def label(self) -> str:
        return DIMENSION_LABELS[self]


DIMENSION_LABELS: Dict[Dimension, str] = {
    Dimension.RISK_LEVEL: "Risk Level",
    Dimension.FINANCIAL_HEALTH: "Financial Health",
    Dimension.COMPLETION: "Completion",
    Dimension.TEAM_MORALE: "Team Morale",
    Dimension.CUSTOMER_SATISFACTION: "Customer Satisfaction",
    Dimension.PM_EVALUATION: "PM Evaluation",
    Dimension.FRONT_END_QUALITY: "Front-End",
    Dimension.BACK_END_QUALITY: "Back-End",
    Dimension.TESTING_QUALITY: "Testing",
    Dimension.DESIGN_QUALITY: "Design",
    Dimension.OVERALL_PROJECT_SCORE: "Overall Score",
}

# The ten dimensions a reporter rates directly; the overall score is either
# supplied or derived from these.
RATED_DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension.RISK_LEVEL,
    Dimension.FINANCIAL_HEALTH,
    Dimension.COMPLETION,
    Dimension.TEAM_MORALE,
    Dimension.CUSTOMER_SATISFACTION,
    Dimension.PM_EVALUATION,
    Dimension.FRONT_END_QUALITY,
    Dimension.BACK_END_QUALITY,
    Dimension.TESTING_QUALITY,
    Dimension.DESIGN_QUALITY,
)


# --------------------
# Vocabularies
# --------------------

SENTINEL = "N.A."

_SENTINEL_TOKENS = {"", "n.a.", "n/a", "na", "n.a"}

RISK_VALUES: Dict[str, float] = {
    "Low": 4.0,
    "Medium": 3.0,
    "High": 2.0,
    "Critical": 1.0,
}

FINANCIAL_VALUES: Dict[str, float] = {
    "Healthy": 4.0,
    "On Watch": 3.0,
    "At Risk": 2.0,
    "Critical": 1.0,
}

COMPLETION_VALUES: Dict[str, float] = {
    "All completed": 4.0,
    "Completely completed": 4.0,
    "Mostly": 3.0,
    "Partially": 2.0,
    "Not completed": 1.0,
}

MORALE_VALUES: Dict[str, float] = {
    "High": 4.0,
    "Good": 3.5,
    "Moderate": 3.0,
    "Low": 2.0,
    "Burnt Out": 0.5,
}

SATISFACTION_VALUES: Dict[str, float] = {
    "Very Satisfied": 4.0,
    "Satisfied": 3.0,
    "Neutral / Unclear": 2.0,
    "Neutral": 2.0,
    "Unclear": 2.0,
    "Dissatisfied": 1.0,
    "Very Dissatisfied": 0.5,
}

QUALITY_VALUES: Dict[str, float] = {
    "Excellent": 4.0,
    "Good": 3.0,
    "Fair": 2.0,
    "Poor": 1.0,
}

_TABLES: Dict[Dimension, Dict[str, float]] = {
    Dimension.RISK_LEVEL: RISK_VALUES,
    Dimension.FINANCIAL_HEALTH: FINANCIAL_VALUES,
    Dimension.COMPLETION: COMPLETION_VALUES,
    Dimension.TEAM_MORALE: MORALE_VALUES,
    Dimension.CUSTOMER_SATISFACTION: SATISFACTION_VALUES,
    Dimension.PM_EVALUATION: QUALITY_VALUES,
    Dimension.FRONT_END_QUALITY: QUALITY_VALUES,
    Dimension.BACK_END_QUALITY: QUALITY_VALUES,
    Dimension.TESTING_QUALITY: QUALITY_VALUES,
    Dimension.DESIGN_QUALITY: QUALITY_VALUES,
    Dimension.OVERALL_PROJECT_SCORE: QUALITY_VALUES,
}

# Case-insensitive lookup built once from the tables above.
_FOLDED: Dict[Dimension, Dict[str, float]] = {
    dim: {label.casefold(): value for label, value in table.items()}
    for dim, table in _TABLES.items()
}

_LABEL_THRESHOLDS: List[Tuple[float, str]] = [
    (3.5, "Excellent"),
    (2.5, "Good"),
    (1.5, "Fair"),
]

NO_DATA = "No Data"


# --------------------
# Public API
# --------------------


def is_sentinel(raw: Optional[str]) -> bool:
    """True for ``None``, blank strings and the ``N.A.``/``N/A`` markers."""
    if raw is None:
        return True
    return str(raw).strip().casefold() in _SENTINEL_TOKENS


def vocabulary(dimension: Dimension) -> List[str]:
    """Every accepted label for ``dimension``, sentinel last."""
    return list(_TABLES[Dimension(dimension)]) + [SENTINEL]


def is_recognized(dimension: Dimension, raw: Optional[str]) -> bool:
    """True when ``raw`` is a real (non-sentinel) label of the vocabulary."""
    if is_sentinel(raw):
        return False
    return str(raw).strip().casefold() in _FOLDED[Dimension(dimension)]


def rated_value(dimension: Dimension, raw: Optional[str]) -> Optional[float]:
    """Normalized value of a real rating, ``None`` when unrated.

    Unknown labels are treated exactly like ``N.A.``.
    """
    if is_sentinel(raw):
        return None
    value = _FOLDED[Dimension(dimension)].get(str(raw).strip().casefold())
    if value is None:
        logger.debug("Unrecognised %s rating %r treated as N.A.", Dimension(dimension).value, raw)
    return value


def normalize(dimension: Dimension, raw: Optional[str]) -> float:
    """Map a raw label onto the 0-4 scale; sentinel and unknown labels give ``0.0``."""
    value = rated_value(dimension, raw)
    return 0.0 if value is None else value


def rating_label(score: Optional[float]) -> str:
    """Derive a display label from any composite score."""
    if score is None:
        return NO_DATA
    for threshold, label in _LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    if score > 0:
        return "Poor"
    return NO_DATA


__all__ = [
    "Dimension",
    "DIMENSION_LABELS",
    "RATED_DIMENSIONS",
    "SENTINEL",
    "NO_DATA",
    "RISK_VALUES",
    "FINANCIAL_VALUES",
    "COMPLETION_VALUES",
    "MORALE_VALUES",
    "SATISFACTION_VALUES",
    "QUALITY_VALUES",
    "is_sentinel",
    "vocabulary",
    "is_recognized",
    "rated_value",
    "normalize",
    "rating_label",
]
