"""Report record consumed by every engine component.

The persistence layer resolves joins (assigned PM name, client metadata) and
hands the engine plain mappings in one canonical camelCase shape. This module
converts that shape to an immutable :class:`Report` and back; it does not
probe alternative key spellings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .date_utils import parse_timestamp
from .ratings import RATED_DIMENSIONS, SENTINEL, is_recognized, is_sentinel

logger = logging.getLogger("healthpulse.models")

UNASSIGNED = "Unassigned"

# Canonical payload key -> Report attribute.
_FIELD_KEYS: Tuple[Tuple[str, str], ...] = (
    ("riskLevel", "risk_level"),
    ("financialHealth", "financial_health"),
    ("completionOfPlannedWork", "completion_of_planned_work"),
    ("teamMorale", "team_morale"),
    ("customerSatisfaction", "customer_satisfaction"),
    ("projectManagerEvaluation", "project_manager_evaluation"),
    ("frontEndQuality", "front_end_quality"),
    ("backEndQuality", "back_end_quality"),
    ("testingQuality", "testing_quality"),
    ("designQuality", "design_quality"),
)

_DETAIL_KEYS: Tuple[Tuple[str, str], ...] = (
    ("submittedBy", "submitted_by"),
    ("clientName", "client_name"),
    ("projectType", "project_type"),
    ("projectStatus", "project_status"),
    ("jiraId", "jira_id"),
)


@dataclass(frozen=True)
class Report:
    id: str
    project_name: str
    reporting_period: Optional[str] = None
    submission_date: Optional[datetime] = None
    assigned_pm: str = UNASSIGNED
    risk_level: str = SENTINEL
    financial_health: str = SENTINEL
    completion_of_planned_work: str = SENTINEL
    team_morale: str = SENTINEL
    customer_satisfaction: str = SENTINEL
    project_manager_evaluation: str = SENTINEL
    front_end_quality: str = SENTINEL
    back_end_quality: str = SENTINEL
    testing_quality: str = SENTINEL
    design_quality: str = SENTINEL
    overall_project_score: Optional[str] = None
    submitted_by: Optional[str] = None
    client_name: Optional[str] = None
    project_type: Optional[str] = None
    project_status: Optional[str] = None
    jira_id: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Report":
        """Build a report from the canonical camelCase mapping.

        Raises ``ValueError`` when the payload is not a mapping or carries no
        project name, since such a record cannot be grouped at all.
        """

        if not isinstance(payload, Mapping):
            raise ValueError("report payload must be a mapping")
        project_name = str(payload.get("projectName") or "").strip()
        if not project_name:
            raise ValueError(f"report {payload.get('id')!r} has no projectName")

        ratings = {
            attr: _text(payload.get(key), SENTINEL) for key, attr in _FIELD_KEYS
        }
        details = {attr: _optional_text(payload.get(key)) for key, attr in _DETAIL_KEYS}
        period = _optional_text(payload.get("reportingPeriod"))

        return cls(
            id=str(payload.get("id") or f"{project_name}:{period or ''}"),
            project_name=project_name,
            reporting_period=period,
            submission_date=parse_timestamp(payload.get("submissionDate")),
            assigned_pm=_text(payload.get("assignedPM"), UNASSIGNED),
            overall_project_score=_optional_text(payload.get("overallProjectScore")),
            **ratings,
            **details,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "projectName": self.project_name,
            "reportingPeriod": self.reporting_period,
            "submissionDate": self.submission_date.isoformat() if self.submission_date else None,
            "assignedPM": self.assigned_pm,
            "overallProjectScore": self.overall_project_score,
        }
        for key, attr in _FIELD_KEYS + _DETAIL_KEYS:
            data[key] = getattr(self, attr)
        return data


def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def reports_from_dicts(payloads: Iterable[Mapping[str, Any]]) -> Tuple[List[Report], List[Dict[str, Any]]]:
    """Convert many payloads, collecting the ones that cannot be used.

    Returns ``(reports, rejected)`` where ``rejected`` holds ``{"index",
    "id", "error"}`` entries for the caller to log or report.
    """

    reports: List[Report] = []
    rejected: List[Dict[str, Any]] = []
    for index, payload in enumerate(payloads or []):
        try:
            reports.append(Report.from_dict(payload))
        except ValueError as exc:
            ident = payload.get("id") if isinstance(payload, Mapping) else None
            logger.debug("Skipping report #%d (%s): %s", index, ident, exc)
            rejected.append({"index": index, "id": ident, "error": str(exc)})
    return reports, rejected


def unrecognized_ratings(report: Report) -> Dict[str, str]:
    """Raw labels outside their vocabulary, keyed by dimension label.

    The engine scores these as unrated; callers surface them for cleanup.
    """
    found: Dict[str, str] = {}
    for dimension in RATED_DIMENSIONS:
        raw = getattr(report, dimension.attribute)
        if not is_sentinel(raw) and not is_recognized(dimension, raw):
            found[dimension.label] = raw
    return found


def group_by_project(reports: Iterable[Report]) -> Dict[str, List[Report]]:
    groups: Dict[str, List[Report]] = {}
    for report in reports:
        groups.setdefault(report.project_name, []).append(report)
    return groups


__all__ = ["UNASSIGNED", "Report", "reports_from_dicts", "group_by_project", "unrecognized_ratings"]
