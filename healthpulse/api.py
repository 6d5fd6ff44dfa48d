"""REST API exposing the scoring engine.

Every endpoint takes a JSON object carrying a ``reports`` list in the
canonical report shape. Records that cannot be grouped (no project name) are
skipped, logged and written to the data-quality ledger rather than failing
the request.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Tuple

from flask import Blueprint, Response, jsonify, request

from . import settings
from .compliance import evaluate_compliance
from .delta_engine import compare_latest, kpi_trend_series
from .latest_resolver import available_periods, missing_for_period, resolve_latest
from .logging_utils import record_feedback_tag
from .models import UNASSIGNED, Report, reports_from_dicts, unrecognized_ratings
from .portfolio import portfolio_summary
from .ratings import DIMENSION_LABELS, Dimension
from .score_aggregator import kpi_highlights, score_report
from .underperformance import tally_underperformance

api = Blueprint("healthpulse", __name__, url_prefix="/api")
logger = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Request body is unusable; rendered as HTTP 400."""


def json_response(func: Callable[..., Any]) -> Callable[..., Response]:
    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> Response:
        try:
            result = func(*args, **kwargs)
        except PayloadError as exc:
            return jsonify({"status": "error", "detail": str(exc)}), 400
        if isinstance(result, Response):
            return result
        return jsonify(result)

    return wrapper


def _payload() -> Dict[str, Any]:
    payload = request.get_json(force=True, silent=True)
    if not isinstance(payload, dict):
        raise PayloadError("Invalid payload: must be JSON object")
    return payload


def _ledger(event: str, message: str, *, severity: str, context: Dict[str, Any]) -> None:
    if settings.FEEDBACK_ENABLED:
        record_feedback_tag(event, message, severity=severity, context=context)


def _reports(payload: Dict[str, Any]) -> Tuple[List[Report], List[Dict[str, Any]]]:
    raw = payload.get("reports", [])
    if not isinstance(raw, list):
        raise PayloadError("Invalid reports: must be a list")
    reports, rejected = reports_from_dicts(raw)
    if rejected:
        logger.warning("Skipped %d unusable report record(s) on %s", len(rejected), request.path)
        _ledger(
            "report_skipped",
            f"{len(rejected)} report record(s) could not be used",
            severity="warning",
            context={"endpoint": request.path, "rejected": rejected},
        )

    unknown: List[Dict[str, Any]] = []
    for report in reports:
        labels = unrecognized_ratings(report)
        if labels:
            unknown.append({"id": report.id, "ratings": labels})
    if unknown:
        logger.info("%d report(s) carry unrecognised rating labels on %s", len(unknown), request.path)
        _ledger(
            "rating_unrecognised",
            f"{len(unknown)} report(s) carry rating labels scored as N.A.",
            severity="info",
            context={"endpoint": request.path, "reports": unknown},
        )
    return reports, rejected


def _string_list(payload: Dict[str, Any], key: str) -> Optional[List[str]]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PayloadError(f"Invalid {key}: must be a list of strings")
    return value


def _dimensions(names: Optional[List[str]]) -> Optional[List[Dimension]]:
    if names is None:
        return None
    by_label = {label.casefold(): dim for dim, label in DIMENSION_LABELS.items()}
    dimensions: List[Dimension] = []
    for name in names:
        try:
            dimensions.append(Dimension(name))
        except ValueError:
            dim = by_label.get(name.casefold())
            if dim is None:
                raise PayloadError(f"Unknown dimension: {name}")
            dimensions.append(dim)
    return dimensions


@api.route("/scores", methods=["POST"])
@json_response
def scores() -> Dict[str, object]:
    payload = _payload()
    reports, rejected = _reports(payload)
    results = []
    for report in reports:
        entry = score_report(report).to_dict()
        highlights = kpi_highlights(report)
        entry["doingWell"] = highlights.doing_well
        entry["needsAttention"] = highlights.needs_attention
        results.append(entry)
    return {"scores": results, "rejected": rejected}


@api.route("/trend", methods=["POST"])
@json_response
def trend() -> Dict[str, object]:
    payload = _payload()
    reports, rejected = _reports(payload)
    project_name = payload.get("projectName")
    if project_name:
        reports = [r for r in reports if r.project_name == project_name]
    comparison = compare_latest(reports)
    return {
        "comparison": comparison.to_dict(),
        "series": [point.to_dict() for point in kpi_trend_series(reports)],
        "rejected": rejected,
    }


@api.route("/latest", methods=["POST"])
@json_response
def latest() -> Dict[str, object]:
    payload = _payload()
    reports, rejected = _reports(payload)
    registry = _string_list(payload, "registry") or []
    period = payload.get("period")
    resolved = resolve_latest(reports, registry)
    body = resolved.to_dict()
    body["periods"] = available_periods(reports)
    body["missingForPeriod"] = [m.to_dict() for m in missing_for_period(reports, registry, period)]
    body["rejected"] = rejected
    return body


@api.route("/compliance", methods=["POST"])
@json_response
def compliance() -> Dict[str, object]:
    payload = _payload()
    reports, rejected = _reports(payload)
    pm_names = _string_list(payload, "pmNames")
    if pm_names is None:
        pm_names = sorted({r.assigned_pm for r in reports if r.assigned_pm != UNASSIGNED})
    periods = _string_list(payload, "periods")
    rows = evaluate_compliance(reports, pm_names, periods)
    return {"compliance": [row.to_dict() for row in rows], "rejected": rejected}


@api.route("/underperformance", methods=["POST"])
@json_response
def underperformance() -> Dict[str, object]:
    payload = _payload()
    reports, rejected = _reports(payload)
    period = payload.get("period")
    if period:
        reports = [r for r in reports if r.reporting_period == period]
    dimensions = _dimensions(_string_list(payload, "dimensions"))
    tally = tally_underperformance(reports, dimensions)
    return {"underperformance": [row.to_dict() for row in tally], "rejected": rejected}


@api.route("/portfolio", methods=["POST"])
@json_response
def portfolio() -> Dict[str, object]:
    payload = _payload()
    reports, rejected = _reports(payload)
    summary = portfolio_summary(reports, payload.get("period"))
    body = summary.to_dict()
    body["rejected"] = rejected
    return body
