import sys
from datetime import datetime
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from healthpulse.compliance import (
    LATE,
    MISSING,
    NOT_APPLICABLE,
    ON_TIME,
    compliance_score,
    compliance_tier,
    evaluate_compliance,
    is_late,
    recent_periods,
)
from healthpulse.models import Report


def _report(project, period, submitted, pm="Dana", report_id=None) -> Report:
    return Report(
        id=report_id or f"{project}-{period}",
        project_name=project,
        reporting_period=period,
        submission_date=submitted,
        assigned_pm=pm,
    )


def _statuses(row):
    return [(s.period, s.status) for s in row.period_statuses]


def test_gap_period_marked_missing_not_na():
    reports = [
        _report("Beta", "2025-01", datetime(2025, 1, 10)),
        _report("Beta", "2025-03", datetime(2025, 3, 5)),
    ]
    periods = ["2025-03", "2025-02", "2025-01"]
    [row] = evaluate_compliance(reports, ["Dana"], periods)

    assert _statuses(row) == [
        ("2025-03", ON_TIME),
        ("2025-02", MISSING),
        ("2025-01", ON_TIME),
    ]
    assert row.compliance_score == 67
    assert row.tier == "warning"


def test_pm_without_projects_is_not_applicable_and_scores_zero():
    reports = [_report("Beta", "2025-01", datetime(2025, 1, 10))]
    rows = evaluate_compliance(reports, ["Dana", "Eve"], ["2025-01", "2024-12"])
    eve = rows[1]

    assert _statuses(eve) == [("2025-01", NOT_APPLICABLE), ("2024-12", NOT_APPLICABLE)]
    assert eve.compliance_score == 0
    assert eve.tier == "critical"


def test_na_cells_excluded_from_denominator():
    assert compliance_score([ON_TIME, NOT_APPLICABLE, NOT_APPLICABLE]) == 100
    assert compliance_score([ON_TIME, LATE, MISSING]) == 50
    assert compliance_score([LATE, ON_TIME]) == 75
    assert compliance_score([LATE, ON_TIME, ON_TIME, MISSING]) == 63
    assert compliance_score([NOT_APPLICABLE]) == 0
    assert compliance_score([]) == 0


def test_late_when_submitted_in_last_five_days_of_month():
    # February 2025 has 28 days: day 24 onwards is late.
    assert is_late(_report("Acme", "2025-02", datetime(2025, 2, 24)))
    assert not is_late(_report("Acme", "2025-02", datetime(2025, 2, 23)))
    assert is_late(_report("Acme", "2025-01", datetime(2025, 1, 27)))
    assert not is_late(_report("Acme", "2025-01", datetime(2025, 1, 26)))


def test_late_window_is_adjustable():
    report = _report("Acme", "2025-04", datetime(2025, 4, 21))
    assert not is_late(report, late_window_days=5)
    assert is_late(report, late_window_days=10)
    assert not is_late(_report("Acme", "2025-04", datetime(2025, 4, 20)), late_window_days=10)


def test_missing_date_or_malformed_period_never_late():
    assert not is_late(_report("Acme", "2025-02", None))
    assert not is_late(_report("Acme", "Feb 2025", datetime(2025, 2, 27)))


def test_one_late_report_marks_the_period_late():
    reports = [
        _report("Acme", "2025-02", datetime(2025, 2, 10)),
        _report("Beta", "2025-02", datetime(2025, 2, 26)),
    ]
    [row] = evaluate_compliance(reports, ["Dana"], ["2025-02"])
    assert _statuses(row) == [("2025-02", LATE)]
    assert row.compliance_score == 50
    assert row.tier == "warning"


def test_default_periods_are_three_most_recent():
    reports = [
        _report("Acme", period, datetime(2025, 1, 1))
        for period in ["2024-11", "2024-12", "2025-01", "2025-02"]
    ]
    assert recent_periods(reports) == ["2025-02", "2025-01", "2024-12"]
    assert recent_periods(reports, 0) == []

    [row] = evaluate_compliance(reports, ["Dana"])
    assert [s.period for s in row.period_statuses] == ["2025-02", "2025-01", "2024-12"]


def test_reports_of_other_pms_do_not_count():
    reports = [
        _report("Acme", "2025-01", datetime(2025, 1, 5), pm="Dana"),
        _report("Beta", "2025-02", datetime(2025, 2, 5), pm="Eli"),
    ]
    rows = evaluate_compliance(reports, ["Dana", "Eli", "Dana"], ["2025-02", "2025-01"])
    assert [r.pm_name for r in rows] == ["Dana", "Eli"]
    assert _statuses(rows[0]) == [("2025-02", MISSING), ("2025-01", ON_TIME)]
    assert _statuses(rows[1]) == [("2025-02", ON_TIME), ("2025-01", MISSING)]


def test_empty_inputs():
    assert evaluate_compliance([], []) == []
    [row] = evaluate_compliance([], ["Dana"])
    assert row.period_statuses == []
    assert row.compliance_score == 0


@pytest.mark.parametrize("score, tier", [(100, "good"), (80, "good"), (79, "warning"), (50, "warning"), (49, "critical"), (0, "critical")])
def test_compliance_tiers(score, tier):
    assert compliance_tier(score) == tier


def test_row_serialisation():
    reports = [_report("Acme", "2025-01", datetime(2025, 1, 5))]
    [row] = evaluate_compliance(reports, ["Dana"], ["2025-01"])
    assert row.to_dict() == {
        "pmName": "Dana",
        "periodStatuses": [{"period": "2025-01", "status": "On Time"}],
        "complianceScore": 100,
        "tier": "good",
    }
