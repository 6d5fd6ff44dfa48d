import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from healthpulse.models import Report
from healthpulse.portfolio import department_averages, portfolio_summary, risk_distribution


def _report(index, period="2025-02", **ratings) -> Report:
    return Report(id=f"r{index}", project_name=f"P{index}", reporting_period=period, **ratings)


def test_risk_distribution_ignores_unrated():
    reports = [
        _report(1, risk_level="Low"),
        _report(2, risk_level="low"),
        _report(3, risk_level="Critical"),
        _report(4, risk_level="N.A."),
        _report(5, risk_level="Unknown"),
    ]
    assert risk_distribution(reports) == {"Low": 2, "Medium": 0, "High": 0, "Critical": 1}


def test_department_averages_over_rated_reports_only():
    reports = [
        _report(1, front_end_quality="Excellent", back_end_quality="Poor"),
        _report(2, front_end_quality="Good", back_end_quality="N.A."),
    ]
    averages = {a.name: a for a in department_averages(reports)}

    assert averages["Front-End"].score == 3.5
    assert averages["Front-End"].label == "Excellent"
    assert averages["Front-End"].rated_reports == 2
    assert averages["Back-End"].score == 1.0
    assert averages["Back-End"].rated_reports == 1
    assert averages["Testing"].score == 0.0
    assert averages["Testing"].label == "No Data"


def test_summary_filters_by_period():
    reports = [
        _report(1, period="2025-01", risk_level="High"),
        _report(2, period="2025-02", risk_level="Critical"),
        _report(3, period="2025-02", risk_level="Low"),
    ]
    summary = portfolio_summary(reports, "2025-02")
    assert summary.total_reports == 2
    assert summary.risk_distribution["Critical"] == 1
    assert summary.risk_distribution["High"] == 0
    assert [(u.dimension, u.count) for u in summary.underperformance] == [
        ("Overall Score", 1),
        ("Risk Level", 1),
    ]

    everything = portfolio_summary(reports)
    assert everything.total_reports == 3
    assert everything.to_dict()["period"] is None


def test_summary_of_nothing():
    summary = portfolio_summary([])
    assert summary.total_reports == 0
    assert summary.underperformance == []
    assert all(a.score == 0.0 for a in summary.department_averages)
