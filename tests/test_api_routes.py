import pathlib
import sys
from typing import Dict, List

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from healthpulse import api as api_module
from healthpulse import settings
from healthpulse.app_server import create_app


REPORTS: List[Dict[str, object]] = [
    {
        "id": "a-jan",
        "projectName": "Acme",
        "reportingPeriod": "2025-01",
        "submissionDate": "2025-01-08T10:00:00",
        "assignedPM": "Dana",
        "riskLevel": "Medium",
        "financialHealth": "Healthy",
    },
    {
        "id": "a-feb",
        "projectName": "Acme",
        "reportingPeriod": "2025-02",
        "submissionDate": "2025-02-26T10:00:00",
        "assignedPM": "Dana",
        "riskLevel": "Low",
        "financialHealth": "At Risk",
    },
    {
        "id": "b-jan",
        "projectName": "Beta",
        "reportingPeriod": "2025-01",
        "submissionDate": "2025-01-12T10:00:00",
        "assignedPM": "Eli",
        "riskLevel": "Critical",
    },
]


@pytest.fixture
def client(monkeypatch):
    ledger: List[Dict[str, object]] = []

    def fake_record(event, message, **kwargs):
        ledger.append({"event": event, "message": message, **kwargs})

    monkeypatch.setattr(api_module, "record_feedback_tag", fake_record)
    monkeypatch.setattr(settings, "FEEDBACK_ENABLED", True)
    app = create_app()
    app.config.update(TESTING=True)
    return app.test_client(), ledger


def test_ping(client):
    test_client, _ = client
    response = test_client.get("/api/ping")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


@pytest.mark.parametrize(
    "endpoint",
    ["/api/scores", "/api/trend", "/api/latest", "/api/compliance", "/api/underperformance", "/api/portfolio"],
)
def test_non_object_body_is_rejected(client, endpoint):
    test_client, _ = client
    response = test_client.post(endpoint, json=["not", "an", "object"])
    assert response.status_code == 400
    body = response.get_json()
    assert body["status"] == "error"
    assert "JSON object" in body["detail"]


def test_reports_must_be_a_list(client):
    test_client, _ = client
    response = test_client.post("/api/scores", json={"reports": {"id": "x"}})
    assert response.status_code == 400


def test_scores_endpoint(client):
    test_client, _ = client
    response = test_client.post("/api/scores", json={"reports": REPORTS[1:2]})
    assert response.status_code == 200
    [entry] = response.get_json()["scores"]

    assert entry["report_id"] == "a-feb"
    assert entry["overall"] == 3.0
    assert entry["overall_source"] == "computed"
    assert entry["project_health"] == 3.0
    assert entry["team_kpis"] is None
    assert entry["doingWell"] == ["Risk Management"]
    assert entry["needsAttention"] == ["Financial Health"]


def test_trend_endpoint_compares_latest_two(client):
    test_client, _ = client
    response = test_client.post("/api/trend", json={"reports": REPORTS, "projectName": "Acme"})
    body = response.get_json()
    comparison = body["comparison"]

    assert comparison["sufficientData"] is True
    assert comparison["previousPeriod"] == "2025-01"
    assert comparison["currentPeriod"] == "2025-02"
    assert [(d["name"], d["change"]) for d in comparison["improved"]] == [("Risk Level", 1.0)]
    assert [(d["name"], d["change"]) for d in comparison["declined"]] == [
        ("Financial Health", -2.0),
        ("Overall Score", -0.5),
    ]
    assert [p["reportId"] for p in body["series"]] == ["a-jan", "a-feb"]


def test_trend_endpoint_with_one_report(client):
    test_client, _ = client
    response = test_client.post("/api/trend", json={"reports": REPORTS, "projectName": "Beta"})
    comparison = response.get_json()["comparison"]
    assert comparison["sufficientData"] is False
    assert comparison["message"].startswith("Insufficient data")


def test_latest_endpoint(client):
    test_client, _ = client
    response = test_client.post(
        "/api/latest",
        json={"reports": REPORTS, "registry": ["Acme", "Beta", "Gamma"], "period": "2025-02"},
    )
    body = response.get_json()

    assert body["latest"]["Acme"]["id"] == "a-feb"
    assert body["latest"]["Beta"]["id"] == "b-jan"
    assert body["withoutReports"] == ["Gamma"]
    assert body["periods"] == ["2025-02", "2025-01"]
    assert body["missingForPeriod"] == [
        {"projectName": "Beta", "assignedPM": "Eli"},
        {"projectName": "Gamma", "assignedPM": "Unassigned"},
    ]


def test_compliance_endpoint_defaults_to_known_pms(client):
    test_client, _ = client
    response = test_client.post("/api/compliance", json={"reports": REPORTS})
    rows = {row["pmName"]: row for row in response.get_json()["compliance"]}

    assert sorted(rows) == ["Dana", "Eli"]
    assert rows["Dana"]["periodStatuses"] == [
        {"period": "2025-02", "status": "Late"},
        {"period": "2025-01", "status": "On Time"},
    ]
    assert rows["Dana"]["complianceScore"] == 75
    assert rows["Eli"]["periodStatuses"] == [
        {"period": "2025-02", "status": "Missing"},
        {"period": "2025-01", "status": "On Time"},
    ]
    assert rows["Eli"]["tier"] == "warning"


def test_compliance_endpoint_validates_lists(client):
    test_client, _ = client
    response = test_client.post("/api/compliance", json={"reports": REPORTS, "pmNames": "Dana"})
    assert response.status_code == 400


def test_underperformance_endpoint(client):
    test_client, _ = client
    response = test_client.post("/api/underperformance", json={"reports": REPORTS, "period": "2025-01"})
    assert response.get_json()["underperformance"] == [
        {"dimension": "Overall Score", "count": 1, "severityTier": "caution"},
        {"dimension": "Risk Level", "count": 1, "severityTier": "caution"},
    ]

    response = test_client.post(
        "/api/underperformance",
        json={"reports": REPORTS, "dimensions": ["Financial Health", "risk_level"]},
    )
    assert [row["dimension"] for row in response.get_json()["underperformance"]] == [
        "Financial Health",
        "Risk Level",
    ]

    response = test_client.post("/api/underperformance", json={"reports": REPORTS, "dimensions": ["Vibes"]})
    assert response.status_code == 400


def test_portfolio_endpoint(client):
    test_client, _ = client
    response = test_client.post("/api/portfolio", json={"reports": REPORTS, "period": "2025-01"})
    body = response.get_json()
    assert body["totalReports"] == 2
    assert body["riskDistribution"] == {"Low": 0, "Medium": 1, "High": 0, "Critical": 1}


def test_unusable_records_are_skipped_and_ledgered(client):
    test_client, ledger = client
    payload = {"reports": REPORTS[:1] + [{"id": "orphan", "riskLevel": "Low"}]}
    response = test_client.post("/api/scores", json=payload)

    assert response.status_code == 200
    body = response.get_json()
    assert [s["report_id"] for s in body["scores"]] == ["a-jan"]
    assert body["rejected"][0]["id"] == "orphan"
    assert ledger[0]["event"] == "report_skipped"
    assert ledger[0]["context"]["endpoint"] == "/api/scores"


def test_ledger_can_be_disabled(client, monkeypatch):
    test_client, ledger = client
    monkeypatch.setattr(settings, "FEEDBACK_ENABLED", False)
    test_client.post("/api/scores", json={"reports": [{"id": "orphan"}]})
    assert ledger == []


def test_trend_without_project_name_does_not_mix_projects(client):
    test_client, _ = client
    reports = [
        {"id": "a1", "projectName": "Acme", "reportingPeriod": "2025-01", "riskLevel": "Critical"},
        {"id": "b1", "projectName": "Beta", "reportingPeriod": "2025-02", "riskLevel": "Low"},
    ]
    response = test_client.post("/api/trend", json={"reports": reports})
    assert response.status_code == 200
    comparison = response.get_json()["comparison"]

    assert comparison["sufficientData"] is False
    assert comparison["projectName"] is None
    assert comparison["improved"] == []
    assert comparison["declined"] == []
    assert "several projects" in comparison["message"]


def test_unrecognised_ratings_are_ledgered(client):
    test_client, ledger = client
    report = dict(REPORTS[0], riskLevel="Medium-ish", testingQuality="Superb")
    response = test_client.post("/api/scores", json={"reports": [report, REPORTS[1]]})

    assert response.status_code == 200
    [entry] = ledger
    assert entry["event"] == "rating_unrecognised"
    assert entry["context"]["reports"] == [
        {"id": "a-jan", "ratings": {"Risk Level": "Medium-ish", "Testing": "Superb"}}
    ]
