import asyncio
import logging

import pytest
from fastapi.testclient import TestClient

from claimscope.config import MAX_DATASET_SIZE
from claimscope.pipeline.load_claims import load_imported_claims, load_synthetic_claims
from claimscope.serving import app as app_module

HEADER = "Patient ID,Amount Billed,Diagnosis,Treatment,Target_Fraude"


@pytest.fixture
def client(monkeypatch):
    async def fake_explain(claim):
        return f"analysis of {claim.id}"

    monkeypatch.setattr(app_module, "explain_claim", fake_explain)
    app_module.set_dataset(None)
    yield TestClient(app_module.app)
    app_module.set_dataset(None)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_initial_dataset_is_synthetic(client):
    body = client.get("/dataset").json()
    assert body["source"] == "synthetic"
    assert body["total_records"] == 850
    metrics = body["metrics"]
    assert metrics["total_fraud"] + metrics["total_normal"] == 850


def test_regenerate_with_count(client):
    body = client.post("/datasets/synthetic", params={"count": 120}).json()
    assert body["total_records"] == 120
    assert client.get("/metrics").json()["total_samples"] == 120


def test_negative_count_is_rejected(client):
    assert client.post("/datasets/synthetic", params={"count": -5}).status_code == 422


def test_import_replaces_dataset(client):
    csv_text = f"{HEADER}\nP1,500,E11,CONS-101,No Fraud\nP2,900,Z00.0,SURG-999,Phantom Billing\nP3\n"
    response = client.post("/datasets/import", content=csv_text.encode("utf-8"),
                           headers={"Content-Type": "text/csv"})

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "import"
    assert body["total_records"] == 2
    assert body["has_ground_truth"] is True
    assert body["metrics"]["total_fraud"] == 1

    fraud = client.get("/claims", params={"status": "fraud"}).json()
    assert [c["id"] for c in fraud["claims"]] == ["P2"]
    assert fraud["claims"][0]["reason"] == "Phantom Billing"


def test_import_with_no_records_is_rejected(client):
    response = client.post("/datasets/import", content=HEADER.encode("utf-8"))
    assert response.status_code == 422
    assert client.get("/dataset").json()["source"] == "synthetic"


def test_import_rejects_non_utf8(client):
    response = client.post("/datasets/import", content=b"\xff\xfe\x00bad")
    assert response.status_code == 422


def test_claim_listing_filters_and_limits(client):
    client.post("/datasets/synthetic", params={"count": 300})

    everything = client.get("/claims", params={"limit": 10}).json()
    assert everything["total"] == 300
    assert everything["shown"] == 10

    normal = client.get("/claims", params={"status": "normal", "limit": 1000}).json()
    assert all(c["status"] == "Normal" for c in normal["claims"])

    chart = client.get("/charts/class_distribution").json()
    assert chart["status"] == ["Normal", "Fraud"]
    assert sum(chart["count"]) == 300
    assert chart["count"][0] == normal["total"]


def test_explain_stores_analysis_per_claim(client):
    client.post("/datasets/synthetic", params={"count": 5})

    response = client.post("/claims/CLM-10003/explain")
    assert response.json() == {"claim_id": "CLM-10003", "analysis": "analysis of CLM-10003"}
    assert client.get("/claims/CLM-10003/explanation").json()["analysis"] == "analysis of CLM-10003"
    assert client.get("/claims/CLM-10001/explanation").status_code == 404


def test_unknown_claim(client):
    assert client.get("/claims/NOPE").status_code == 404
    assert client.post("/claims/NOPE/explain").status_code == 404


def test_count_above_cap_is_rejected(client):
    response = client.post("/datasets/synthetic", params={"count": MAX_DATASET_SIZE + 1})
    assert response.status_code == 422


def test_analysis_for_replaced_dataset_is_not_served(client, monkeypatch):
    client.post("/datasets/synthetic", params={"count": 5})

    async def explain_while_regenerating(claim):
        # dataset swapped by another request while the analysis is in flight
        app_module.set_dataset(load_synthetic_claims(5))
        return f"analysis of old {claim.id}"

    monkeypatch.setattr(app_module, "explain_claim", explain_while_regenerating)

    response = client.post("/claims/CLM-10003/explain")
    assert response.status_code == 200
    assert response.json()["analysis"] == "analysis of old CLM-10003"
    assert client.get("/claims/CLM-10003/explanation").status_code == 404


def test_regenerating_drops_previous_analyses(client):
    client.post("/datasets/synthetic", params={"count": 5})
    client.post("/claims/CLM-10002/explain")

    client.post("/datasets/synthetic", params={"count": 5})
    assert client.get("/claims/CLM-10002/explanation").status_code == 404


def test_import_parses_off_the_event_loop(client, monkeypatch):
    seen = {}

    def loader(text):
        try:
            asyncio.get_running_loop()
            seen["on_loop"] = True
        except RuntimeError:
            seen["on_loop"] = False
        return load_imported_claims(text)

    monkeypatch.setattr(app_module, "load_imported_claims", loader)
    response = client.post("/datasets/import", content=f"{HEADER}\nP1,500,E11,CONS-101,No Fraud".encode("utf-8"))

    assert response.status_code == 200
    assert seen == {"on_loop": False}


def test_missing_label_column_is_warned_once(client, caplog):
    with caplog.at_level(logging.WARNING):
        response = client.post("/datasets/import", content=b"id,amount\nA,10\nB,20")

    assert response.status_code == 200
    assert response.json()["has_ground_truth"] is False
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING and "label column" in r.getMessage()]
    assert len(warnings) == 1
