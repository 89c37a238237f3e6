import pytest

from app.dependencies import get_triage_client
from app.main import app
from app.utils.exceptions import TriageUnavailable
from tests.conftest import TINY_JPEG, FakeTriage


@pytest.mark.asyncio
async def test_limping_dog_scenario(client, fake_triage):
    assert (await client.get("/api/stats")).json() == {"total": 0, "pending": 0, "resolved": 0, "critical": 0}

    response = await client.post("/api/submissions", json={
        "image": TINY_JPEG,
        "description": "stray dog, limping",
        "city": "Oakland",
        "state": "CA",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    assert body["data"]["priority"] == "high"
    assert body["data"]["analysis"]["animalType"] == "dog"
    assert body["data"]["guidance"] == "Keep the animal warm and still."

    [report] = (await client.get("/api/reports")).json()
    assert report["id"] == body["data"]["id"]
    assert report["priority"] == "high"
    assert report["status"] == "pending"
    assert report["city"] == "Oakland"

    assert (await client.get("/api/stats")).json() == {"total": 1, "pending": 1, "resolved": 0, "critical": 0}


@pytest.mark.asyncio
async def test_classify_timeout_scenario(client):
    app.dependency_overrides[get_triage_client] = lambda: FakeTriage(
        classify_error=TriageUnavailable("Triage model timed out"),
    )

    response = await client.post("/api/submissions", json={
        "image": TINY_JPEG,
        "description": "cat with a hurt paw",
    })

    assert response.status_code == 201
    assert response.json()["data"]["priority"] == "medium"

    [report] = (await client.get("/api/reports")).json()
    assert report["priority"] == "medium"
    assert report["status"] == "pending"
    assert report["ai_analysis"] is None


@pytest.mark.asyncio
async def test_missing_description_makes_no_triage_call(client, fake_triage):
    response = await client.post("/api/submissions", json={"image": TINY_JPEG, "description": ""})

    assert response.status_code == 422
    assert response.json()["message"] == "A description is required"
    assert fake_triage.calls == []
    assert (await client.get("/api/reports")).json() == []


@pytest.mark.asyncio
async def test_missing_image_rejected(client, fake_triage):
    response = await client.post("/api/submissions", json={"description": "stray dog"})
    assert response.status_code == 422
    assert fake_triage.calls == []


@pytest.mark.asyncio
async def test_analyze_returns_analysis_and_guidance(client):
    response = await client.post("/api/analyze", json={"image": TINY_JPEG})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["analysis"] == {
        "animalType": "dog",
        "condition": "injured",
        "severity": "high",
        "description": "visible limp",
        "priorityScore": 7,
    }
    assert data["guidance"] == "Keep the animal warm and still."
    assert (await client.get("/api/reports")).json() == []


@pytest.mark.asyncio
async def test_analyze_failure_is_503(client):
    app.dependency_overrides[get_triage_client] = lambda: FakeTriage(
        classify_error=TriageUnavailable("Triage model timed out"),
    )
    response = await client.post("/api/analyze", json={"image": TINY_JPEG})

    assert response.status_code == 503
    assert response.json()["message"] == "Triage model timed out"


@pytest.mark.asyncio
async def test_analyze_normalizes_model_output(client):
    app.dependency_overrides[get_triage_client] = lambda: FakeTriage(
        analysis={"animalType": "cat", "severity": "extreme", "priorityScore": 42},
    )
    response = await client.post("/api/analyze", json={"image": TINY_JPEG})

    analysis = response.json()["data"]["analysis"]
    assert analysis["severity"] == "medium"
    assert analysis["priorityScore"] == 10
    assert "extreme" in analysis["description"]


@pytest.mark.asyncio
async def test_analyze_does_not_touch_report_store(client):
    from app.dependencies import get_report_store

    def _no_store():
        raise AssertionError("report store requested")

    app.dependency_overrides[get_report_store] = _no_store
    response = await client.post("/api/analyze", json={"image": TINY_JPEG})

    assert response.status_code == 200
