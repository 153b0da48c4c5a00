from __future__ import annotations

import base64
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from nutcounter.adapters.inference.placeholder import PlaceholderInference
from nutcounter.adapters.sheets.mock_sheet import MockSheet
from nutcounter.orchestrator import errors
from nutcounter.orchestrator.pipeline import SubmissionPipeline
from nutcounter.services import api

IMAGE = base64.b64encode(b"\xff\xd8fake-jpeg").decode()
VOCAB = ("walnut", "almond")


@pytest.fixture
def client():
    return TestClient(api.app)


def make_pipeline(status_store, writer=None, inference=None):
    return SubmissionPipeline(
        inference=inference or PlaceholderInference(status_store),
        writer=writer if writer is not None else MockSheet(status_store),
        vocabulary=VOCAB,
        status_store=status_store,
    )


def test_process_image_success(client, status_store):
    with patch.object(api, "pipeline", make_pipeline(status_store)):
        r = client.post("/process-image", json={"image": IMAGE, "fileName": "tray.jpg"})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == errors.STATUS_SUCCESS
    assert body["outcome"] == "success"
    assert body["classCounts"] == {"walnut": 2, "almond": 1}
    assert body["total"] == 4
    assert body["row"][1:] == ["tray.jpg", 2, 1, 4]


def test_data_url_prefix_is_accepted(client, status_store):
    with patch.object(api, "pipeline", make_pipeline(status_store)):
        r = client.post("/process-image", json={"image": f"data:image/jpeg;base64,{IMAGE}", "fileName": "x.jpg"})
    assert r.status_code == 200


def test_missing_sheet_credential_still_returns_200(client, status_store):
    writer = MagicMock(configured=False)
    with patch.object(api, "pipeline", make_pipeline(status_store, writer=writer)):
        r = client.post("/process-image", json={"image": IMAGE, "fileName": "tray.jpg"})
    assert r.status_code == 200
    body = r.json()
    assert body["outcome"] == "missing_credential"
    assert body["status"] == errors.STATUS_MISSING_KEY
    assert body["total"] == 4
    assert len(body["row"]) == 5


def test_permission_failure_is_reported_not_raised(client, status_store):
    writer = MagicMock(configured=True)
    writer.append_row.side_effect = errors.SheetWriteError("Unable to parse range: Sheet1!A:E", status_code=400)
    with patch.object(api, "pipeline", make_pipeline(status_store, writer=writer)):
        r = client.post("/process-image", json={"image": IMAGE, "fileName": "tray.jpg"})
    assert r.status_code == 200
    assert r.json()["failureClass"] == "permission"
    assert r.json()["classCounts"] == {"walnut": 2, "almond": 1}


def test_inference_failure_is_500(client, status_store):
    inference = MagicMock()
    inference.infer.side_effect = errors.InferenceTransportError("connection refused")
    with patch.object(api, "pipeline", make_pipeline(status_store, inference=inference)):
        r = client.post("/process-image", json={"image": IMAGE, "fileName": "tray.jpg"})
    assert r.status_code == 500
    body = r.json()
    assert body["message"] == "Internal server error: Roboflow inference failed: connection refused"
    assert body["error"] == "Roboflow inference failed: connection refused"


@pytest.mark.parametrize("payload", [{}, {"fileName": "a.jpg"}, {"image": "", "fileName": "a.jpg"}])
def test_missing_image_is_400(client, payload):
    r = client.post("/process-image", json=payload)
    assert r.status_code == 400
    assert r.json()["message"] == "No image data provided."


def test_invalid_base64_is_400(client):
    r = client.post("/process-image", json={"image": "abc", "fileName": "a.jpg"})
    assert r.status_code == 400
    assert r.json()["message"] == "Image data is not valid base64."
    assert r.json()["error"]


def test_post_without_body_is_400(client):
    r = client.post("/process-image")
    assert r.status_code == 400
    assert r.json()["message"] == "No image data provided."


@pytest.mark.parametrize("payload", [{"image": 123}, {"image": ["a"]}, [1, 2]])
def test_unusable_image_field_is_400(client, payload):
    r = client.post("/process-image", json=payload)
    assert r.status_code == 400
    assert set(r.json()) == {"message", "error"}


def test_non_json_body_is_400(client):
    r = client.post("/process-image", content=b"not json", headers={"content-type": "application/json"})
    assert r.status_code == 400


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
def test_non_post_is_405(client, method):
    r = client.request(method, "/process-image")
    assert r.status_code == 405
    assert r.headers["allow"] == "POST"
    assert r.json()["message"] == f"Method {method} not allowed"
    assert r.json()["error"] == f"Method {method} not allowed"


def test_health_reports_modes(client, status_store):
    with patch.object(api, "pipeline", make_pipeline(status_store)):
        r = client.get("/health")
    body = r.json()
    assert body["inference_mode"] == "placeholder"
    assert body["sheet_adapter"] == "MockSheet"
    assert body["sheet_configured"] is True
    assert body["vocabulary"] == ["walnut", "almond"]


def test_status_shows_last_submission(client, status_store):
    with patch.object(api, "pipeline", make_pipeline(status_store)):
        client.post("/process-image", json={"image": IMAGE, "fileName": "last.jpg"})
    body = client.get("/status").json()
    assert body["last_submission"]["submission_id"] == "last.jpg"
    assert body["last_submission"]["total"] == 4
    assert isinstance(body["logs"], list)
