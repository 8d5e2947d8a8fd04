"""Unit tests for the vodsync web API."""

import io
from unittest.mock import patch

import pytest

from vodsync.models import SyncFound, SyncNotFound
from vodsync.web import create_app
from vodsync.web import routes

SYNC_BODY = {
    "vod": {
        "url": "https://www.twitch.tv/videos/42",
        "published_at": "2024-01-01T23:50:00Z",
        "duration": "5h0m0s",
    },
    "roi": {"x": 1700, "y": 20, "w": 180, "h": 48},
}


@pytest.fixture
def app(tmp_path):
    routes._jobs.clear()
    app = create_app(work_dir=tmp_path)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def _upload(client, filename="clip.mp4", content=b"fake video data"):
    return client.post(
        "/api/upload",
        data={"file": (io.BytesIO(content), filename)},
        content_type="multipart/form-data",
    )


def _wait(client, job_id):
    """Drain the progress stream, which ends once the worker thread finishes."""
    resp = client.get(f"/api/jobs/{job_id}/progress")
    return resp.get_data(as_text=True)


class TestUpload:
    def test_upload_success(self, client):
        resp = _upload(client)
        assert resp.status_code == 200
        data = resp.get_json()
        assert "job_id" in data
        assert data["filename"] == "clip.mp4"

    def test_upload_no_file(self, client):
        resp = client.post("/api/upload")
        assert resp.status_code == 400

    def test_upload_creates_file(self, client, tmp_path):
        resp = _upload(client, filename="clip.webm", content=b"CONTENT")
        job_id = resp.get_json()["job_id"]
        clip = tmp_path / job_id / "clip.webm"
        assert clip.exists()
        assert clip.read_bytes() == b"CONTENT"

    def test_upload_registers_job_under_lock(self, client):
        seen = []

        class RecordingLock:
            def __enter__(self):
                seen.append(len(routes._jobs))

            def __exit__(self, *exc):
                seen.append(len(routes._jobs))

        with patch("vodsync.web.routes._jobs_lock", RecordingLock()):
            _upload(client)
        assert seen == [0, 1]


class TestSync:
    def test_sync_unknown_job(self, client):
        resp = client.post("/api/jobs/nonexistent/sync", json=SYNC_BODY)
        assert resp.status_code == 404

    def test_missing_vod(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.post(f"/api/jobs/{job_id}/sync", json={})
        assert resp.status_code == 400

    def test_malformed_duration(self, client):
        job_id = _upload(client).get_json()["job_id"]
        body = {"vod": {**SYNC_BODY["vod"], "duration": "5 hours"}}
        resp = client.post(f"/api/jobs/{job_id}/sync", json=body)
        assert resp.status_code == 400
        assert "duration" in resp.get_json()["error"]

    def test_invalid_roi(self, client):
        job_id = _upload(client).get_json()["job_id"]
        body = {**SYNC_BODY, "roi": {"x": 0, "y": 0, "w": 0, "h": 10}}
        resp = client.post(f"/api/jobs/{job_id}/sync", json=body)
        assert resp.status_code == 400

    @patch("vodsync.web.routes.synchronize", return_value=SyncFound(offset_seconds=900))
    def test_sync_found(self, mock_sync, client, tmp_path):
        job_id = _upload(client).get_json()["job_id"]

        resp = client.post(f"/api/jobs/{job_id}/sync", json=SYNC_BODY)
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "started"

        stream = _wait(client, job_id)
        assert '"stage": "complete"' in stream

        status = client.get(f"/api/jobs/{job_id}/status").get_json()
        assert status["status"] == "done"
        assert status["result"] == {"found": True, "offset_seconds": 900, "timestamp": "00:15:00"}

        request, config = mock_sync.call_args[0]
        assert request.clip == tmp_path / job_id / "clip.mp4"
        assert request.roi.x == 1700
        assert config.images_dir == tmp_path / job_id / "frames"

    @patch("vodsync.web.routes.synchronize", return_value=SyncNotFound(reason="clock not recognized"))
    def test_sync_not_found(self, mock_sync, client):
        job_id = _upload(client).get_json()["job_id"]
        client.post(f"/api/jobs/{job_id}/sync", json=SYNC_BODY)
        _wait(client, job_id)

        status = client.get(f"/api/jobs/{job_id}/status").get_json()
        assert status["result"] == {"found": False, "reason": "clock not recognized"}

    @patch("vodsync.web.routes.synchronize", side_effect=routes.ExtractionFailed("Invalid data"))
    def test_sync_error(self, mock_sync, client):
        job_id = _upload(client).get_json()["job_id"]
        client.post(f"/api/jobs/{job_id}/sync", json=SYNC_BODY)
        stream = _wait(client, job_id)
        assert "ffmpeg failed" in stream

        status = client.get(f"/api/jobs/{job_id}/status").get_json()
        assert status["status"] == "error"
        assert "Invalid data" in status["error"]

    def test_one_sync_at_a_time(self, client):
        busy = _upload(client).get_json()["job_id"]
        routes._jobs[busy]["status"] = "syncing"
        job_id = _upload(client).get_json()["job_id"]

        resp = client.post(f"/api/jobs/{job_id}/sync", json=SYNC_BODY)
        assert resp.status_code == 409
        assert client.get(f"/api/jobs/{job_id}/status").get_json()["status"] == "uploaded"


class TestStatus:
    def test_status_after_upload(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.get(f"/api/jobs/{job_id}/status")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "uploaded"

    def test_status_unknown_job(self, client):
        resp = client.get("/api/jobs/nonexistent/status")
        assert resp.status_code == 404


class TestProgress:
    def test_progress_before_sync(self, client):
        job_id = _upload(client).get_json()["job_id"]
        resp = client.get(f"/api/jobs/{job_id}/progress")
        assert resp.status_code == 409
