"""Web API routes for vodsync."""

import dataclasses
import json
import queue
import threading
import uuid
from pathlib import Path

from flask import Blueprint, Response, current_app, jsonify, request

from vodsync.engine import synchronize
from vodsync.ffutil import ExtractionFailed
from vodsync.models import ROI, SyncFound, SyncRequest, VodInfo
from vodsync.timestamps import MalformedDuration, parse_instant

bp = Blueprint("web", __name__)

# In-memory job store: job_id -> job dict
_jobs: dict[str, dict] = {}
# Guards inserts and the one-sync-at-a-time check
_jobs_lock = threading.Lock()


@bp.route("/api/upload", methods=["POST"])
def upload():
    if "file" not in request.files:
        return jsonify({"error": "No file provided"}), 400

    f = request.files["file"]
    if not f.filename:
        return jsonify({"error": "Empty filename"}), 400

    job_id = uuid.uuid4().hex[:12]
    job_dir = Path(current_app.config["WORK_DIR"]) / job_id
    job_dir.mkdir(parents=True, exist_ok=True)

    ext = Path(f.filename).suffix or ".mp4"
    clip_path = job_dir / f"clip{ext}"
    f.save(clip_path)

    with _jobs_lock:
        _jobs[job_id] = {
            "dir": job_dir,
            "clip_path": clip_path,
            "filename": f.filename,
            "status": "uploaded",
        }

    return jsonify({"job_id": job_id, "filename": f.filename})


def _parse_sync_request(job: dict, payload: dict) -> SyncRequest:
    """Build a SyncRequest from the JSON body; raises ValueError/KeyError on bad input."""
    vod = payload["vod"]
    vod_info = VodInfo(
        url=vod.get("url", ""),
        published_at=vod["published_at"],
        duration=vod["duration"],
    )
    vod_info.duration_seconds  # raises MalformedDuration
    roi = ROI(**payload["roi"]) if payload.get("roi") else None
    return SyncRequest(
        clip=job["clip_path"],
        reference_instant=parse_instant(payload.get("reference_instant") or vod_info.published_at),
        vod=vod_info,
        roi=roi,
    )


@bp.route("/api/jobs/<job_id>/sync", methods=["POST"])
def start_sync(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    try:
        sync_request = _parse_sync_request(job, request.get_json(silent=True) or {})
    except MalformedDuration as e:
        return jsonify({"error": str(e)}), 400
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"error": f"Invalid sync request: {e}"}), 400

    with _jobs_lock:
        if job["status"] == "syncing":
            return jsonify({"error": "Job is already syncing"}), 409
        if any(j["status"] == "syncing" for j in _jobs.values()):
            return jsonify({"error": "Another sync is in progress"}), 409
        job["status"] = "syncing"

    config = dataclasses.replace(
        current_app.config["SYNC_CONFIG"], images_dir=job["dir"] / "frames"
    )
    progress_queue: queue.Queue = queue.Queue()
    job["progress_queue"] = progress_queue
    job["error"] = None
    job["result"] = None

    def run():
        try:
            def on_progress(stage: str, frac: float):
                progress_queue.put({"stage": stage, "progress": round(frac, 3)})

            result = synchronize(sync_request, config, on_progress=on_progress)
            if isinstance(result, SyncFound):
                job["result"] = {
                    "found": True,
                    "offset_seconds": result.offset_seconds,
                    "timestamp": result.timestamp,
                }
            else:
                job["result"] = {"found": False, "reason": result.reason}
            job["status"] = "done"
        except ExtractionFailed as e:
            job["status"] = "error"
            job["error"] = f"ffmpeg failed: {e}"
        except Exception as e:
            job["status"] = "error"
            job["error"] = str(e)
        finally:
            progress_queue.put(None)  # sentinel

    threading.Thread(target=run, daemon=True).start()
    return jsonify({"status": "started"})


@bp.route("/api/jobs/<job_id>/progress")
def progress_stream(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    q = job.get("progress_queue")

    if q is None:
        return jsonify({"error": "No sync in progress"}), 409

    def generate():
        while True:
            try:
                msg = q.get(timeout=120)
            except queue.Empty:
                yield "data: {\"error\": \"timeout\"}\n\n"
                break
            if msg is None:
                if job["status"] == "error":
                    data = json.dumps({"error": job["error"]})
                else:
                    data = json.dumps({
                        "stage": "complete",
                        "progress": 1.0,
                        "result": job.get("result"),
                    })
                yield f"data: {data}\n\n"
                break
            yield f"data: {json.dumps(msg)}\n\n"

    return Response(generate(), mimetype="text/event-stream")


@bp.route("/api/jobs/<job_id>/status")
def job_status(job_id: str):
    if job_id not in _jobs:
        return jsonify({"error": "Job not found"}), 404

    job = _jobs[job_id]
    resp = {"status": job["status"], "filename": job.get("filename")}
    if job["status"] == "done":
        resp["result"] = job.get("result")
    if job["status"] == "error":
        resp["error"] = job.get("error")
    return jsonify(resp)
