"""Flask application factory for the vodsync web API."""

import tempfile
from pathlib import Path

from flask import Flask, jsonify

from vodsync.config import SyncConfig


def create_app(work_dir: Path | None = None, sync_config: SyncConfig | None = None) -> Flask:
    app = Flask(__name__)
    app.config["WORK_DIR"] = work_dir or Path(tempfile.mkdtemp(prefix="vodsync_"))
    app.config["SYNC_CONFIG"] = sync_config or SyncConfig()
    app.config["MAX_CONTENT_LENGTH"] = 2 * 1024 * 1024 * 1024  # 2 GB

    from vodsync.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(413)
    def request_entity_too_large(error):
        return jsonify({"error": "File too large"}), 413

    return app
