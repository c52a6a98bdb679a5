"""Flask application factory for the SegMark web API."""

import tempfile
from pathlib import Path

from flask import Flask, jsonify

from segmark.errors import SegmarkError


def create_app(work_dir: Path | None = None) -> Flask:
    app = Flask(__name__)
    app.config["WORK_DIR"] = work_dir or Path(tempfile.mkdtemp(prefix="segmark_"))
    app.config["SEGMARK_DEFAULT_ROLE"] = "A"

    from segmark.web.routes import bp, error_status
    app.register_blueprint(bp)

    @app.errorhandler(SegmarkError)
    def segmark_error(error: SegmarkError):
        return jsonify({"error": str(error), "kind": error.kind.value}), error_status(error)

    return app
