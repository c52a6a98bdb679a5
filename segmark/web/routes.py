"""JSON API routes for SegMark editing sessions."""

import logging
import subprocess
import threading
import uuid
from pathlib import Path

from flask import Blueprint, Response, abort, current_app, jsonify, request

from segmark import media
from segmark.catalog import parse_catalog
from segmark.errors import ErrorKind, SegmarkError
from segmark.models import Role, Segment
from segmark.paths import default_export_name, default_project_name, file_name
from segmark.session import AnnotationSession, EditResult
from segmark.timeutil import format_ms

logger = logging.getLogger(__name__)

bp = Blueprint("api", __name__, url_prefix="/api")

# In-memory session store: session_id -> {"session": AnnotationSession, "lock": Lock}
_sessions: dict[str, dict] = {}

_CONFLICT_KINDS = {ErrorKind.NOT_READY, ErrorKind.INCOMPLETE_SEGMENTS}


def error_status(error: SegmarkError) -> int:
    return 409 if error.kind in _CONFLICT_KINDS else 400


@bp.errorhandler(400)
def bad_request(error):
    return jsonify({"error": error.description}), 400


def _segment_json(seg: Segment) -> dict:
    return {
        "id": seg.id,
        "start_ms": seg.start_ms,
        "end_ms": seg.end_ms,
        "start": format_ms(seg.start_ms),
        "end": format_ms(seg.end_ms),
        "text": seg.text,
        "label_id": seg.label_id,
        "complete": seg.is_complete,
    }


def _state_json(session_id: str, session: AnnotationSession) -> dict:
    labels = None
    if session.catalog is not None:
        labels = [{"id": label.id, "display": label.display} for label in session.catalog]
    return {
        "session_id": session_id,
        "media_path": session.media_reference,
        "media_name": file_name(session.media_reference) if session.media_reference else None,
        "labels_path": session.catalog_reference,
        "labels": labels,
        "role": session.role.value,
        "duration_ms": session.duration_ms,
        "segments": [_segment_json(s) for s in session.segments],
        "can_save": session.can_save,
        "can_export": session.can_export,
    }


def _edit_json(result: EditResult) -> dict:
    return {
        "changed": result.changed,
        "infeasible": result.infeasible,
        "segments": [_segment_json(s) for s in result.segments],
    }


def _get_entry(session_id: str) -> dict:
    entry = _sessions.get(session_id)
    if entry is None:
        abort(404, description="Session not found")
    return entry


def _payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _number(payload: dict, key: str, required: bool = True) -> float | None:
    value = payload.get(key)
    if value is None and not required:
        return None
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        abort(400, description=f"'{key}' must be a number")
    return value


@bp.errorhandler(404)
def not_found(error):
    return jsonify({"error": error.description}), 404


@bp.route("/sessions", methods=["POST"])
def create_session():
    payload = _payload()
    media_path = payload.get("media_path")
    if not isinstance(media_path, str) or not media_path:
        abort(400, description="'media_path' is required")

    session = AnnotationSession(
        role=Role(current_app.config["SEGMARK_DEFAULT_ROLE"]),
        output_dir=Path(current_app.config["WORK_DIR"]),
    )
    try:
        session.open_media(media_path, _number(payload, "duration_ms", required=False))
    except (media.FFprobeNotFoundError, subprocess.CalledProcessError, OSError, ValueError) as e:
        abort(400, description=f"Cannot read media duration: {e}")

    session_id = uuid.uuid4().hex[:12]
    _sessions[session_id] = {"session": session, "lock": threading.Lock()}
    logger.info("Started session %s for %s", session_id, file_name(media_path))
    return jsonify(_state_json(session_id, session)), 201


@bp.route("/sessions/<session_id>")
def session_state(session_id: str):
    entry = _get_entry(session_id)
    return jsonify(_state_json(session_id, entry["session"]))


@bp.route("/sessions/<session_id>", methods=["DELETE"])
def close_session(session_id: str):
    _get_entry(session_id)
    del _sessions[session_id]
    return jsonify({"status": "closed"})


@bp.route("/sessions/<session_id>/role", methods=["PUT"])
def set_role(session_id: str):
    entry = _get_entry(session_id)
    role = _payload().get("role")
    if not isinstance(role, str) or role not in {r.value for r in Role}:
        abort(400, description="'role' must be one of A, B, C, D")
    with entry["lock"]:
        entry["session"].role = Role(role)
    return jsonify({"role": role})


@bp.route("/sessions/<session_id>/catalog", methods=["POST"])
def load_catalog(session_id: str):
    entry = _get_entry(session_id)
    payload = _payload()
    session: AnnotationSession = entry["session"]
    with entry["lock"]:
        if isinstance(payload.get("xml"), str):
            reference = payload["path"] if isinstance(payload.get("path"), str) else "labels.xml"
            session.use_catalog(parse_catalog(payload["xml"]), reference)
        elif isinstance(payload.get("path"), str):
            try:
                session.load_catalog(payload["path"])
            except OSError as e:
                abort(400, description=f"Cannot read catalog: {e}")
        else:
            abort(400, description="Provide 'xml' or 'path'")
    return jsonify(_state_json(session_id, session))


@bp.route("/sessions/<session_id>/project", methods=["POST"])
def open_project(session_id: str):
    entry = _get_entry(session_id)
    payload = _payload()
    path = payload.get("path")
    if not isinstance(path, str):
        abort(400, description="'path' is required")
    session: AnnotationSession = entry["session"]
    with entry["lock"]:
        try:
            warnings = session.open_project(path, _number(payload, "duration_ms", required=False))
        except OSError as e:
            abort(400, description=f"Cannot read project: {e}")
    state = _state_json(session_id, session)
    state["warnings"] = warnings
    return jsonify(state)


@bp.route("/sessions/<session_id>/segments", methods=["POST"])
def create_segment(session_id: str):
    entry = _get_entry(session_id)
    at_ms = _number(_payload(), "at_ms")
    with entry["lock"]:
        created = entry["session"].create_at(at_ms)
        segments = entry["session"].segments
    return jsonify({
        "created": _segment_json(created),
        "segments": [_segment_json(s) for s in segments],
    }), 201


@bp.route("/sessions/<session_id>/segments/<segment_id>/move", methods=["POST"])
def move_segment(session_id: str, segment_id: str):
    entry = _get_entry(session_id)
    start_ms = _number(_payload(), "start_ms")
    with entry["lock"]:
        result = entry["session"].move(segment_id, start_ms)
    return jsonify(_edit_json(result))


@bp.route("/sessions/<session_id>/segments/<segment_id>/resize-start", methods=["POST"])
def resize_segment_start(session_id: str, segment_id: str):
    entry = _get_entry(session_id)
    start_ms = _number(_payload(), "start_ms")
    with entry["lock"]:
        result = entry["session"].resize_start(segment_id, start_ms)
    return jsonify(_edit_json(result))


@bp.route("/sessions/<session_id>/segments/<segment_id>/resize-end", methods=["POST"])
def resize_segment_end(session_id: str, segment_id: str):
    entry = _get_entry(session_id)
    end_ms = _number(_payload(), "end_ms")
    with entry["lock"]:
        result = entry["session"].resize_end(segment_id, end_ms)
    return jsonify(_edit_json(result))


@bp.route("/sessions/<session_id>/segments/<segment_id>", methods=["PATCH"])
def update_segment(session_id: str, segment_id: str):
    entry = _get_entry(session_id)
    payload = _payload()
    session: AnnotationSession = entry["session"]

    if "text" in payload and not isinstance(payload["text"], str):
        abort(400, description="'text' must be a string")
    label_id = payload.get("label_id")
    if label_id is not None and (not isinstance(label_id, int) or isinstance(label_id, bool)):
        abort(400, description="'label_id' must be an integer or null")

    with entry["lock"]:
        result = None
        if "label_id" in payload:
            result = session.set_label(segment_id, label_id)
        if "text" in payload:
            result = session.set_text(segment_id, payload["text"])
        if result is None:
            abort(400, description="Provide 'text' and/or 'label_id'")
    return jsonify(_edit_json(result))


@bp.route("/sessions/<session_id>/segments/<segment_id>", methods=["DELETE"])
def delete_segment(session_id: str, segment_id: str):
    entry = _get_entry(session_id)
    with entry["lock"]:
        result = entry["session"].remove(segment_id)
    return jsonify(_edit_json(result))


@bp.route("/sessions/<session_id>/project.ann")
def download_project(session_id: str):
    entry = _get_entry(session_id)
    session: AnnotationSession = entry["session"]
    with entry["lock"]:
        text = session.project_text()
    name = default_project_name(session.media_reference, session.role)
    return Response(
        text,
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )


@bp.route("/sessions/<session_id>/export.csv")
def download_csv(session_id: str):
    entry = _get_entry(session_id)
    session: AnnotationSession = entry["session"]
    with entry["lock"]:
        text = session.export_text()
    name = default_export_name(session.media_reference, session.role)
    return Response(
        text,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )


@bp.route("/sessions/<session_id>/save", methods=["POST"])
def save_project(session_id: str):
    entry = _get_entry(session_id)
    path = _payload().get("path")
    if path is not None and not isinstance(path, str):
        abort(400, description="'path' must be a string")
    with entry["lock"]:
        saved = entry["session"].save_project(path)
    return jsonify({"path": str(saved)})


@bp.route("/sessions/<session_id>/export", methods=["POST"])
def export_project(session_id: str):
    entry = _get_entry(session_id)
    path = _payload().get("path")
    if path is not None and not isinstance(path, str):
        abort(400, description="'path' must be a string")
    with entry["lock"]:
        exported = entry["session"].export_csv(path)
    return jsonify({"path": str(exported)})
