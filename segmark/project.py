"""Annotation project (.ann) codec: the persisted state of a session.

The file is a single JSON object::

    {
      "version": 1,
      "video_path": "/media/clip.mp4",
      "labels_path": "/media/labels.xml",
      "role": "A",
      "segments": [{"start_ms": 0, "end_ms": 1000, "text": "hi", "label_id": 2}]
    }

Segment ids are never written; decoding assigns fresh ones.
"""

import json
import math
from pathlib import Path

from segmark.errors import ErrorKind, ProjectError
from segmark.models import Project, Role, Segment
from segmark.segments import sort_segments

PROJECT_VERSION = 1

# Older files may use the spelled-out names.
_MEDIA_KEYS = ("video_path", "media_reference")
_CATALOG_KEYS = ("labels_path", "catalog_reference")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _first_present(data: dict, keys: tuple[str, ...]):
    for key in keys:
        if key in data:
            return data[key]
    return None


def _decode_label_id(value) -> int | None:
    if not _is_number(value):
        return None
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    return value


def _decode_segment(entry) -> Segment:
    if not isinstance(entry, dict):
        raise ProjectError(ErrorKind.INVALID_SEGMENTS, "Segment entries must be objects")
    start = entry.get("start_ms")
    end = entry.get("end_ms")
    if not (_is_number(start) and _is_number(end) and math.isfinite(start) and math.isfinite(end)):
        raise ProjectError(ErrorKind.INVALID_SEGMENTS, "Segment bounds must be finite numbers")
    if start >= end:
        raise ProjectError(
            ErrorKind.INVALID_SEGMENTS, f"Segment start {start} is not before end {end}"
        )
    text = entry.get("text")
    return Segment(
        start_ms=start,
        end_ms=end,
        text=text if isinstance(text, str) else "",
        label_id=_decode_label_id(entry.get("label_id")),
    )


def decode_project(text: str) -> Project:
    """Parse and validate project JSON.

    Raises:
        ProjectError: INVALID_FORMAT for structural problems, INVALID_SEGMENTS
            if any segment has bad bounds. Nothing is returned on failure.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProjectError(ErrorKind.INVALID_FORMAT, f"Project is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProjectError(ErrorKind.INVALID_FORMAT, "Project must be a JSON object")

    version = data.get("version")
    if not _is_number(version):
        raise ProjectError(ErrorKind.INVALID_FORMAT, "Project 'version' must be a number")

    media_ref = _first_present(data, _MEDIA_KEYS)
    if not isinstance(media_ref, str):
        raise ProjectError(ErrorKind.INVALID_FORMAT, "Project 'video_path' must be a string")

    catalog_ref = _first_present(data, _CATALOG_KEYS)
    if not isinstance(catalog_ref, str):
        raise ProjectError(ErrorKind.INVALID_FORMAT, "Project 'labels_path' must be a string")

    role = data.get("role")
    if not isinstance(role, str) or role not in {r.value for r in Role}:
        raise ProjectError(ErrorKind.INVALID_FORMAT, f"Project 'role' must be one of A, B, C, D; got {role!r}")

    raw_segments = data.get("segments")
    if not isinstance(raw_segments, list):
        raise ProjectError(ErrorKind.INVALID_FORMAT, "Project 'segments' must be a list")

    segments = [_decode_segment(entry) for entry in raw_segments]

    return Project(
        version=version,
        media_reference=media_ref,
        catalog_reference=catalog_ref,
        role=Role(role),
        segments=sort_segments(segments),
    )


def encode_project(
    media_reference: str,
    catalog_reference: str,
    role: Role | str,
    segments: list[Segment],
) -> str:
    """Serialize a project; segments are sorted and stripped of ids."""
    try:
        role = Role(role)
    except ValueError as e:
        raise ProjectError(ErrorKind.INVALID_FORMAT, f"Unknown role {role!r}") from e

    payload = {
        "version": PROJECT_VERSION,
        "video_path": media_reference,
        "labels_path": catalog_reference,
        "role": role.value,
        "segments": [seg.to_record() for seg in sort_segments(segments)],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def load_project(path: str | Path) -> Project:
    """Read and decode a UTF-8 project file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ProjectError(ErrorKind.INVALID_FORMAT, f"Project is not valid UTF-8: {e}") from e
    return decode_project(text)


def save_project(
    path: str | Path,
    media_reference: str,
    catalog_reference: str,
    role: Role | str,
    segments: list[Segment],
) -> Path:
    path = Path(path)
    path.write_text(
        encode_project(media_reference, catalog_reference, role, segments),
        encoding="utf-8",
    )
    return path
