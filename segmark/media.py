"""ffprobe wrapper used to learn a media file's duration."""

import json
import shutil
import subprocess
from pathlib import Path


class FFprobeNotFoundError(RuntimeError):
    pass


def check_ffprobe() -> None:
    """Raise FFprobeNotFoundError if ffprobe is not on PATH."""
    if shutil.which("ffprobe") is None:
        raise FFprobeNotFoundError("ffprobe not found on PATH")


def probe_duration_ms(input_path: Path) -> int:
    """Return the container duration of a media file in milliseconds."""
    check_ffprobe()
    cmd = [
        "ffprobe",
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        str(input_path),
    ]
    result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    data = json.loads(result.stdout)

    duration = data.get("format", {}).get("duration")
    if duration is None:
        raise ValueError(f"No duration reported for {input_path}")
    return round(float(duration) * 1000)
