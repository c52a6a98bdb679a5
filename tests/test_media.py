"""Unit tests for the ffprobe wrapper."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from segmark.media import FFprobeNotFoundError, check_ffprobe, probe_duration_ms


class TestCheckFFprobe:
    @patch("segmark.media.shutil.which", return_value=None)
    def test_missing(self, mock_which):
        with pytest.raises(FFprobeNotFoundError, match="ffprobe"):
            check_ffprobe()


class TestProbeDuration:
    @patch("segmark.media.shutil.which", return_value="/usr/bin/ffprobe")
    @patch("segmark.media.subprocess.run")
    def test_basic(self, mock_run, mock_which):
        mock_run.return_value = MagicMock(
            returncode=0,
            stdout=json.dumps({"format": {"duration": "61.234"}}),
        )
        assert probe_duration_ms(Path("video.mp4")) == 61234

        cmd = mock_run.call_args[0][0]
        assert cmd[0] == "ffprobe"
        assert "-show_format" in cmd
        assert cmd[-1] == "video.mp4"

    @patch("segmark.media.shutil.which", return_value="/usr/bin/ffprobe")
    @patch("segmark.media.subprocess.run")
    def test_no_duration(self, mock_run, mock_which):
        mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps({"format": {}}))
        with pytest.raises(ValueError, match="No duration"):
            probe_duration_ms(Path("video.mp4"))
