"""Tests for file-name helpers."""

from segmark.models import Role
from segmark.paths import base_name, default_export_name, default_project_name, file_name


class TestFileName:
    def test_posix(self):
        assert file_name("/media/clips/interview.mp4") == "interview.mp4"

    def test_windows(self):
        assert file_name("C:\\media\\interview.mp4") == "interview.mp4"

    def test_trailing_separator(self):
        assert file_name("/media/") == ""


class TestBaseName:
    def test_strips_last_extension(self):
        assert base_name("take.2.mp4") == "take.2"

    def test_dotfile_kept(self):
        assert base_name(".hidden") == ".hidden"

    def test_no_extension(self):
        assert base_name("README") == "README"


class TestDefaultNames:
    def test_project(self):
        assert default_project_name("/m/interview.mp4", Role.C) == "interview_C.ann"

    def test_export(self):
        assert default_export_name("C:\\m\\interview.mov", "B") == "interview_B.csv"
