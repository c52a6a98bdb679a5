"""Tests for project file encoding and decoding."""

import json
from pathlib import Path

import pytest

from segmark.errors import ErrorKind, ProjectError
from segmark.models import Role, Segment
from segmark.project import decode_project, encode_project, load_project, save_project


def _doc(**overrides) -> str:
    data = {
        "version": 1,
        "video_path": "/media/clip.mp4",
        "labels_path": "/media/labels.xml",
        "role": "A",
        "segments": [],
    }
    data.update(overrides)
    return json.dumps(data)


def _kind(text: str) -> ErrorKind:
    with pytest.raises(ProjectError) as exc_info:
        decode_project(text)
    return exc_info.value.kind


class TestDecode:
    def test_minimal(self):
        project = decode_project(_doc())
        assert project.version == 1
        assert project.media_reference == "/media/clip.mp4"
        assert project.catalog_reference == "/media/labels.xml"
        assert project.role is Role.A
        assert project.segments == []

    def test_sorts_and_assigns_ids(self):
        project = decode_project(_doc(segments=[
            {"start_ms": 3000, "end_ms": 4000, "text": "b", "label_id": 1},
            {"start_ms": 0, "end_ms": 1000, "text": "a", "label_id": None},
        ]))
        assert [s.start_ms for s in project.segments] == [0, 3000]
        ids = {s.id for s in project.segments}
        assert len(ids) == 2 and all(ids)

    def test_fresh_ids_each_decode(self):
        text = _doc(segments=[{"start_ms": 0, "end_ms": 1000}])
        assert decode_project(text).segments[0].id != decode_project(text).segments[0].id

    def test_defaults_for_text_and_label(self):
        project = decode_project(_doc(segments=[
            {"start_ms": 0, "end_ms": 1000, "text": 42, "label_id": "3"},
        ]))
        seg = project.segments[0]
        assert seg.text == ""
        assert seg.label_id is None

    def test_spelled_out_field_names(self):
        text = json.dumps({
            "version": 1,
            "media_reference": "clip.mp4",
            "catalog_reference": "labels.xml",
            "role": "D",
            "segments": [],
        })
        project = decode_project(text)
        assert project.media_reference == "clip.mp4"
        assert project.role is Role.D

    def test_load_sample(self, sample_project_path: Path):
        project = load_project(sample_project_path)
        assert project.role is Role.B
        assert [(s.start_ms, s.end_ms) for s in project.segments] == [(0, 2000), (2500, 4000)]
        assert project.segments[1].text == "second, with comma"


class TestDecodeRejections:
    def test_not_json(self):
        assert _kind("not json") is ErrorKind.INVALID_FORMAT

    def test_not_object(self):
        assert _kind("[1, 2]") is ErrorKind.INVALID_FORMAT

    @pytest.mark.parametrize("overrides", [
        {"version": "1"},
        {"version": True},
        {"video_path": 3},
        {"labels_path": None},
        {"role": "E"},
        {"role": ["A"]},
        {"segments": {}},
    ])
    def test_bad_fields(self, overrides):
        assert _kind(_doc(**overrides)) is ErrorKind.INVALID_FORMAT

    def test_missing_field(self):
        data = json.loads(_doc())
        del data["role"]
        assert _kind(json.dumps(data)) is ErrorKind.INVALID_FORMAT

    @pytest.mark.parametrize("segment", [
        {"start_ms": 1000, "end_ms": 1000},
        {"start_ms": 2000, "end_ms": 1000},
        {"start_ms": "0", "end_ms": 1000},
        {"end_ms": 1000},
        "not an object",
    ])
    def test_bad_segment_rejects_everything(self, segment):
        good = {"start_ms": 0, "end_ms": 500, "text": "ok", "label_id": 0}
        assert _kind(_doc(segments=[good, segment])) is ErrorKind.INVALID_SEGMENTS

    def test_non_finite_bounds(self):
        text = _doc().replace('"segments": []', '"segments": [{"start_ms": 0, "end_ms": Infinity}]')
        assert _kind(text) is ErrorKind.INVALID_SEGMENTS

    def test_file_not_utf8(self, tmp_path: Path):
        path = tmp_path / "broken.ann"
        path.write_bytes(b"\xff")
        with pytest.raises(ProjectError) as exc_info:
            load_project(path)
        assert exc_info.value.kind is ErrorKind.INVALID_FORMAT


class TestEncode:
    def test_fields(self):
        segments = [Segment(1000, 2000, text="b", label_id=2), Segment(0, 500, text="a")]
        data = json.loads(encode_project("clip.mp4", "labels.xml", Role.C, segments))
        assert data == {
            "version": 1,
            "video_path": "clip.mp4",
            "labels_path": "labels.xml",
            "role": "C",
            "segments": [
                {"start_ms": 0, "end_ms": 500, "text": "a", "label_id": None},
                {"start_ms": 1000, "end_ms": 2000, "text": "b", "label_id": 2},
            ],
        }

    def test_unknown_role(self):
        with pytest.raises(ProjectError) as exc_info:
            encode_project("clip.mp4", "labels.xml", "Z", [])
        assert exc_info.value.kind is ErrorKind.INVALID_FORMAT

    def test_keeps_non_ascii(self):
        text = encode_project("動画.mp4", "labels.xml", "A", [Segment(0, 100, text="こんにちは")])
        assert "こんにちは" in text

    def test_round_trip(self):
        segments = [
            Segment(2500, 4000, text='quote " and, comma', label_id=1),
            Segment(0, 2000, text="first\nline", label_id=None),
        ]
        project = decode_project(encode_project("clip.mp4", "labels.xml", "B", segments))
        assert project.media_reference == "clip.mp4"
        assert project.catalog_reference == "labels.xml"
        assert project.role is Role.B
        assert [s.to_record() for s in project.segments] == [
            s.to_record() for s in sorted(segments, key=lambda s: s.start_ms)
        ]

    def test_save_and_load(self, tmp_path: Path):
        path = save_project(tmp_path / "clip_A.ann", "clip.mp4", "labels.xml", "A", [Segment(0, 100)])
        assert load_project(path).segments == [Segment(0, 100)]
