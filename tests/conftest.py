"""Shared test fixtures."""

from pathlib import Path

import pytest

from segmark.models import Segment

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_project_path() -> Path:
    return FIXTURES_DIR / "sample_project.ann"


@pytest.fixture
def sample_catalog_path() -> Path:
    return FIXTURES_DIR / "labels.xml"


@pytest.fixture
def two_segments() -> list[Segment]:
    """[0, 1000) and [1500, 2000) with ids "a" and "b"."""
    return [
        Segment(start_ms=0, end_ms=1000, id="a"),
        Segment(start_ms=1500, end_ms=2000, id="b"),
    ]
