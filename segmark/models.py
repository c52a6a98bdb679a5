"""Shared data types used across SegMark."""

import uuid
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Iterator


def new_segment_id() -> str:
    """Return a fresh, never-reused segment identifier."""
    return uuid.uuid4().hex


class Role(str, Enum):
    """Annotator role recorded in a project file."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"


@dataclass(frozen=True)
class Segment:
    """A half-open [start_ms, end_ms) interval with a label and free text.

    ``id`` only addresses the segment within an editing session; it is
    ignored by equality and never written to disk.
    """

    start_ms: float
    end_ms: float
    text: str = ""
    label_id: int | None = None
    id: str = field(default_factory=new_segment_id, compare=False)

    @property
    def duration_ms(self) -> float:
        return self.end_ms - self.start_ms

    @property
    def is_complete(self) -> bool:
        return self.text.strip() != "" and self.label_id is not None

    def to_record(self) -> dict:
        """Serializable form without the transient id."""
        record = asdict(self)
        del record["id"]
        return record


@dataclass(frozen=True)
class Label:
    """One entry of a label catalog."""

    id: int
    display: str


@dataclass(frozen=True)
class LabelCatalog:
    """An ordered, versioned set of labels loaded from a catalog file."""

    version: str
    labels: tuple[Label, ...] = ()

    def __iter__(self) -> Iterator[Label]:
        return iter(self.labels)

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def ids(self) -> set[int]:
        return {label.id for label in self.labels}

    def get(self, label_id: int) -> Label | None:
        return next((label for label in self.labels if label.id == label_id), None)


@dataclass
class Project:
    """Persisted root of an annotation: media, catalog, role and segments."""

    media_reference: str
    catalog_reference: str
    role: Role
    segments: list[Segment] = field(default_factory=list)
    version: int = 1
