"""Error taxonomy shared by the parsers, codec and segment engine."""

from enum import Enum


class ErrorKind(str, Enum):
    # label catalog
    MALFORMED_DOCUMENT = "malformed_document"
    MISSING_ROOT = "missing_root"
    MISSING_VERSION = "missing_version"
    MISSING_FIELD = "missing_field"
    INVALID_ID = "invalid_id"
    DUPLICATE_ID = "duplicate_id"
    # project file
    INVALID_FORMAT = "invalid_format"
    INVALID_SEGMENTS = "invalid_segments"
    # segment creation / validation
    INSUFFICIENT_SPACE = "insufficient_space"
    OVERLAP = "overlap"
    OUT_OF_RANGE = "out_of_range"
    # session
    NOT_READY = "not_ready"
    INCOMPLETE_SEGMENTS = "incomplete_segments"
    UNKNOWN_LABEL = "unknown_label"


class SegmarkError(ValueError):
    """Base class for every rejection raised by SegMark.

    ``kind`` is the machine-readable tag; the message is for humans.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


class CatalogError(SegmarkError):
    """The label catalog document could not be loaded."""


class ProjectError(SegmarkError):
    """The project file could not be decoded."""


class SegmentError(SegmarkError):
    """A segment could not be created, or a collection breaks an invariant."""


class SessionError(SegmarkError):
    """An editing session is not in a state that allows the request."""
