"""Segment timeline engine.

Every operation takes a list of segments, leaves it untouched, and returns a
new list in canonical order (ascending start, then end). Move and resize
requests that have no valid destination return the input list unchanged;
creation failures raise :class:`SegmentError`.
"""

from dataclasses import replace
from typing import Iterable

from segmark.errors import ErrorKind, SegmentError
from segmark.models import Segment
from segmark.timeutil import clamp_ms

MIN_SEGMENT_MS = 50
DEFAULT_SEGMENT_MS = 2000


def is_overlap(start_a: float, end_a: float, start_b: float, end_b: float) -> bool:
    """Half-open interval intersection. Touching endpoints do not overlap."""
    return start_a < end_b and end_a > start_b


def sort_segments(segments: Iterable[Segment]) -> list[Segment]:
    return sorted(segments, key=lambda s: (s.start_ms, s.end_ms))


def find_segment(segments: Iterable[Segment], segment_id: str) -> Segment | None:
    return next((s for s in segments if s.id == segment_id), None)


def incomplete_segments(segments: Iterable[Segment]) -> list[Segment]:
    """Segments still missing text or a label, in canonical order."""
    return [s for s in sort_segments(segments) if not s.is_complete]


def _locate(segments: list[Segment], segment_id: str) -> tuple[list[Segment], int] | None:
    ordered = sort_segments(segments)
    for index, seg in enumerate(ordered):
        if seg.id == segment_id:
            return ordered, index
    return None


def _neighbors(ordered: list[Segment], index: int) -> tuple[float | None, float | None]:
    prev_end = ordered[index - 1].end_ms if index > 0 else None
    next_start = ordered[index + 1].start_ms if index < len(ordered) - 1 else None
    return prev_end, next_start


def _replace_at(ordered: list[Segment], index: int, updated: Segment) -> list[Segment]:
    result = list(ordered)
    result[index] = updated
    return sort_segments(result)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

def create_at(segments: list[Segment], point_ms: float, duration_ms: float) -> list[Segment]:
    """Insert a default-length segment at ``point_ms``, snapped to its neighbors.

    The start snaps forward to the end of the segment that begins at or
    before the point; the end snaps back to the start of the next segment.

    Raises:
        SegmentError: INSUFFICIENT_SPACE if the snapped interval is shorter
            than MIN_SEGMENT_MS, OVERLAP if it still intersects a segment.
    """
    ordered = sort_segments(segments)
    start = clamp_ms(point_ms, 0, duration_ms)
    end = min(start + DEFAULT_SEGMENT_MS, duration_ms)

    prev_end: float | None = None
    next_start: float | None = None
    for seg in ordered:
        if seg.start_ms <= start:
            prev_end = seg.end_ms
            continue
        next_start = seg.start_ms
        break

    if prev_end is not None and start < prev_end:
        start = prev_end
    if next_start is not None and end > next_start:
        end = next_start

    if end - start < MIN_SEGMENT_MS:
        raise SegmentError(
            ErrorKind.INSUFFICIENT_SPACE,
            f"Free space at {point_ms} ms is shorter than {MIN_SEGMENT_MS} ms",
        )

    for seg in ordered:
        if is_overlap(start, end, seg.start_ms, seg.end_ms):
            raise SegmentError(
                ErrorKind.OVERLAP,
                f"New segment [{start}, {end}) overlaps [{seg.start_ms}, {seg.end_ms})",
            )

    return sort_segments([*ordered, Segment(start_ms=start, end_ms=end)])


# ---------------------------------------------------------------------------
# Move / resize
# ---------------------------------------------------------------------------

def move_bounds(
    segments: list[Segment], segment_id: str, duration_ms: float
) -> tuple[float, float] | None:
    """Allowed start range for moving a segment, or None if it cannot move."""
    located = _locate(segments, segment_id)
    if located is None:
        return None
    ordered, index = located
    seg = ordered[index]
    length = seg.duration_ms
    prev_end, next_start = _neighbors(ordered, index)
    lo = max(prev_end if prev_end is not None else 0, 0)
    hi = min(next_start if next_start is not None else duration_ms, duration_ms) - length
    if lo > hi:
        return None
    return lo, hi


def resize_start_bounds(
    segments: list[Segment], segment_id: str
) -> tuple[float, float] | None:
    located = _locate(segments, segment_id)
    if located is None:
        return None
    ordered, index = located
    prev_end, _ = _neighbors(ordered, index)
    lo = max(prev_end if prev_end is not None else 0, 0)
    hi = ordered[index].end_ms - MIN_SEGMENT_MS
    if lo > hi:
        return None
    return lo, hi


def resize_end_bounds(
    segments: list[Segment], segment_id: str, duration_ms: float
) -> tuple[float, float] | None:
    located = _locate(segments, segment_id)
    if located is None:
        return None
    ordered, index = located
    _, next_start = _neighbors(ordered, index)
    lo = ordered[index].start_ms + MIN_SEGMENT_MS
    hi = min(next_start if next_start is not None else duration_ms, duration_ms)
    if lo > hi:
        return None
    return lo, hi


def move(
    segments: list[Segment], segment_id: str, proposed_start_ms: float, duration_ms: float
) -> list[Segment]:
    """Translate a segment, keeping its length, between its neighbors."""
    bounds = move_bounds(segments, segment_id, duration_ms)
    if bounds is None:
        return segments
    ordered, index = _locate(segments, segment_id)
    seg = ordered[index]
    start = clamp_ms(proposed_start_ms, *bounds)
    return _replace_at(ordered, index, replace(seg, start_ms=start, end_ms=start + seg.duration_ms))


def resize_start(segments: list[Segment], segment_id: str, proposed_start_ms: float) -> list[Segment]:
    bounds = resize_start_bounds(segments, segment_id)
    if bounds is None:
        return segments
    ordered, index = _locate(segments, segment_id)
    start = clamp_ms(proposed_start_ms, *bounds)
    return _replace_at(ordered, index, replace(ordered[index], start_ms=start))


def resize_end(
    segments: list[Segment], segment_id: str, proposed_end_ms: float, duration_ms: float
) -> list[Segment]:
    bounds = resize_end_bounds(segments, segment_id, duration_ms)
    if bounds is None:
        return segments
    ordered, index = _locate(segments, segment_id)
    end = clamp_ms(proposed_end_ms, *bounds)
    return _replace_at(ordered, index, replace(ordered[index], end_ms=end))


# ---------------------------------------------------------------------------
# Payload edits
# ---------------------------------------------------------------------------

def set_text(segments: list[Segment], segment_id: str, text: str) -> list[Segment]:
    located = _locate(segments, segment_id)
    if located is None:
        return segments
    ordered, index = located
    if ordered[index].text == text:
        return segments
    return _replace_at(ordered, index, replace(ordered[index], text=text))


def set_label(segments: list[Segment], segment_id: str, label_id: int | None) -> list[Segment]:
    located = _locate(segments, segment_id)
    if located is None:
        return segments
    ordered, index = located
    if ordered[index].label_id == label_id:
        return segments
    return _replace_at(ordered, index, replace(ordered[index], label_id=label_id))


def remove(segments: list[Segment], segment_id: str) -> list[Segment]:
    if find_segment(segments, segment_id) is None:
        return segments
    return sort_segments(s for s in segments if s.id != segment_id)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_segments(segments: list[Segment], duration_ms: float | None = None) -> None:
    """Raise SegmentError if a collection breaks a timeline invariant."""
    ordered = sort_segments(segments)
    for seg in ordered:
        if seg.duration_ms < MIN_SEGMENT_MS:
            raise SegmentError(
                ErrorKind.INSUFFICIENT_SPACE,
                f"Segment [{seg.start_ms}, {seg.end_ms}) is shorter than {MIN_SEGMENT_MS} ms",
            )
        if seg.start_ms < 0 or (duration_ms is not None and seg.end_ms > duration_ms):
            raise SegmentError(
                ErrorKind.OUT_OF_RANGE,
                f"Segment [{seg.start_ms}, {seg.end_ms}) lies outside the media",
            )
    for prev, cur in zip(ordered, ordered[1:]):
        if is_overlap(prev.start_ms, prev.end_ms, cur.start_ms, cur.end_ms):
            raise SegmentError(
                ErrorKind.OVERLAP,
                f"Segments [{prev.start_ms}, {prev.end_ms}) and "
                f"[{cur.start_ms}, {cur.end_ms}) overlap",
            )
