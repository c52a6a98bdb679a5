"""CSV export of a finished annotation."""

from segmark.models import Segment
from segmark.segments import sort_segments
from segmark.timeutil import format_ms

CSV_HEADER = "start,end,label,text"

_NEEDS_QUOTES = (",", '"', "\n", "\r")


def escape_field(value: str) -> str:
    """Quote a field containing a comma, quote or line break; double inner quotes."""
    if not any(ch in value for ch in _NEEDS_QUOTES):
        return value
    return '"' + value.replace('"', '""') + '"'


def export_csv(segments: list[Segment]) -> str:
    """Render segments as CSV rows in canonical order.

    Completeness is not checked here; callers only export fully labeled
    segment lists.
    """
    lines = [CSV_HEADER]
    for seg in sort_segments(segments):
        label = "" if seg.label_id is None else str(seg.label_id)
        lines.append(f"{format_ms(seg.start_ms)},{format_ms(seg.end_ms)},{label},{escape_field(seg.text)}")
    return "\n".join(lines)
