"""Label catalog loader.

A catalog is an XML document of the form::

    <labels version="1.0">
      <label id="0" display="Confident" />
      <label id="1" display="Neutral" />
    </labels>

Loading is all-or-nothing: the first problem raises CatalogError and no
partial catalog is returned.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from segmark.errors import CatalogError, ErrorKind
from segmark.models import Label, LabelCatalog

_INT_RE = re.compile(r"^\s*[+-]?\d+\s*$")


def _find_root(doc: ET.Element) -> ET.Element | None:
    if doc.tag == "labels":
        return doc
    return doc.find(".//labels")


def parse_catalog(text: str) -> LabelCatalog:
    """Validate catalog XML and return its labels in document order."""
    try:
        doc = ET.fromstring(text)
    except ET.ParseError as e:
        raise CatalogError(ErrorKind.MALFORMED_DOCUMENT, f"Catalog is not well-formed XML: {e}") from e

    root = _find_root(doc)
    if root is None:
        raise CatalogError(ErrorKind.MISSING_ROOT, "Catalog has no <labels> element")

    version = root.get("version")
    if not version:
        raise CatalogError(ErrorKind.MISSING_VERSION, "<labels> requires a version attribute")

    labels: list[Label] = []
    seen: set[int] = set()
    for node in root.iter("label"):
        id_attr = node.get("id")
        display = node.get("display")
        if id_attr is None or display is None:
            raise CatalogError(ErrorKind.MISSING_FIELD, "<label> requires id and display attributes")
        if not _INT_RE.match(id_attr):
            raise CatalogError(ErrorKind.INVALID_ID, f"Label id {id_attr!r} is not an integer")
        label_id = int(id_attr)
        if label_id in seen:
            raise CatalogError(ErrorKind.DUPLICATE_ID, f"Label id {label_id} appears more than once")
        seen.add(label_id)
        labels.append(Label(id=label_id, display=display))

    return LabelCatalog(version=version, labels=tuple(labels))


def load_catalog(path: str | Path) -> LabelCatalog:
    """Read and parse a UTF-8 catalog file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise CatalogError(ErrorKind.MALFORMED_DOCUMENT, f"Catalog is not valid UTF-8: {e}") from e
    return parse_catalog(text)
