"""Editing session: owns the state of one annotation and drives the engine."""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from segmark import media, paths
from segmark import segments as engine
from segmark.catalog import load_catalog
from segmark.errors import CatalogError, ErrorKind, SessionError
from segmark.export import export_csv
from segmark.models import LabelCatalog, Role, Segment
from segmark.project import encode_project, load_project

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    """Outcome of a move/resize/edit request.

    ``infeasible`` is set when a move or resize had no valid destination and
    the segments were left as they were.
    """

    segments: list[Segment]
    changed: bool
    infeasible: bool = False


@dataclass
class AnnotationSession:
    """State of one editing session.

    Calls that mutate ``segments`` must be serialized by the caller; each
    one replaces the list with a new snapshot.
    """

    media_reference: str | None = None
    catalog_reference: str | None = None
    catalog: LabelCatalog | None = None
    role: Role = Role.A
    duration_ms: float | None = None
    segments: list[Segment] = field(default_factory=list)
    output_dir: Path | None = None

    # --- Loading -----------------------------------------------------------

    def open_media(self, path: str, duration_ms: float | None = None) -> None:
        """Switch to a new media file, discarding the current segments."""
        if duration_ms is None:
            duration_ms = media.probe_duration_ms(Path(path))
        self.media_reference = path
        self.duration_ms = duration_ms
        self.segments = []
        logger.info("Opened media %s (%s ms)", paths.file_name(path), duration_ms)

    def load_catalog(self, path: str) -> LabelCatalog:
        catalog = load_catalog(path)
        self.use_catalog(catalog, str(path))
        return catalog

    def use_catalog(self, catalog: LabelCatalog, reference: str) -> None:
        """Adopt an already parsed catalog; ``reference`` is what gets saved."""
        self.catalog = catalog
        self.catalog_reference = reference
        logger.info("Loaded %d labels from %s (version %s)", len(catalog), reference, catalog.version)

    def open_project(self, path: str | Path, duration_ms: float | None = None) -> list[str]:
        """Load a project file and the catalog it references.

        Returns human-readable warnings; the project is loaded even when the
        catalog cannot be read or the media differs from the one open.
        """
        project = load_project(path)
        warnings: list[str] = []

        if self.media_reference and project.media_reference != self.media_reference:
            warnings.append(
                f"Project media {project.media_reference} does not match open media {self.media_reference}"
            )

        if duration_ms is None:
            try:
                duration_ms = media.probe_duration_ms(Path(project.media_reference))
            except (media.FFprobeNotFoundError, subprocess.CalledProcessError, OSError, ValueError) as e:
                warnings.append(f"Media duration unavailable: {e}")

        catalog_path = Path(project.catalog_reference)
        if not catalog_path.is_absolute():
            catalog_path = Path(path).parent / catalog_path
        catalog: LabelCatalog | None = None
        try:
            catalog = load_catalog(catalog_path)
        except (CatalogError, OSError) as e:
            warnings.append(f"Label catalog {project.catalog_reference} could not be loaded: {e}")

        self.media_reference = project.media_reference
        self.duration_ms = duration_ms
        self.role = project.role
        self.segments = project.segments
        self.catalog = None
        self.catalog_reference = project.catalog_reference
        if catalog is not None:
            self.use_catalog(catalog, project.catalog_reference)

        for warning in warnings:
            logger.warning(warning)
        logger.info("Opened project %s with %d segments", path, len(self.segments))
        return warnings

    # --- Segment edits -----------------------------------------------------

    def _require_duration(self) -> float:
        if self.duration_ms is None:
            raise SessionError(ErrorKind.NOT_READY, "Media duration is unknown; open a media file first")
        return self.duration_ms

    def _apply(self, updated: list[Segment], infeasible: bool = False) -> EditResult:
        changed = updated is not self.segments
        self.segments = updated
        return EditResult(segments=updated, changed=changed, infeasible=infeasible)

    def create_at(self, point_ms: float) -> Segment:
        """Create a segment at ``point_ms`` and return it."""
        before = {s.id for s in self.segments}
        self.segments = engine.create_at(self.segments, point_ms, self._require_duration())
        created = next(s for s in self.segments if s.id not in before)
        logger.debug("Created segment %s [%s, %s)", created.id, created.start_ms, created.end_ms)
        return created

    def move(self, segment_id: str, proposed_start_ms: float) -> EditResult:
        duration = self._require_duration()
        infeasible = engine.move_bounds(self.segments, segment_id, duration) is None
        if infeasible:
            logger.debug("Move of %s has no valid destination", segment_id)
        return self._apply(engine.move(self.segments, segment_id, proposed_start_ms, duration), infeasible)

    def resize_start(self, segment_id: str, proposed_start_ms: float) -> EditResult:
        infeasible = engine.resize_start_bounds(self.segments, segment_id) is None
        if infeasible:
            logger.debug("Start resize of %s has no valid destination", segment_id)
        return self._apply(engine.resize_start(self.segments, segment_id, proposed_start_ms), infeasible)

    def resize_end(self, segment_id: str, proposed_end_ms: float) -> EditResult:
        duration = self._require_duration()
        infeasible = engine.resize_end_bounds(self.segments, segment_id, duration) is None
        if infeasible:
            logger.debug("End resize of %s has no valid destination", segment_id)
        return self._apply(engine.resize_end(self.segments, segment_id, proposed_end_ms, duration), infeasible)

    def set_text(self, segment_id: str, text: str) -> EditResult:
        return self._apply(engine.set_text(self.segments, segment_id, text))

    def set_label(self, segment_id: str, label_id: int | None) -> EditResult:
        if label_id is not None:
            if self.catalog is None:
                raise SessionError(ErrorKind.NOT_READY, "Load a label catalog before labeling segments")
            if self.catalog.get(label_id) is None:
                raise SessionError(ErrorKind.UNKNOWN_LABEL, f"Label {label_id} is not in the catalog")
        return self._apply(engine.set_label(self.segments, segment_id, label_id))

    def remove(self, segment_id: str) -> EditResult:
        result = self._apply(engine.remove(self.segments, segment_id))
        if result.changed:
            logger.debug("Removed segment %s", segment_id)
        return result

    # --- Output ------------------------------------------------------------

    @property
    def can_save(self) -> bool:
        return bool(self.media_reference and self.catalog_reference)

    @property
    def can_export(self) -> bool:
        return bool(self.media_reference) and not engine.incomplete_segments(self.segments)

    def _default_dir(self) -> Path:
        if self.output_dir is not None:
            return self.output_dir
        return Path(self.media_reference).parent

    def project_text(self) -> str:
        if not self.can_save:
            raise SessionError(ErrorKind.NOT_READY, "Open a media file and a label catalog before saving")
        return encode_project(self.media_reference, self.catalog_reference, self.role, self.segments)

    def export_text(self) -> str:
        if not self.media_reference:
            raise SessionError(ErrorKind.NOT_READY, "Open a media file before exporting")
        incomplete = engine.incomplete_segments(self.segments)
        if incomplete:
            raise SessionError(
                ErrorKind.INCOMPLETE_SEGMENTS,
                f"{len(incomplete)} segment(s) still need text and a label",
            )
        return export_csv(self.segments)

    def save_project(self, path: str | Path | None = None) -> Path:
        text = self.project_text()
        if path is None:
            path = self._default_dir() / paths.default_project_name(self.media_reference, self.role)
        path = Path(path)
        path.write_text(text, encoding="utf-8")
        logger.info("Saved project %s", path)
        return path

    def export_csv(self, path: str | Path | None = None) -> Path:
        text = self.export_text()
        if path is None:
            path = self._default_dir() / paths.default_export_name(self.media_reference, self.role)
        path = Path(path)
        path.write_text(text, encoding="utf-8")
        logger.info("Exported %d segments to %s", len(self.segments), path)
        return path
