"""Thin CLI entry point: validates, exports and serves annotation projects."""

import argparse
import logging
import sys
from pathlib import Path

from segmark.catalog import load_catalog
from segmark.errors import SegmarkError
from segmark.export import export_csv
from segmark.paths import default_export_name
from segmark.project import load_project
from segmark.segments import incomplete_segments, validate_segments
from segmark.timeutil import format_ms

logger = logging.getLogger(__name__)


def _check(args: argparse.Namespace) -> int:
    project = load_project(args.project)
    validate_segments(project.segments, args.duration_ms)
    print(f"{args.project}: {len(project.segments)} segments, role {project.role.value}")

    catalog_path = Path(project.catalog_reference)
    if not catalog_path.is_absolute():
        catalog_path = args.project.parent / catalog_path
    catalog = load_catalog(catalog_path)
    unknown = [s for s in project.segments if s.label_id is not None and catalog.get(s.label_id) is None]
    for seg in unknown:
        print(f"  unknown label {seg.label_id} at {format_ms(seg.start_ms)}", file=sys.stderr)

    incomplete = incomplete_segments(project.segments)
    for seg in incomplete:
        print(f"  incomplete: {format_ms(seg.start_ms)}-{format_ms(seg.end_ms)}")
    return 1 if unknown else 0


def _export(args: argparse.Namespace) -> int:
    project = load_project(args.project)
    incomplete = incomplete_segments(project.segments)
    if incomplete:
        print(
            f"Error: {len(incomplete)} segment(s) still need text and a label; nothing exported.",
            file=sys.stderr,
        )
        return 1
    output = args.output or args.project.with_name(
        default_export_name(project.media_reference, project.role)
    )
    output.write_text(export_csv(project.segments), encoding="utf-8")
    logger.info("Exported %d segments to %s", len(project.segments), output)
    print(f"Done! Output: {output}")
    return 0


def _labels(args: argparse.Namespace) -> int:
    catalog = load_catalog(args.catalog)
    print(f"Catalog version {catalog.version}, {len(catalog)} labels")
    for label in catalog:
        print(f"  {label.id:>4}  {label.display}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="segmark",
        description="SegMark: timeline segment annotation, validation and CSV export.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    check = sub.add_parser("check", help="Validate a project file and its label catalog")
    check.add_argument("project", type=Path, help="Project (.ann) file")
    check.add_argument("--duration-ms", type=float, default=None, help="Media duration for range checks")

    export = sub.add_parser("export", help="Export a fully labeled project to CSV")
    export.add_argument("project", type=Path, help="Project (.ann) file")
    export.add_argument("--output", "-o", type=Path, help="Output CSV path")

    labels = sub.add_parser("labels", help="List the labels of a catalog")
    labels.add_argument("catalog", type=Path, help="Label catalog (.xml) file")

    serve = sub.add_parser("serve", help="Launch the web API")
    serve.add_argument("--port", type=int, default=8322, help="Port to listen on")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind to")
    serve.add_argument("--work-dir", type=Path, default=None, help="Default directory for saved files")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        from segmark.web import create_app
        app = create_app(work_dir=args.work_dir)
        print(f"SegMark web API: http://{args.host}:{args.port}")
        app.run(host=args.host, port=args.port, debug=False)
        return

    handlers = {"check": _check, "export": _export, "labels": _labels}
    try:
        code = handlers[args.command](args)
    except (SegmarkError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
