import argparse
import sys
from pathlib import Path
from typing import List, Optional

from geodata.core.export import places_frame, write_places_csv
from geodata.core.importer import import_csv, import_place, import_place_list
from geodata.core.places import PlaceEditor
from geodata.core.repair import RepairEngine
from geodata.core.report import (
    format_report_for_display,
    generate_repair_report,
    generate_validation_report,
    save_report,
)
from geodata.core.storage import LocalFilesystem
from geodata.core.validation import validate_tree

DEFAULT_ROOT = "data"


def _filesystem(args: argparse.Namespace) -> Optional[LocalFilesystem]:
    root = Path(args.root)
    if not root.is_dir():
        print(f"Error: data folder not found: {root}")
        return None
    return LocalFilesystem(root)


def _finish(report: dict, args: argparse.Namespace) -> None:
    for line in format_report_for_display(report):
        print(line)
    if args.report:
        save_report(report, args.report)
        print(f"Report written to {args.report}")


def _cmd_repair(args: argparse.Namespace) -> int:
    filesystem = _filesystem(args)
    if filesystem is None:
        return 1
    try:
        results = RepairEngine(filesystem, report=print).run()
        _finish(generate_repair_report(results), args)
        return 0 if results['success'] else 1
    except Exception as exc:
        print(f"Repair failed: {exc}")
        return 1


def _cmd_validate(args: argparse.Namespace) -> int:
    filesystem = _filesystem(args)
    if filesystem is None:
        return 1
    try:
        results = validate_tree(filesystem, report=print)
        _finish(generate_validation_report(results), args)
        return 0 if not results['errors'] and not results['warnings'] else 1
    except Exception as exc:
        print(f"Validation failed: {exc}")
        return 1


def _cmd_import(args: argparse.Namespace) -> int:
    if not args.files and not args.place:
        print("Error: give one or more CSV files, or --place with --latitude and --longitude")
        return 1
    if args.place and (args.latitude is None or args.longitude is None):
        print("Error: --place needs both --latitude and --longitude")
        return 1

    filesystem = _filesystem(args)
    if filesystem is None:
        return 1

    editor = PlaceEditor(filesystem, report=print)
    exit_code = 0
    try:
        for csv_file in args.files:
            results = import_csv(editor, csv_file, args.delimiter)
            print(f"Imported {results['imported']} places from {csv_file}")
            if results['errors']:
                exit_code = 1
        if args.place:
            import_place(editor, args.place, args.longitude, args.latitude, args.crs)
        return exit_code
    except Exception as exc:
        print(f"Import failed: {exc}")
        return 1


def _cmd_merge(args: argparse.Namespace) -> int:
    filesystem = _filesystem(args)
    if filesystem is None:
        return 1
    try:
        results = import_place_list(PlaceEditor(filesystem, report=print), args.parent, args.file)
        print(f"Added {len(results['added'])} of {results['names']} places")
        return 0
    except Exception as exc:
        print(f"Merge failed: {exc}")
        return 1


def _cmd_translate(args: argparse.Namespace) -> int:
    filesystem = _filesystem(args)
    if filesystem is None:
        return 1
    try:
        editor = PlaceEditor(filesystem, report=print)
        found = editor.set_translation(args.place, args.language, args.translation)
        return 0 if found else 1
    except Exception as exc:
        print(f"Translation failed: {exc}")
        return 1


def _cmd_export(args: argparse.Namespace) -> int:
    filesystem = _filesystem(args)
    if filesystem is None:
        return 1
    output = args.output or f"dist/places-{args.language}.csv"
    try:
        gdf = places_frame(filesystem, language=args.language, prefix=args.prefix)
        write_places_csv(gdf, output, delimiter=args.delimiter, report=print)
        return 0
    except Exception as exc:
        print(f"Export failed: {exc}")
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geodata",
        description="Geodata - geographic data for genealogists",
    )
    parser.add_argument("--root", default=DEFAULT_ROOT, help="Folder holding the data tree")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_repair = subparsers.add_parser("repair", help="Find and fix errors and inconsistencies")
    p_repair.add_argument("--report", help="Optional path to write a JSON report")
    p_repair.set_defaults(func=_cmd_repair)

    p_validate = subparsers.add_parser("validate", help="Check the data without changing it")
    p_validate.add_argument("--report", help="Optional path to write a JSON report")
    p_validate.set_defaults(func=_cmd_validate)

    p_import = subparsers.add_parser("import", help="Import coordinates")
    p_import.add_argument("files", nargs="*", help="CSV files in webtrees/googlemap format")
    p_import.add_argument("--delimiter", default=";", help="Comma or semicolon")
    p_import.add_argument("--place", help='Single place, e.g. "England/London"')
    p_import.add_argument("--latitude", help='e.g. "N51.50735"')
    p_import.add_argument("--longitude", help='e.g. "W0.12776"')
    p_import.add_argument("--crs", help="CRS of --longitude/--latitude, if not WGS84 degrees")
    p_import.set_defaults(func=_cmd_import)

    p_merge = subparsers.add_parser("merge", help="Add places (without coordinates) from a list")
    p_merge.add_argument("parent", help='Parent place, e.g. "England", or "" for the top level')
    p_merge.add_argument("file", help="Text file with one place name per line")
    p_merge.set_defaults(func=_cmd_merge)

    p_translate = subparsers.add_parser("translate", help="Add a translation to an existing place")
    p_translate.add_argument("place", help='Name of place (in English), e.g. "England/London"')
    p_translate.add_argument("language", help='Language code, e.g. "fr"')
    p_translate.add_argument(
        "translation", nargs="?", default="",
        help='e.g. "Londres" (leave empty to delete existing translation)'
    )
    p_translate.set_defaults(func=_cmd_translate)

    p_export = subparsers.add_parser("export", help="Export places in webtrees/googlemap format")
    p_export.add_argument("--language", default="en", help="Language code")
    p_export.add_argument("--prefix", default="", help="Only places beginning with this prefix")
    p_export.add_argument("--delimiter", default=";", help="Comma or semicolon")
    p_export.add_argument("--output", help="CSV file to write (default dist/places-LANGUAGE.csv)")
    p_export.set_defaults(func=_cmd_export)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


def app() -> None:
    sys.exit(main())


if __name__ == "__main__":
    app()
