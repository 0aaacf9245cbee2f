"""
Core engine for the geodata tree.
"""

from .exceptions import CoordinateError, DuplicateIdError, EncodeError, InvalidNameWarning, ParseError
from .model import Feature, FeatureCollection, Geometry, features_include
from .formatter import encode_geojson, format_geojson
from .storage import Entry, Filesystem, LocalFilesystem
from .tree import walk
from .repair import RepairEngine, canonicalize
from .places import PlaceEditor
from .coordinates import parse_latitude, parse_longitude, format_latitude, format_longitude
from .importer import import_csv, import_place, import_place_list
from .validation import run_validation, validate_tree
from .export import places_frame, translated_paths, write_places_csv
from .report import generate_repair_report, generate_validation_report

__all__ = [
    "CoordinateError",
    "DuplicateIdError",
    "EncodeError",
    "InvalidNameWarning",
    "ParseError",
    "Feature",
    "FeatureCollection",
    "Geometry",
    "features_include",
    "encode_geojson",
    "format_geojson",
    "Entry",
    "Filesystem",
    "LocalFilesystem",
    "walk",
    "RepairEngine",
    "canonicalize",
    "PlaceEditor",
    "parse_latitude",
    "parse_longitude",
    "format_latitude",
    "format_longitude",
    "import_csv",
    "import_place",
    "import_place_list",
    "run_validation",
    "validate_tree",
    "places_frame",
    "translated_paths",
    "write_places_csv",
    "generate_repair_report",
    "generate_validation_report",
]
