"""
Import of place data from external files.

Handles webtrees/googlemap CSV files, single places and plain lists of names.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from .coordinates import parse_latitude, parse_longitude, to_wgs84
from .exceptions import CoordinateError, ParseError
from .model import Feature
from .places import PlaceEditor
from .storage import split_path

# Level;Country;State;County;City;Place;Longitude;Latitude;Zoom;Icon
CSV_FIELDS = 10
HEADER_LINES = 1
MAX_PLACE_PARTS = 5


def read_places_csv(path: Union[str, Path], delimiter: str = ";") -> pd.DataFrame:
    """
    Load a webtrees/googlemap CSV file as a frame of strings.

    The header line is skipped. Blank lines are kept (as empty rows) so that
    row positions map back to line numbers.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    frame = pd.read_csv(
        path,
        sep=delimiter,
        header=None,
        names=list(range(CSV_FIELDS)),
        skiprows=HEADER_LINES,
        index_col=False,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
        quotechar='"',
        escapechar="\\",
        encoding="utf-8",
    )
    return frame.fillna("")


def import_csv(
    editor: PlaceEditor,
    path: Union[str, Path],
    delimiter: str = ";"
) -> Dict[str, Union[int, List[str]]]:
    """
    Import coordinates from a webtrees/googlemap CSV file.

    Column 0 is the level, columns 1-5 the place names (empty cells ignored),
    column 6 the longitude and column 7 the latitude, e.g. "W0.1", "N51.5".
    Bad rows are reported and skipped.

    Args:
        editor: Editor used to write the places
        path: Path to the CSV file
        delimiter: Field separator, ";" or ","

    Returns:
        Dictionary with the number of lines read and imported, and the errors
    """
    frame = read_places_csv(path, delimiter)
    editor.notify(f"Reading {path}")

    imported = 0
    errors = []

    for offset, row in enumerate(frame.itertuples(index=False, name=None)):
        line = offset + HEADER_LINES + 1
        fields = [str(value).strip() for value in row]
        if not any(fields):
            continue

        editor.notify(f"Line {line} - processing “{','.join(fields[:8])}”")

        place_parts = [part for part in fields[1:1 + MAX_PLACE_PARTS] if part]

        try:
            level = int(fields[0])
        except ValueError:
            errors.append(f"Error at line {line}.  Invalid level “{fields[0]}”")
            editor.notify(errors[-1])
            continue

        if level + 1 != len(place_parts):
            errors.append(f"Error at line {line}.  Level does not match number of place names")
            editor.notify(errors[-1])
            continue

        try:
            longitude = parse_longitude(fields[6])
            latitude = parse_latitude(fields[7])
        except CoordinateError as e:
            errors.append(f"Error at line {line}.  {e}")
            editor.notify(errors[-1])
            continue

        try:
            editor.import_coordinates(place_parts, longitude, latitude)
        except (ParseError, OSError) as e:
            errors.append(f"Error at line {line}.  {e}")
            editor.notify(errors[-1])
            continue
        imported += 1

    return {
        'lines': len(frame),
        'imported': imported,
        'errors': errors
    }


def import_place(
    editor: PlaceEditor,
    place: str,
    longitude: str,
    latitude: str,
    source_crs: Optional[str] = None
) -> Feature:
    """
    Import the location of a single place.

    Without source_crs the values use hemisphere notation ("W0.1", "N51.5")
    or signed decimal degrees. With source_crs they are plain numbers in
    that CRS (x, y) and are reprojected to WGS84.

    Raises:
        CoordinateError: If the values cannot be understood
    """
    if source_crs:
        try:
            x, y = float(longitude), float(latitude)
        except ValueError as e:
            raise CoordinateError(f"Coordinates must be numbers in {source_crs}") from e
        lon, lat = to_wgs84(x, y, source_crs)
    else:
        lon = parse_longitude(longitude)
        lat = parse_latitude(latitude)

    return editor.import_coordinates(split_path(place), lon, lat)


def import_place_list(
    editor: PlaceEditor,
    parent: str,
    path: Union[str, Path]
) -> Dict[str, Union[int, List[str]]]:
    """
    Add places (without coordinates) from a text file with one name per line.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    names = path.read_text(encoding="utf-8").splitlines()
    added = editor.merge_places(parent, names)

    return {
        'names': len([name for name in names if name.strip()]),
        'added': added
    }
