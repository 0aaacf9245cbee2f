"""
Latitude and longitude handling.

Parses the hemisphere notation used by webtrees/googlemap files (N51.5, W0.1),
degrees/minutes/seconds, and reprojects coordinates from other CRS to WGS84.
"""

import re
from decimal import Decimal
from typing import Tuple, Union

from pyproj import CRS, Transformer

from .exceptions import CoordinateError

# Stored coordinates are rounded to this many decimal places (about 1m).
PRECISION = 5

WGS84 = CRS.from_epsg(4326)

_DECIMAL = re.compile(r"^([0-9.]+)\s*°?$")
_DEGREES_MINUTES = re.compile(r"^([0-9]+)\s*°\s*([0-9.]+)\s*[′']?$")
_DEGREES_MINUTES_SECONDS = re.compile(r"^([0-9]+)\s*°\s*([0-9]+)\s*[′']\s*([0-9.]+)\s*[″\"]?$")


def round_coordinate(value: Union[str, float]) -> float:
    # Adding 0.0 turns -0.0 into 0.0
    return round(float(value), PRECISION) + 0.0


def wgs84_bounds() -> Tuple[float, float, float, float]:
    """(west, south, east, north) of the WGS84 area of use."""
    area = WGS84.area_of_use
    return area.west, area.south, area.east, area.north


def check_bounds(longitude: float, latitude: float) -> None:
    """
    Raises:
        CoordinateError: If the point lies outside the WGS84 area of use
    """
    west, south, east, north = wgs84_bounds()
    if not west <= longitude <= east:
        raise CoordinateError(f"longitude {longitude} is outside the range {west} to {east}")
    if not south <= latitude <= north:
        raise CoordinateError(f"latitude {latitude} is outside the range {south} to {north}")


def parse_latitude(value: str) -> float:
    """
    Convert a user-supplied latitude into signed decimal degrees.

    "N51.5" -> 51.5, "S51.5" -> -51.5, "51° 30' 0\"S" -> -51.5
    """
    latitude = _parse_angle(value, "N", "S")
    check_bounds(0.0, latitude)
    return latitude


def parse_longitude(value: str) -> float:
    """
    Convert a user-supplied longitude into signed decimal degrees.

    "E0.1" -> 0.1, "W0.1" -> -0.1
    """
    longitude = _parse_angle(value, "E", "W")
    check_bounds(longitude, 0.0)
    return longitude


def _parse_angle(value: str, positive: str, negative: str) -> float:
    text = value.strip()
    sign = 1.0

    for hemisphere, factor in ((positive, 1.0), (negative, -1.0)):
        if text[:1].upper() == hemisphere:
            text = text[1:].strip()
            sign = factor
            break
        if text[-1:].upper() == hemisphere:
            text = text[:-1].strip()
            sign = factor
            break
    else:
        if text[:1] in ("-", "+"):
            sign = -1.0 if text[0] == "-" else 1.0
            text = text[1:].strip()

    degrees = _degrees(text)
    if degrees is None:
        raise CoordinateError(f"the angle {value} is not recognised")

    return round_coordinate(sign * degrees)


def _degrees(text: str):
    """Unsigned decimal degrees, or None if the text is not an angle."""
    try:
        match = _DECIMAL.match(text)
        if match:
            return float(match.group(1))

        match = _DEGREES_MINUTES.match(text)
        if match:
            return float(match.group(1)) + float(match.group(2)) / 60.0

        match = _DEGREES_MINUTES_SECONDS.match(text)
        if match:
            return (
                float(match.group(1))
                + float(match.group(2)) / 60.0
                + float(match.group(3)) / 3600.0
            )
    except ValueError:
        # e.g. "1.2.3" matches the character class but is not a number
        return None

    return None


def _format_degrees(value: float) -> str:
    text = repr(round_coordinate(value))
    if "e" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def format_latitude(latitude: float) -> str:
    if latitude < 0:
        return "S" + _format_degrees(abs(latitude))
    return "N" + _format_degrees(latitude)


def format_longitude(longitude: float) -> str:
    if longitude < 0:
        return "W" + _format_degrees(abs(longitude))
    return "E" + _format_degrees(longitude)


def to_wgs84(x: float, y: float, source_crs: Union[str, int, CRS]) -> Tuple[float, float]:
    """
    Reproject a coordinate into WGS84.

    Args:
        x: Easting (or longitude) in the source CRS
        y: Northing (or latitude) in the source CRS
        source_crs: Source CRS (EPSG code, CRS string, or CRS object)

    Returns:
        Tuple of (longitude, latitude), rounded for storage

    Raises:
        CoordinateError: If the CRS is unknown or the point cannot be transformed
    """
    try:
        source = CRS.from_user_input(source_crs)
        transformer = Transformer.from_crs(source, WGS84, always_xy=True)
        longitude, latitude = transformer.transform(x, y)
    except Exception as e:
        raise CoordinateError(f"Cannot transform ({x}, {y}) from {source_crs}: {e}") from e

    longitude = round_coordinate(longitude)
    latitude = round_coordinate(latitude)
    check_bounds(longitude, latitude)
    return longitude, latitude
