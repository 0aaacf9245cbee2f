"""
Place-level operations on the data tree.

A place is addressed by a '/'-delimited path of English names, e.g.
"England/Greater London/London". The feature for a place lives in the
data.geojson of its parent folder, under the id of the last segment.
"""

from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .coordinates import check_bounds, round_coordinate
from .formatter import encode_geojson
from .model import Feature, FeatureCollection, Geometry, stub_feature
from .storage import Filesystem, join_path, split_path
from .tree import data_file_for


def locate(place: str) -> Tuple[str, str]:
    """
    Find where a place is stored.

    Args:
        place: Place path, e.g. "England/London"

    Returns:
        Tuple of (data_file, feature_id), e.g. ("England/data.geojson", "London")

    Raises:
        ValueError: If the place path is empty
    """
    return locate_parts(split_path(place))


def locate_parts(place_parts: Sequence[str]) -> Tuple[str, str]:
    parts = [part for part in place_parts if part]
    if not parts:
        raise ValueError("A place name is required")
    return data_file_for(join_path(*parts[:-1])), parts[-1]


class PlaceEditor:
    """
    Locates features by place path, changes them and writes them back in canonical form.
    """

    def __init__(self, filesystem: Filesystem, report: Optional[Callable[[str], None]] = None):
        self.filesystem = filesystem
        self.report = report

    def notify(self, message: str) -> None:
        if self.report:
            self.report(message)

    def load(self, data_file: str) -> FeatureCollection:
        """The collection stored in data_file, or an empty one if there is no such file."""
        if not self.filesystem.has(data_file):
            return FeatureCollection()
        return FeatureCollection.from_json(self.filesystem.read(data_file))

    def save(self, data_file: str, geojson: FeatureCollection) -> None:
        self.filesystem.write(data_file, encode_geojson(geojson))

    def find(self, place: str) -> Optional[Feature]:
        data_file, feature_id = locate(place)
        return self.load(data_file).find(feature_id)

    def ensure_feature(self, place: str) -> Feature:
        """
        Make sure the parent's data.geojson lists this place, adding a stub if needed.

        Ancestors are listed too, so every folder holding data stays
        reachable from the top-level file.

        Returns:
            The existing or newly created feature
        """
        parts = split_path(place)
        if len(parts) > 1:
            self.ensure_feature(join_path(*parts[:-1]))

        data_file, feature_id = locate(place)
        geojson = self.load(data_file)

        feature = geojson.find(feature_id)
        if feature is None:
            self.notify(f"Creating {feature_id} in {data_file}")
            feature = stub_feature(feature_id)
            geojson.features.append(feature)
            self.save(data_file, geojson)

        return feature

    def import_coordinates(
        self,
        place_parts: Sequence[str],
        longitude: float,
        latitude: float
    ) -> Feature:
        """
        Set the location of a place, creating its file and feature as needed.

        Args:
            place_parts: Place names, from the top level down
            longitude: Signed decimal degrees, east positive
            latitude: Signed decimal degrees, north positive

        Returns:
            The updated or created feature

        Raises:
            CoordinateError: If the point is outside WGS84 bounds
        """
        data_file, feature_id = locate_parts(place_parts)
        longitude = round_coordinate(longitude)
        latitude = round_coordinate(latitude)
        check_bounds(longitude, latitude)

        if not self.filesystem.has(data_file):
            self.notify(f"Creating {data_file}")
        geojson = self.load(data_file)

        feature = geojson.find(feature_id)
        if feature is None:
            self.notify(f"Creating {feature_id}")
            feature = Feature(id=feature_id, geometry=Geometry.point(longitude, latitude))
            geojson.features.append(feature)
        else:
            self.notify(f"Updating {feature_id}")
            feature.geometry = Geometry.point(longitude, latitude)

        self.save(data_file, geojson)
        return feature

    def set_translation(self, place: str, language: str, translation: str) -> bool:
        """
        Set (or remove) the name of a place in one language.

        An empty translation, or one equal to the English id, removes the entry.

        Returns:
            True if the place was found and updated; False (and reported) if not
        """
        data_file, feature_id = locate(place)

        if not self.filesystem.has(data_file):
            self.notify(f"{place} not found: there is no {data_file}")
            return False

        geojson = self.load(data_file)
        feature = geojson.find(feature_id)
        if feature is None:
            self.notify(f"{place} not found in {data_file}")
            return False

        if translation == "" or translation == feature.id:
            if language in feature.properties:
                self.notify(f"Removing {language}/{feature_id}")
                del feature.properties[language]
        else:
            self.notify(f"Setting {language}/{feature_id} to {translation}")
            feature.properties[language] = translation

        self.save(data_file, geojson)
        return True

    def merge_places(self, parent: str, names: Iterable[str]) -> List[str]:
        """
        Add stub features for a list of place names below parent.

        Names already present are left alone. The parent's data.geojson is
        written once, and the parent itself is listed in its ancestors' files.

        Returns:
            The names that were added
        """
        folder = join_path(*split_path(parent))
        data_file = data_file_for(folder)
        geojson = self.load(data_file)

        added = []
        for name in names:
            name = name.strip()
            if name == "" or geojson.includes(name):
                continue
            self.notify(f"Creating {name} in {data_file}")
            geojson.features.append(stub_feature(name))
            added.append(name)

        if added:
            if folder:
                self.ensure_feature(folder)
            self.save(data_file, geojson)
        return added
