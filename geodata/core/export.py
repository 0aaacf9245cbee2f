"""
Export of the data tree.

Builds a table of every located place with its name in a chosen language,
and writes it in webtrees/googlemap CSV format.
"""

from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

import geopandas as gpd
import pandas as pd
from shapely.geometry import Point

from .coordinates import format_latitude, format_longitude
from .exceptions import ParseError
from .importer import MAX_PLACE_PARTS
from .model import Feature, FeatureCollection
from .storage import Filesystem, join_path, split_path
from .tree import data_files, sort_by_parent, walk

EXPORT_COLUMNS = ['Level', 'Country', 'State', 'County', 'City', 'Place', 'Longitude', 'Latitude']
FRAME_COLUMNS = ['path', 'level', 'name', 'names', 'geometry']


def _translate_tree(filesystem: Filesystem, language: str) -> Iterator[Tuple[str, List[str], Feature]]:
    """
    Yield (path, translated_names, feature) for every feature in the tree.

    translated_names holds one name per level. A name may itself contain a
    '/', e.g. "Bruxelles/Brussel", so it is never split again.

    Files are read parent-before-child, so a parent's translation is always
    known before its children are reached.
    """
    translations: Dict[str, List[str]] = {}

    for entry in sort_by_parent(data_files(walk(filesystem))):
        try:
            collection = FeatureCollection.from_json(filesystem.read(entry.path))
        except ParseError as e:
            raise ParseError(str(e), entry.path) from e

        parent = entry.dirname
        translated_parent = translations.get(parent, split_path(parent))

        for feature in collection.features:
            path = join_path(parent, feature.id)
            translations[path] = translated_parent + [feature.translation(language)]
            yield path, translations[path], feature


def translated_paths(filesystem: Filesystem, language: str) -> Dict[str, str]:
    """
    Map each place path to its path in another language.

    e.g. {"Germany": "Deutschland", "Germany/Bavaria": "Deutschland/Bayern"}
    Places without a translation keep their English name.
    """
    return {path: "/".join(names) for path, names, _ in _translate_tree(filesystem, language)}


def places_frame(
    filesystem: Filesystem,
    language: str = "en",
    prefix: str = ""
) -> gpd.GeoDataFrame:
    """
    Collect every place with known coordinates into a GeoDataFrame.

    Args:
        filesystem: Storage holding the tree
        language: Language for the place names
        prefix: Only include places whose path begins with this prefix

    Returns:
        GeoDataFrame (EPSG:4326) with columns path, level, name, names
        (the translated name of each level) and geometry
    """
    rows = []

    for path, names, feature in _translate_tree(filesystem, language):
        if not feature.has_coordinates or not path.startswith(prefix):
            continue
        rows.append({
            'path': path,
            'level': len(names) - 1,
            'name': "/".join(names),
            'names': names,
            'geometry': Point(feature.longitude, feature.latitude)
        })

    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    return gpd.GeoDataFrame(frame, geometry='geometry', crs='EPSG:4326')


def write_places_csv(
    gdf: gpd.GeoDataFrame,
    output_path: Union[str, Path],
    delimiter: str = ";",
    report: Optional[Callable[[str], None]] = None
) -> int:
    """
    Write places in webtrees/googlemap CSV format.

    Places more than five levels deep do not fit the format and are skipped.

    Returns:
        Number of places written
    """
    output_path = Path(output_path)
    rows = []

    for record in gdf.itertuples(index=False):
        names = list(record.names)
        if len(names) > MAX_PLACE_PARTS:
            if report:
                report(f"Skipping {record.path}: more than {MAX_PLACE_PARTS} levels")
            continue

        rows.append(
            [len(names) - 1]
            + names
            + [''] * (MAX_PLACE_PARTS - len(names))
            + [format_longitude(record.geometry.x), format_latitude(record.geometry.y)]
        )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(rows, columns=EXPORT_COLUMNS).to_csv(
        output_path, sep=delimiter, index=False, encoding='utf-8'
    )

    if report:
        report(f"Wrote {len(rows)} places to {output_path}")

    return len(rows)
