"""
Repair engine for the data tree.

Runs three passes over the whole tree:
1. report file and folder names outside the allowed character class
2. add missing features for folders that hold data
3. rewrite every data.geojson in canonical form
"""

import re
from typing import Callable, Dict, List, Optional, Union

from .exceptions import DuplicateIdError, EncodeError, InvalidNameWarning, ParseError
from .formatter import encode_geojson
from .model import FEATURE, FeatureCollection, Feature, Geometry, stub_feature
from .storage import Filesystem, parent_path, split_path
from .tree import data_file_for, data_files, data_folders, walk

# Folder names, and therefore ids, must consist of these ASCII characters.
NAME_PATTERN = re.compile(r"^[A-Za-z ().'-]+$")


def is_valid_name(name: str) -> bool:
    return NAME_PATTERN.match(name) is not None


def default_geometry() -> Geometry:
    return Geometry.point(0, 0)


def canonicalize(collection: FeatureCollection) -> FeatureCollection:
    """
    Normalize a collection into the strict stored schema.

    Missing types, geometries and properties get their defaults, translations
    equal to the id are dropped and features are sorted by id.

    Raises:
        DuplicateIdError: If two features share an id
    """
    duplicates = collection.duplicate_ids()
    if duplicates:
        raise DuplicateIdError(duplicates[0])

    features = []
    for feature in collection.features:
        features.append(Feature(
            id=feature.id,
            type=feature.type or FEATURE,
            geometry=feature.geometry or default_geometry(),
            properties={
                language: name
                for language, name in feature.properties.items()
                if name != feature.id
            },
        ))

    features.sort(key=lambda feature: feature.id)
    return FeatureCollection(features=features)


class RepairEngine:
    """
    Finds and fixes errors and inconsistencies in the data tree.
    """

    def __init__(
        self,
        filesystem: Filesystem,
        report: Optional[Callable[[str], None]] = None
    ):
        self.filesystem = filesystem
        self.report = report

    def _notify(self, message: str) -> None:
        if self.report:
            self.report(message)

    def _load(self, path: str) -> FeatureCollection:
        if not self.filesystem.has(path):
            return FeatureCollection()
        return FeatureCollection.from_json(self.filesystem.read(path))

    def check_filenames(self) -> Dict[str, Union[int, List]]:
        """
        Report every file or folder whose name is not in the allowed character class.

        Names are reported, never renamed.

        Returns:
            Dictionary with the number of entries checked and the invalid paths
        """
        entries = walk(self.filesystem)
        warnings = []

        for entry in entries:
            if not is_valid_name(entry.basename):
                warning = InvalidNameWarning(entry.path)
                warnings.append(warning)
                self._notify(str(warning))

        return {
            'checked': len(entries),
            'invalid': [warning.path for warning in warnings],
            'warnings': [str(warning) for warning in warnings],
            'errors': []
        }

    def add_missing_features(self) -> Dict[str, Union[int, List]]:
        """
        Make sure every folder holding data is listed in its parent's data.geojson.

        Folders are processed deepest first. Creating a parent's data.geojson
        makes that parent a candidate too, so gaps spanning several levels are
        filled in one run.

        Returns:
            Dictionary with the features created and any per-file errors
        """
        pending: Dict[int, set] = {}
        for folder in data_folders(walk(self.filesystem)):
            pending.setdefault(len(split_path(folder)), set()).add(folder)

        created = []
        errors = []
        checked = 0

        depth = max(pending, default=0)
        while depth > 0:
            for folder in sorted(pending.get(depth, ())):
                checked += 1
                parent = parent_path(folder)

                name = folder.rsplit("/", 1)[-1]
                geojson_file = data_file_for(parent)

                try:
                    existed = self.filesystem.has(geojson_file)
                    geojson = self._load(geojson_file)
                    if geojson.includes(name):
                        continue

                    self._notify(f"Adding {name} to {geojson_file}")
                    geojson.features.append(stub_feature(name))
                    self.filesystem.write(geojson_file, encode_geojson(geojson))
                    created.append(folder)
                except (ParseError, EncodeError, OSError) as e:
                    message = f"{geojson_file}: {e}"
                    self._notify(message)
                    errors.append(message)
                    continue

                if not existed and parent:
                    pending.setdefault(depth - 1, set()).add(parent)
            depth -= 1

        return {
            'checked': checked,
            'created': created,
            'warnings': [],
            'errors': errors
        }

    def canonicalize_file(self, path: str) -> bool:
        """
        Rewrite one data.geojson in canonical form.

        Args:
            path: Path of the file

        Returns:
            True if the file was rewritten, False if it was already canonical

        Raises:
            ParseError: If the file is not a valid FeatureCollection
            DuplicateIdError: If two features share an id; the file is left unmodified
            OSError: If the file cannot be read or written
        """
        raw = self.filesystem.read(path)

        try:
            geojson = FeatureCollection.from_json(raw)
        except ParseError as e:
            raise ParseError(str(e), path) from e

        try:
            geojson = canonicalize(geojson)
        except DuplicateIdError as e:
            raise DuplicateIdError(e.feature_id, path) from e

        canonical = encode_geojson(geojson)
        if canonical == raw:
            return False

        self.filesystem.write(path, canonical)
        return True

    def canonicalize_all(self) -> Dict[str, Union[int, List]]:
        """
        Convert every data.geojson in the tree to canonical format.

        A file that fails (bad JSON, duplicate ids, I/O) is reported and
        skipped; the walk continues with the next file.

        Returns:
            Dictionary with per-file results
        """
        results = []
        errors = []
        rewritten = 0

        for entry in data_files(walk(self.filesystem)):
            try:
                changed = self.canonicalize_file(entry.path)
            except DuplicateIdError as e:
                self._notify(str(e))
                errors.append(str(e))
                results.append({'path': entry.path, 'success': False, 'duplicate_id': e.feature_id, 'error': str(e)})
                continue
            except ParseError as e:
                message = str(e)
                self._notify(message)
                errors.append(message)
                results.append({'path': entry.path, 'success': False, 'error': message})
                continue
            except (EncodeError, OSError) as e:
                message = f"{entry.path}: {e}"
                self._notify(message)
                errors.append(message)
                results.append({'path': entry.path, 'success': False, 'error': message})
                continue

            if changed:
                rewritten += 1
                self._notify(f"Rewrote {entry.path}")
            results.append({'path': entry.path, 'success': True, 'rewritten': changed})

        return {
            'processed': len(results),
            'rewritten': rewritten,
            'failed': len(errors),
            'results': results,
            'warnings': [],
            'errors': errors
        }

    def run(self) -> Dict[str, Union[bool, List[Dict]]]:
        """
        Complete repair pipeline: names, missing features, canonical format.

        Returns:
            Dictionary with the results of each step
        """
        steps = [
            ('invalid_names', 'Check for invalid characters in filenames', self.check_filenames),
            ('missing_features', 'Check for missing data.geojson entries', self.add_missing_features),
            ('canonical_format', 'Converting data.geojson files to canonical format', self.canonicalize_all),
        ]

        results = {
            'processing_steps': [],
            'success': True
        }

        for step, description, method in steps:
            self._notify(description)
            step_results = method()
            results['processing_steps'].append({
                'step': step,
                'success': not step_results['errors'],
                'results': step_results
            })
            if step_results['errors']:
                results['success'] = False

        return results
