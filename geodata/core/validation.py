"""
Validation engine for data.geojson files.

Checks files without changing them: parse errors, duplicate ids, redundant
translations, missing geometry, invalid ids and canonical formatting.
"""

import posixpath
from typing import Callable, Dict, List, Optional, Tuple, Union

import pandas as pd

from .exceptions import EncodeError, ParseError
from .formatter import encode_geojson
from .model import FeatureCollection
from .repair import canonicalize, is_valid_name
from .storage import Filesystem
from .tree import data_files, walk


def validate_collection(collection: FeatureCollection) -> Dict[str, Union[int, bool, list]]:
    """
    Check the features of a collection.

    Args:
        collection: Parsed collection

    Returns:
        Dictionary with validation results:
        - total_features: int
        - duplicate_ids: ids used more than once
        - redundant_translations: "id (language)" for translations equal to the id
        - missing_geometry: ids of features without a geometry
        - invalid_ids: ids outside the allowed character class
        - unsorted: whether the features are out of id order
    """
    ids = collection.ids()

    redundant = [
        f"{feature.id} ({language})"
        for feature in collection.features
        for language, name in sorted(feature.properties.items())
        if name == feature.id
    ]

    return {
        'total_features': len(ids),
        'duplicate_ids': collection.duplicate_ids(),
        'redundant_translations': redundant,
        'missing_geometry': [f.id for f in collection.features if f.geometry is None],
        'invalid_ids': [feature_id for feature_id in ids if not is_valid_name(feature_id)],
        'unsorted': ids != sorted(ids)
    }


def run_validation(filesystem: Filesystem, path: str) -> Tuple[Dict, FeatureCollection]:
    """
    Run all checks on one data.geojson file.

    Args:
        filesystem: Storage holding the file
        path: Path of the file

    Returns:
        Tuple of (validation_report, loaded_collection)
    """
    report = {
        'file_path': path,
        'file_name': posixpath.basename(path),
        'file_size': 0,
        'timestamp': pd.Timestamp.now().isoformat(),
        'validation': {},
        'feature_validation': {},
        'warnings': [],
        'errors': []
    }

    try:
        raw = filesystem.read(path)
        report['file_size'] = len(raw)

        collection = FeatureCollection.from_json(raw)
        report['validation']['loaded_successfully'] = True
        report['validation']['feature_count'] = len(collection.features)

        checks = validate_collection(collection)
        report['feature_validation'] = checks

        for feature_id in checks['duplicate_ids']:
            report['errors'].append(f"Duplicate ID: {feature_id}")

        if checks['redundant_translations']:
            report['warnings'].append(
                f"Redundant translations: {', '.join(checks['redundant_translations'])}"
            )

        if checks['missing_geometry']:
            report['warnings'].append(
                f"Features without geometry: {', '.join(checks['missing_geometry'])}"
            )

        if checks['invalid_ids']:
            report['warnings'].append(
                f"IDs with invalid characters: {', '.join(checks['invalid_ids'])}"
            )

        # Canonical form is undefined while ids are duplicated
        if not checks['duplicate_ids']:
            is_canonical = encode_geojson(canonicalize(collection)) == raw
            report['validation']['is_canonical'] = is_canonical
            if not is_canonical:
                report['warnings'].append("Not in canonical format")

        has_issues = bool(report['warnings'] or report['errors'])
        report['validation']['has_issues'] = has_issues
        report['validation']['status'] = 'issues_found' if has_issues else 'clean'

    except (ParseError, EncodeError, OSError) as e:
        report['validation']['loaded_successfully'] = False
        report['errors'].append(f"Failed to load {path}: {e}")
        report['validation']['status'] = 'error'
        collection = FeatureCollection()

    return report, collection


def validate_tree(
    filesystem: Filesystem,
    report: Optional[Callable[[str], None]] = None
) -> Dict[str, Union[int, List[Dict]]]:
    """
    Validate every data.geojson in the tree.

    Args:
        filesystem: Storage holding the tree
        report: Optional sink for one line per problem found

    Returns:
        Dictionary with counts per status and the individual reports
    """
    reports = []

    for entry in data_files(walk(filesystem)):
        file_report, _ = run_validation(filesystem, entry.path)
        reports.append(file_report)

        if report:
            for message in file_report['errors'] + file_report['warnings']:
                report(f"{entry.path}: {message}")

    statuses = [r['validation']['status'] for r in reports]

    return {
        'total_files': len(reports),
        'clean': statuses.count('clean'),
        'issues_found': statuses.count('issues_found'),
        'failed': statuses.count('error'),
        'warnings': [w for r in reports for w in r['warnings']],
        'errors': [e for r in reports for e in r['errors']],
        'reports': reports
    }
