"""
Pytest configuration and fixtures for geodata tests.
"""

import json
from pathlib import Path

import pytest

from geodata.core.model import Feature, FeatureCollection, Geometry
from geodata.core.storage import LocalFilesystem


def write_json(root: Path, relative: str, data) -> Path:
    """Write data as loosely formatted (non-canonical) JSON."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=4, ensure_ascii=False), encoding='utf-8')
    return path


def write_text(root: Path, relative: str, text: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    return path


@pytest.fixture
def data_root(tmp_path):
    """An empty data folder."""
    root = tmp_path / 'data'
    root.mkdir()
    return root


@pytest.fixture
def filesystem(data_root):
    return LocalFilesystem(data_root)


@pytest.fixture
def messages():
    """Collects everything reported through a sink."""
    return []


@pytest.fixture
def sink(messages):
    return messages.append


@pytest.fixture
def scenario_collection():
    """Unsorted features, one with a translation equal to its id."""
    return FeatureCollection(features=[
        Feature(id='Zeta'),
        Feature(id='Alpha', properties={'en': 'Alpha'}),
    ])


@pytest.fixture
def london_collection():
    return FeatureCollection(features=[
        Feature(
            id='London',
            geometry=Geometry.point(-0.12776, 51.50735),
            properties={'fr': 'Londres', 'de': 'London', 'it': 'Londra'}
        ),
        Feature(
            id='Bath',
            geometry=Geometry.point(-2.35869, 51.38059),
        ),
    ])


@pytest.fixture
def sample_tree(data_root):
    """
    A small data tree with typical problems:

    - the top-level file is unsorted and not canonically formatted
    - England/data.geojson has a redundant English translation
    - Germany/data.geojson is missing, although Germany/Bavaria holds data
    - Wales has a flag but no entry in the top-level file
    """
    write_json(data_root, 'data.geojson', {
        'type': 'FeatureCollection',
        'features': [
            {
                'type': 'Feature',
                'id': 'Germany',
                'geometry': {'type': 'Point', 'coordinates': [10.45153, 51.16569]},
                'properties': {'fr': 'Allemagne', 'de': 'Deutschland'}
            },
            {
                'type': 'Feature',
                'id': 'England',
                'geometry': {'type': 'Point', 'coordinates': [-1.17432, 52.35552]},
                'properties': {'fr': 'Angleterre'}
            },
        ]
    })
    write_json(data_root, 'England/data.geojson', {
        'type': 'FeatureCollection',
        'features': [
            {
                'id': 'London',
                'geometry': {'type': 'Point', 'coordinates': [-0.12776, 51.50735]},
                'properties': {'en': 'London', 'fr': 'Londres'}
            },
        ]
    })
    write_text(data_root, 'England/flag.svg', '<svg xmlns="http://www.w3.org/2000/svg"/>')
    write_json(data_root, 'Germany/Bavaria/data.geojson', {
        'type': 'FeatureCollection',
        'features': [
            {
                'id': 'Munich',
                'type': 'Feature',
                'geometry': {'type': 'Point', 'coordinates': [11.58198, 48.13513]},
                'properties': {'de': 'München'}
            },
        ]
    })
    write_text(data_root, 'Wales/flag.svg', '<svg xmlns="http://www.w3.org/2000/svg"/>')
    write_text(data_root, 'Wales/LICENCE.md', '')

    return data_root


@pytest.fixture
def sample_csv(tmp_path):
    """A webtrees/googlemap CSV file with two good rows and two bad ones."""
    path = tmp_path / 'places.csv'
    path.write_text(
        'Level;Country;State;County;City;Place;Longitude;Latitude\n'
        '0;England;;;;;W1.17432;N52.35552\n'
        '1;England;London;;;;W0.12776;N51.50735\n'
        '2;England;London;;;;W0.1;N51.5\n'
        '1;England;Nowhere;;;;X1;N1\n',
        encoding='utf-8'
    )
    return path
