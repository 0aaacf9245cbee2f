"""
Tests for the repair engine.
"""

import json

import pytest

from geodata.core.exceptions import DuplicateIdError, ParseError
from geodata.core.formatter import encode_geojson
from geodata.core.model import Feature, FeatureCollection, Geometry
from geodata.core.repair import RepairEngine, canonicalize, is_valid_name
from geodata.core.storage import LocalFilesystem

from conftest import write_json, write_text


def load(root, relative):
    return FeatureCollection.from_json((root / relative).read_bytes())


class TestNames:
    """Test the allowed character class."""

    def test_valid_names(self):
        for name in ['England', 'Greater London', "Cotes-d'Armor", 'data.geojson', 'Saint-Martin (Rouen)']:
            assert is_valid_name(name)

    def test_invalid_names(self):
        assert not is_valid_name('Zürich')
        assert not is_valid_name('Bremen2')
        assert not is_valid_name('A_B')
        assert not is_valid_name('')


class TestCanonicalize:
    """Test normalization of a collection."""

    def test_defaults_filled(self):
        collection = canonicalize(FeatureCollection(features=[Feature(id='Wales', type='')]))
        wales = collection.features[0]

        assert wales.type == 'Feature'
        assert wales.geometry == Geometry.point(0, 0)
        assert wales.properties == {}

    def test_redundant_translations_removed(self, scenario_collection):
        collection = canonicalize(scenario_collection)

        assert collection.ids() == ['Alpha', 'Zeta']
        assert collection.features[0].properties == {}

    def test_existing_geometry_kept(self, london_collection):
        collection = canonicalize(london_collection)
        assert collection.find('London').geometry == Geometry.point(-0.12776, 51.50735)

    def test_duplicates_rejected(self):
        collection = FeatureCollection(features=[Feature(id='X'), Feature(id='X')])

        with pytest.raises(DuplicateIdError) as excinfo:
            canonicalize(collection)
        assert excinfo.value.feature_id == 'X'
        assert str(excinfo.value) == 'Duplicate ID: X'


class TestCheckFilenames:
    """Test the first repair pass."""

    def test_clean_tree(self, sample_tree, messages, sink):
        results = RepairEngine(LocalFilesystem(sample_tree), report=sink).check_filenames()

        assert results['checked'] == 10
        assert results['invalid'] == []
        assert messages == []

    def test_non_ascii_folder(self, data_root, messages, sink):
        write_json(data_root, 'Zürich/data.geojson', {'features': []})

        results = RepairEngine(LocalFilesystem(data_root), report=sink).check_filenames()

        assert results['invalid'] == ['Zürich']
        assert messages == ['Zürich is not written using ASCII characters']
        # Reported, never renamed
        assert (data_root / 'Zürich').is_dir()


class TestAddMissingFeatures:
    """Test the second repair pass."""

    def test_sample_tree(self, sample_tree, messages, sink):
        results = RepairEngine(LocalFilesystem(sample_tree), report=sink).add_missing_features()

        assert results['created'] == ['Germany/Bavaria', 'Wales']
        assert results['errors'] == []
        assert load(sample_tree, 'Germany/data.geojson').ids() == ['Bavaria']
        assert 'Wales' in load(sample_tree, 'data.geojson').ids()
        assert 'Adding Wales to data.geojson' in messages

    def test_gap_of_two_levels(self, data_root):
        """Test that a chain of missing parents is filled in one run."""
        write_json(data_root, 'A/B/data.geojson', {'features': [{'id': 'C'}]})

        results = RepairEngine(LocalFilesystem(data_root)).add_missing_features()

        assert results['created'] == ['A/B', 'A']
        assert load(data_root, 'A/data.geojson').ids() == ['B']
        assert load(data_root, 'data.geojson').ids() == ['A']

    def test_stub_has_no_geometry(self, data_root):
        write_text(data_root, 'Wales/flag.svg', '<svg/>')

        RepairEngine(LocalFilesystem(data_root)).add_missing_features()

        wales = load(data_root, 'data.geojson').find('Wales')
        assert wales.geometry is None
        assert wales.properties == {}

    def test_existing_feature_left_alone(self, sample_tree):
        before = (sample_tree / 'England' / 'data.geojson').read_bytes()

        RepairEngine(LocalFilesystem(sample_tree)).add_missing_features()

        assert (sample_tree / 'England' / 'data.geojson').read_bytes() == before

    def test_broken_parent_reported(self, data_root, messages, sink):
        write_text(data_root, 'data.geojson', '{not json')
        write_text(data_root, 'Wales/flag.svg', '<svg/>')
        write_text(data_root, 'England/flag.svg', '<svg/>')

        results = RepairEngine(LocalFilesystem(data_root), report=sink).add_missing_features()

        assert results['created'] == []
        assert len(results['errors']) == 2
        assert results['errors'][0].startswith('data.geojson: ')
        assert (data_root / 'data.geojson').read_text() == '{not json'


class TestCanonicalizeAll:
    """Test the third repair pass."""

    def test_rewrites_only_changed_files(self, data_root, london_collection):
        canonical = encode_geojson(canonicalize(london_collection))
        (data_root / 'data.geojson').write_bytes(canonical)
        write_json(data_root, 'England/data.geojson', {'features': [{'id': 'London'}]})

        results = RepairEngine(LocalFilesystem(data_root)).canonicalize_all()

        assert results['processed'] == 2
        assert results['rewritten'] == 1
        assert (data_root / 'data.geojson').read_bytes() == canonical

    def test_duplicate_ids_left_unmodified(self, data_root, messages, sink):
        write_json(data_root, 'data.geojson', {'features': [{'id': 'Dup'}, {'id': 'Other'}]})
        write_json(data_root, 'Dup/data.geojson', {'features': [{'id': 'X'}, {'id': 'X'}]})
        before = (data_root / 'Dup' / 'data.geojson').read_bytes()

        results = RepairEngine(LocalFilesystem(data_root), report=sink).canonicalize_all()

        assert (data_root / 'Dup' / 'data.geojson').read_bytes() == before
        assert results['failed'] == 1
        assert results['rewritten'] == 1
        assert 'Dup/data.geojson: Duplicate ID: X' in messages
        failed = [r for r in results['results'] if not r['success']]
        assert failed[0]['duplicate_id'] == 'X'

    def test_invalid_json_reported(self, data_root, messages, sink):
        write_text(data_root, 'Bad/data.geojson', '{"features": [')
        write_json(data_root, 'Good/data.geojson', {'features': [{'id': 'Town'}]})

        results = RepairEngine(LocalFilesystem(data_root), report=sink).canonicalize_all()

        assert results['failed'] == 1
        assert results['errors'][0].startswith('Bad/data.geojson: ')
        assert 'Rewrote Good/data.geojson' in messages

    def test_canonicalize_file_errors_carry_path(self, data_root):
        write_text(data_root, 'Bad/data.geojson', '[]')
        engine = RepairEngine(LocalFilesystem(data_root))

        with pytest.raises(ParseError) as excinfo:
            engine.canonicalize_file('Bad/data.geojson')
        assert excinfo.value.path == 'Bad/data.geojson'


class TestRun:
    """Test the complete repair pipeline."""

    def test_sample_tree(self, sample_tree, messages, sink):
        results = RepairEngine(LocalFilesystem(sample_tree), report=sink).run()

        assert results['success']
        assert [step['step'] for step in results['processing_steps']] == [
            'invalid_names', 'missing_features', 'canonical_format'
        ]
        assert messages[0] == 'Check for invalid characters in filenames'

        root = load(sample_tree, 'data.geojson')
        assert root.ids() == ['England', 'Germany', 'Wales']
        assert root.find('Wales').geometry == Geometry.point(0, 0)

        london = load(sample_tree, 'England/data.geojson').find('London')
        assert london.properties == {'fr': 'Londres'}

        germany = load(sample_tree, 'Germany/data.geojson')
        assert germany.find('Bavaria').geometry == Geometry.point(0, 0)

        text = (sample_tree / 'Germany' / 'Bavaria' / 'data.geojson').read_text(encoding='utf-8')
        assert '"de": "München"' in text

    def test_second_run_changes_nothing(self, sample_tree):
        RepairEngine(LocalFilesystem(sample_tree)).run()
        snapshot = {p: p.read_bytes() for p in sample_tree.rglob('*') if p.is_file()}

        results = RepairEngine(LocalFilesystem(sample_tree)).run()

        steps = {step['step']: step['results'] for step in results['processing_steps']}
        assert steps['missing_features']['created'] == []
        assert steps['canonical_format']['rewritten'] == 0
        assert {p: p.read_bytes() for p in sample_tree.rglob('*') if p.is_file()} == snapshot

    def test_failure_marks_run_unsuccessful(self, data_root):
        write_json(data_root, 'data.geojson', {'features': [{'id': 'X'}, {'id': 'X'}]})

        results = RepairEngine(LocalFilesystem(data_root)).run()

        assert not results['success']
        assert not results['processing_steps'][2]['success']

    def test_output_is_parseable_json(self, sample_tree):
        RepairEngine(LocalFilesystem(sample_tree)).run()

        data = json.loads((sample_tree / 'data.geojson').read_text(encoding='utf-8'))
        assert data['type'] == 'FeatureCollection'
