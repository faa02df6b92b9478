"""
Tests for saving and loading an encoded catalog.
Run: pytest tests/test_feature_store.py
"""

import pickle

import pytest

from film_recommender.feature_store import load_context, save_context, saved_context_exists
from film_recommender.models import MovieRecord
from film_recommender.recommendation_service import RecommendationService


def build_service():
	return RecommendationService([
		MovieRecord('Heat', genres='Crime|Thriller', cast='Al Pacino|Robert De Niro', popularity=30.1),
		MovieRecord('Ronin', genres='Action|Thriller', cast='Robert De Niro|Jean Reno', popularity=18.4),
		MovieRecord('Serpico', genres='Crime|Drama', cast='Al Pacino', popularity=9.9),
		MovieRecord('Up', genres='Animation|Family', cast='Ed Asner', popularity=66.0),
	])


def test_save_and_load_round_trip(tmp_path):
	service = build_service()
	base = tmp_path / 'models' / 'feature_index'
	service.save(str(base))
	assert saved_context_exists(str(base))

	restored = RecommendationService.from_saved(str(base))
	assert restored.context.catalog.titles() == service.context.catalog.titles()
	assert restored.context.matrix.feature_names == service.context.matrix.feature_names
	assert restored.context.matrix.field_slices == service.context.matrix.field_slices
	for title in restored.context.catalog.titles():
		assert restored.recommend(title, 3) == service.recommend(title, 3)


def test_missing_files_raise(tmp_path):
	base = tmp_path / 'nothing_here'
	assert not saved_context_exists(str(base))
	with pytest.raises(FileNotFoundError):
		load_context(str(base))


def test_mismatched_metadata_raises(tmp_path):
	service = build_service()
	base = tmp_path / 'feature_index'
	save_context(service.context, str(base))

	# Drop one record from the metadata so rows and records disagree
	metadata_path = tmp_path / 'feature_index.pkl'
	with open(metadata_path, 'rb') as f:
		metadata = pickle.load(f)
	metadata['records'] = metadata['records'][:-1]
	with open(metadata_path, 'wb') as f:
		pickle.dump(metadata, f)

	with pytest.raises(ValueError):
		load_context(str(base))


def test_vocabulary_survives_reload_from_disk(tmp_path):
	service = build_service()
	base = tmp_path / 'feature_index'
	service.save(str(base))

	restored = RecommendationService.from_saved(str(base))
	assert restored.vocabulary('genres') == ('action', 'animation', 'crime', 'drama', 'family', 'thriller')
	assert restored.vocabulary('cast') == service.vocabulary('cast')
	assert restored.vocabulary('keywords') == ()


def test_dotted_base_paths_do_not_collide(tmp_path):
	first = build_service()
	second = RecommendationService([MovieRecord('Alien', genres='Horror|Science Fiction'), MovieRecord('Aliens', genres='Action|Science Fiction')])
	first.save(str(tmp_path / 'index.v1'))
	second.save(str(tmp_path / 'index.v2'))

	assert (tmp_path / 'index.v1.npz').exists() and (tmp_path / 'index.v1.pkl').exists()
	assert not (tmp_path / 'index.npz').exists()
	assert load_context(str(tmp_path / 'index.v1')).catalog.titles() == ['Heat', 'Ronin', 'Serpico', 'Up']
	assert load_context(str(tmp_path / 'index.v2')).catalog.titles() == ['Alien', 'Aliens']
