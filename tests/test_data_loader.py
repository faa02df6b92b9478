"""
Tests for DataLoader: raw tuples, JSONL and CSV ingestion, and graceful degradation of bad values.
Run: pytest tests/test_data_loader.py
"""

import json
import sys
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from film_recommender.data_loader import DataLoader


def write_jsonl(path, rows):
	with open(path, 'w', encoding='utf-8') as f:
		for row in rows:
			f.write(row if isinstance(row, str) else json.dumps(row))
			f.write('\n')
	return path


def test_record_from_tuple():
	loader = DataLoader()
	record = loader.record_from_tuple((
		'Avatar', 'Action|Adventure', 'space|alien', 'Sam Worthington', 'Lightstorm',
		'150.4', 162, '11800', 7.2, '2009-12-10',
	))
	assert record.title == 'Avatar'
	assert record.genres == 'Action|Adventure'
	assert record.popularity == pytest.approx(150.4)
	assert record.runtime == 162.0
	assert record.vote_count == 11800.0
	assert record.release_date == date(2009, 12, 10)


def test_record_from_short_tuple():
	record = DataLoader().record_from_tuple(('Heat', 'Crime|Thriller'))
	assert record.title == 'Heat'
	assert record.keywords is None
	assert record.release_date is None


def test_record_from_tuple_rejects_extra_values():
	with pytest.raises(ValueError):
		DataLoader().record_from_tuple(tuple(range(11)))


def test_invalid_values_degrade_to_none():
	record = DataLoader().parse_record({
		'title': '  Primer  ',
		'popularity': 'n/a',
		'runtime': '',
		'vote_average': float('nan'),
		'release_date': '2004-13-45',
	})
	assert record.title == 'Primer'
	assert record.popularity is None
	assert record.runtime is None
	assert record.vote_average is None
	assert record.release_date is None


@pytest.mark.parametrize("raw, expected", [
	('1999-03-31', date(1999, 3, 31)),
	('1999/03/31', date(1999, 3, 31)),
	('31/03/1999', date(1999, 3, 31)),
	('1999', date(1999, 1, 1)),
])
def test_release_date_formats(raw, expected):
	record = DataLoader().parse_record({'title': 'The Matrix', 'release_date': raw})
	assert record.release_date == expected


def test_missing_title_returns_none():
	loader = DataLoader()
	assert loader.parse_record({'genres': 'Drama'}) is None
	assert loader.parse_record({'title': '   '}) is None


def test_list_fields_become_token_tuples():
	record = DataLoader().parse_record({
		'title': 'Up',
		'genres': ['Animation', 'Family'],
		'production_companies': [{'id': 3, 'name': 'Pixar'}, {'id': 2, 'name': 'Disney'}],
		'actors': ['Ed Asner', None],
	})
	assert record.genres == ('Animation', 'Family')
	assert record.companies == ('Pixar', 'Disney')
	assert record.cast == ('Ed Asner',)


def test_canonical_key_wins_over_alias():
	record = DataLoader().parse_record({'original_title': 'Le Fabuleux', 'title': 'Amelie'})
	assert record.title == 'Amelie'


def test_load_jsonl_skips_bad_lines(tmp_path):
	path = write_jsonl(tmp_path / 'movies.jsonl', [
		{'title': 'Alien', 'genres': 'Horror|Science Fiction', 'release_date': '1979-05-25'},
		'{not json',
		'',
		'[1, 2, 3]',
		{'genres': 'Drama'},
		{'title': 'Aliens', 'genres': 'Action|Science Fiction', 'release_date': 'sometime'},
	])
	movies = DataLoader().load_movies_from_jsonl(str(path))
	assert [m.title for m in movies] == ['Alien', 'Aliens']
	assert movies[1].release_date is None


def test_load_csv_with_aliases(tmp_path):
	path = tmp_path / 'movies.csv'
	path.write_text(
		'title,genres,keywords,cast,production_companies,popularity,runtime,vote_count,vote_average,release_date\n'
		'Heat,Crime|Thriller,heist,Al Pacino|Robert De Niro,Warner Bros.,30.1,170,1886,7.7,1995-12-15\n'
		',Drama,,,,,,,,\n'
		'Ronin,Action|Thriller,,Robert De Niro,,,,,,not a date\n',
		encoding='utf-8',
	)
	movies = DataLoader().load_movies(str(path))
	assert [m.title for m in movies] == ['Heat', 'Ronin']
	assert movies[0].companies == 'Warner Bros.'
	assert movies[0].runtime == 170.0
	assert movies[1].keywords == ''
	assert movies[1].popularity is None
	assert movies[1].release_date is None


def test_missing_file_raises(tmp_path):
	loader = DataLoader()
	with pytest.raises(FileNotFoundError):
		loader.load_movies_from_jsonl(str(tmp_path / 'missing.jsonl'))
	with pytest.raises(FileNotFoundError):
		loader.load_movies_from_csv(str(tmp_path / 'missing.csv'))


def test_sample_catalog_loads():
	movies = DataLoader().load_movies(str(ROOT / 'data' / 'movies.jsonl'))
	assert len(movies) >= 10
	assert all(m.title for m in movies)
	assert all(m.release_date is not None for m in movies)
