"""
Data loading and preprocessing module.
Turns raw movie rows (tuples, dicts, JSONL or CSV files) into MovieRecord objects.
A bad value never aborts ingestion: it degrades to None and is logged.
"""

# Standard libs for JSON parsing, dates, math checks, typing, and paths
import json  # read JSON lines
import math  # NaN detection for numeric fields
from datetime import date, datetime  # release date parsing
from typing import Any, Dict, List, Optional, Sequence, Tuple  # type hints
from pathlib import Path  # filesystem-safe paths

# pandas reads CSV exports (TMDB-style dumps) robustly
import pandas as pd  # CSV parsing

# Import our MovieRecord data class used across the project
from .models import CategoricalValue, MovieRecord  # structured movie record

# Console logging
from loguru import logger  # console logger


class DataLoader:
	"""
	Handles loading and preprocessing of movie data.
	"""

	# Positional layout of a raw ingestion tuple
	RAW_FIELD_ORDER: Tuple[str, ...] = (
		'title', 'genres', 'keywords', 'cast', 'companies',
		'popularity', 'runtime', 'vote_count', 'vote_average', 'release_date',
	)

	# Source column names that map onto our field names
	FIELD_ALIASES = {
		'name': 'title',  # some dumps call the title "name"
		'original_title': 'title',
		'genre': 'genres',
		'tags': 'keywords',
		'actors': 'cast',
		'production_companies': 'companies',
		'studios': 'companies',
		'release': 'release_date',
		'date': 'release_date',
	}

	CATEGORICAL_FIELDS = ('genres', 'keywords', 'cast', 'companies')
	NUMERIC_FIELDS = ('popularity', 'runtime', 'vote_count', 'vote_average')

	# Date formats tried in order; the first that parses wins
	DATE_FORMATS = ('%Y-%m-%d', '%Y/%m/%d', '%d/%m/%Y', '%Y')

	def load_movies_from_jsonl(self, filepath: str) -> List[MovieRecord]:
		"""
		Load movies from a JSON Lines (JSONL) file where each line is one JSON object.
		Returns a list of MovieRecord objects in file order.
		"""
		movies = []  # accumulator for parsed records
		filepath = Path(filepath)  # normalize path

		# Validate the file presence early to give clear error messages
		if not filepath.exists():
			raise FileNotFoundError(f"Movie data file not found: {filepath}")

		logger.info(f"[DataLoader] Loading movies from {filepath}...")  # log action

		# Read line-by-line to handle large datasets efficiently
		with open(filepath, 'r', encoding='utf-8') as f:
			for line_num, line in enumerate(f, 1):  # keep track of line number for diagnostics
				if not line.strip():  # tolerate blank lines
					continue
				try:
					data = json.loads(line.strip())  # parse JSON object per line
				except json.JSONDecodeError as e:
					logger.warning(f"[DataLoader] Skipping invalid JSON at line {line_num}: {e}")  # malformed line
					continue  # move on
				if not isinstance(data, dict):  # a bare list or number is not a movie
					logger.warning(f"[DataLoader] Skipping non-object JSON at line {line_num}")
					continue
				movie = self.parse_record(data)  # convert dict -> MovieRecord
				if movie is None:  # no usable title
					logger.warning(f"[DataLoader] Skipping record without title at line {line_num}")
					continue
				movies.append(movie)  # collect

		logger.info(f"[DataLoader] Successfully loaded {len(movies)} movies.")  # summary
		return movies  # return list

	def load_movies_from_csv(self, filepath: str) -> List[MovieRecord]:
		"""
		Load movies from a CSV file with one movie per row.
		Column names may use the aliases in FIELD_ALIASES.
		"""
		filepath = Path(filepath)  # normalize path
		if not filepath.exists():
			raise FileNotFoundError(f"Movie data file not found: {filepath}")

		logger.info(f"[DataLoader] Loading movies from {filepath}...")
		# Keep every column as text; parsing happens per field below
		df = pd.read_csv(filepath, dtype=str, keep_default_na=False)

		movies = []  # accumulator
		for row_num, row in enumerate(df.to_dict(orient='records'), 2):  # header is line 1
			movie = self.parse_record(row)  # convert dict -> MovieRecord
			if movie is None:
				logger.warning(f"[DataLoader] Skipping record without title at line {row_num}")
				continue
			movies.append(movie)

		logger.info(f"[DataLoader] Successfully loaded {len(movies)} movies.")
		return movies

	def load_movies(self, filepath: str) -> List[MovieRecord]:
		"""Dispatch on file extension: .csv goes through pandas, anything else is read as JSONL."""
		if Path(filepath).suffix.lower() == '.csv':
			return self.load_movies_from_csv(filepath)
		return self.load_movies_from_jsonl(filepath)

	def record_from_tuple(self, values: Sequence[Any]) -> Optional[MovieRecord]:
		"""
		Build a record from a positional raw tuple laid out as RAW_FIELD_ORDER.
		Trailing values may be omitted.
		"""
		if len(values) > len(self.RAW_FIELD_ORDER):
			raise ValueError(
				f"Raw tuple has {len(values)} values; expected at most {len(self.RAW_FIELD_ORDER)}"
			)
		return self.parse_record(dict(zip(self.RAW_FIELD_ORDER, values)))

	def parse_record(self, data: Dict[str, Any]) -> Optional[MovieRecord]:
		"""
		Convert a raw dictionary (from file or caller) into an immutable MovieRecord.
		Returns None when the row has no usable title.
		"""
		data = self._apply_aliases(data)  # map source column names onto ours

		title = data.get('title')  # required field
		if title is None or (isinstance(title, float) and math.isnan(title)):
			return None
		title = str(title).strip()  # surrounding whitespace is never meaningful
		if not title:
			return None

		# Categorical fields stay as delimited strings or become token tuples
		categorical = {name: self._parse_categorical(data.get(name)) for name in self.CATEGORICAL_FIELDS}

		# Numeric fields degrade to None when missing or unparseable
		numeric = {name: self._parse_float(data.get(name), name, title) for name in self.NUMERIC_FIELDS}

		return MovieRecord(
			title=title,
			release_date=self._parse_release_date(data.get('release_date'), title),
			**categorical,
			**numeric,
		)

	def _apply_aliases(self, data: Dict[str, Any]) -> Dict[str, Any]:
		"""Rename aliased keys; a canonical key already present wins over its alias."""
		normalized = {}
		for key, value in data.items():
			key = str(key).strip().lower()
			canonical = self.FIELD_ALIASES.get(key, key)
			if canonical in normalized and canonical != key:
				continue  # keep the first value seen for this field
			normalized[canonical] = value
		return normalized

	def _parse_categorical(self, value: Any) -> CategoricalValue:
		"""
		Keep strings as-is (the encoder splits them on the field delimiter);
		turn JSON lists into token tuples. Lists of {"name": ...} objects (TMDB style) are supported.
		"""
		if value is None:  # missing field
			return None
		if isinstance(value, str):  # delimited string
			return value
		if isinstance(value, (list, tuple)):  # already split
			tokens = []
			for item in value:
				if isinstance(item, dict):  # TMDB objects carry the label in "name"
					item = item.get('name')
				if item is None:
					continue
				tokens.append(str(item))
			return tuple(tokens)
		# Anything else (numbers, nested objects) is passed through; the encoder applies the field policy
		return value

	def _parse_float(self, value: Any, name: str, title: str) -> Optional[float]:
		"""Parse a numeric value; missing, empty, NaN or garbage become None."""
		if value is None or (isinstance(value, str) and not value.strip()):
			return None
		if isinstance(value, bool):  # bool is an int subclass but never a valid measurement
			logger.warning(f"[DataLoader] Ignoring boolean {name} for '{title}'")
			return None
		try:
			number = float(value)
		except (TypeError, ValueError):
			logger.warning(f"[DataLoader] Unparseable {name} '{value}' for '{title}'")
			return None
		if math.isnan(number) or math.isinf(number):
			return None
		return number

	def _parse_release_date(self, value: Any, title: str) -> Optional[date]:
		"""Parse a release date string; an invalid date keeps the record with release_date=None."""
		if value is None:
			return None
		if isinstance(value, datetime):
			return value.date()
		if isinstance(value, date):
			return value
		text = str(value).strip()
		if not text:
			return None
		for fmt in self.DATE_FORMATS:
			try:
				return datetime.strptime(text, fmt).date()
			except ValueError:
				continue
		logger.warning(f"[DataLoader] Unparseable release date '{text}' for '{title}'")
		return None
