"""
Configuration for the Film Recommender.
Encoder settings are plain dataclasses with sensible defaults; the HTTP layer reads
its file locations from the environment.
"""

import os  # environment-based settings for the API
from dataclasses import dataclass  # config containers
from enum import Enum  # explicit per-field failure policy
from typing import FrozenSet, Optional, Tuple  # type hints


class FieldPolicy(str, Enum):
	"""What the encoder does with a malformed or missing field value."""
	DEGRADE = 'degrade'  # contribute a zero block and log a warning
	STRICT = 'strict'  # raise EncodingError and abort the whole encode


@dataclass(frozen=True)
class CategoricalField:
	"""One delimiter-separated categorical field and how it is weighted."""
	name: str  # MovieRecord attribute name
	delimiter: str = '|'  # token separator inside the raw string
	weight: float = 1.0  # scale applied to the L2-normalized block
	max_tokens: Optional[int] = None  # keep only the first N tokens (e.g. top-billed cast)
	policy: FieldPolicy = FieldPolicy.DEGRADE


DEFAULT_FIELDS: Tuple[CategoricalField, ...] = (
	CategoricalField('genres'),
	CategoricalField('keywords'),
	CategoricalField('cast'),
	CategoricalField('companies'),
)

# Numeric attributes blended into the vector, in column order
DEFAULT_NUMERIC_FIELDS: Tuple[str, ...] = ('popularity', 'runtime', 'vote_count', 'vote_average', 'release_date')

DEFAULT_STOP_WORDS: FrozenSet[str] = frozenset({'n/a', 'none', 'unknown'})


@dataclass(frozen=True)
class EncoderConfig:
	"""
	Settings for the FeatureEncoder.
	- fields: categorical fields in the fixed order their blocks are concatenated
	- numeric_weight: scale of the numeric block; 0 leaves numeric attributes out entirely
	- numeric_scaling: 'minmax' or 'zscore', computed over the whole catalog
	"""
	fields: Tuple[CategoricalField, ...] = DEFAULT_FIELDS
	stop_words: FrozenSet[str] = DEFAULT_STOP_WORDS
	lowercase: bool = True
	numeric_fields: Tuple[str, ...] = DEFAULT_NUMERIC_FIELDS
	numeric_weight: float = 0.25
	numeric_scaling: str = 'minmax'
	numeric_policy: FieldPolicy = FieldPolicy.DEGRADE

	def __post_init__(self):
		if self.numeric_scaling not in ('minmax', 'zscore'):
			raise ValueError(f"Unknown numeric scaling: {self.numeric_scaling}")
		if self.numeric_weight < 0:
			raise ValueError("numeric_weight must be >= 0")
		names = [f.name for f in self.fields]
		if len(set(names)) != len(names):
			raise ValueError(f"Duplicate categorical fields: {names}")


@dataclass(frozen=True)
class ApiSettings:
	"""File locations used by the HTTP layer at startup."""
	data_path: str = 'data/movies.jsonl'  # JSONL or CSV catalog
	index_base_path: str = 'models/feature_index'  # saved encoding (without extension)
	default_k: int = 5

	@classmethod
	def from_env(cls) -> 'ApiSettings':
		return cls(
			data_path=os.environ.get('FILM_RECOMMENDER_DATA', cls.data_path),
			index_base_path=os.environ.get('FILM_RECOMMENDER_INDEX', cls.index_base_path),
			default_k=int(os.environ.get('FILM_RECOMMENDER_DEFAULT_K', cls.default_k)),
		)
