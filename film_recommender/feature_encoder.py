"""
Feature encoding module.
Turns movie metadata into one fixed-length TF-IDF feature vector per movie.

Layout of every vector, in this order:
  [genres block | keywords block | cast block | companies block | numeric block]
Each categorical block is TF-IDF weighted over the whole catalog, L2-normalized and scaled by
its field weight. The numeric block holds scaled popularity/runtime/vote/date columns.
"""

# Import dataclasses helper to validate configured field names against the record schema
from dataclasses import fields as dataclass_fields  # MovieRecord attribute names
from datetime import date  # release dates become ordinal day numbers
import math  # finite checks for numeric attributes
# Import typing helpers for clear API contracts
from typing import Dict, List, Optional, Sequence, Tuple  # type hints

# Import NumPy for the dense numeric block
import numpy as np  # numeric arrays
# SciPy sparse blocks keep wide vocabularies cheap
from scipy import sparse  # CSR matrices and hstack
# scikit-learn's smoothed TF-IDF: idf(t) = ln((1 + N) / (1 + df(t))) + 1, sorted vocabulary
from sklearn.feature_extraction.text import TfidfVectorizer  # term weighting

from .config import CategoricalField, EncoderConfig, FieldPolicy  # encoder settings
from .exceptions import EmptyCatalogError, EncodingError  # failure taxonomy
from .models import FeatureMatrix, MovieRecord  # input records and output matrix

# Import loguru for consistent console logging
from loguru import logger  # console logger


def _pre_tokenized(tokens: List[str]) -> List[str]:
	"""Analyzer for documents that are already token lists."""
	return tokens


class FeatureEncoder:
	"""
	Encodes a catalog of MovieRecord objects into a FeatureMatrix.
	The encoder is stateless between calls apart from the vocabularies of the last encode.
	"""

	def __init__(self, config: Optional[EncoderConfig] = None):
		"""
		Initialize the encoder with a configuration (defaults to EncoderConfig()).
		Raises ValueError when a configured field is not a MovieRecord attribute.
		"""
		self.config = config or EncoderConfig()  # encoder settings
		known = {f.name for f in dataclass_fields(MovieRecord)}  # valid attribute names
		configured = [f.name for f in self.config.fields] + list(self.config.numeric_fields)
		unknown = [name for name in configured if name not in known or name == 'title']
		if unknown:
			raise ValueError(f"Unknown movie fields in encoder config: {unknown}")
		# Stop words compare case-insensitively
		self._stop_words = {word.lower() for word in self.config.stop_words}
		# Vocabularies learned by the most recent successful encode
		self._vocabularies: Dict[str, Tuple[str, ...]] = {}

	def encode(self, records: Sequence[MovieRecord]) -> FeatureMatrix:
		"""
		Encode all records into a FeatureMatrix whose row i belongs to records[i].
		- Raises EmptyCatalogError when records is empty.
		- Raises EncodingError when a STRICT field is missing or malformed; nothing is returned in that case.
		"""
		records = list(records)  # fix the order once
		# Guard against empty input: no vocabulary can be learned from nothing
		if not records:
			raise EmptyCatalogError("Cannot encode an empty catalog")

		logger.info(f"[Encoder] Encoding {len(records)} movies across {len(self.config.fields)} categorical fields")

		blocks: List[sparse.csr_matrix] = []  # one block per field, in config order
		feature_names: List[str] = []  # column labels aligned with the blocks
		field_slices: Dict[str, Tuple[int, int]] = {}  # field -> [start, stop) columns
		vocabularies: Dict[str, Tuple[str, ...]] = {}  # field -> sorted vocabulary
		offset = 0  # running column position

		for field in self.config.fields:
			# Tokenize this field for every record in catalog order
			documents = [self._tokenize(record, index, field) for index, record in enumerate(records)]
			block, vocabulary = self._tfidf_block(documents, field)
			vocabularies[field.name] = vocabulary
			field_slices[field.name] = (offset, offset + len(vocabulary))
			if block is not None:
				blocks.append(block)
				feature_names.extend(f"{field.name}={token}" for token in vocabulary)
				offset += len(vocabulary)
			logger.debug(f"[Encoder] Field '{field.name}' vocabulary size: {len(vocabulary)}")

		numeric_block = self._numeric_block(records)
		if numeric_block is not None:
			blocks.append(numeric_block)
			feature_names.extend(f"numeric={name}" for name in self.config.numeric_fields)
			field_slices['numeric'] = (offset, offset + numeric_block.shape[1])
			offset += numeric_block.shape[1]

		# Concatenate blocks horizontally into one fixed-width row per movie
		if blocks:
			vectors = sparse.hstack(blocks, format='csr', dtype=np.float64)
		else:
			vectors = sparse.csr_matrix((len(records), 0), dtype=np.float64)

		matrix = FeatureMatrix(vectors=vectors, feature_names=tuple(feature_names), field_slices=field_slices)
		# Only publish vocabularies once the whole encode has succeeded
		self._vocabularies = vocabularies
		logger.info(f"[Encoder] Built feature matrix with shape {vectors.shape} ({vectors.nnz} non-zeros)")
		return matrix

	def vocabulary(self, field_name: str) -> Tuple[str, ...]:
		"""Return the sorted vocabulary learned for `field_name` by the last encode."""
		if field_name not in self._vocabularies:
			raise KeyError(f"No vocabulary for field '{field_name}'. Run encode first.")
		return self._vocabularies[field_name]

	def _tokenize(self, record: MovieRecord, index: int, field: CategoricalField) -> List[str]:
		"""
		Split one record's field into clean tokens.
		- delimited strings are split on the field delimiter; token tuples are used as-is
		- tokens are stripped, optionally lower-cased, and stop words are dropped
		- empty strings produce no tokens under every policy
		"""
		value = getattr(record, field.name)
		if value is None:
			if field.policy is FieldPolicy.STRICT:
				raise EncodingError(
					f"Movie {index} ('{record.title}') is missing field '{field.name}'", index, field.name
				)
			return []

		if isinstance(value, str):
			raw_tokens = value.split(field.delimiter)
		elif isinstance(value, (tuple, list)) and all(isinstance(token, str) for token in value):
			raw_tokens = list(value)
		else:
			# Neither a delimited string nor a token sequence: cannot be tokenized
			if field.policy is FieldPolicy.STRICT:
				raise EncodingError(
					f"Movie {index} ('{record.title}') has malformed field '{field.name}': {type(value).__name__}",
					index,
					field.name,
				)
			logger.warning(
				f"[Encoder] Malformed '{field.name}' on movie {index} ('{record.title}'); contributing zeros"
			)
			return []

		tokens = []
		for token in raw_tokens:
			token = token.strip()
			if not token:
				continue
			if self.config.lowercase:
				token = token.lower()
			if token.lower() in self._stop_words:
				continue
			tokens.append(token)

		if field.max_tokens is not None:
			tokens = tokens[:field.max_tokens]
		return tokens

	def _tfidf_block(
		self,
		documents: List[List[str]],
		field: CategoricalField,
	) -> Tuple[Optional[sparse.csr_matrix], Tuple[str, ...]]:
		"""
		TF-IDF weight one field over the whole catalog.
		Returns (block, vocabulary); block is None when the field has no tokens anywhere.
		"""
		if not any(documents):
			return None, ()

		vectorizer = TfidfVectorizer(
			analyzer=_pre_tokenized,  # documents are already token lists
			smooth_idf=True,  # ln((1 + N) / (1 + df)) + 1
			sublinear_tf=False,  # plain term frequency
			norm='l2',  # unit-length rows so cosine reduces to a dot product
			dtype=np.float64,
		)
		block = vectorizer.fit_transform(documents).tocsr()
		vocabulary = tuple(vectorizer.get_feature_names_out())  # sorted lexicographically
		if field.weight != 1.0:
			block = block.multiply(field.weight).tocsr()
		return block, vocabulary

	def _numeric_block(self, records: List[MovieRecord]) -> Optional[sparse.csr_matrix]:
		"""
		Scale numeric attributes per column over the catalog and weight the block.
		Missing values and constant columns contribute zero. Under min-max scaling that makes
		a missing value indistinguishable from the catalog minimum; under z-score it sits at the mean.
		"""
		names = self.config.numeric_fields
		if not names or self.config.numeric_weight == 0:
			return None

		# Raw values, NaN where missing
		values = np.full((len(records), len(names)), np.nan, dtype=np.float64)
		for i, record in enumerate(records):
			for j, name in enumerate(names):
				values[i, j] = self._numeric_value(record, i, name)

		scaled = np.zeros_like(values)
		for j in range(len(names)):
			column = values[:, j]
			present = ~np.isnan(column)
			if not present.any():
				continue
			observed = column[present]
			if self.config.numeric_scaling == 'minmax':
				low, high = observed.min(), observed.max()
				if high > low:
					scaled[present, j] = (observed - low) / (high - low)
			else:
				mean, std = observed.mean(), observed.std()
				if std > 0:
					scaled[present, j] = (observed - mean) / std

		# Divide by sqrt(columns) so the block norm stays comparable to one categorical block
		scaled *= self.config.numeric_weight / np.sqrt(len(names))
		return sparse.csr_matrix(scaled)

	def _numeric_value(self, record: MovieRecord, index: int, name: str) -> float:
		"""Read one numeric attribute as a float; NaN stands for missing."""
		value = getattr(record, name)
		strict = self.config.numeric_policy is FieldPolicy.STRICT
		if value is None:
			if strict:
				raise EncodingError(f"Movie {index} ('{record.title}') is missing field '{name}'", index, name)
			return np.nan
		if isinstance(value, date):
			return float(value.toordinal())
		if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool) and math.isfinite(value):
			return float(value)
		if strict:
			raise EncodingError(f"Movie {index} ('{record.title}') has malformed field '{name}': {value!r}", index, name)
		logger.warning(f"[Encoder] Malformed '{name}' on movie {index} ('{record.title}'); contributing zero")
		return np.nan
