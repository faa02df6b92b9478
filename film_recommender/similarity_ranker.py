"""
Similarity ranking module.
Exhaustive cosine-similarity ranking of every catalog row against one query row.
Cost is O(N * D) per query; there is no index structure, so this suits small-to-medium catalogs.
"""

from typing import List, Optional, Tuple, Union

import numpy as np
from scipy import sparse
from sklearn.metrics.pairwise import cosine_similarity

from .exceptions import InvalidQueryError
from .models import FeatureMatrix

from loguru import logger


VectorLike = Union[sparse.spmatrix, np.ndarray]


class SimilarityRanker:
	"""
	Ranks catalog items by cosine similarity to a query vector.
	Ordering: descending score, ties broken by ascending catalog index.
	The query item itself is never part of the result.
	"""

	def rank(
		self,
		query_vector: VectorLike,
		matrix: FeatureMatrix,
		query_index: int,
		k: int,
	) -> List[Tuple[int, float]]:
		"""
		Return up to k (index, score) pairs, best first.
		Fewer than k pairs come back only when the catalog has fewer than k other items.
		"""
		self._validate(matrix, query_index, k)
		query = self._as_row(query_vector, matrix.dimension)

		scores = self._scores(query, matrix)
		candidates = np.arange(len(matrix))
		keep = candidates != query_index  # a movie is never recommended to itself
		candidates, scores = candidates[keep], scores[keep]

		# lexsort uses the last key as primary: descending score, then ascending index
		order = np.lexsort((candidates, -scores))[:k]
		results = [(int(candidates[i]), float(scores[i])) for i in order]
		logger.debug(f"[Ranker] Query {query_index}: returning {len(results)} of {len(candidates)} candidates")
		return results

	def similarity(self, a: VectorLike, b: VectorLike) -> float:
		"""Cosine similarity of two vectors; 0.0 when either is all zeros."""
		a_row = self._as_row(a)
		b_row = self._as_row(b)
		if a_row.shape[1] != b_row.shape[1]:
			raise InvalidQueryError(
				f"Vector dimensions differ: {a_row.shape[1]} vs {b_row.shape[1]}"
			)
		if a_row.shape[1] == 0:
			return 0.0
		return float(cosine_similarity(a_row, b_row)[0, 0])

	def _validate(self, matrix: FeatureMatrix, query_index: int, k: int):
		# bool is an int subclass; True is not a valid k or index
		if not isinstance(k, (int, np.integer)) or isinstance(k, bool):
			raise InvalidQueryError(f"k must be an integer, got {type(k).__name__}")
		if k <= 0:
			raise InvalidQueryError(f"k must be positive, got {k}")
		if not isinstance(query_index, (int, np.integer)) or isinstance(query_index, bool):
			raise InvalidQueryError(f"Query index must be an integer, got {type(query_index).__name__}")
		if not 0 <= query_index < len(matrix):
			raise InvalidQueryError(f"Query index {query_index} out of range for {len(matrix)} movies")

	def _as_row(self, vector: VectorLike, expected_dimension: Optional[int] = None) -> VectorLike:
		"""Coerce a sparse row or 1-D/2-D array into a single 2-D row."""
		if sparse.issparse(vector):
			row = sparse.csr_matrix(vector)
		else:
			row = np.asarray(vector, dtype=np.float64)
			if row.ndim == 1:
				row = row.reshape(1, -1)
		if row.ndim != 2 or row.shape[0] != 1:
			raise InvalidQueryError(f"Query vector must be a single row, got shape {row.shape}")
		if expected_dimension is not None and row.shape[1] != expected_dimension:
			raise InvalidQueryError(
				f"Query vector dimension ({row.shape[1]}) doesn't match matrix dimension ({expected_dimension})"
			)
		return row

	def _scores(self, query: VectorLike, matrix: FeatureMatrix) -> np.ndarray:
		# A catalog with no features at all: every pair is equally (un)similar
		if matrix.dimension == 0:
			return np.zeros(len(matrix), dtype=np.float64)
		return cosine_similarity(query, matrix.vectors).ravel()
