"""
Unit tests for SimilarityRanker: cosine scores, ordering, tie-breaks, and query validation.
Run: pytest tests/test_similarity_ranker.py
"""

import numpy as np
import pytest
from scipy import sparse

from film_recommender.exceptions import InvalidQueryError
from film_recommender.models import FeatureMatrix
from film_recommender.similarity_ranker import SimilarityRanker


def make_matrix(rows):
	rows = np.asarray(rows, dtype=np.float64)
	names = tuple(f"f{i}" for i in range(rows.shape[1]))
	return FeatureMatrix(vectors=sparse.csr_matrix(rows), feature_names=names)


def test_self_similarity_is_one():
	ranker = SimilarityRanker()
	matrix = make_matrix([[0.3, 0.0, 1.7], [2.0, 1.0, 0.0]])
	for i in range(len(matrix)):
		assert ranker.similarity(matrix.row(i), matrix.row(i)) == pytest.approx(1.0)


def test_similarity_is_symmetric():
	ranker = SimilarityRanker()
	a = np.array([1.0, 2.0, 0.0, 0.5])
	b = np.array([0.0, 1.0, 3.0, 0.5])
	assert ranker.similarity(a, b) == pytest.approx(ranker.similarity(b, a))
	assert ranker.similarity(a, b) == pytest.approx(a @ b / (np.linalg.norm(a) * np.linalg.norm(b)))


def test_zero_vector_similarity_is_zero():
	ranker = SimilarityRanker()
	assert ranker.similarity(np.zeros(3), np.array([1.0, 0.0, 0.0])) == 0.0


def test_similarity_dimension_mismatch():
	with pytest.raises(InvalidQueryError):
		SimilarityRanker().similarity(np.ones(2), np.ones(3))


def test_rank_orders_by_descending_score_and_excludes_query():
	matrix = make_matrix([
		[1.0, 0.0],
		[0.0, 1.0],  # orthogonal
		[1.0, 1.0],  # 45 degrees
		[1.0, 0.1],  # nearly parallel
	])
	results = SimilarityRanker().rank(matrix.row(0), matrix, 0, k=3)
	assert [i for i, _ in results] == [3, 2, 1]
	scores = [s for _, s in results]
	assert scores == sorted(scores, reverse=True)
	assert scores[-1] == pytest.approx(0.0)


def test_ties_break_by_ascending_index():
	matrix = make_matrix([[1.0, 1.0]] * 5)
	results = SimilarityRanker().rank(matrix.row(2), matrix, 2, k=4)
	assert [i for i, _ in results] == [0, 1, 3, 4]
	assert all(s == pytest.approx(1.0) for _, s in results)


def test_k_larger_than_catalog_returns_all_others():
	matrix = make_matrix([[1.0, 0.0], [0.5, 0.5], [0.0, 1.0]])
	results = SimilarityRanker().rank(matrix.row(1), matrix, 1, k=10)
	assert len(results) == 2
	assert 1 not in [i for i, _ in results]


def test_single_item_catalog_returns_nothing():
	matrix = make_matrix([[1.0, 0.0]])
	assert SimilarityRanker().rank(matrix.row(0), matrix, 0, k=5) == []


def test_dense_query_vector_is_accepted():
	matrix = make_matrix([[1.0, 0.0], [1.0, 0.2], [0.0, 1.0]])
	results = SimilarityRanker().rank(np.array([1.0, 0.0]), matrix, 0, k=1)
	assert results[0][0] == 1


def test_zero_width_matrix_scores_zero():
	matrix = FeatureMatrix(vectors=sparse.csr_matrix((3, 0)), feature_names=())
	results = SimilarityRanker().rank(matrix.row(0), matrix, 0, k=2)
	assert results == [(1, 0.0), (2, 0.0)]


@pytest.mark.parametrize("k", [0, -1, True, 2.5])
def test_invalid_k_raises(k):
	matrix = make_matrix([[1.0], [1.0]])
	with pytest.raises(InvalidQueryError):
		SimilarityRanker().rank(matrix.row(0), matrix, 0, k=k)


@pytest.mark.parametrize("index", [-1, 2, 99])
def test_out_of_range_query_index_raises(index):
	matrix = make_matrix([[1.0], [1.0]])
	with pytest.raises(InvalidQueryError):
		SimilarityRanker().rank(matrix.row(0), matrix, index, k=1)


def test_query_dimension_mismatch_raises():
	matrix = make_matrix([[1.0, 0.0], [0.0, 1.0]])
	with pytest.raises(InvalidQueryError):
		SimilarityRanker().rank(np.ones(3), matrix, 0, k=1)
