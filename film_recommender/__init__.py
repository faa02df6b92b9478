"""
Film Recommender: content-based movie recommendations from TF-IDF metadata vectors.
"""

from .catalog import Catalog, RecommendationContext
from .config import CategoricalField, EncoderConfig, FieldPolicy
from .data_loader import DataLoader
from .exceptions import (
	EmptyCatalogError,
	EncodingError,
	InvalidQueryError,
	RecommenderError,
	TitleNotFoundError,
)
from .feature_encoder import FeatureEncoder
from .models import FeatureMatrix, MovieRecord, Recommendation
from .recommendation_service import RecommendationService
from .similarity_ranker import SimilarityRanker

__version__ = '1.0.0'
