"""
Recommendation service module.
Resolves a title to its catalog position, ranks the catalog against it, and returns titles.
This is the entry point external callers (API, scripts, tests) use.
"""

import threading  # serializes catalog reloads (encode + publish)
from typing import List, Optional, Sequence, Tuple  # type annotations for clarity

# Fuzzy matching for "did you mean" suggestions on unknown titles
from rapidfuzz import fuzz, process  # fuzzy matching utilities

# Import project modules for data structures and components
from .catalog import Catalog, RecommendationContext  # catalog + matrix pair
from .config import EncoderConfig  # encoder settings
from .exceptions import EmptyCatalogError, TitleNotFoundError  # failure taxonomy
from .feature_encoder import FeatureEncoder  # TF-IDF encoder
from .feature_store import load_context, save_context  # optional persistence
from .models import MovieRecord, Recommendation  # core data classes
from .similarity_ranker import SimilarityRanker  # cosine ranking

# Import loguru for console logging
from loguru import logger  # simple structured logger


class RecommendationService:
	"""
	High-level recommendation API over one loaded catalog.
	The catalog and its matrix are published together as one immutable RecommendationContext;
	loading a new catalog swaps the whole context, so concurrent queries always see a consistent pair.
	"""

	# Suggestion settings for unknown titles
	SUGGESTION_LIMIT = 3
	SUGGESTION_CUTOFF = 70

	def __init__(
		self,
		records: Optional[Sequence[MovieRecord]] = None,  # optional catalog to load right away
		config: Optional[EncoderConfig] = None,  # encoder settings
	):
		self.encoder = FeatureEncoder(config)  # builds feature matrices
		self.ranker = SimilarityRanker()  # ranks rows against a query row
		self._lock = threading.Lock()  # held by load() across encode and publish; readers never take it
		self._context: Optional[RecommendationContext] = None  # published catalog + matrix
		if records is not None:
			self.load(records)

	@classmethod
	def from_context(cls, context: RecommendationContext, config: Optional[EncoderConfig] = None) -> 'RecommendationService':
		"""Wrap an already encoded context (e.g. one loaded from disk)."""
		service = cls(config=config)
		service._publish(context)
		return service

	@classmethod
	def from_saved(cls, base_path: str, config: Optional[EncoderConfig] = None) -> 'RecommendationService':
		"""Create a service from an encoding written by save()."""
		logger.info(f"[Service] Loading saved encoding from '{base_path}'")
		return cls.from_context(load_context(base_path), config=config)

	@property
	def context(self) -> RecommendationContext:
		"""The currently published context; raises EmptyCatalogError when nothing is loaded."""
		context = self._context  # single reference read
		if context is None:
			raise EmptyCatalogError("No catalog loaded")
		return context

	@property
	def is_loaded(self) -> bool:
		return self._context is not None

	def load(self, records: Sequence[MovieRecord]) -> RecommendationContext:
		"""
		Encode a new catalog and publish it.
		On any encoding error the previously published context stays in place.
		"""
		catalog = Catalog(records)  # freeze the record order
		# Loads run one at a time, so the published matrix always belongs to its catalog
		with self._lock:
			logger.info(f"[Service] Encoding catalog of {len(catalog)} movies")
			matrix = self.encoder.encode(catalog.records)  # all-or-nothing
			context = RecommendationContext(catalog=catalog, matrix=matrix)
			self._context = context  # single reference swap
		self._log_ready(context)
		return context

	def save(self, base_path: str):
		"""Persist the current context so a later run can skip encoding."""
		save_context(self.context, base_path)

	def recommend(self, title: str, k: int = 5) -> List[str]:
		"""Return up to k titles most similar to `title`, best first."""
		return [r.title for r in self.recommend_with_scores(title, k)]

	def recommend_with_scores(self, title: str, k: int = 5) -> List[Recommendation]:
		"""
		Same as recommend() but keeps the catalog index and similarity of each result.
		Raises TitleNotFoundError when `title` has no exact match.
		"""
		context = self.context  # pin one consistent catalog + matrix for this call
		index = context.catalog.index_of(title)  # exact, case-sensitive
		if index is None:
			suggestions = self.suggest_titles(title, context)
			logger.debug(f"[Service] Title not found: '{title}' | suggestions={suggestions}")
			raise TitleNotFoundError(title, suggestions)

		ranked = self.ranker.rank(context.matrix.row(index), context.matrix, index, k)
		results = [
			Recommendation(title=context.catalog[i].title, index=i, score=score)
			for i, score in ranked
		]
		logger.debug(f"[Service] '{title}' -> {[(r.title, round(r.score, 3)) for r in results]}")
		return results

	def suggest_titles(self, title: str, context: Optional[RecommendationContext] = None) -> List[str]:
		"""Close catalog titles for a query that didn't match exactly."""
		context = context or self.context
		if not title or not title.strip():
			return []
		matches = process.extract(
			title,
			context.catalog.titles(),
			scorer=fuzz.WRatio,
			limit=self.SUGGESTION_LIMIT,
			score_cutoff=self.SUGGESTION_CUTOFF,
		)
		# Duplicate titles can appear more than once; keep the first of each
		suggestions = []
		for match, _score, _index in matches:
			if match not in suggestions:
				suggestions.append(match)
		return suggestions

	def vocabulary(self, field_name: str) -> Tuple[str, ...]:
		"""Sorted vocabulary of `field_name` in the published encoding."""
		return self.context.matrix.vocabulary(field_name)

	def _publish(self, context: RecommendationContext):
		with self._lock:
			self._context = context  # single reference swap
		self._log_ready(context)

	def _log_ready(self, context: RecommendationContext):
		logger.info(
			f"[Service] Catalog ready | movies={len(context.catalog)} dim={context.matrix.dimension}"
		)
