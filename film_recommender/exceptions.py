"""
Error taxonomy for the Film Recommender.
"""

from typing import Optional, Sequence


class RecommenderError(Exception):
	pass


class EmptyCatalogError(RecommenderError):
	"""Raised when there is no catalog to encode or query."""
	pass


class EncodingError(RecommenderError):
	"""Raised when a record field is corrupt and its policy forbids degrading to zero."""

	def __init__(self, message: str, record_index: Optional[int] = None, field: Optional[str] = None):
		super().__init__(message)
		self.record_index = record_index
		self.field = field


class InvalidQueryError(RecommenderError):
	"""Raised for caller misuse: bad index, bad vector shape, or non-positive k."""
	pass


class TitleNotFoundError(RecommenderError):
	"""Raised when a queried title has no exact match in the loaded catalog."""

	def __init__(self, title: str, suggestions: Optional[Sequence[str]] = None):
		self.title = title
		self.suggestions = list(suggestions or [])
		message = f"Movie not found: '{title}'"
		if self.suggestions:
			message += f" (did you mean: {', '.join(self.suggestions)}?)"
		super().__init__(message)
