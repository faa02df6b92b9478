"""
Catalog store module.
Holds the immutable, ordered collection of movie records for one session, and the
catalog + feature matrix pair that the service publishes to readers.
"""

from dataclasses import dataclass  # immutable pairing container
from typing import Dict, Iterable, Iterator, List, Optional, Tuple  # type hints

from .models import FeatureMatrix, MovieRecord  # record and matrix types


class Catalog:
	"""
	Ordered, read-only sequence of MovieRecord objects.
	Position i in the catalog is row i of the FeatureMatrix encoded from it.
	"""

	def __init__(self, records: Iterable[MovieRecord]):
		# Copy into a tuple so later changes to the caller's list can't leak in
		self._records: Tuple[MovieRecord, ...] = tuple(records)
		# Title -> first position; duplicate titles resolve to the earliest record
		self._title_index: Dict[str, int] = {}
		for position, record in enumerate(self._records):
			self._title_index.setdefault(record.title, position)

	def __len__(self) -> int:
		return len(self._records)

	def __iter__(self) -> Iterator[MovieRecord]:
		return iter(self._records)

	def __getitem__(self, index: int) -> MovieRecord:
		return self._records[index]

	@property
	def records(self) -> Tuple[MovieRecord, ...]:
		return self._records

	def index_of(self, title: str) -> Optional[int]:
		"""Exact, case-sensitive title lookup. Returns None when the title is absent."""
		return self._title_index.get(title)

	def titles(self) -> List[str]:
		"""Titles in catalog order (duplicates included)."""
		return [record.title for record in self._records]


@dataclass(frozen=True, eq=False)
class RecommendationContext:
	"""
	One loaded catalog together with the matrix encoded from it.
	Published and replaced as a unit so readers never see mismatched halves.
	"""
	catalog: Catalog
	matrix: FeatureMatrix

	def __post_init__(self):
		if len(self.matrix) != len(self.catalog):
			raise ValueError(
				f"Number of records ({len(self.catalog)}) doesn't match number of feature vectors ({len(self.matrix)})"
			)
