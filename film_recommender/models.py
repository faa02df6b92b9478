"""
Data models for the Film Recommender.
Defines the core data structures shared by the catalog, encoder, ranker and service.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Calendar dates for release information
from datetime import date  # parsed release date
# Import typing helpers for precise and self-documenting types
from typing import Dict, Optional, Tuple, Union  # optional values and fixed-size tuples

# SciPy sparse matrices hold the TF-IDF feature space
from scipy import sparse  # CSR matrix storage


# A categorical field arrives either as a delimited string ("Action|Drama") or pre-split tokens
CategoricalValue = Optional[Union[str, Tuple[str, ...]]]


@dataclass(frozen=True)
class MovieRecord:
	"""
	Represents a single movie and all the metadata used to compare it with others.
	Records are immutable once constructed.
	"""
	title: str  # display title, used for exact-match lookup
	genres: CategoricalValue = None  # e.g. "Action|Sci-Fi|Adventure"
	keywords: CategoricalValue = None  # plot keywords
	cast: CategoricalValue = None  # billed cast members in order
	companies: CategoricalValue = None  # production companies
	popularity: Optional[float] = None  # popularity score from the data source
	runtime: Optional[float] = None  # running time in minutes
	vote_count: Optional[float] = None  # number of votes the movie has received
	vote_average: Optional[float] = None  # average vote, scale left to the source
	release_date: Optional[date] = None  # None when missing or unparseable


@dataclass(frozen=True, eq=False)
class FeatureMatrix:
	"""
	Encoded feature space for one catalog: row i is the FeatureVector of record i.
	The vocabulary (and therefore the column layout) is learned from the whole catalog,
	so a matrix is only ever rebuilt as a whole.
	"""
	vectors: sparse.csr_matrix  # shape (num_records, dimension)
	feature_names: Tuple[str, ...]  # column labels, e.g. "genres=action"
	field_slices: Dict[str, Tuple[int, int]] = field(default_factory=dict)  # field -> [start, stop)

	def __post_init__(self):
		# Column bookkeeping must agree with the matrix width
		if self.vectors.shape[1] != len(self.feature_names):
			raise ValueError(
				f"Feature names ({len(self.feature_names)}) don't match matrix width ({self.vectors.shape[1]})"
			)

	def __len__(self) -> int:
		return self.vectors.shape[0]

	@property
	def dimension(self) -> int:
		"""Number of columns in every FeatureVector."""
		return self.vectors.shape[1]

	def row(self, index: int) -> sparse.csr_matrix:
		"""Return the 1 x dimension FeatureVector for catalog position `index`."""
		return self.vectors[index]

	def vocabulary(self, field_name: str) -> Tuple[str, ...]:
		"""Sorted tokens of one categorical field, read back from the column labels."""
		if field_name not in self.field_slices:
			raise KeyError(f"No columns for field '{field_name}'")
		start, stop = self.field_slices[field_name]
		prefix = f"{field_name}="
		return tuple(name[len(prefix):] for name in self.feature_names[start:stop])


@dataclass(frozen=True)
class Recommendation:
	title: str  # recommended movie title
	index: int  # catalog position of the recommended movie
	score: float  # cosine similarity to the queried movie
