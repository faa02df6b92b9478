"""
Feature store module.
Persists an encoded catalog (feature matrix + records) so later runs can skip encoding.
"""

# Pathlib for robust path handling when saving/loading
from pathlib import Path  # filesystem paths
# Pickle for persisting the records and column metadata
import pickle  # simple serialization

# SciPy writes the sparse matrix in its own compressed format
from scipy import sparse  # save_npz / load_npz

from .catalog import Catalog, RecommendationContext  # the pair being persisted
from .models import FeatureMatrix  # matrix container

# Console logging
from loguru import logger  # console logger


def save_context(context: RecommendationContext, filepath: str):
	"""
	Persist the feature matrix and the catalog it was encoded from.
	- filepath: base path; .npz and .pkl are appended, so dots in the name are kept
	"""
	filepath = Path(filepath)  # coerce to Path
	filepath.parent.mkdir(parents=True, exist_ok=True)  # ensure the directory exists
	# Write the sparse feature matrix
	matrix_path = Path(f"{filepath}.npz")
	sparse.save_npz(str(matrix_path), context.matrix.vectors)
	# Prepare and save the records and column layout
	metadata_path = Path(f"{filepath}.pkl")
	metadata = {
		'records': list(context.catalog.records),  # row -> record mapping
		'feature_names': list(context.matrix.feature_names),  # column labels
		'field_slices': dict(context.matrix.field_slices),  # field -> column range
	}
	with open(metadata_path, 'wb') as f:
		pickle.dump(metadata, f)  # serialize metadata
	logger.info(f"[FeatureStore] Saved matrix to {matrix_path} and metadata to {metadata_path}")


def load_context(filepath: str) -> RecommendationContext:
	"""
	Load a previously saved encoding.
	- filepath: base path without extension (.npz/.pkl inferred)
	Raises FileNotFoundError when either file is missing, ValueError when they disagree.
	"""
	filepath = Path(filepath)  # coerce to Path
	matrix_path = Path(f"{filepath}.npz")  # sparse matrix file
	metadata_path = Path(f"{filepath}.pkl")  # Python metadata

	# Validate presence of both files
	if not matrix_path.exists():
		raise FileNotFoundError(f"Matrix file not found: {matrix_path}")
	if not metadata_path.exists():
		raise FileNotFoundError(f"Metadata file not found: {metadata_path}")

	vectors = sparse.load_npz(str(matrix_path)).tocsr()  # feature matrix
	with open(metadata_path, 'rb') as f:
		metadata = pickle.load(f)

	records = metadata['records']
	if vectors.shape[0] != len(records):
		raise ValueError(
			f"Saved matrix has {vectors.shape[0]} rows but metadata lists {len(records)} movies"
		)

	matrix = FeatureMatrix(
		vectors=vectors,
		feature_names=tuple(metadata['feature_names']),
		field_slices=dict(metadata.get('field_slices', {})),
	)
	context = RecommendationContext(catalog=Catalog(records), matrix=matrix)
	logger.info(f"[FeatureStore] Loaded encoding from {matrix_path} | movies={len(records)} dim={matrix.dimension}")
	return context


def saved_context_exists(filepath: str) -> bool:
	"""Check if both matrix and metadata files exist for a given base path."""
	base = Path(filepath)
	return Path(f"{base}.npz").exists() and Path(f"{base}.pkl").exists()
