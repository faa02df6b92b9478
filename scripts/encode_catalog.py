"""
Encode the movie catalog and persist the feature matrix.

This script:
1) Loads movies from data/movies.jsonl (or a CSV given as the first argument)
2) Encodes TF-IDF feature vectors for the whole catalog
3) Saves the matrix and metadata to models/
4) Prints sample recommendations for a few titles

Usage:
    python -m scripts.encode_catalog [data_file] [title ...]

After running this once, the API will load the saved encoding for faster startup.
"""

import sys  # command-line arguments
import time  # measure step timings
from pathlib import Path  # filesystem-safe paths

from loguru import logger  # console logging

from film_recommender.data_loader import DataLoader  # data ingestion
from film_recommender.exceptions import TitleNotFoundError  # unknown sample titles
from film_recommender.recommendation_service import RecommendationService  # encoder + ranker


def main(argv=None):
	argv = sys.argv[1:] if argv is None else argv

	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Encode Movie Catalog")
	logger.info("=" * 60)

	# Resolve project root and key paths
	root = Path(__file__).resolve().parents[1]  # project root
	data_path = Path(argv[0]) if argv else root / 'data' / 'movies.jsonl'  # input dataset
	sample_titles = argv[1:]  # titles to demo
	models_dir = root / 'models'  # output directory for encoding files
	models_dir.mkdir(parents=True, exist_ok=True)  # ensure exists
	index_base = models_dir / 'feature_index'  # base filename (no extension)

	# 1) Load data
	logger.info("[1/4] Loading movies...")
	loader = DataLoader()  # loader instance
	movies = loader.load_movies(str(data_path))  # read dataset
	logger.info(f"[OK] Loaded {len(movies)} movies")  # confirm count

	# 2) Encode
	logger.info("[2/4] Encoding feature vectors...")
	t0 = time.time()  # start timer
	service = RecommendationService(movies)  # encode and publish
	matrix = service.context.matrix
	logger.info(f"[OK] Encoded in {time.time() - t0:.2f}s; shape={matrix.vectors.shape}")  # report
	for field, (start, stop) in matrix.field_slices.items():
		logger.info(f"     {field:<10} {stop - start} columns")

	# 3) Save
	logger.info("[3/4] Saving matrix and metadata...")
	service.save(str(index_base))  # write .npz and .pkl
	logger.info("[OK] Saved.")  # done

	# 4) Sample recommendations
	logger.info("[4/4] Sample recommendations...")
	if not sample_titles:
		sample_titles = [record.title for record in service.context.catalog.records[:3]]
	for title in sample_titles:
		try:
			results = service.recommend_with_scores(title, k=5)
		except TitleNotFoundError as e:
			logger.warning(f"     {e}")
			continue
		logger.info(f"     {title}:")
		for i, r in enumerate(results, 1):
			logger.info(f"       {i}. [{r.score:.3f}] {r.title}")

	# Footer
	logger.info("All done! The API will load this saved encoding if present.")
	logger.info("=" * 60)


if __name__ == '__main__':
	main()  # invoke encoder
