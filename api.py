"""
FastAPI server exposing the movie recommendation API.
Endpoints:
- GET /health: basic health check
- GET /recommend?title=...&k=5: returns the k most similar movies with scores (k defaults to FILM_RECOMMENDER_DEFAULT_K)

Startup loads a saved encoding if available (models/feature_index.*),
otherwise encodes the catalog file on the fly.
"""

# Import standard libraries for timing and startup wiring
import time  # measure startup and request latencies
from contextlib import asynccontextmanager  # lifespan handler
from typing import List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for response models
from fastapi import FastAPI, HTTPException, Query, Request  # FastAPI primitives
from pydantic import BaseModel  # response schema definitions

# Import our internal modules for data loading and recommendations
from film_recommender.config import ApiSettings  # file locations from the environment
from film_recommender.data_loader import DataLoader  # loads and normalizes movies
from film_recommender.exceptions import EmptyCatalogError, InvalidQueryError, TitleNotFoundError  # error mapping
from film_recommender.feature_store import saved_context_exists  # detects a saved encoding
from film_recommender.recommendation_service import RecommendationService  # core service

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger


def build_service(settings: ApiSettings) -> RecommendationService:
	"""Load a saved encoding when present; otherwise read and encode the data file."""
	if saved_context_exists(settings.index_base_path):
		return RecommendationService.from_saved(settings.index_base_path)
	loader = DataLoader()  # create loader instance
	movies = loader.load_movies(settings.data_path)  # read dataset
	logger.info(f"[API] Loaded {len(movies)} movies for encoding")  # record dataset size
	return RecommendationService(movies)


@asynccontextmanager
async def lifespan(app: FastAPI):
	"""Initialize the recommendation service once and log how it was initialized."""
	start = time.time()  # start timer for startup latency
	settings = ApiSettings.from_env()  # env overrides for paths
	app.state.settings = settings
	logger.info("[API] Startup: loading movies and initializing service...")  # log intent
	try:
		app.state.service = build_service(settings)
	except (FileNotFoundError, EmptyCatalogError) as e:
		# Stay up and report not-ready instead of crashing the process
		logger.error(f"[API] Service not initialized: {e}")
		app.state.service = None
	app.state.startup_seconds = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {app.state.startup_seconds:.2f}s")  # summary log
	yield


# Instantiate the FastAPI application with metadata
app = FastAPI(title="Film Recommender API", version="1.0.0", lifespan=lifespan)  # web app


# Pydantic model for a single recommended movie
class RecommendationItem(BaseModel):
	title: str  # recommended title
	score: float  # cosine similarity to the queried movie


# Pydantic model for the complete recommendation payload
class RecommendationResponse(BaseModel):
	title: str  # queried title
	k: int  # number of results requested
	elapsed_ms: float  # server-side time in ms
	results: List[RecommendationItem]  # ranked items


def get_service(request: Request) -> RecommendationService:
	"""Return the loaded service or answer 503 while none is available."""
	service: Optional[RecommendationService] = getattr(request.app.state, 'service', None)
	if service is None or not service.is_loaded:
		logger.warning("[API] Request received but service not initialized")  # guard log
		raise HTTPException(status_code=503, detail="Recommendation service not ready")
	return service


# Simple health endpoint for readiness checks
@app.get("/health")
async def health(request: Request):
	"""Return minimal health info for liveness/readiness probes."""
	service = getattr(request.app.state, 'service', None)
	ready = service is not None and service.is_loaded
	return {
		"status": "ok",  # constant indicator
		"catalog_ready": ready,  # True if a catalog is published
		"catalog_size": len(service.context.catalog) if ready else 0,
	}


# Main endpoint: movies similar to a given title
@app.get("/recommend", response_model=RecommendationResponse)
def recommend(
	request: Request,
	title: str = Query(..., description="Exact movie title"),
	k: Optional[int] = Query(None, ge=1, description="Number of recommendations (defaults to the configured default_k)"),
):
	"""Return the k movies most similar to `title`."""
	service = get_service(request)
	if k is None:
		settings = getattr(request.app.state, 'settings', None) or ApiSettings()
		k = settings.default_k  # FILM_RECOMMENDER_DEFAULT_K
	start = time.time()  # start timer
	logger.debug(f"[API] /recommend title='{title}' k={k}")  # debug log of input

	try:
		results = service.recommend_with_scores(title, k=k)
	except TitleNotFoundError as e:
		raise HTTPException(status_code=404, detail={"message": str(e), "suggestions": e.suggestions})
	except InvalidQueryError as e:
		raise HTTPException(status_code=400, detail=str(e))

	elapsed_ms = (time.time() - start) * 1000  # compute ms
	logger.info(f"[API] /recommend served {len(results)} results in {elapsed_ms:.2f} ms")  # summary
	items = [RecommendationItem(title=r.title, score=round(r.score, 4)) for r in results]
	return RecommendationResponse(title=title, k=k, elapsed_ms=round(elapsed_ms, 2), results=items)
