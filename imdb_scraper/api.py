import logging
import traceback
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from imdb_scraper import __version__
from imdb_scraper.config import configure_logging, settings
from imdb_scraper.errors import ApiError, ValidationError
from imdb_scraper.models import (
    HealthResponse,
    MovieResponse,
    ScrapeMovieRequest,
    TrendingItem,
    TrendingResponse,
)
from imdb_scraper.scraper import BaseScraper, PlaywrightScraper
from imdb_scraper.scraper.playwright_scraper import utc_now_iso

logger = logging.getLogger(__name__)

SERVICE_NAME = "IMDb Scraper API"
VERSION = __version__

AVAILABLE_ENDPOINTS = [
    "GET /",
    "GET /api/health",
    "GET /api/test",
    "POST /api/scrape/movie",
    "GET /api/trending/movies",
]

IMDBID_EXAMPLE = {"imdbid": "tt1375666"}


# ---------------------------------------------------------------------------
# Application Setup
# ---------------------------------------------------------------------------
@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Configure logging on boot so a bare `uvicorn imdb_scraper.api:app` still logs."""
    configure_logging()
    if not settings.scraper_api_key:
        logger.warning("[API] SCRAPER_API_KEY is not set; gateway navigation will fail")
    logger.info("[API] %s %s started", SERVICE_NAME, VERSION)
    yield


app = FastAPI(
    title=SERVICE_NAME,
    description="Scrape IMDb title pages and the trending list through a headless browser.",
    version=VERSION,
    lifespan=_lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-api-key"],
)

default_scraper = PlaywrightScraper()


def get_scraper() -> BaseScraper:
    return default_scraper


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("[API] %s %s", request.method, request.url.path)
    return await call_next(request)


# ---------------------------------------------------------------------------
# Error Handlers
# ---------------------------------------------------------------------------
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "type": exc.error_type, "details": exc.details},
    )


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    # Unknown path or unsupported method on a known path: both are "no such endpoint"
    if exc.status_code not in (404, 405):
        return await http_exception_handler(request, exc)
    return JSONResponse(
        status_code=404,
        content={
            "error": "Endpoint not found",
            "message": f"{request.method} {request.url.path} does not exist",
            "availableEndpoints": AVAILABLE_ENDPOINTS,
        },
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("[API] Unhandled error: %s", exc, exc_info=exc)
    content = {"error": "Internal server error", "message": str(exc)}
    if settings.is_development:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/")
async def root():
    return {
        "message": SERVICE_NAME,
        "version": VERSION,
        "status": "Running",
        "endpoints": {
            "GET /": "API information",
            "GET /api/health": "Health check",
            "POST /api/scrape/movie": "Scrape IMDb movie data",
            "GET /api/trending/movies": "Get trending movies",
        },
    }


@app.get("/api/test")
async def test_endpoint():
    return {
        "message": "Scraper API is running",
        "endpoints": {
            "POST /api/scrape/movie": "Scrape IMDb movie data",
            "GET /api/trending/movies": "Get trending movies",
            "GET /api/health": "Health check",
        },
    }


@app.get("/api/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="OK", timestamp=utc_now_iso(), service=SERVICE_NAME, version=VERSION)


@app.post("/api/scrape/movie", response_model=MovieResponse)
async def scrape_movie(request: Request, scraper: BaseScraper = Depends(get_scraper)):
    try:
        body = await request.json()
    except ValueError:
        body = None

    payload = ScrapeMovieRequest()
    if isinstance(body, dict):
        try:
            payload = ScrapeMovieRequest.model_validate(body)
        except PydanticValidationError:
            raise ValidationError("imdbid must be a string", details={"example": IMDBID_EXAMPLE})

    imdb_id = (payload.imdbid or "").strip()
    if not imdb_id:
        return JSONResponse(
            status_code=400,
            content={"error": "imdbid is required", "example": IMDBID_EXAMPLE},
        )

    logger.info("[API] Starting scrape for %s", imdb_id)
    try:
        movie_data = await scraper.scrape_title(imdb_id)
    except Exception as e:
        logger.error("[API] Scraping error for %s: %s", imdb_id, e)
        content = {"error": "Failed to scrape movie data", "message": str(e)}
        if settings.is_development:
            content["details"] = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        return JSONResponse(status_code=500, content=content)

    return MovieResponse(data=movie_data, scraped_at=utc_now_iso())


@app.get("/api/trending/movies", response_model=TrendingResponse)
async def trending_movies(scraper: BaseScraper = Depends(get_scraper)):
    """
    Empty results are reported as a 500 here. The scraper itself returns an
    empty list for an unreadable page; deciding that this is a failure is the
    endpoint's job.
    """
    try:
        logger.info("[API] Starting to scrape trending movies")
        movie_list = await scraper.scrape_trending(settings.trending_list_url)
        if movie_list is None:
            raise ApiError(500, "Scraper returned no data")
        if not isinstance(movie_list, list):
            raise ApiError(500, "Scraper returned invalid data format")
        if not movie_list:
            raise ApiError(500, "No valid trending movies data found")
        data = [TrendingItem.model_validate(movie) for movie in movie_list]
    except Exception as e:
        logger.error("[API] Trending movies error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to scrape trending movies", "message": str(e)},
        )

    logger.info("[API] Successfully scraped %d valid movies", len(data))
    return TrendingResponse(data=data, count=len(data), scraped_at=utc_now_iso())
