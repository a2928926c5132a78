from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------------------------------------------------------------
# Scraped records
# -------------------------------------------------------------
class TrendingItem(CamelModel):
    imdb_id: str = Field(default="", description="IMDb title id, e.g. 'tt1375666'.")
    title: str = ""
    year: str = ""
    runtime: str = ""
    rating: str = Field(default="", description="Content rating such as 'PG-13'.")
    imdb_rating: str = ""
    imdb_votes: str = ""
    metascore: str = ""
    plot: str = ""
    director: str = ""
    stars: List[str] = Field(default_factory=list)
    poster_url: str = ""
    poster_alt: str = ""
    movie_url: str = ""
    watchlist_id: str = ""
    ranking: str = ""

    def is_valid(self) -> bool:
        return bool(self.title.strip()) and self.imdb_id.startswith("tt")


class VideoSource(CamelModel):
    src: str
    type: str = "video/mp4"
    poster: str = ""
    class_name: str = ""
    id: str = ""
    preload: Optional[str] = None
    controls: Optional[bool] = None
    autoplay: Optional[bool] = None
    muted: Optional[bool] = None
    loop: Optional[bool] = None
    width: Optional[int] = None
    height: Optional[int] = None
    discovered_via: str = Field(default="native", description="Which DOM query found this source; informational only.")


# -------------------------------------------------------------
# API payloads
# -------------------------------------------------------------
class ScrapeMovieRequest(BaseModel):
    imdbid: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "OK"
    timestamp: str
    service: str
    version: str


class MovieResponse(CamelModel):
    success: bool = True
    data: Dict[str, Any]
    scraped_at: str


class TrendingResponse(CamelModel):
    success: bool = True
    data: List[TrendingItem]
    count: int
    type: str = "trending"
    scraped_at: str
