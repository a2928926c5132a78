"""
Versioned CSS selector tables for IMDb title and list pages.

IMDb ships hashed class names (``sc-xxxx``) that change between site releases.
All selectors live here so a layout change means adding a new table version,
not editing every extractor.
"""
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict


class _Group(BaseModel):
    model_config = ConfigDict(frozen=True)


class BasicInfoSelectors(_Group):
    ready: str
    title_candidates: Tuple[str, ...]


class StorylineSelectors(_Group):
    section: str
    plot: str
    tagline: str
    genres: str
    keywords: str
    certificate: str
    parents_guide: str


class RatingsSelectors(_Group):
    section: str
    score: str
    votes: str
    metascore: str


class CastSelectors(_Group):
    section: str
    item: str
    actor: str
    character: str
    character_name: str
    image: str
    voice_indicator: str


class VideosSelectors(_Group):
    section: str
    item: str
    image: str
    overlay_link: str


class ImagesSelectors(_Group):
    section: str
    image: str


class VideoSourceSelectors(_Group):
    ready: str
    native: str
    player: str
    imdb_player: str


class PosterSelectors(_Group):
    ready: str
    candidates: Tuple[str, ...]
    alt_text: str
    fallback: Tuple[str, ...]


class TrendingSelectors(_Group):
    item: str
    link: str
    title: str
    metadata: str
    rating: str
    votes: str
    metascore: str
    plot: str
    credit: str
    image: str
    watchlist: str


class SelectorTable(_Group):
    version: str
    basic_info: BasicInfoSelectors
    storyline: StorylineSelectors
    ratings: RatingsSelectors
    cast: CastSelectors
    videos: VideosSelectors
    images: ImagesSelectors
    video_sources: VideoSourceSelectors
    poster: PosterSelectors
    trending: TrendingSelectors


IMDB_2024_06 = SelectorTable(
    version="2024-06",
    basic_info=BasicInfoSelectors(
        ready='[data-testid="hero__pageTitle"], h1',
        title_candidates=(
            '[data-testid="hero__pageTitle"]',
            'h1[data-testid="hero-title-block__title"]',
            "h1",
        ),
    ),
    storyline=StorylineSelectors(
        section='[data-testid="Storyline"]',
        plot='[data-testid="storyline-plot-summary"] .ipc-html-content-inner-div',
        tagline='[data-testid="storyline-taglines"] .ipc-metadata-list-item__list-content-item',
        genres='[data-testid="storyline-genres"] .ipc-metadata-list-item__list-content-item',
        keywords='[data-testid="storyline-plot-keywords"] a .ipc-chip__text',
        certificate='[data-testid="storyline-certificate"] .ipc-metadata-list-item__list-content-item',
        parents_guide='[data-testid="storyline-parents-guide"]',
    ),
    ratings=RatingsSelectors(
        section='[data-testid="hero-rating-bar__aggregate-rating"]',
        score='[data-testid="hero-rating-bar__aggregate-rating__score"] .sc-4dc495c1-1',
        votes='[data-testid="hero-rating-bar__aggregate-rating"] .sc-4dc495c1-3',
        metascore=".metacritic-score-box",
    ),
    cast=CastSelectors(
        section='section[data-testid="title-cast"]',
        item='div[data-testid="title-cast-item"]',
        actor='a[data-testid="title-cast-item__actor"]',
        character='a[data-testid="cast-item-characters-link"]',
        character_name="span.sc-10bde568-4.jwxYun",
        image="img.ipc-image",
        voice_indicator="span.sc-10bde568-9.dKIpPl",
    ),
    videos=VideosSelectors(
        section='[data-testid="grid_first_row_video"]',
        item='[data-testid="grid_first_row_video"] .video-item',
        image="img.ipc-image",
        overlay_link='a[data-testid^="videos-slate-overlay-"]',
    ),
    images=ImagesSelectors(
        section='section[data-testid="Photos"]',
        image='section[data-testid="Photos"] a.sc-83794ccd-0.gkzoxh img.ipc-image',
    ),
    video_sources=VideoSourceSelectors(
        ready="video",
        native="video",
        player=".jw-video, .jw-media video",
        imdb_player='video[class*="jw"], video[class*="imdb"]',
    ),
    poster=PosterSelectors(
        ready='[data-testid="hero-media__poster"]',
        candidates=(
            '[data-testid="hero-media__poster"] .ipc-image',
            ".ipc-poster__poster-image .ipc-image",
            ".sc-b234497d-7 .ipc-image",
            ".ipc-media--poster-27x40 .ipc-image",
            ".ipc-poster .ipc-image",
        ),
        alt_text='img[alt*="poster" i]',
        fallback=(
            'img[src*="amazon.com"][src*="MV5B"]',
            'img[alt*="poster" i]',
            '.ipc-image[src*="amazon.com"]',
            '[data-testid*="poster"] img',
        ),
    ),
    trending=TrendingSelectors(
        item=".ipc-metadata-list-summary-item",
        link=".ipc-title-link-wrapper",
        title=".ipc-title__text",
        metadata=".dli-title-metadata-item",
        rating=".ipc-rating-star--rating",
        votes=".ipc-rating-star--voteCount",
        metascore=".metacritic-score-box",
        plot=".title-description-plot-container .ipc-html-content-inner-div",
        credit=".title-description-credit a",
        image=".ipc-image",
        watchlist='[data-testid^="inline-watched-button-"]',
    ),
)

SELECTOR_TABLES: Dict[str, SelectorTable] = {
    IMDB_2024_06.version: IMDB_2024_06,
}


def get_selectors(version: str) -> SelectorTable:
    try:
        return SELECTOR_TABLES[version]
    except KeyError:
        known = ", ".join(sorted(SELECTOR_TABLES))
        raise KeyError(f"Unknown selector version '{version}' (known: {known})") from None
