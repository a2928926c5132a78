"""
Per-section readers for IMDb pages.

Every extractor takes a loaded Playwright page and the active selector table
and returns an ExtractionResult. Extractors never pick defaults; the
aggregator applies SECTION_DEFAULTS to failed sections.

DOM access happens in small in-page functions (the ``*_JS`` constants) that
only read attributes and text. Parsing and validation happen in Python.
"""
import logging
import re
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from playwright.async_api import Page
from pydantic import ValidationError as PydanticValidationError

from imdb_scraper.models import TrendingItem, VideoSource
from imdb_scraper.scraper.result import ExtractionResult
from imdb_scraper.scraper.selectors import SelectorTable

logger = logging.getLogger(__name__)

SECTION_TIMEOUT_MS = 5_000
PLOT_TIMEOUT_MS = 8_000
VIDEO_TIMEOUT_MS = 10_000

TITLE_ID_RE = re.compile(r"/title/(tt\d+)")
WIDTH_RE = re.compile(r"^(\d+)")

# Value used for a section whose extractor failed.
SECTION_DEFAULTS: Dict[str, Any] = {
    "basicInfo": {"imdbId": "", "title": ""},
    "storyline": None,
    "ratings": None,
    "cast": [],
    "videos": [],
    "images": [],
    "videoSources": [],
    "poster": None,
}


# -------------------------------------------------------------
# In-page functions
# -------------------------------------------------------------
STORYLINE_JS = r"""
(sel) => {
  const text = (el) => (el && el.textContent ? el.textContent.trim() : "");
  return {
    tagline: text(document.querySelector(sel.tagline)),
    story: text(document.querySelector(sel.plot)),
    genres: Array.from(document.querySelectorAll(sel.genres)).map(text),
    keywords: Array.from(document.querySelectorAll(sel.keywords)).map(text),
    certificate: text(document.querySelector(sel.certificate)),
    hasParentGuide: !!document.querySelector(sel.parents_guide),
  };
}
"""

RATINGS_JS = r"""
(sel) => {
  const text = (el) => (el && el.textContent ? el.textContent.trim() : "");
  const score = document.querySelector(sel.score);
  const votes = document.querySelector(sel.votes);
  const meta = document.querySelector(sel.metascore);
  return {
    imdbScore: {
      rating: text(score),
      totalVotes: text(votes),
      fullRating: text(score ? score.parentElement : null),
    },
    metascore: {
      score: text(meta),
      backgroundColor: meta && meta.style ? meta.style.backgroundColor || "" : "",
    },
  };
}
"""

CAST_JS = r"""
(elements, sel) => elements.map((el) => {
  const text = (node) => (node && node.textContent ? node.textContent.trim() : "");
  const actor = el.querySelector(sel.actor);
  const character = el.querySelector(sel.character);
  const img = el.querySelector(sel.image);
  const voice = el.querySelector(sel.voice_indicator);
  return {
    actorName: text(actor),
    actorUrl: actor ? actor.getAttribute("href") || "" : "",
    characterName: character ? text(character.querySelector(sel.character_name)) : "",
    characterUrl: character ? character.getAttribute("href") || "" : "",
    imageUrl: img ? img.getAttribute("src") || "" : "",
    imageAlt: img ? img.getAttribute("alt") || "" : "",
    isVoiceRole: text(voice).includes("voice"),
  };
})
"""

VIDEOS_JS = r"""
(elements, sel) => elements.map((el) => {
  const img = el.querySelector(sel.image);
  const overlay = el.querySelector(sel.overlay_link);
  return {
    title: overlay ? overlay.getAttribute("aria-label") || "" : "",
    videoUrl: overlay ? overlay.getAttribute("href") || "" : "",
    imageUrl: img ? img.getAttribute("src") || "" : "",
    imageAlt: img ? img.getAttribute("alt") || "" : "",
  };
})
"""

IMAGES_JS = r"""
(imgs) => imgs.map((img) => ({
  src: img.getAttribute("src") || "",
  alt: img.getAttribute("alt") || "",
}))
"""

VIDEO_NATIVE_JS = r"""
(sel) => {
  const sources = [];
  document.querySelectorAll(sel.native).forEach((video, index) => {
    const base = {
      poster: video.poster || "",
      className: video.className || "",
      preload: video.preload || "",
      controls: video.controls,
      autoplay: video.autoplay,
      muted: video.muted,
      loop: video.loop,
      width: video.videoWidth || video.width,
      height: video.videoHeight || video.height,
    };
    if (video.src) {
      sources.push(Object.assign({}, base, {
        src: video.src,
        type: video.getAttribute("type") || "video/mp4",
        id: video.id || `video-${index}`,
        discoveredVia: "native",
      }));
    }
    video.querySelectorAll("source").forEach((source, sourceIndex) => {
      if (source.src) {
        sources.push(Object.assign({}, base, {
          src: source.src,
          type: source.type || "video/mp4",
          id: video.id || `video-${index}-source-${sourceIndex}`,
          discoveredVia: "native-source",
        }));
      }
    });
  });
  return sources;
}
"""

VIDEO_PLAYER_JS = r"""
(sel) => {
  const sources = [];
  const collect = (selector, tag, prefix) => {
    document.querySelectorAll(selector).forEach((video, index) => {
      if (video.src) {
        sources.push({
          src: video.src,
          type: video.getAttribute("type") || "video/mp4",
          poster: video.poster || "",
          className: video.className || "",
          id: video.id || `${prefix}-${index}`,
          discoveredVia: tag,
        });
      }
    });
  };
  collect(sel.player, "jwplayer", "imdb-video");
  collect(sel.imdb_player, "imdb-player", "imdb-specific-video");
  return sources;
}
"""

VIDEO_FALLBACK_JS = r"""
(sel) => Array.from(document.querySelectorAll(sel.native))
  .map((video, index) => ({
    src: video.src || "",
    type: video.getAttribute("type") || "video/mp4",
    poster: video.poster || "",
    className: video.className || "",
    id: video.id || `fallback-video-${index}`,
    discoveredVia: "fallback",
  }))
  .filter((source) => source.src)
"""

POSTER_JS = r"""
(sel) => {
  let img = null;
  for (const candidate of sel.candidates) {
    img = document.querySelector(candidate);
    if (img && img.src) break;
  }
  if (!img) img = document.querySelector(sel.alt_text);
  if (!img) return null;
  return {
    srcset: img.getAttribute("srcset") || "",
    src: img.getAttribute("src") || "",
    currentSrc: img.src || "",
  };
}
"""

POSTER_FALLBACK_JS = r"""
(selectors) => {
  for (const selector of selectors) {
    const img = document.querySelector(selector);
    if (img && img.src && img.src.startsWith("http") && !img.src.endsWith(".jpg")) {
      return img.src;
    }
  }
  return null;
}
"""

TRENDING_JS = r"""
(elements, sel) => elements.map((el) => {
  const text = (node) => (node && node.textContent ? node.textContent.trim() : "");
  const link = el.querySelector(sel.link);
  const img = el.querySelector(sel.image);
  const watch = el.querySelector(sel.watchlist);
  return {
    movieUrl: link ? link.getAttribute("href") || "" : "",
    title: text(el.querySelector(sel.title)),
    metadata: Array.from(el.querySelectorAll(sel.metadata)).map(text),
    imdbRating: text(el.querySelector(sel.rating)),
    imdbVotes: text(el.querySelector(sel.votes)),
    metascore: text(el.querySelector(sel.metascore)),
    plot: text(el.querySelector(sel.plot)),
    credits: Array.from(el.querySelectorAll(sel.credit)).map(text),
    posterUrl: img ? img.getAttribute("src") || "" : "",
    posterAlt: img ? img.getAttribute("alt") || "" : "",
    watchlistTestId: watch ? watch.getAttribute("data-testid") || "" : "",
  };
})
"""


# -------------------------------------------------------------
# Pure helpers
# -------------------------------------------------------------
def parse_title_id(url: Optional[str]) -> str:
    match = TITLE_ID_RE.search(url or "")
    return match.group(1) if match else ""


def parse_srcset(srcset: str) -> List[Tuple[str, int]]:
    """'a.jpg 190w, b.jpg 380w' -> [('a.jpg', 190), ('b.jpg', 380)]"""
    entries = []
    for entry in srcset.split(","):
        parts = entry.split()
        if not parts:
            continue
        width_match = WIDTH_RE.match(parts[1]) if len(parts) > 1 else None
        entries.append((parts[0], int(width_match.group(1)) if width_match else 0))
    return entries


def pick_largest_srcset(srcset: Optional[str]) -> Optional[str]:
    """Widest absolute-URL candidate; the first one wins when widths tie."""
    candidates = [
        (url, width) for url, width in parse_srcset(srcset or "")
        if width > 0 and url.startswith("http")
    ]
    if not candidates:
        return None
    # sorted() is stable, so equal widths keep document order
    return sorted(candidates, key=lambda entry: entry[1], reverse=True)[0][0]


def choose_poster_url(found: Optional[Dict[str, str]]) -> Optional[str]:
    if not found:
        return None
    best = pick_largest_srcset(found.get("srcset"))
    if best:
        return best
    for key in ("src", "currentSrc"):
        value = found.get(key) or ""
        if value.startswith("http"):
            return value
    return None


def dedupe_video_sources(sources: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drops repeated src URLs, keeping the first occurrence."""
    seen = set()
    unique = []
    for source in sources:
        src = source.get("src")
        if not src or src in seen:
            continue
        seen.add(src)
        unique.append(source)
    return unique


def normalize_video_sources(raw: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        VideoSource.model_validate(source).model_dump(by_alias=True, exclude_none=True)
        for source in dedupe_video_sources(raw)
    ]


def parse_trending_item(raw: Dict[str, Any]) -> Dict[str, Any]:
    metadata = raw.get("metadata") or []
    credits = raw.get("credits") or []
    title = (raw.get("title") or "").strip()
    movie_url = raw.get("movieUrl") or ""
    ranking = re.match(r"^\d+", title)

    item = TrendingItem(
        imdb_id=parse_title_id(movie_url),
        title=title,
        year=metadata[0] if len(metadata) > 0 else "",
        runtime=metadata[1] if len(metadata) > 1 else "",
        rating=metadata[2] if len(metadata) > 2 else "",
        imdb_rating=raw.get("imdbRating") or "",
        imdb_votes=re.sub(r"[()]", "", raw.get("imdbVotes") or ""),
        metascore=raw.get("metascore") or "",
        plot=raw.get("plot") or "",
        director=(credits[0] or "") if credits else "",
        stars=[c for c in credits[1:] if c],
        poster_url=raw.get("posterUrl") or "",
        poster_alt=raw.get("posterAlt") or "",
        movie_url=movie_url,
        watchlist_id=(raw.get("watchlistTestId") or "").replace("inline-watched-button-", ""),
        ranking=ranking.group(0) if ranking else "",
    )
    if not item.title or not item.imdb_id:
        logger.warning("[Extract] Trending item missing critical data: title=%r imdbId=%r",
                       item.title, item.imdb_id)
    return item.model_dump(by_alias=True)


def filter_trending(items: Iterable[Any]) -> List[Dict[str, Any]]:
    """Keeps items that parse as a TrendingItem with a non-blank title and a 'tt' id."""
    valid = []
    for raw in items:
        try:
            item = TrendingItem.model_validate(raw)
        except PydanticValidationError:
            continue
        if item.is_valid():
            valid.append(raw)
    return valid


# -------------------------------------------------------------
# Extractors
# -------------------------------------------------------------
async def extract_basic_info(page: Page, selectors: SelectorTable, timeout: int = SECTION_TIMEOUT_MS) -> ExtractionResult:
    try:
        title = ""
        for candidate in selectors.basic_info.title_candidates:
            element = await page.query_selector(candidate)
            if element is not None:
                title = ((await element.text_content()) or "").strip()
                break
        return ExtractionResult.success("basicInfo", {"imdbId": parse_title_id(page.url), "title": title})
    except Exception as e:
        logger.warning("[Extract] Failed to scrape basic info: %s", e)
        return ExtractionResult.failed("basicInfo", e)


async def extract_storyline(page: Page, selectors: SelectorTable, timeout: int = SECTION_TIMEOUT_MS) -> ExtractionResult:
    sel = selectors.storyline
    try:
        await page.wait_for_selector(sel.section, timeout=timeout)
        await page.wait_for_selector(sel.plot, timeout=PLOT_TIMEOUT_MS)
        storyline = await page.evaluate(STORYLINE_JS, sel.model_dump())
        storyline["keywords"] = [k for k in storyline.get("keywords", []) if k and "more" not in k]
        return ExtractionResult.success("storyline", storyline)
    except Exception as e:
        logger.warning("[Extract] Storyline section not found or failed to load: %s", e)
        return ExtractionResult.failed("storyline", e)


async def extract_ratings(page: Page, selectors: SelectorTable, timeout: int = SECTION_TIMEOUT_MS) -> ExtractionResult:
    sel = selectors.ratings
    try:
        await page.wait_for_selector(sel.section, timeout=timeout)
        return ExtractionResult.success("ratings", await page.evaluate(RATINGS_JS, sel.model_dump()))
    except Exception as e:
        logger.warning("[Extract] Ratings section not found or failed to load: %s", e)
        return ExtractionResult.failed("ratings", e)


async def extract_cast(page: Page, selectors: SelectorTable, timeout: int = SECTION_TIMEOUT_MS) -> ExtractionResult:
    sel = selectors.cast
    try:
        await page.wait_for_selector(sel.section, timeout=timeout)
        cast = await page.eval_on_selector_all(sel.item, CAST_JS, sel.model_dump())
        return ExtractionResult.success("cast", cast)
    except Exception as e:
        logger.warning("[Extract] Cast section not found or failed to load: %s", e)
        return ExtractionResult.failed("cast", e)


async def extract_videos(page: Page, selectors: SelectorTable, timeout: int = SECTION_TIMEOUT_MS) -> ExtractionResult:
    sel = selectors.videos
    try:
        await page.wait_for_selector(sel.section, timeout=timeout)
        videos = await page.eval_on_selector_all(sel.item, VIDEOS_JS, sel.model_dump())
        return ExtractionResult.success("videos", videos)
    except Exception as e:
        logger.warning("[Extract] Videos section not found or failed to load: %s", e)
        return ExtractionResult.failed("videos", e)


async def extract_images(page: Page, selectors: SelectorTable, timeout: int = SECTION_TIMEOUT_MS) -> ExtractionResult:
    sel = selectors.images
    try:
        await page.wait_for_selector(sel.section, timeout=timeout)
        return ExtractionResult.success("images", await page.eval_on_selector_all(sel.image, IMAGES_JS))
    except Exception as e:
        logger.warning("[Extract] Images section not found or failed to load: %s", e)
        return ExtractionResult.failed("images", e)


async def extract_video_sources(page: Page, selectors: SelectorTable, timeout: int = VIDEO_TIMEOUT_MS) -> ExtractionResult:
    sel = selectors.video_sources.model_dump()
    try:
        await page.wait_for_selector(selectors.video_sources.ready, timeout=timeout)
        native = await page.evaluate(VIDEO_NATIVE_JS, sel)
        player = await page.evaluate(VIDEO_PLAYER_JS, sel)
        sources = normalize_video_sources([*native, *player])
        logger.info("[Extract] Found %d video sources", len(sources))
        return ExtractionResult.success("videoSources", sources)
    except Exception as e:
        logger.warning("[Extract] Video sources not found or failed to load: %s", e)

    try:
        fallback = await page.evaluate(VIDEO_FALLBACK_JS, sel)
        return ExtractionResult.success("videoSources", normalize_video_sources(fallback))
    except Exception as e:
        logger.warning("[Extract] Fallback video scraping also failed: %s", e)
        return ExtractionResult.failed("videoSources", e)


async def extract_poster(page: Page, selectors: SelectorTable, timeout: int = SECTION_TIMEOUT_MS) -> ExtractionResult:
    sel = selectors.poster
    try:
        await page.wait_for_selector(sel.ready, timeout=timeout)
        found = await page.evaluate(POSTER_JS, {"candidates": list(sel.candidates), "alt_text": sel.alt_text})
        poster = choose_poster_url(found)
        if poster:
            logger.info("[Extract] High-quality poster URL: %s", poster)
        else:
            logger.info("[Extract] No poster found")
        return ExtractionResult.success("poster", poster)
    except Exception as e:
        logger.warning("[Extract] Poster not found or failed to load: %s", e)

    try:
        return ExtractionResult.success("poster", await page.evaluate(POSTER_FALLBACK_JS, list(sel.fallback)))
    except Exception as e:
        logger.warning("[Extract] Fallback poster scraping also failed: %s", e)
        return ExtractionResult.failed("poster", e)


async def extract_trending(page: Page, selectors: SelectorTable, timeout: int = SECTION_TIMEOUT_MS) -> ExtractionResult:
    """Raw trending items, parsed but not yet filtered for validity."""
    sel = selectors.trending
    try:
        await page.wait_for_selector(sel.item, timeout=timeout)
        raw_items = await page.eval_on_selector_all(sel.item, TRENDING_JS, sel.model_dump())
        if not isinstance(raw_items, list):
            return ExtractionResult.failed("trending", TypeError(f"expected a list, got {type(raw_items).__name__}"))
        items = []
        for index, raw in enumerate(raw_items, start=1):
            try:
                items.append(parse_trending_item(raw))
            except Exception as e:
                logger.warning("[Extract] Error processing trending item %d: %s", index, e)
        return ExtractionResult.success("trending", items)
    except Exception as e:
        logger.warning("[Extract] Trending list not found or failed to load: %s", e)
        return ExtractionResult.failed("trending", e)


Extractor = Callable[..., Awaitable[ExtractionResult]]

# Sections of a title page, in output order.
TITLE_EXTRACTORS: List[Tuple[str, Extractor]] = [
    ("basicInfo", extract_basic_info),
    ("storyline", extract_storyline),
    ("ratings", extract_ratings),
    ("cast", extract_cast),
    ("videos", extract_videos),
    ("images", extract_images),
    ("videoSources", extract_video_sources),
    ("poster", extract_poster),
]
