import argparse
import asyncio
import json
import sys

from imdb_scraper.config import configure_logging, settings
from imdb_scraper.scraper import PlaywrightScraper


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="IMDb Scraper - read IMDb title pages and lists through a headless browser")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL (e.g. DEBUG)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    movie = subparsers.add_parser("movie", help="Scrape one title page")
    movie.add_argument("imdbid", type=str, help="The IMDb id of the title (e.g., 'tt1375666')")

    trending = subparsers.add_parser("trending", help="Scrape the trending list")
    trending.add_argument("--url", default=settings.trending_list_url, help="IMDb list URL")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("imdb_scraper.api:app", host=args.host, port=args.port, log_level=settings.log_level.lower())
        return 0

    scraper = PlaywrightScraper()
    try:
        if args.command == "movie":
            _print_json(asyncio.run(scraper.scrape_title(args.imdbid)))
            return 0

        movies = asyncio.run(scraper.scrape_trending(args.url))
        if not movies:
            print("No valid trending movies data found", file=sys.stderr)
            return 1
        _print_json(movies)
        return 0
    except Exception as e:
        print(f"Scrape failed: {type(e).__name__}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
