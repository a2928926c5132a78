import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, Type, TypeVar

from imdb_scraper.errors import ExtractionFailure, ScraperError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ExtractionResult(Generic[T]):
    """Outcome of reading one page section: a value or the failure that prevented it."""
    section: str
    value: Optional[T] = None
    failure: Optional[ExtractionFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, section: str, value: T) -> "ExtractionResult[T]":
        return cls(section=section, value=value)

    @classmethod
    def failed(cls, section: str, cause: Optional[BaseException] = None) -> "ExtractionResult[T]":
        return cls(section=section, failure=ExtractionFailure(section, cause))

    def unwrap_or(self, default: Any) -> Any:
        return self.value if self.ok else default


@dataclass(frozen=True)
class Strategy(Generic[T]):
    """One entry of an ordered fallback list."""
    name: str
    run: Callable[[], Awaitable[T]]


async def first_success(
    strategies: Sequence[Strategy[T]],
    error_cls: Type[ScraperError] = ScraperError,
    label: str = "strategy",
) -> T:
    """
    Runs strategies in order and returns the first result that does not raise.
    Raises ``error_cls`` chained to the last failure when every strategy fails.
    """
    last_error: Optional[BaseException] = None
    for index, strategy in enumerate(strategies, start=1):
        try:
            result = await strategy.run()
        except Exception as e:
            last_error = e
            logger.warning("[Fallback] %s %d (%s) failed: %s", label, index, strategy.name, e)
            continue
        logger.info("[Fallback] %s %d (%s) succeeded", label, index, strategy.name)
        return result
    raise error_cls(f"All {label} strategies failed: {last_error}") from last_error
