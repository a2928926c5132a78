from typing import Any, Literal, Optional

ErrorType = Literal["VALIDATION_ERROR", "INTERNAL_ERROR"]


class ScraperError(Exception):
    """Base class for failures while acquiring or reading an IMDb page."""
    pass


class ConfigurationError(ScraperError):
    """Raised when a component is built without a required setting."""
    pass


class FetchError(ScraperError):
    """Raised when the rendering gateway does not return a page."""
    pass


class BrowserLaunchError(ScraperError):
    pass


class NavigationError(ScraperError):
    pass


class SessionStartError(ScraperError):
    """Raised once every launch/navigation attempt has been used up."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        self.attempts = attempts
        self.last_error = last_error
        reason = str(last_error) if last_error is not None else "unknown error"
        super().__init__(f"Failed to start browser after {attempts} attempts. Last error: {reason}")


class ExtractionFailure(ScraperError):
    """A page section that could not be read. Carried inside results, not raised to callers."""

    def __init__(self, section: str, cause: Optional[BaseException] = None):
        self.section = section
        self.cause = cause
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "no data"
        super().__init__(f"{section}: {detail}")


class ApiError(Exception):
    """Error carrying an HTTP status, rendered as JSON by the API layer."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_type: ErrorType = "INTERNAL_ERROR",
        details: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_type = error_type
        self.details = details


class ValidationError(ApiError):
    def __init__(self, message: str = "Validation failed", details: Any = None):
        super().__init__(400, message, "VALIDATION_ERROR", details)
