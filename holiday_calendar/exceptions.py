"""
Error hierarchy for the holiday calendar pipeline.

Row-level errors (EncodingError, DateParseError) are recovered where they
occur; pass-level errors (FetchError, ArtifactIOError) propagate to the
process entry point and abort startup.
"""
from typing import Any, Dict, Optional

__all__ = [
    "HolidayCalendarError",
    "FetchError",
    "EncodingError",
    "DateParseError",
    "ArtifactIOError",
]


class HolidayCalendarError(Exception):
    """Base class for all pipeline errors.

    Carries a human-readable ``message`` and a ``details`` dict with context
    for logging.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class FetchError(HolidayCalendarError):
    """Network failure or non-200 status while fetching the upstream CSV."""


class EncodingError(HolidayCalendarError):
    """Bytes that are not valid in the declared source encoding."""


class DateParseError(HolidayCalendarError, ValueError):
    """A date string matched none of the candidate layouts."""


class ArtifactIOError(HolidayCalendarError):
    """The holiday table file could not be written or read."""
