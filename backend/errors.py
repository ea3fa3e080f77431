"""Exceptions raised at the request boundary of a profile run.

Only request-level failures are exceptions.  Per-page fetch failures are
returned as :class:`~backend.scraper.models.FetchError` values and malformed
structured-data blocks are skipped inside the harvester; neither ever
reaches the caller.
"""

from __future__ import annotations


class ProfileError(Exception):
    """Base class; ``status_code`` is what the HTTP layer should answer with."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidTargetError(ProfileError, ValueError):
    """The submitted URL is malformed or not http/https.

    Raised before any network activity begins.
    """

    status_code = 400


class InsufficientContentError(ProfileError):
    """The whole crawl produced no corpus text and no structured data."""

    status_code = 422

    def __init__(self, message: str = "Could not extract enough content from the provided site.") -> None:
        super().__init__(message)


class SummarizerError(ProfileError):
    """The summarisation model is unconfigured or its call failed."""

    status_code = 502
