"""
truthlens.errors – exception hierarchy.

Model-side failures (GeminiError) are caught by the analyzers and turned
into "Unverified" results; fetch failures (ContentFetchError) carry the
HTTP status the API should answer with.
"""
from __future__ import annotations


class TruthLensError(Exception):
    """Base class for all TruthLens errors."""


class GeminiError(TruthLensError):
    """The hosted model could not be reached or returned unusable output."""


class GeminiConfigurationError(GeminiError):
    """No API key (or another required setting) is configured."""


class ContentFetchError(TruthLensError):
    """A remote asset could not be fetched safely."""

    def __init__(self, detail: str, status_code: int = 422) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
