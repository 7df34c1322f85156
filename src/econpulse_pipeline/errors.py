"""
errors.py — exception taxonomy for the indicator sync pipeline.

  ConfigurationError  missing credential / document id; fatal before any network call
  FetchError          one series could not be fetched; absorbed into an empty series
  PublishReadError    prior document unreadable; absorbed into an empty base document
  PublishWriteError   merged document could not be written; fatal
  NoDataError         every indicator of every country came back empty; fatal
"""

from __future__ import annotations


class EconPulseError(Exception):
    """Base class for all econpulse errors."""


class ConfigurationError(EconPulseError):
    """Required configuration is missing or invalid."""


class FetchError(EconPulseError):
    """A single provider series could not be fetched."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        series_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.series_id = series_id


class PublishReadError(EconPulseError):
    """The existing remote document could not be read or parsed."""


class PublishWriteError(EconPulseError):
    """The remote document store rejected the update."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class NoDataError(EconPulseError):
    """No series produced any data in this run."""
