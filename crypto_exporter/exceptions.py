"""Exceptions raised by the exporter."""

from __future__ import annotations


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigError(ExporterError):
    """Invalid command-line or environment configuration."""


class FetchError(ExporterError):
    """A price fetch failed: transport error, bad status or undecodable body.

    No partial result accompanies a FetchError.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
