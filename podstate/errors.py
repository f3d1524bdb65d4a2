"""Exception hierarchy for podstate."""

from __future__ import annotations


class PodStateError(Exception):
    """Base class for all podstate errors."""


class MalformedStatusError(PodStateError):
    """Raised when a raw pod status payload cannot be decoded."""


class ConfigurationError(PodStateError, ValueError):
    """Raised when configuration is invalid or a required parameter is missing."""
