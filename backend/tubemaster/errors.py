# backend/tubemaster/errors.py

from typing import Optional


class TubeMasterError(Exception):
    """Base class for every error raised by the tubemaster backend."""


class ConfigurationError(TubeMasterError):
    """A required setting (usually an API key) is missing or invalid."""


class TransportError(TubeMasterError):
    """
    Network failure or a non-2xx answer from a model endpoint.

    `status` is None when no HTTP response was received at all.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        self.message = message
        prefix = f"HTTP {status}: " if status is not None else ""
        super().__init__(f"{prefix}{message}")


class MalformedOutputError(TubeMasterError):
    """Model output could not be turned into the expected structure."""

    def __init__(self, message: str, raw: Optional[str] = None):
        self.raw = raw[:500] if raw else raw
        super().__init__(message)


class DegradedInputError(TubeMasterError):
    """An input image could not be decoded or normalized."""
