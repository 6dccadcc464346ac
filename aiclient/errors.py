from __future__ import annotations

from typing import Optional


class AiClientError(Exception):
    """Base exception class for the aiclient package."""


class PromptValidationError(AiClientError, ValueError):
    """Raised when a prompt is empty or malformed. No provider call is made."""


class ConfigurationError(AiClientError):
    """Raised when settings cannot be turned into a working client."""


class TransportError(AiClientError):
    """A provider call failed: network error or the provider rejected it."""

    def __init__(self, message: str, *, provider: Optional[str] = None, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status = status


class ProviderResponseError(TransportError):
    """The provider answered, but the payload does not match its contract."""


class StreamInterruptedError(TransportError):
    """A streamed call failed after the stream had been opened."""
