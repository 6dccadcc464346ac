# Uniform client interface over AI generation providers.

from .errors import (
    AiClientError,
    ConfigurationError,
    PromptValidationError,
    ProviderResponseError,
    StreamInterruptedError,
    TransportError,
)
from .generate import AiClient, AiResponse, AiStreamClient, Generation, Message, Prompt

__all__ = [
    "AiClient",
    "AiStreamClient",
    "AiResponse",
    "Generation",
    "Message",
    "Prompt",
    "AiClientError",
    "ConfigurationError",
    "PromptValidationError",
    "ProviderResponseError",
    "StreamInterruptedError",
    "TransportError",
]
