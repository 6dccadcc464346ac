# Generator package

# Exposes the adapter contract, the shared data model and the dev client.

from .client import AiClient, AiStreamClient, ChatClient
from .generator import ChatGenerator
from .types import (
    AiResponse,
    ChoiceMetadata,
    Generation,
    GenerationMetadata,
    GenerationOptions,
    Message,
    MessageType,
    Prompt,
    PromptFilterMetadata,
    PromptMetadata,
    Usage,
)
from .clients.echo_dev_client import EchoDevClient

__all__ = [
    "AiClient",
    "AiStreamClient",
    "ChatClient",
    "ChatGenerator",
    "AiResponse",
    "ChoiceMetadata",
    "Generation",
    "GenerationMetadata",
    "GenerationOptions",
    "Message",
    "MessageType",
    "Prompt",
    "PromptFilterMetadata",
    "PromptMetadata",
    "Usage",
    "EchoDevClient",
]
