"""Provider-agnostic generation contract.

`AiClient` and `AiStreamClient` are the two capabilities every adapter exposes.
`ChatClient` is the shared base for adapters that carry default generation
options; it never mutates itself, the `with_*` methods return a new adapter.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Iterator, Optional

from ..errors import PromptValidationError
from .types import AiResponse, GenerationOptions, Prompt


def ensure_prompt(prompt: Any) -> Prompt:
    """Reject anything that is not a valid Prompt before a transport is touched."""
    if not isinstance(prompt, Prompt):
        raise PromptValidationError(f"Expected Prompt, got {type(prompt).__name__}")
    return prompt


class AiClient(ABC):
    """Single-shot generation."""

    @abstractmethod
    def generate(self, prompt: Prompt) -> AiResponse:
        """Send the prompt and block until the provider answers."""

    def generate_text(self, message: str) -> str:
        return self.generate(Prompt.from_text(message)).generation.text


class AiStreamClient(ABC):
    """Streamed generation."""

    @abstractmethod
    def generate_stream(self, prompt: Prompt) -> Iterator[AiResponse]:
        """Return a single-use iterator yielding one AiResponse per provider chunk."""


class ChatClient(AiClient, AiStreamClient):
    provider = "unknown"

    def __init__(self, options: Optional[GenerationOptions] = None):
        self.options = options or GenerationOptions()

    def with_options(self, **changes) -> "ChatClient":
        clone = copy.copy(self)
        clone.options = replace(self.options, **changes)
        return clone

    def with_temperature(self, temperature: Optional[float]) -> "ChatClient":
        return self.with_options(temperature=temperature)

    def with_top_p(self, top_p: Optional[float]) -> "ChatClient":
        return self.with_options(top_p=top_p)

    def with_max_tokens(self, max_tokens: Optional[int]) -> "ChatClient":
        return self.with_options(max_tokens=max_tokens)

    def resolve_options(self, prompt: Prompt) -> GenerationOptions:
        """Adapter defaults, overridden field by field by the prompt's own options."""
        return self.options.merged_with(prompt.options)
