# Typed, immutable dataclasses shared by the adapter contract and every
# provider client: what goes in (Prompt) and what comes out (AiResponse).

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple

from ..errors import PromptValidationError


class MessageType(str, Enum):
    """Role of a single chat turn."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    FUNCTION = "function"


@dataclass(frozen=True)
class Message:
    """Single chat turn: system, user, assistant or function result."""
    role: MessageType
    content: str

    def __post_init__(self):
        try:
            role = MessageType(self.role)
        except ValueError:
            raise PromptValidationError(f"Unknown message role: {self.role!r}") from None
        if not isinstance(self.content, str):
            raise PromptValidationError(f"Message content must be a string, got {type(self.content).__name__}")
        object.__setattr__(self, "role", role)


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling parameters. None means "let the provider decide"."""
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None

    def merged_with(self, overrides: Optional["GenerationOptions"]) -> "GenerationOptions":
        """Return a copy where every field set on `overrides` wins."""
        if overrides is None:
            return self
        return GenerationOptions(
            temperature=overrides.temperature if overrides.temperature is not None else self.temperature,
            top_p=overrides.top_p if overrides.top_p is not None else self.top_p,
            max_tokens=overrides.max_tokens if overrides.max_tokens is not None else self.max_tokens,
        )


@dataclass(frozen=True)
class Prompt:
    """Ordered, non-empty conversation sent to a provider."""
    messages: Tuple[Message, ...]
    options: Optional[GenerationOptions] = None

    def __post_init__(self):
        if isinstance(self.messages, (str, Message)) or not isinstance(self.messages, Iterable):
            raise PromptValidationError("Prompt messages must be a sequence of Message objects")
        messages = tuple(self.messages)
        if not messages:
            raise PromptValidationError("Prompt must contain at least one message")
        for m in messages:
            if not isinstance(m, Message):
                raise PromptValidationError(f"Expected Message, got {type(m).__name__}")
        object.__setattr__(self, "messages", messages)

    @classmethod
    def from_text(cls, text: str, options: Optional[GenerationOptions] = None) -> "Prompt":
        return cls(messages=(Message(role=MessageType.USER, content=text),), options=options)

    @property
    def contents(self) -> str:
        return "".join(m.content for m in self.messages)


@dataclass(frozen=True)
class Usage:
    """Token accounting. A count the provider did not report stays None."""
    prompt_tokens: Optional[int] = None
    generation_tokens: Optional[int] = None

    def __post_init__(self):
        for name in ("prompt_tokens", "generation_tokens"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    @property
    def total_tokens(self) -> Optional[int]:
        reported = [t for t in (self.prompt_tokens, self.generation_tokens) if t is not None]
        return sum(reported) if reported else None


@dataclass(frozen=True)
class ChoiceMetadata:
    """Per-generation metadata. finish_reason is None until the provider reports one."""
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None


@dataclass(frozen=True)
class Generation:
    """One produced output."""
    text: str
    info: Mapping[str, Any] = field(default_factory=dict, hash=False)
    choice_metadata: Optional[ChoiceMetadata] = None

    def with_choice_metadata(self, choice_metadata: Optional[ChoiceMetadata]) -> "Generation":
        return replace(self, choice_metadata=choice_metadata)


@dataclass(frozen=True)
class PromptFilterMetadata:
    """Content-filter verdicts a provider attached to one prompt."""
    prompt_index: int
    content_filter_metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class PromptMetadata:
    """Prompt-level metadata returned alongside the generations."""
    filters: Tuple[PromptFilterMetadata, ...] = ()

    @classmethod
    def empty(cls) -> "PromptMetadata":
        return _EMPTY_PROMPT_METADATA

    @classmethod
    def of(cls, *filters: PromptFilterMetadata) -> "PromptMetadata":
        return cls(filters=tuple(filters))

    def find_by_prompt_index(self, prompt_index: int) -> Optional[PromptFilterMetadata]:
        for f in self.filters:
            if f.prompt_index == prompt_index:
                return f
        return None

    def __iter__(self) -> Iterator[PromptFilterMetadata]:
        return iter(self.filters)

    def __len__(self) -> int:
        return len(self.filters)


_EMPTY_PROMPT_METADATA = PromptMetadata()


@dataclass(frozen=True)
class GenerationMetadata:
    """Response-level metadata: which provider/model answered and total usage."""
    provider: Optional[str] = None
    model: Optional[str] = None
    usage: Optional[Usage] = None
    extra: Mapping[str, Any] = field(default_factory=dict, hash=False)


GenerationMetadata.NULL = GenerationMetadata()


@dataclass(frozen=True)
class AiResponse:
    """Full result of one generation call (or of one streamed chunk)."""
    generations: Tuple[Generation, ...]
    metadata: GenerationMetadata = GenerationMetadata.NULL
    prompt_metadata: PromptMetadata = field(default_factory=PromptMetadata.empty)

    def __post_init__(self):
        generations = tuple(self.generations)
        if not generations:
            raise ValueError("AiResponse requires at least one Generation")
        object.__setattr__(self, "generations", generations)
        if self.metadata is None:
            object.__setattr__(self, "metadata", GenerationMetadata.NULL)
        if self.prompt_metadata is None:
            object.__setattr__(self, "prompt_metadata", PromptMetadata.empty())

    @property
    def generation(self) -> Generation:
        return self.generations[0]

    def with_prompt_metadata(self, prompt_metadata: Optional[PromptMetadata]) -> "AiResponse":
        return replace(self, prompt_metadata=prompt_metadata if prompt_metadata is not None else PromptMetadata.empty())
