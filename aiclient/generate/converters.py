# Flatten a message sequence into the single text prompt expected by
# completion-style providers (Bedrock Llama2, Ollama /api/generate).

from __future__ import annotations

from typing import Sequence

from ..errors import PromptValidationError
from .types import Message, MessageType


class MessageToPromptConverter:
    """Anthropic/Llama2 style "Human:/Assistant:" transcript.

    System messages are hoisted to the top, the remaining turns keep their
    order, and the transcript ends with the assistant cue so the model
    continues as the assistant.
    """

    def __init__(self, human_prompt: str = "Human:", assistant_prompt: str = "Assistant:", line_separator: str = "\n"):
        self.human_prompt = human_prompt
        self.assistant_prompt = assistant_prompt
        self.line_separator = line_separator

    @classmethod
    def create(cls) -> "MessageToPromptConverter":
        return cls()

    def to_prompt(self, messages: Sequence[Message]) -> str:
        system = [m.content for m in messages if m.role == MessageType.SYSTEM]
        turns = [self._message_to_string(m) for m in messages if m.role != MessageType.SYSTEM]

        parts = []
        if system:
            parts.append(self.line_separator.join(system))
        if turns:
            parts.append(self.line_separator.join(turns))
        parts.append(self.assistant_prompt)
        return self.line_separator.join(parts)

    def _message_to_string(self, message: Message) -> str:
        if message.role == MessageType.USER:
            return f"{self.human_prompt} {message.content}"
        if message.role == MessageType.ASSISTANT:
            return f"{self.assistant_prompt} {message.content}"
        raise PromptValidationError(f"{message.role.value} messages are not supported by completion-style providers")


def compose_role_blocks(messages: Sequence[Message]) -> str:
    """ROLE:\\ncontent blocks, one per message, in conversation order."""
    parts = []
    for m in messages:
        parts.append(f"{m.role.value.upper()}:\n{m.content.strip()}\n")
    return "\n".join(parts)
