# Dummy model client for local dev and testing without API calls.
# Echoes the last user message; streaming yields it word by word.

from __future__ import annotations

import re
from typing import Iterator, List, Optional

from ..client import ChatClient, ensure_prompt
from ..types import AiResponse, ChoiceMetadata, Generation, GenerationMetadata, GenerationOptions, MessageType, Prompt, Usage

_WORD = re.compile(r"\S+\s*")


class EchoDevClient(ChatClient):
    provider = "echo"

    def __init__(self, options: Optional[GenerationOptions] = None):
        super().__init__(options)
        self.model = "echo-dev"

    def generate(self, prompt: Prompt) -> AiResponse:
        prompt = ensure_prompt(prompt)
        text = self._reply(prompt)
        usage = Usage(prompt_tokens=_count(prompt.contents), generation_tokens=_count(text))
        return self._response(text, "STOP", usage, prompt)

    def generate_stream(self, prompt: Prompt) -> Iterator[AiResponse]:
        prompt = ensure_prompt(prompt)
        return self._stream(prompt)

    def _stream(self, prompt: Prompt) -> Iterator[AiResponse]:
        text = self._reply(prompt)
        pieces: List[str] = _WORD.findall(text) or [text]
        last = len(pieces) - 1
        for i, piece in enumerate(pieces):
            if i < last:
                yield self._response(piece, None, None, prompt)
            else:
                usage = Usage(prompt_tokens=_count(prompt.contents), generation_tokens=len(pieces))
                yield self._response(piece, "STOP", usage, prompt)

    def _reply(self, prompt: Prompt) -> str:
        user_inputs = [m.content for m in prompt.messages if m.role == MessageType.USER]
        return f"[ECHO RESPONSE]\n{user_inputs[-1] if user_inputs else '(no user input)'}"

    def _response(self, text: str, finish_reason: Optional[str], usage: Optional[Usage], prompt: Prompt) -> AiResponse:
        opts = self.resolve_options(prompt)
        generation = Generation(
            text=text,
            info={"temp": opts.temperature, "max_tokens": opts.max_tokens},
        ).with_choice_metadata(ChoiceMetadata(finish_reason=finish_reason, usage=usage))
        return AiResponse(
            generations=(generation,),
            metadata=GenerationMetadata(provider=self.provider, model=self.model, usage=usage),
        )


def _count(text: str) -> int:
    return len(_WORD.findall(text))
