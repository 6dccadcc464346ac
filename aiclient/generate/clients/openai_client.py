# Client for the OpenAI Chat Completions API.
# Same shape as the Ollama client: OpenAiApi is the transport, OpenAiChatClient the adapter.

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

import openai
from openai import OpenAI

from ...errors import ProviderResponseError, StreamInterruptedError, TransportError
from ..client import ChatClient, ensure_prompt
from ..types import AiResponse, ChoiceMetadata, Generation, GenerationMetadata, GenerationOptions, Prompt, Usage

logger = logging.getLogger(__name__)

PROVIDER = "openai"


class OpenAiApi:
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, client: Optional[OpenAI] = None):
        self.client = client or OpenAI(api_key=api_key, base_url=base_url)

    def chat_completion(self, request: Dict[str, Any]):
        try:
            return self.client.chat.completions.create(**request)
        except openai.OpenAIError as e:
            logger.error("OpenAI chat completion failed: %s", e)
            raise TransportError(str(e), provider=PROVIDER, status=getattr(e, "status_code", None)) from e

    def chat_completion_stream(self, request: Dict[str, Any]) -> Iterator[Any]:
        try:
            stream = self.client.chat.completions.create(**request, stream=True)
        except openai.OpenAIError as e:
            logger.error("OpenAI chat completion stream failed: %s", e)
            raise TransportError(str(e), provider=PROVIDER, status=getattr(e, "status_code", None)) from e
        return self._iter_chunks(stream)

    def _iter_chunks(self, stream) -> Iterator[Any]:
        try:
            for chunk in stream:
                yield chunk
        except openai.OpenAIError as e:
            logger.error("OpenAI stream broke: %s", e)
            raise StreamInterruptedError(str(e), provider=PROVIDER) from e


class OpenAiChatClient(ChatClient):
    provider = PROVIDER

    def __init__(self, api: OpenAiApi, model: str = "gpt-4o-mini", options: Optional[GenerationOptions] = None):
        super().__init__(options)
        self.api = api
        self.model = model

    def with_model(self, model: str) -> "OpenAiChatClient":
        clone = self.with_options()
        clone.model = model
        return clone

    def generate(self, prompt: Prompt) -> AiResponse:
        request = self.create_request(ensure_prompt(prompt))
        logger.debug("openai generate model=%s", self.model)
        resp = self.api.chat_completion(request)
        choices = getattr(resp, "choices", None)
        if not choices:
            raise ProviderResponseError("OpenAI returned no choices", provider=PROVIDER)

        usage = _usage_of(resp)
        generations = [
            Generation(
                text=choice.message.content or "",
                info={"index": choice.index, "role": choice.message.role},
            ).with_choice_metadata(ChoiceMetadata(finish_reason=choice.finish_reason, usage=usage))
            for choice in choices
        ]
        return AiResponse(generations=tuple(generations), metadata=self._metadata(resp, usage))

    def generate_stream(self, prompt: Prompt) -> Iterator[AiResponse]:
        request = self.create_request(ensure_prompt(prompt))
        return self._stream(request)

    def create_request(self, prompt: Prompt) -> Dict[str, Any]:
        opts = self.resolve_options(prompt)
        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": m.role.value, "content": m.content} for m in prompt.messages],
        }
        if opts.temperature is not None:
            request["temperature"] = opts.temperature
        if opts.top_p is not None:
            request["top_p"] = opts.top_p
        if opts.max_tokens is not None:
            request["max_tokens"] = opts.max_tokens
        return request

    def _stream(self, request: Dict[str, Any]) -> Iterator[AiResponse]:
        for chunk in self.api.chat_completion_stream(request):
            usage = _usage_of(chunk)
            generations: List[Generation] = [
                Generation(
                    text=(choice.delta.content if choice.delta is not None else None) or "",
                    info={"index": choice.index},
                ).with_choice_metadata(ChoiceMetadata(finish_reason=choice.finish_reason, usage=usage))
                for choice in (chunk.choices or [])
            ]
            if not generations:
                # usage-only trailer chunk
                generations = [Generation(text="").with_choice_metadata(ChoiceMetadata(usage=usage))]
            yield AiResponse(generations=tuple(generations), metadata=self._metadata(chunk, usage))
        logger.debug("openai stream closed model=%s", self.model)

    def _metadata(self, resp, usage: Optional[Usage]) -> GenerationMetadata:
        return GenerationMetadata(
            provider=self.provider,
            model=getattr(resp, "model", None) or self.model,
            usage=usage,
            extra={"id": getattr(resp, "id", None)},
        )


def _usage_of(resp) -> Optional[Usage]:
    usage = getattr(resp, "usage", None)
    if usage is None:
        return None
    try:
        return Usage(
            prompt_tokens=getattr(usage, "prompt_tokens", None),
            generation_tokens=getattr(usage, "completion_tokens", None),
        )
    except ValueError as e:
        raise ProviderResponseError(str(e), provider=PROVIDER) from e
