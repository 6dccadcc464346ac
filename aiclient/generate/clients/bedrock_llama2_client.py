# Adapter exposing the Bedrock Llama2 chat model through AiClient/AiStreamClient.

from __future__ import annotations

import logging
from typing import Iterator, Optional

from ...errors import ProviderResponseError
from ..client import ChatClient, ensure_prompt
from ..converters import MessageToPromptConverter
from ..types import AiResponse, ChoiceMetadata, Generation, GenerationMetadata, GenerationOptions, Prompt, Usage
from .bedrock_llama2_api import PROVIDER, Llama2ChatBedrockApi, Llama2ChatRequest, Llama2ChatResponse

logger = logging.getLogger(__name__)


class BedrockLlama2ChatClient(ChatClient):
    provider = "bedrock-llama2"

    def __init__(
        self,
        chat_api: Llama2ChatBedrockApi,
        options: Optional[GenerationOptions] = None,
        converter: Optional[MessageToPromptConverter] = None,
    ):
        super().__init__(options)
        self.chat_api = chat_api
        self.converter = converter or MessageToPromptConverter.create()

    def with_max_gen_len(self, max_gen_len: Optional[int]) -> "BedrockLlama2ChatClient":
        return self.with_max_tokens(max_gen_len)

    def generate(self, prompt: Prompt) -> AiResponse:
        request = self.create_request(ensure_prompt(prompt))
        logger.debug("bedrock llama2 generate model=%s", getattr(self.chat_api, "model_id", None))
        return self._to_ai_response(self.chat_api.chat_completion(request))

    def generate_stream(self, prompt: Prompt) -> Iterator[AiResponse]:
        request = self.create_request(ensure_prompt(prompt))
        return self._stream(request)

    def create_request(self, prompt: Prompt) -> Llama2ChatRequest:
        opts = self.resolve_options(prompt)
        return Llama2ChatRequest(
            prompt=self.converter.to_prompt(prompt.messages),
            temperature=opts.temperature,
            top_p=opts.top_p,
            max_gen_len=opts.max_tokens,
        )

    # -------------------------
    # Response mapping
    # -------------------------
    def _stream(self, request: Llama2ChatRequest) -> Iterator[AiResponse]:
        count = 0
        for chunk in self.chat_api.chat_completion_stream(request):
            count += 1
            yield self._to_ai_response(chunk)
        logger.debug("bedrock llama2 stream closed after %d chunks", count)

    def _to_ai_response(self, response: Llama2ChatResponse) -> AiResponse:
        stop_reason = response.stop_reason.name if response.stop_reason is not None else None
        usage = _extract_usage(response)
        generation = Generation(text=response.generation).with_choice_metadata(
            ChoiceMetadata(finish_reason=stop_reason, usage=usage)
        )
        metadata = GenerationMetadata(
            provider=self.provider,
            model=getattr(self.chat_api, "model_id", None),
            usage=usage,
        )
        return AiResponse(generations=(generation,), metadata=metadata)


def _extract_usage(response: Llama2ChatResponse) -> Optional[Usage]:
    if response.prompt_token_count is None and response.generation_token_count is None:
        return None
    try:
        return Usage(
            prompt_tokens=response.prompt_token_count,
            generation_tokens=response.generation_token_count,
        )
    except ValueError as e:
        raise ProviderResponseError(str(e), provider=PROVIDER) from e
