# Client for Ollama local inference over its HTTP API (/api/generate).
# OllamaApi is the transport; OllamaClient adapts it to AiClient/AiStreamClient.

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, Optional

import requests

from ...errors import ProviderResponseError, StreamInterruptedError, TransportError
from ..client import ChatClient, ensure_prompt
from ..converters import compose_role_blocks
from ..types import AiResponse, ChoiceMetadata, Generation, GenerationMetadata, GenerationOptions, Prompt, Usage

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_HOST = "http://localhost:11434"
PROVIDER = "ollama"


class OllamaApi:
    def __init__(self, base_url: str = DEFAULT_OLLAMA_HOST, timeout: float = 180, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/api/generate"
        try:
            resp = self.session.post(url, json={**payload, "stream": False}, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error("Ollama request to %s failed: %s", url, e)
            raise TransportError(str(e), provider=PROVIDER, status=_status_of(e)) from e
        try:
            return resp.json()
        except ValueError as e:
            raise ProviderResponseError("Invalid JSON response from Ollama", provider=PROVIDER) from e

    def chat_completion_stream(self, payload: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        url = f"{self.base_url}/api/generate"
        resp = None
        try:
            resp = self.session.post(url, json={**payload, "stream": True}, stream=True, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            if resp is not None:
                resp.close()
            logger.error("Ollama stream request to %s failed: %s", url, e)
            raise TransportError(str(e), provider=PROVIDER, status=_status_of(e)) from e
        return self._iter_lines(resp)

    def _iter_lines(self, resp) -> Iterator[Dict[str, Any]]:
        # Ollama streams newline-delimited JSON objects.
        try:
            with resp:
                for line in resp.iter_lines(decode_unicode=True):
                    if not line:
                        continue
                    try:
                        data = json.loads(line)
                    except ValueError as e:
                        raise ProviderResponseError(f"Invalid stream line from Ollama: {line!r}", provider=PROVIDER) from e
                    if "error" in data:
                        raise StreamInterruptedError(str(data["error"]), provider=PROVIDER)
                    yield data
        except requests.RequestException as e:
            logger.error("Ollama stream broke: %s", e)
            raise StreamInterruptedError(str(e), provider=PROVIDER) from e


class OllamaClient(ChatClient):
    provider = PROVIDER

    def __init__(self, api: OllamaApi, model: str = "mistral:7b-instruct", options: Optional[GenerationOptions] = None):
        super().__init__(options)
        self.api = api
        self.model = model

    def with_model(self, model: str) -> "OllamaClient":
        clone = self.with_options()
        clone.model = model
        return clone

    def generate(self, prompt: Prompt) -> AiResponse:
        payload = self.create_request(ensure_prompt(prompt))
        logger.debug("ollama generate model=%s", self.model)
        return self._to_ai_response(self.api.chat_completion(payload))

    def generate_stream(self, prompt: Prompt) -> Iterator[AiResponse]:
        payload = self.create_request(ensure_prompt(prompt))
        return self._stream(payload)

    def create_request(self, prompt: Prompt) -> Dict[str, Any]:
        opts = self.resolve_options(prompt)
        options: Dict[str, Any] = {}
        if opts.temperature is not None:
            options["temperature"] = float(opts.temperature)
        if opts.top_p is not None:
            options["top_p"] = float(opts.top_p)
        if opts.max_tokens is not None:
            options["num_predict"] = int(opts.max_tokens)

        payload: Dict[str, Any] = {"model": self.model, "prompt": compose_role_blocks(prompt.messages)}
        if options:
            payload["options"] = options
        return payload

    def _stream(self, payload: Dict[str, Any]) -> Iterator[AiResponse]:
        for data in self.api.chat_completion_stream(payload):
            yield self._to_ai_response(data)
        logger.debug("ollama stream closed model=%s", self.model)

    def _to_ai_response(self, data: Dict[str, Any]) -> AiResponse:
        if not isinstance(data, dict) or "response" not in data:
            raise ProviderResponseError("Ollama response has no 'response' field", provider=PROVIDER)
        usage = None
        if data.get("prompt_eval_count") is not None or data.get("eval_count") is not None:
            try:
                usage = Usage(prompt_tokens=data.get("prompt_eval_count"), generation_tokens=data.get("eval_count"))
            except ValueError as e:
                raise ProviderResponseError(str(e), provider=PROVIDER) from e
        finish_reason = data.get("done_reason") if data.get("done") else None
        generation = Generation(text=data["response"]).with_choice_metadata(
            ChoiceMetadata(finish_reason=finish_reason, usage=usage)
        )
        return AiResponse(
            generations=(generation,),
            metadata=GenerationMetadata(provider=self.provider, model=data.get("model", self.model), usage=usage),
        )


def _status_of(error: requests.RequestException) -> Optional[int]:
    response = getattr(error, "response", None)
    return getattr(response, "status_code", None) if response is not None else None
