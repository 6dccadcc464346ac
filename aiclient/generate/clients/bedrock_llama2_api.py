# Transport for the Llama2 chat models hosted on AWS Bedrock.
# Wraps the boto3 "bedrock-runtime" client: invoke_model for one-shot calls,
# invoke_model_with_response_stream for chunked output.

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ...errors import ProviderResponseError, StreamInterruptedError, TransportError

logger = logging.getLogger(__name__)

PROVIDER = "bedrock"

# Event keys Bedrock uses to report a failure inside a response stream.
_STREAM_ERROR_KEYS = (
    "internalServerException",
    "modelStreamErrorException",
    "modelTimeoutException",
    "throttlingException",
    "validationException",
    "serviceUnavailableException",
)


class Llama2ChatModel(str, Enum):
    LLAMA2_13B_CHAT_V1 = "meta.llama2-13b-chat-v1"
    LLAMA2_70B_CHAT_V1 = "meta.llama2-70b-chat-v1"


class StopReason(str, Enum):
    STOP = "stop"  # natural end of the generation
    LENGTH = "length"  # max_gen_len reached


@dataclass(frozen=True)
class Llama2ChatRequest:
    """Wire request. Parameters left as None are not sent."""
    prompt: str
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_gen_len: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"prompt": self.prompt}
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if self.top_p is not None:
            payload["top_p"] = self.top_p
        if self.max_gen_len is not None:
            payload["max_gen_len"] = self.max_gen_len
        return payload


@dataclass(frozen=True)
class Llama2ChatResponse:
    generation: str
    prompt_token_count: Optional[int] = None
    generation_token_count: Optional[int] = None
    stop_reason: Optional[StopReason] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Llama2ChatResponse":
        if not isinstance(data, dict) or "generation" not in data:
            raise ProviderResponseError("Llama2 response has no 'generation' field", provider=PROVIDER)
        raw_reason = data.get("stop_reason")
        try:
            stop_reason = StopReason(raw_reason) if raw_reason is not None else None
        except ValueError:
            raise ProviderResponseError(f"Unknown Llama2 stop_reason: {raw_reason!r}", provider=PROVIDER) from None
        if not isinstance(data["generation"], str):
            raise ProviderResponseError(f"Llama2 generation must be a string, got {data['generation']!r}", provider=PROVIDER)
        return cls(
            generation=data["generation"],
            prompt_token_count=data.get("prompt_token_count"),
            generation_token_count=data.get("generation_token_count"),
            stop_reason=stop_reason,
        )


class Llama2ChatBedrockApi:
    def __init__(self, model_id: str = Llama2ChatModel.LLAMA2_70B_CHAT_V1.value, region: str = "us-east-1", client=None):
        self.model_id = model_id.value if isinstance(model_id, Llama2ChatModel) else model_id
        self.region = region
        self.client = client or boto3.client("bedrock-runtime", region_name=region)

    # -------------------------
    # Public API
    # -------------------------
    def chat_completion(self, request: Llama2ChatRequest) -> Llama2ChatResponse:
        try:
            resp = self.client.invoke_model(
                modelId=self.model_id,
                body=json.dumps(request.to_payload()),
                contentType="application/json",
                accept="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Bedrock invoke_model failed for %s: %s", self.model_id, e)
            raise TransportError(str(e), provider=PROVIDER, status=_status_of(e)) from e
        return Llama2ChatResponse.from_payload(_read_json(resp["body"].read()))

    def chat_completion_stream(self, request: Llama2ChatRequest) -> Iterator[Llama2ChatResponse]:
        try:
            resp = self.client.invoke_model_with_response_stream(
                modelId=self.model_id,
                body=json.dumps(request.to_payload()),
                contentType="application/json",
                accept="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Bedrock invoke_model_with_response_stream failed for %s: %s", self.model_id, e)
            raise TransportError(str(e), provider=PROVIDER, status=_status_of(e)) from e
        return self._iter_chunks(resp["body"])

    # -------------------------
    # Helpers
    # -------------------------
    def _iter_chunks(self, event_stream) -> Iterator[Llama2ChatResponse]:
        try:
            for event in event_stream:
                chunk = event.get("chunk")
                if chunk is not None:
                    yield Llama2ChatResponse.from_payload(_read_json(chunk["bytes"]))
                    continue
                for key in _STREAM_ERROR_KEYS:
                    if key in event:
                        message = event[key].get("message", key)
                        logger.error("Bedrock stream for %s failed: %s", self.model_id, message)
                        raise StreamInterruptedError(message, provider=PROVIDER)
        except (ClientError, BotoCoreError) as e:
            logger.error("Bedrock stream for %s broke: %s", self.model_id, e)
            raise StreamInterruptedError(str(e), provider=PROVIDER, status=_status_of(e)) from e


def _read_json(raw: bytes) -> Dict[str, Any]:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ProviderResponseError(f"Invalid JSON from Bedrock: {e}", provider=PROVIDER) from e


def _status_of(error: Exception) -> Optional[int]:
    if isinstance(error, ClientError):
        return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return None
