# ChatGenerator:
# - accepts any adapter (Bedrock Llama2, Ollama, OpenAI, Echo)
# - builds a Prompt from the configured system message, history and user turn
# - returns AiResponse, or an iterator of AiResponse when streaming

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterator, List, Optional

import yaml

from .client import AiClient, AiStreamClient
from .types import AiResponse, GenerationOptions, Message, MessageType, Prompt

logger = logging.getLogger(__name__)


class ChatGenerator:
    def __init__(self, model_client: AiClient, config_path: str = "config/generate.yaml"):
        self.model_client = model_client
        self.config_path = config_path
        self.cfg = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        if not os.path.exists(self.config_path):
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _compose_prompt(
        self,
        user_message: str,
        history: Optional[List[Message]],
        temperature: Optional[float],
        max_tokens: Optional[int],
        top_p: Optional[float],
    ) -> Prompt:
        messages: List[Message] = []
        system = (self.cfg.get("system_prompt") or "").strip()
        if system:
            messages.append(Message(role=MessageType.SYSTEM, content=system))
        messages.extend(history or [])
        messages.append(Message(role=MessageType.USER, content=user_message))

        # Call arguments win over the config file; anything still unset is left to the adapter.
        options = GenerationOptions(
            temperature=temperature if temperature is not None else self.cfg.get("temperature"),
            top_p=top_p if top_p is not None else self.cfg.get("top_p"),
            max_tokens=max_tokens if max_tokens is not None else self.cfg.get("max_tokens"),
        )
        return Prompt(messages=tuple(messages), options=options)

    def chat(
        self,
        user_message: str,
        history: Optional[List[Message]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
    ) -> AiResponse:
        """Main entry point for generation."""
        prompt = self._compose_prompt(user_message, history, temperature, max_tokens, top_p)
        logger.debug("chat via %s (%d messages)", type(self.model_client).__name__, len(prompt.messages))
        return self.model_client.generate(prompt)

    def stream_chat(
        self,
        user_message: str,
        history: Optional[List[Message]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
    ) -> Iterator[AiResponse]:
        if not isinstance(self.model_client, AiStreamClient):
            raise TypeError(f"{type(self.model_client).__name__} does not support streaming")
        prompt = self._compose_prompt(user_message, history, temperature, max_tokens, top_p)
        return self.model_client.generate_stream(prompt)
