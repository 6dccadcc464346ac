# ------------------------------------------------------------
# Bootstrap: turn settings into ready-to-use adapters.
# Transports are built here and handed to the adapters; adapters
# never read configuration themselves.
# ------------------------------------------------------------

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError
from .generate.client import ChatClient
from .generate.clients.echo_dev_client import EchoDevClient
from .settings import RedisVectorStoreSettings, Settings

logger = logging.getLogger(__name__)

PROVIDERS = ("echo", "ollama", "openai", "bedrock")


def create_chat_client(settings: Optional[Settings] = None) -> ChatClient:
    """Build the adapter selected by AI_PROVIDER, with settings-level option defaults."""
    settings = settings or Settings()
    provider = settings.AI_PROVIDER.strip().lower()

    if provider == "ollama":
        from .generate.clients.ollama_client import OllamaApi, OllamaClient
        client: ChatClient = OllamaClient(OllamaApi(base_url=settings.OLLAMA_HOST), model=settings.OLLAMA_MODEL)
    elif provider == "openai":
        if not settings.OPENAI_API_KEY:
            raise ConfigurationError("AI_PROVIDER=openai requires OPENAI_API_KEY")
        from .generate.clients.openai_client import OpenAiApi, OpenAiChatClient
        client = OpenAiChatClient(
            OpenAiApi(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL),
            model=settings.OPENAI_MODEL,
        )
    elif provider == "bedrock":
        from .generate.clients.bedrock_llama2_api import Llama2ChatBedrockApi
        from .generate.clients.bedrock_llama2_client import BedrockLlama2ChatClient
        client = BedrockLlama2ChatClient(
            Llama2ChatBedrockApi(model_id=settings.BEDROCK_LLAMA2_MODEL, region=settings.BEDROCK_REGION)
        )
    elif provider == "echo":
        client = EchoDevClient()
    else:
        raise ConfigurationError(f"Unknown AI_PROVIDER {settings.AI_PROVIDER!r}; expected one of {', '.join(PROVIDERS)}")

    logger.info("using %s adapter", type(client).__name__)
    return client.with_options(
        temperature=settings.TEMPERATURE,
        top_p=settings.TOP_P,
        max_tokens=settings.MAX_TOKENS,
    )


@dataclass(frozen=True)
class RedisVectorStoreConfig:
    """Validated Redis vector store connection parameters."""
    uri: str
    index: str
    prefix: str


def redis_vector_store_config(props: Optional[RedisVectorStoreSettings] = None) -> RedisVectorStoreConfig:
    props = props or RedisVectorStoreSettings()
    missing = [name for name in ("index", "prefix") if not getattr(props, name)]
    if missing:
        raise ConfigurationError(
            f"{RedisVectorStoreSettings.CONFIG_PREFIX} is missing required setting(s): {', '.join(missing)}"
        )
    if not props.uri.startswith(("redis://", "rediss://", "unix://")):
        raise ConfigurationError(f"Unsupported Redis URI scheme: {props.uri!r}")
    return RedisVectorStoreConfig(uri=props.uri, index=props.index, prefix=props.prefix)
