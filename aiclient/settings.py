# aiclient/settings.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="aiclient")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # which adapter bootstrap builds: echo | ollama | openai | bedrock
    AI_PROVIDER: str = Field(default="echo")

    # openai
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = Field(default="gpt-4o-mini")

    # ollama
    OLLAMA_HOST: str = Field(default="http://localhost:11434")
    OLLAMA_MODEL: str = Field(default="mistral:7b-instruct")

    # bedrock
    BEDROCK_REGION: str = Field(default="us-east-1")
    BEDROCK_LLAMA2_MODEL: str = Field(default="meta.llama2-70b-chat-v1")

    # adapter-level generation defaults; unset means the provider decides
    TEMPERATURE: Optional[float] = None
    TOP_P: Optional[float] = None
    MAX_TOKENS: Optional[int] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


class RedisVectorStoreSettings(BaseSettings):
    """Connection settings for the Redis vector store.

    Bound from `AICLIENT_VECTORSTORE_REDIS_*` environment variables or from the
    `aiclient.vectorstore.redis` block of a YAML file. `index` and `prefix`
    have no default; bootstrap code requires them when it builds the store.
    """

    CONFIG_PREFIX: ClassVar[str] = "aiclient.vectorstore.redis"

    uri: str = Field(default="redis://localhost:6379")
    index: Optional[str] = None
    prefix: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="AICLIENT_VECTORSTORE_REDIS_",
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def from_yaml(cls, path: str | os.PathLike[str]) -> "RedisVectorStoreSettings":
        cfg_path = Path(path)
        if not cfg_path.exists():
            raise FileNotFoundError(f"Config not found: {cfg_path}")
        with cfg_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**_select(data, cls.CONFIG_PREFIX))


def _select(data: Dict[str, Any], dotted: str) -> Dict[str, Any]:
    """Walk a nested mapping by a dotted key; missing levels yield {}."""
    node: Any = data
    for part in dotted.split("."):
        if not isinstance(node, dict):
            return {}
        node = node.get(part, {})
    return node if isinstance(node, dict) else {}
