"""Configuration management for the Terraform assistant."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RETRIEVER_TOP_K = 5
DEFAULT_HISTORY_DEPTH = 10
DEFAULT_MAX_CONTEXT_TOKENS = 6000

_AGENT_DEFAULTS = {
    "retriever_top_k": DEFAULT_RETRIEVER_TOP_K,
    "history_depth": DEFAULT_HISTORY_DEPTH,
    "max_context_tokens": DEFAULT_MAX_CONTEXT_TOKENS,
}

# Sentinel value for history_db_path that turns the conversation store off
HISTORY_DISABLED = "disabled"


class AgentConfig(BaseModel):
    """
    Per-agent tuning supplied at construction.

    Unset, None or non-positive values fall back to the named defaults.
    """

    retriever_top_k: int = DEFAULT_RETRIEVER_TOP_K
    history_depth: int = DEFAULT_HISTORY_DEPTH
    max_context_tokens: int = DEFAULT_MAX_CONTEXT_TOKENS

    @field_validator("retriever_top_k", "history_depth", "max_context_tokens", mode="before")
    @classmethod
    def _default_when_unset(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, int) and value <= 0):
            return _AGENT_DEFAULTS[info.field_name]
        return value


class Settings(BaseSettings):
    """Assistant configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Model backend (any OpenAI-compatible endpoint; Ollama by default)
    openai_base_url: str = Field(default="http://localhost:11434/v1")
    # Ollama ignores the key but the client requires one
    openai_api_key: str = Field(default="ollama")
    chat_model: str = Field(default="llama3.1", description="Model used for chat queries")
    chat_temperature: float = Field(default=0.2)
    chat_max_tokens: int = Field(default=4096)
    chat_timeout_seconds: float = Field(default=120.0)

    # Context assembly
    rag_top_k: int = Field(default=DEFAULT_RETRIEVER_TOP_K)
    history_depth: int = Field(default=DEFAULT_HISTORY_DEPTH)
    max_context_tokens: int = Field(default=DEFAULT_MAX_CONTEXT_TOKENS)

    # Conversation history ("disabled" to turn off)
    history_db_path: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "text", "both"] = Field(default="both")
    log_dir: Path = Field(default=Path("./logs"))

    def agent_config(self) -> AgentConfig:
        """Build the agent tuning config from these settings."""
        return AgentConfig(
            retriever_top_k=self.rag_top_k,
            history_depth=self.history_depth,
            max_context_tokens=self.max_context_tokens,
        )


def get_settings() -> Settings:
    """Get a fresh settings instance."""
    return Settings()
