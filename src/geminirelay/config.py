from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _unprefixed(name: str) -> AliasChoices:
    # Provider keys keep the env names the deployments already use
    return AliasChoices(name, name.upper())


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RELAY_", env_file=".env", extra="ignore", populate_by_name=True
    )

    # Gemini (primary provider)
    gemini_api_key: str = Field(default="", validation_alias=_unprefixed("gemini_api_key"))
    gemini_model: str = Field(
        default="gemini-2.5-flash", validation_alias=_unprefixed("gemini_model")
    )
    gemini_api_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias=_unprefixed("gemini_api_url"),
    )

    # OpenAI (fallback for non-streaming generate)
    openai_api_key: str = Field(default="", validation_alias=_unprefixed("openai_api_key"))
    openai_model: str = Field(default="gpt-3.5-turbo", validation_alias=_unprefixed("openai_model"))
    openai_api_url: str = Field(
        default="https://api.openai.com/v1", validation_alias=_unprefixed("openai_api_url")
    )

    # Generation defaults
    default_temperature: float = 0.7
    default_max_tokens: int = 900
    top_p: float = 0.95
    top_k: int = 40
    safety_threshold: str = "BLOCK_ONLY_HIGH"

    # Upstream HTTP
    upstream_timeout_s: float = 120.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
