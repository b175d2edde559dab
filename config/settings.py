# config/settings.py

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from prompts import PROMPTS


class OpenAIConfig(BaseModel):
    """Config for OpenAI chat completions + image generation."""

    api_key: Optional[str] = Field(None, repr=False)  # falls back to OPENAI_API_KEY
    base_url: Optional[str] = None
    chat_model: str = "gpt-4o-mini"
    temperature: float = 0.1  # between 0 and 2, low favours determinism
    image_model: str = "dall-e-3"
    image_size: Literal["1024x1024", "1792x1024", "1024x1792"] = "1024x1024"  # sizes dall-e-3 accepts
    request_timeout_seconds: float = 60.0
    system_prompt: str = PROMPTS['system']


class AgentConfig(BaseModel):
    """Config for the tool-calling loop in agent.py."""

    max_iterations: int = 5
    enable_tools: bool = True


class LoggingConfig(BaseModel):
    """Basic logging config."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_logging: bool = True


class Settings(BaseSettings):
    """Top-level app settings loaded from environment / .env."""

    # Nested configs
    openai: OpenAIConfig = OpenAIConfig()
    agent: AgentConfig = AgentConfig()
    logging: LoggingConfig = LoggingConfig()

    # pydantic-settings v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",              # all vars start with APP_
        env_nested_delimiter="__",      # APP_OPENAI__CHAT_MODEL, etc.
        case_sensitive=False,
        extra="ignore",
    )


# Single global instance you import everywhere
settings = Settings()
