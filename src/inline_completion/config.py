"""
Configuration settings for the Inline Completion Engine.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # === Application ===
    APP_NAME: str = "Inline Completion Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    
    # === Provider Selection ===
    PROVIDER: Literal["local", "openai"] = "local"
    
    # === Ollama (local model) ===
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "qwen2.5:3b"
    OLLAMA_TIMEOUT: int = 60  # seconds, hard cap below the abort guard
    
    # === OpenAI-compatible remote API ===
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    
    # === Generation Parameters ===
    AI_TEMPERATURE: float = 0.7
    AI_TOP_K: int = 3
    AI_MAX_TOKENS: int = 150
    OUTPUT_LANGUAGE: Optional[Literal["en", "es", "ja"]] = None  # None = auto
    DEFAULT_OUTPUT_LANGUAGE: Literal["en", "es", "ja"] = "en"
    
    # === Engine ===
    MAX_SUGGESTIONS: int = 3
    RESPONSE_TIMEOUT_MS: int = 10000
    CACHE_TTL_SECONDS: float = 300.0  # 5 minutes
    CACHE_MAX_ENTRIES: int = 1000
    QUEUE_MIN_DELAY_MS: int = 40
    FOREGROUND_PRIORITY_LANE: bool = False  # False = single FIFO lane
    SESSION_IDLE_TIMEOUT_SECONDS: float = 300.0
    CONTEXT_WINDOW_CHARS: int = 1000
    
    # === Prompt Templates ===
    PROMPT_TEMPLATES_DIR: Optional[str] = None  # None = bundled templates
    
    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
