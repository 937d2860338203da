"""
FastAPI dependency injection for the completion service.

The orchestrator is a process-wide singleton: the service serves one local
user, so concurrent /completions calls supersede each other exactly like
keystrokes in a single text field.
"""

from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from inline_completion.api.models import ProviderInfo
from inline_completion.completion.orchestrator import CompletionOrchestrator
from inline_completion.config import Settings, settings
from inline_completion.llm.base_provider import BaseCompletionProvider
from inline_completion.llm.local_provider import LocalModelProvider
from inline_completion.llm.ollama_backend import OllamaBackend
from inline_completion.llm.openai_provider import OpenAICompatibleProvider
from inline_completion.llm.session_manager import SessionManager
from inline_completion.models.ai_config import AIConfig
from inline_completion.models.enums import OutputLanguage
from inline_completion.persistence.completion_cache import CompletionCache
from inline_completion.prompt.prompt_builder import PromptBuilder
from inline_completion.prompt.prompts import SYSTEM_PROMPT
from inline_completion.scheduling.admission_queue import AdmissionQueue


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.
    
    Returns:
        Settings instance
    """
    return settings


@lru_cache()
def get_ai_config() -> AIConfig:
    """Generation parameters from settings, validated once."""
    cfg = get_settings()
    return AIConfig(
        temperature=cfg.AI_TEMPERATURE,
        top_k=cfg.AI_TOP_K,
        max_tokens=cfg.AI_MAX_TOKENS,
        system_prompt=SYSTEM_PROMPT,
        output_language=OutputLanguage(cfg.OUTPUT_LANGUAGE) if cfg.OUTPUT_LANGUAGE else None,
    )


@lru_cache()
def get_ollama_backend() -> OllamaBackend:
    """
    Get singleton Ollama backend with a pooled HTTP client.
    
    Also used directly by POST /model/download.
    """
    cfg = get_settings()
    return OllamaBackend(
        base_url=cfg.OLLAMA_BASE_URL,
        model=cfg.OLLAMA_MODEL,
        timeout=cfg.OLLAMA_TIMEOUT,
    )


@lru_cache()
def get_provider() -> BaseCompletionProvider:
    """Provider selected by settings.PROVIDER."""
    cfg = get_settings()
    if cfg.PROVIDER == "openai":
        return OpenAICompatibleProvider(
            api_key=cfg.OPENAI_API_KEY,
            model=cfg.OPENAI_MODEL,
            base_url=cfg.OPENAI_BASE_URL,
        )
    session_manager = SessionManager(
        get_ollama_backend(),
        idle_timeout=cfg.SESSION_IDLE_TIMEOUT_SECONDS,
        default_output_language=OutputLanguage(cfg.DEFAULT_OUTPUT_LANGUAGE),
    )
    return LocalModelProvider(session_manager)


@lru_cache()
def get_prompt_builder() -> PromptBuilder:
    """
    Get singleton prompt builder.
    
    Loads the Jinja2 template once and reuses it across requests.
    """
    cfg = get_settings()
    return PromptBuilder(
        templates_dir=Path(cfg.PROMPT_TEMPLATES_DIR) if cfg.PROMPT_TEMPLATES_DIR else None,
        max_tokens=cfg.AI_MAX_TOKENS,
        context_window_chars=cfg.CONTEXT_WINDOW_CHARS,
    )


@lru_cache()
def get_orchestrator() -> CompletionOrchestrator:
    """
    Get the singleton completion orchestrator.
    
    Owns the cache, the admission queue and (through the provider) every
    backend session; main.shutdown() releases them.
    """
    cfg = get_settings()
    return CompletionOrchestrator(
        provider=get_provider(),
        prompt_builder=get_prompt_builder(),
        ai_config=get_ai_config(),
        cache=CompletionCache(ttl_seconds=cfg.CACHE_TTL_SECONDS, max_size=cfg.CACHE_MAX_ENTRIES),
        queue=AdmissionQueue(
            min_delay=cfg.QUEUE_MIN_DELAY_MS / 1000,
            priority_lane=cfg.FOREGROUND_PRIORITY_LANE,
        ),
        max_suggestions=cfg.MAX_SUGGESTIONS,
        response_timeout_ms=cfg.RESPONSE_TIMEOUT_MS,
    )


def get_provider_info(
    orchestrator: CompletionOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> ProviderInfo:
    """Configured vs. serving provider, echoed in responses."""
    return ProviderInfo(preference=settings.PROVIDER, resolved=orchestrator.provider.name)
