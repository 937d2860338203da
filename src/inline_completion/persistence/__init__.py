"""
Persistence layer for completion results.

Components:
- CompletionCache: bounded, time-limited, LFU-evicting in-memory cache
"""

from inline_completion.persistence.completion_cache import CompletionCache

__all__ = ["CompletionCache"]
