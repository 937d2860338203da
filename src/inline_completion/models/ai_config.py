"""
Backend configuration models.

AIConfig is supplied by configuration collaborators and is never mutated by
the engine. Its fields (together with the session scope) form the identity of
a backend session.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from inline_completion.models.enums import OutputLanguage

# (scope, temperature, top_k, max_tokens, system_prompt, output_language)
SessionKey = tuple[str, float, int, int, Optional[str], str]


class AIConfig(BaseModel):
    """Generation parameters for one backend configuration."""
    
    model_config = ConfigDict(frozen=True)
    
    temperature: float = Field(default=0.7, ge=0.0, le=1.0, description="Sampling temperature")
    top_k: int = Field(default=3, ge=1, description="Top-K sampling")
    max_tokens: int = Field(default=150, ge=1, description="Maximum tokens per completion")
    system_prompt: Optional[str] = Field(default=None, description="Initial system instruction")
    output_language: Optional[OutputLanguage] = Field(
        default=None,
        description="Output language; None lets the backend pick the default"
    )
    
    def session_key(self, scope: str) -> SessionKey:
        """
        Registry key: distinct (scope, config) tuples never share a session.
        
        Fields stay separate, so free-form scopes and system prompts never
        run into each other.
        """
        return (
            scope,
            self.temperature,
            self.top_k,
            self.max_tokens,
            self.system_prompt,
            self.output_language.value if self.output_language else "auto",
        )


class CreateOptions(BaseModel):
    """Options handed to a backend when creating a new session."""
    
    model_config = ConfigDict(frozen=True)
    
    temperature: float
    top_k: int
    max_tokens: int
    output_language: OutputLanguage
    system_prompt: Optional[str] = None


class SessionPromptOptions(BaseModel):
    """Per-prompt options passed to a backend session."""
    
    model_config = ConfigDict(frozen=True)
    
    response_constraint: Optional[dict[str, Any]] = Field(
        default=None,
        description="JSON Schema the output must follow, if the backend supports it"
    )
