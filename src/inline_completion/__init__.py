"""
Inline Completion Engine.

Turns "the user wants a suggestion now" events from a text field into ranked
insertion strings produced by a local or remote language model:
- Session cache for expensive backend handles (idle expiry, per-prompt clones)
- Single-flight admission queue with a minimum inter-call gap
- Supersession, timeout and external cancellation of in-flight calls
- Tolerant parsing of structured / freeform model output
- Overlap reconciliation against the text around the caret

Architecture: FastAPI local service + CompletionOrchestrator + Ollama/OpenAI providers
"""

__version__ = "0.1.0"
