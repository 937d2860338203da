"""
Integration tests for the Inline Completion Engine.

Test components together or against real external services:
- API endpoints (FastAPI TestClient over a scripted provider)
- Ollama backend (real calls, marked with @pytest.mark.integration)
"""
