"""
Unit tests for the Inline Completion Engine.

Test individual components in isolation:
- Data models and API payloads (validation, fingerprints, session keys)
- Scheduling (clock, admission queue ordering and delays)
- Cache (TTL expiry, LFU eviction)
- Backends and providers (session reuse, cloning, abort and timeout)
- Prompt assembly (context analysis, domain prompts, compression)
- Reconciliation, parsing and ranking of suggestions
"""
