"""
Session scope derivation.

A scope ties backend sessions to one page or document so running context
from one site never bleeds into another. Query strings and fragments are
ignored: the same form on ?page=1 and ?page=2 shares a session.
"""

from typing import Optional
from urllib.parse import urlsplit

SCOPE_PREFIX = "scope"


def derive_session_scope(url: Optional[str] = None, page_title: Optional[str] = None) -> str:
    """
    Return ``scope:<8 hex digits>`` for the page identity.

    The URL (origin + path, lower-cased) is preferred, then the trimmed page
    title; with neither, every request shares the ``global`` scope hash.
    """
    base = _normalize_context(url, page_title) or "global"
    return f"{SCOPE_PREFIX}:{_hash_string(base)}"


def _normalize_context(url: Optional[str], page_title: Optional[str]) -> str:
    if url:
        normalized = _sanitize_url(url)
        if normalized:
            return normalized
    if page_title:
        return page_title.strip()
    return ""


def _sanitize_url(raw_url: str) -> str:
    try:
        parts = urlsplit(raw_url)
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return raw_url
    if not parts.scheme or not hostname:
        # Not an absolute URL; use it verbatim
        return raw_url
    origin = f"{parts.scheme}://{hostname}"
    if port is not None and port != _DEFAULT_PORTS.get(parts.scheme.lower()):
        origin += f":{port}"
    return f"{origin}{parts.path or '/'}".lower()


_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


def _hash_string(value: str) -> str:
    """31-multiplier hash over UTF-16 code units, kept to 32 bits."""
    encoded = value.encode("utf-16-le", "surrogatepass")
    hash_value = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        hash_value = (hash_value * 31 + code_unit) & 0xFFFFFFFF
    return f"{hash_value:08x}"
