"""
Backend output validation.

- response_parser.py: decode {"suggestions": [{"text": ...}]} or report the
  output as unstructured; build the structured-output constraint
"""

from .response_parser import build_response_constraint, decode_suggestions, parse_suggestions

__all__ = [
    "build_response_constraint",
    "decode_suggestions",
    "parse_suggestions",
]
