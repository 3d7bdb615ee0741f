"""
commscope/extractors - partner identity extraction from free-text cells.
"""

from commscope.extractors.identity import (
    UNKNOWN_NAME,
    extract_identities,
    normalize_identifier,
    parse_line,
)

__all__ = [
    "UNKNOWN_NAME",
    "extract_identities",
    "normalize_identifier",
    "parse_line",
]
