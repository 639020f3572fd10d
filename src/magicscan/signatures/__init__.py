# topmark:header:start
#
#   project      : MagicScan
#   file         : __init__.py
#   file_relpath : src/magicscan/signatures/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Signatures: the byte patterns MagicScan recognizes.

Re-exports the `Signature` value type, list validation, and the built-in
signature table.
"""

from __future__ import annotations

from magicscan.signatures.base import (
    Signature,
    format_hex_pattern,
    parse_hex_pattern,
    validate_signatures,
)
from magicscan.signatures.builtins import BUILTIN_SIGNATURES

__all__ = [
    "BUILTIN_SIGNATURES",
    "Signature",
    "format_hex_pattern",
    "parse_hex_pattern",
    "validate_signatures",
]
