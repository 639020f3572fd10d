# topmark:header:start
#
#   project      : MagicScan
#   file         : base.py
#   file_relpath : src/magicscan/signatures/base.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Signature value type and list validation.

A `Signature` names one recognizable file format by a byte pattern that must
appear at a fixed offset from the start of the file. Callers pass signatures as
an ordered sequence; the order is the match priority.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from magicscan.config.logging import MagicScanLogger, get_logger
from magicscan.constants import MAX_SIGNATURES
from magicscan.errors import TooManySignaturesError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger: MagicScanLogger = get_logger(__name__)


def parse_hex_pattern(text: str) -> bytes:
    """Parse a hex byte pattern such as `"D0 CF 11 E0"`, `"d0cf11e0"` or `"0xD0 0xCF"`.

    Whitespace, `:` and `-` separators and `0x` prefixes are accepted.

    Args:
        text (str): Hex representation of the pattern.

    Returns:
        bytes: The decoded pattern.

    Raises:
        ValueError: If the text is not a valid, non-empty, even-length hex string.
    """
    tokens: list[str] = text.replace(":", " ").replace("-", " ").replace(",", " ").split()
    cleaned: str = "".join(t[2:] if t.lower().startswith("0x") else t for t in tokens)
    if not cleaned:
        raise ValueError("Empty hex pattern")
    try:
        return bytes.fromhex(cleaned)
    except ValueError as exc:
        raise ValueError(f"Invalid hex pattern {text!r}: {exc}") from exc


def format_hex_pattern(pattern: bytes) -> str:
    """Render a pattern as space-separated upper-case hex (e.g. `"FF D8"`)."""
    return " ".join(f"{b:02X}" for b in pattern)


@dataclass(frozen=True)
class Signature:
    """Immutable description of one recognizable file format.

    Attributes:
        type_name (str): Name reported for files that match (e.g. `"xls"`).
        pattern (bytes): The magic bytes.
        offset (int): Position of `pattern` from the start of the file.
    """

    type_name: str
    pattern: bytes
    offset: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.type_name, str) or not self.type_name:
            raise ValueError("Signature type name must be a non-empty string")
        if not isinstance(self.pattern, (bytes, bytearray)) or not self.pattern:
            raise ValueError(f"Signature {self.type_name!r}: pattern must be non-empty bytes")
        if isinstance(self.offset, bool) or not isinstance(self.offset, int) or self.offset < 0:
            raise ValueError(
                f"Signature {self.type_name!r}: offset must be a non-negative integer"
            )
        if isinstance(self.pattern, bytearray):
            object.__setattr__(self, "pattern", bytes(self.pattern))

    @classmethod
    def from_hex(cls, type_name: str, hex_pattern: str, offset: int = 0) -> Signature:
        """Build a signature from a hex pattern string.

        Args:
            type_name (str): Name reported for matching files.
            hex_pattern (str): Pattern as hex text, see `parse_hex_pattern`.
            offset (int): Offset of the pattern from the start of the file.

        Returns:
            Signature: The new signature.
        """
        return cls(type_name=type_name, pattern=parse_hex_pattern(hex_pattern), offset=offset)

    @property
    def required_size(self) -> int:
        """Number of leading bytes a file must have to possibly contain the pattern."""
        return self.offset + len(self.pattern)

    def matches_prefix(self, data: bytes) -> bool:
        """Return True if `data` (the leading bytes of a file) carries this signature.

        Args:
            data (bytes): Bytes read from the start of a file.

        Returns:
            bool: True when `data` is long enough and the pattern sits at `offset`.
        """
        end: int = self.required_size
        if len(data) < end:
            return False
        return data[self.offset : end] == self.pattern

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping (`type`, `pattern` as hex, `offset`)."""
        return {
            "type": self.type_name,
            "pattern": format_hex_pattern(self.pattern),
            "offset": self.offset,
        }

    def __str__(self) -> str:
        return f"{self.type_name}: {format_hex_pattern(self.pattern)} @ {self.offset}"


def validate_signatures(signatures: Sequence[Any]) -> None:
    """Check that a signature list is acceptable for a scan.

    Only the length is checked; no I/O is performed. The empty list is valid.

    Args:
        signatures (Sequence[Any]): The ordered signature list.

    Raises:
        TooManySignaturesError: If more than `MAX_SIGNATURES` entries are given.
    """
    count: int = len(signatures)
    if count > MAX_SIGNATURES:
        logger.error("Signature list too long: %d (max %d)", count, MAX_SIGNATURES)
        raise TooManySignaturesError(count, MAX_SIGNATURES)
    logger.trace("Signature list accepted: %d entries", count)
