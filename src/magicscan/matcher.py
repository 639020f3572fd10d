# topmark:header:start
#
#   project      : MagicScan
#   file         : matcher.py
#   file_relpath : src/magicscan/matcher.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Byte-level signature matching.

`matches` tests one file against one signature by reading exactly the bytes
the signature needs. `classify` tests a file against an ordered signature list
and returns the first hit; it reads the file once and applies the same size
rules as `matches`, so both agree for every signature.

Any failure to open, stat or read a file is logged and treated as "no match".
File handles never outlive the call that opened them.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from magicscan.config.logging import MagicScanLogger, get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from magicscan.signatures.base import Signature

logger: MagicScanLogger = get_logger(__name__)


def _read_prefix(path: str | os.PathLike[str], wanted: int) -> tuple[bytes, int] | None:
    """Read up to `wanted` leading bytes of a file.

    Args:
        path (str | os.PathLike[str]): File to read.
        wanted (int): Maximum number of bytes to read.

    Returns:
        tuple[bytes, int] | None: The bytes read and the file size, or None if the
            file could not be opened, stat'ed or read.
    """
    try:
        with open(path, "rb") as handle:
            size: int = os.fstat(handle.fileno()).st_size
            data: bytes = handle.read(min(wanted, size))
    except OSError as exc:
        logger.warning("Unable to read file %s: %s", path, exc)
        return None
    return data, size


def matches(path: str | os.PathLike[str], signature: Signature) -> bool:
    """Return True if the file at `path` carries `signature`.

    Files smaller than `signature.required_size`, short reads and I/O errors
    all yield False.

    Args:
        path (str | os.PathLike[str]): File to test.
        signature (Signature): Signature to look for.

    Returns:
        bool: True if the pattern sits at the signature's offset.
    """
    required: int = signature.required_size
    try:
        with open(path, "rb") as handle:
            size: int = os.fstat(handle.fileno()).st_size
            if required > size:
                logger.trace(
                    "File too small for %s (%d < %d): %s", signature.type_name, size, required, path
                )
                return False
            data: bytes = handle.read(required)
    except OSError as exc:
        logger.warning("Unable to read file %s: %s", path, exc)
        return False

    if len(data) < required:
        logger.debug("Short read on %s (%d of %d bytes)", path, len(data), required)
        return False
    return signature.matches_prefix(data)


def classify(path: str | os.PathLike[str], signatures: Sequence[Signature]) -> Signature | None:
    """Return the first signature in `signatures` that the file matches.

    Ties between signatures matching the same file are resolved by list order:
    earlier entries win.

    Args:
        path (str | os.PathLike[str]): File to classify.
        signatures (Sequence[Signature]): Ordered signature list.

    Returns:
        Signature | None: The matching signature, or None if none match.
    """
    if not signatures:
        return None

    result: tuple[bytes, int] | None = _read_prefix(
        path, max(sig.required_size for sig in signatures)
    )
    if result is None:
        return None
    data, size = result

    for sig in signatures:
        if sig.required_size > size:
            logger.trace("File too small for %s: %s", sig.type_name, path)
            continue
        if sig.matches_prefix(data):
            logger.debug("Matched %s: %s", sig.type_name, path)
            return sig
    return None
