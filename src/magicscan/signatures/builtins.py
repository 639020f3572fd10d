# topmark:header:start
#
#   project      : MagicScan
#   file         : builtins.py
#   file_relpath : src/magicscan/signatures/builtins.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Built-in signatures for common file formats.

The tuple order is the match priority: longer, more specific patterns come
before short ones that could also match (BMP's two-byte `BM` is last).
"""

from __future__ import annotations

from magicscan.signatures.base import Signature

BUILTIN_SIGNATURES: tuple[Signature, ...] = (
    # Documents and containers
    Signature("xls", b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"),  # OLE2 compound file
    Signature("pdf", b"%PDF-"),
    Signature("sqlite", b"SQLite format 3\x00"),
    Signature("psd", b"8BPS"),
    # Images
    Signature("png", b"\x89PNG\r\n\x1a\n"),
    Signature("jpg", b"\xff\xd8\xff"),
    Signature("gif", b"GIF87a"),
    Signature("gif", b"GIF89a"),
    Signature("tiff", b"II*\x00"),
    Signature("tiff", b"MM\x00*"),
    # Archives and compression
    Signature("zip", b"PK\x03\x04"),
    Signature("zip", b"PK\x05\x06"),  # empty archive
    Signature("7z", b"7z\xbc\xaf\x27\x1c"),
    Signature("rar", b"Rar!\x1a\x07"),
    Signature("gz", b"\x1f\x8b"),
    Signature("bz2", b"BZh"),
    Signature("xz", b"\xfd7zXZ\x00"),
    Signature("zst", b"\x28\xb5\x2f\xfd"),
    Signature("tar", b"ustar", offset=257),
    Signature("iso", b"CD001", offset=32769),
    # Executables and bytecode
    Signature("elf", b"\x7fELF"),
    Signature("macho", b"\xcf\xfa\xed\xfe"),
    Signature("macho", b"\xce\xfa\xed\xfe"),
    Signature("class", b"\xca\xfe\xba\xbe"),
    Signature("wasm", b"\x00asm"),
    Signature("exe", b"MZ"),
    # Audio and video
    Signature("flac", b"fLaC"),
    Signature("ogg", b"OggS"),
    Signature("mp3", b"ID3"),
    Signature("mkv", b"\x1a\x45\xdf\xa3"),
    Signature("mp4", b"ftyp", offset=4),
    # Weak two-byte patterns last
    Signature("bmp", b"BM"),
)
