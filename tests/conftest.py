# topmark:header:start
#
#   project      : MagicScan
#   file         : conftest.py
#   file_relpath : tests/conftest.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Pytest configuration for the MagicScan test suite.

Sets up logging for test runs and provides small helpers to build sample
trees of files with known leading bytes.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar, cast

import pytest

from magicscan.config import logging
from magicscan.signatures.base import Signature

F = TypeVar("F", bound=Callable[..., object])

DecoratorType = Callable[[F], F]

XLS_HEADER: bytes = bytes.fromhex("D0CF11E0A1B11AE1")
JPG_HEADER: bytes = bytes.fromhex("FFD8")
PNG_HEADER: bytes = bytes.fromhex("89504E470D0A1A0A")


def as_typed_mark(mark: Any) -> DecoratorType[Any]:
    """Wrap a pytest mark so static type checkers preserve the function type.

    Args:
        mark (Any): A pytest mark decorator such as `pytest.mark.integration`.

    Returns:
        DecoratorType[Any]: A decorator that preserves the wrapped function's type.
    """

    def _decorator(func: F) -> F:
        return cast("F", mark(func))

    return _decorator


mark_integration: DecoratorType[Any] = as_typed_mark(pytest.mark.integration)


def hookimpl(*args: Any, **kwargs: Any) -> Callable[[F], F]:
    """Typed wrapper for `pytest.hookimpl`."""
    return as_typed_mark(pytest.hookimpl(*args, **kwargs))


@pytest.fixture(autouse=True)
def silence_magicscan_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure MagicScan's runtime log level is not forced via env during tests.

    Args:
        monkeypatch (pytest.MonkeyPatch): Pytest monkeypatch fixture used to manipulate
            environment variables.
    """
    monkeypatch.delenv("MAGICSCAN_LOG_LEVEL", raising=False)


@hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pylint: disable=unused-argument
    """Set the logging level to TRACE for all tests.

    Args:
        config (pytest.Config): The pytest configuration object.
    """
    logging.setup_logging(level=logging.TRACE_LEVEL)


def write_file(root: Path, relpath: str, data: bytes) -> Path:
    """Create `root/relpath` (and its parents) holding `data`.

    Args:
        root (Path): Base directory.
        relpath (str): POSIX-style path relative to `root`.
        data (bytes): File content.

    Returns:
        Path: The created file.
    """
    path: Path = root / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


@pytest.fixture
def sample_signatures() -> list[Signature]:
    """The xls / jpg / png signature list used throughout the scan tests."""
    return [
        Signature("xls", XLS_HEADER, 0),
        Signature("jpg", JPG_HEADER, 0),
        Signature("png", PNG_HEADER, 0),
    ]


@pytest.fixture
def xls_tree(tmp_path: Path) -> Path:
    """A tree holding one xls file among non-matching files.

    Layout::

        root/
          a.txt          plain text
          sub/b.xls      OLE2 header + padding
          sub/empty.bin  zero bytes
          sub/deep/c.dat random-looking bytes
    """
    root: Path = tmp_path / "root"
    write_file(root, "a.txt", b"hello world\n")
    write_file(root, "sub/b.xls", XLS_HEADER + b"\x00" * 504)
    write_file(root, "sub/empty.bin", b"")
    write_file(root, "sub/deep/c.dat", bytes(range(7, 64)))
    return root


class MatchRecorder:
    """Thread-safe match callback recording every `(path, type)` pair.

    Args:
        result (bool | None): Value returned from each call.
    """

    def __init__(self, result: bool | None = True) -> None:
        self.result = result
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def __call__(self, path: str, type_name: str) -> bool:
        with self._lock:
            self.calls.append((path, type_name))
        return cast("bool", self.result)


@pytest.fixture
def recorder() -> MatchRecorder:
    """A fresh `MatchRecorder` that asks to keep scanning."""
    return MatchRecorder()
