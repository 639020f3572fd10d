# topmark:header:start
#
#   project      : MagicScan
#   file         : test_walker.py
#   file_relpath : tests/unit/test_walker.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the directory walker."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from magicscan.cancellation import CancellationToken
from magicscan.errors import DeadlineExceededError, ScanCancelledError
from magicscan.walker import build_exclude_spec, walk
from tests.conftest import write_file


class ListSink:
    """Sink collecting published paths; stops accepting after `capacity` paths."""

    def __init__(self, capacity: int | None = None) -> None:
        self.capacity = capacity
        self.paths: list[str] = []

    def put(self, path: str) -> bool:
        if self.capacity is not None and len(self.paths) >= self.capacity:
            return False
        self.paths.append(path)
        return True


class CancellingSink(ListSink):
    """Sink that cancels `token` once it has received `after` paths."""

    def __init__(self, token: CancellationToken, after: int) -> None:
        super().__init__()
        self.token = token
        self.after = after

    def put(self, path: str) -> bool:
        accepted: bool = super().put(path)
        if len(self.paths) >= self.after:
            self.token.cancel()
        return accepted


def _rel(root: Path, paths: list[str]) -> list[str]:
    return [Path(p).relative_to(root).as_posix() for p in paths]


def test_walk_publishes_regular_files_in_lexical_order(xls_tree: Path) -> None:
    sink = ListSink()
    published: int = walk(xls_tree, sink)
    assert published == 4
    assert _rel(xls_tree, sink.paths) == [
        "a.txt",
        "sub/b.xls",
        "sub/deep/c.dat",
        "sub/empty.bin",
    ]


def test_walk_never_publishes_directories(tmp_path: Path) -> None:
    (tmp_path / "only" / "dirs" / "here").mkdir(parents=True)
    sink = ListSink()
    assert walk(tmp_path, sink) == 0
    assert sink.paths == []


def test_walk_of_empty_directory(tmp_path: Path) -> None:
    sink = ListSink()
    assert walk(tmp_path, sink) == 0


def test_walk_of_missing_root_is_not_an_error(tmp_path: Path) -> None:
    sink = ListSink()
    assert walk(tmp_path / "missing", sink) == 0
    assert sink.paths == []


def test_walk_of_regular_file_root_publishes_only_that_file(tmp_path: Path) -> None:
    path: Path = write_file(tmp_path, "single.bin", b"abc")
    sink = ListSink()
    assert walk(path, sink) == 1
    assert sink.paths == [str(path)]


@pytest.mark.skipif(os.name == "nt", reason="symlinks need privileges on Windows")
def test_walk_does_not_follow_or_publish_symlinks(tmp_path: Path) -> None:
    root: Path = tmp_path / "root"
    outside: Path = tmp_path / "outside"
    write_file(root, "real.bin", b"x")
    write_file(outside, "hidden.bin", b"y")
    (root / "link-to-file").symlink_to(root / "real.bin")
    (root / "link-to-dir").symlink_to(outside, target_is_directory=True)

    sink = ListSink()
    walk(root, sink)
    assert _rel(root, sink.paths) == ["real.bin"]


@pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="needs POSIX permissions")
def test_walk_skips_unreadable_directories(tmp_path: Path) -> None:
    write_file(tmp_path, "a/visible.bin", b"x")
    locked: Path = tmp_path / "b"
    write_file(locked, "invisible.bin", b"y")
    write_file(tmp_path, "c/also-visible.bin", b"z")
    locked.chmod(0)
    try:
        sink = ListSink()
        walk(tmp_path, sink)
    finally:
        locked.chmod(0o700)
    assert _rel(tmp_path, sink.paths) == ["a/visible.bin", "c/also-visible.bin"]


def test_walk_applies_exclude_patterns(xls_tree: Path) -> None:
    spec = build_exclude_spec(["deep/", "*.txt"])
    sink = ListSink()
    walk(xls_tree, sink, exclude=spec)
    assert _rel(xls_tree, sink.paths) == ["sub/b.xls", "sub/empty.bin"]


def test_build_exclude_spec_ignores_blank_patterns() -> None:
    assert build_exclude_spec([]) is None
    assert build_exclude_spec(["", "   "]) is None
    spec = build_exclude_spec(["*.tmp", ""])
    assert spec is not None
    assert spec.match_file("x/y.tmp")


def test_walk_stops_when_sink_refuses(xls_tree: Path) -> None:
    sink = ListSink(capacity=2)
    assert walk(xls_tree, sink) == 2
    assert len(sink.paths) == 2


def test_walk_with_cancelled_token_raises_before_traversal(xls_tree: Path) -> None:
    token = CancellationToken()
    token.cancel()
    sink = ListSink()
    with pytest.raises(ScanCancelledError):
        walk(xls_tree, sink, token=token)
    assert sink.paths == []


def test_walk_with_expired_deadline_raises_deadline_error(xls_tree: Path) -> None:
    token = CancellationToken.with_timeout(0)
    sink = ListSink()
    with pytest.raises(DeadlineExceededError):
        walk(xls_tree, sink, token=token)
    assert sink.paths == []


def test_walk_observes_cancellation_mid_walk(xls_tree: Path) -> None:
    token = CancellationToken()
    sink = CancellingSink(token, after=1)
    with pytest.raises(ScanCancelledError):
        walk(xls_tree, sink, token=token)
    assert len(sink.paths) == 1
