# topmark:header:start
#
#   project      : MagicScan
#   file         : test_search.py
#   file_relpath : tests/api/test_search.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the `search` scan coordinator.

These cover the observable contract of a scan: validation before I/O,
the callback protocol, cancellation, early stop and fault reporting.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any, NoReturn

import pytest

import magicscan
from magicscan import (
    CancellationToken,
    DeadlineExceededError,
    ScanCancelledError,
    ScanReport,
    Signature,
    TooManySignaturesError,
    scanner,
    search,
)
from magicscan.constants import MAX_SIGNATURES
from tests.conftest import (
    JPG_HEADER,
    PNG_HEADER,
    XLS_HEADER,
    MatchRecorder,
    mark_integration,
    write_file,
)

POLL: float = 0.01


def _forbid_io(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*args: Any, **kwargs: Any) -> NoReturn:
        raise AssertionError("unexpected filesystem access")

    monkeypatch.setattr(os, "stat", _fail)
    monkeypatch.setattr(os, "scandir", _fail)
    monkeypatch.setattr("magicscan.scanner.WorkerPool", _fail)


def test_too_many_signatures_fails_before_any_io(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    signatures = [Signature("t", b"\x01")] * (MAX_SIGNATURES + 1)
    recorder = MatchRecorder()
    _forbid_io(monkeypatch)
    with pytest.raises(TooManySignaturesError):
        search(tmp_path, signatures, recorder)
    assert recorder.calls == []


def test_exactly_max_signatures_is_accepted(tmp_path: Path) -> None:
    signatures = [Signature("never", b"\x01\x02\x03")] * MAX_SIGNATURES
    report: ScanReport = search(tmp_path, signatures, MatchRecorder(), workers=2, poll_interval=POLL)
    assert report.ok


def test_empty_signature_list_succeeds_without_callbacks(
    xls_tree: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    recorder = MatchRecorder()
    _forbid_io(monkeypatch)
    report: ScanReport = search(xls_tree, [], recorder)
    assert recorder.calls == []
    assert report == ScanReport(root=str(xls_tree))


def test_already_cancelled_token_raises_and_never_calls_back(
    xls_tree: Path, sample_signatures: list[Signature]
) -> None:
    token = CancellationToken()
    token.cancel()
    recorder = MatchRecorder()
    with pytest.raises(ScanCancelledError) as excinfo:
        search(xls_tree, sample_signatures, recorder, token=token, poll_interval=POLL)
    assert not isinstance(excinfo.value, DeadlineExceededError)
    assert recorder.calls == []


def test_elapsed_deadline_raises_deadline_exceeded(
    xls_tree: Path, sample_signatures: list[Signature]
) -> None:
    token = CancellationToken.with_timeout(0)
    recorder = MatchRecorder()
    with pytest.raises(DeadlineExceededError):
        search(xls_tree, sample_signatures, recorder, token=token, poll_interval=POLL)
    assert recorder.calls == []


@mark_integration
def test_single_xls_file_yields_exactly_one_callback(
    tmp_path: Path, sample_signatures: list[Signature]
) -> None:
    path: Path = write_file(tmp_path, "report.xls", XLS_HEADER)
    recorder = MatchRecorder()
    report: ScanReport = search(tmp_path, sample_signatures, recorder, poll_interval=POLL)
    assert recorder.calls == [(str(path), "xls")]
    assert report.matches == 1
    assert report.files_published == report.files_processed == 1
    assert report.ok and not report.stopped


def test_empty_directory_yields_no_callbacks(
    tmp_path: Path, sample_signatures: list[Signature]
) -> None:
    recorder = MatchRecorder()
    report: ScanReport = search(tmp_path, sample_signatures, recorder, poll_interval=POLL)
    assert recorder.calls == []
    assert report.files_published == 0
    assert report.ok


def test_missing_root_is_success(tmp_path: Path, sample_signatures: list[Signature]) -> None:
    recorder = MatchRecorder()
    report: ScanReport = search(
        tmp_path / "nope", sample_signatures, recorder, poll_interval=POLL
    )
    assert recorder.calls == []
    assert report.files_published == 0


def test_zero_byte_file_is_not_matched(tmp_path: Path, sample_signatures: list[Signature]) -> None:
    write_file(tmp_path, "empty.xls", b"")
    recorder = MatchRecorder()
    report: ScanReport = search(tmp_path, sample_signatures, recorder, poll_interval=POLL)
    assert recorder.calls == []
    assert report.files_processed == 1


@mark_integration
def test_mixed_tree_reports_each_match_once(
    xls_tree: Path, sample_signatures: list[Signature]
) -> None:
    jpg: Path = write_file(xls_tree, "photos/cat.jpg", JPG_HEADER + b"\xe0\x00\x10JFIF")
    png: Path = write_file(xls_tree, "photos/dog.png", PNG_HEADER + b"\x00" * 8)
    recorder = MatchRecorder()
    report: ScanReport = search(
        xls_tree, sample_signatures, recorder, workers=3, poll_interval=POLL
    )
    assert sorted(recorder.calls) == sorted(
        [
            (str(xls_tree / "sub" / "b.xls"), "xls"),
            (str(jpg), "jpg"),
            (str(png), "png"),
        ]
    )
    assert report.files_published == 6
    assert report.files_processed == 6


def test_earlier_signature_wins(tmp_path: Path) -> None:
    path: Path = write_file(tmp_path, "both.bin", b"\xff\xd8\xff\xe0")
    recorder = MatchRecorder()
    search(
        tmp_path,
        [Signature("short", b"\xff\xd8"), Signature("long", b"\xff\xd8\xff")],
        recorder,
        poll_interval=POLL,
    )
    assert recorder.calls == [(str(path), "short")]


def test_exclude_patterns_are_honored(xls_tree: Path, sample_signatures: list[Signature]) -> None:
    recorder = MatchRecorder()
    report: ScanReport = search(
        xls_tree, sample_signatures, recorder, exclude=["*.xls"], poll_interval=POLL
    )
    assert recorder.calls == []
    assert report.files_published == 3


def test_callback_returning_false_stops_whole_scan(
    tmp_path: Path, sample_signatures: list[Signature]
) -> None:
    for i in range(200):
        write_file(tmp_path, f"d{i % 10}/img{i:03}.jpg", JPG_HEADER + b"\x00")
    recorder = MatchRecorder(result=False)
    report: ScanReport = search(
        tmp_path, sample_signatures, recorder, workers=2, poll_interval=POLL
    )
    assert report.stopped
    assert report.files_published < 200
    assert 1 <= len(recorder.calls) <= 2


def test_raising_callback_is_reported_as_fault(
    tmp_path: Path, sample_signatures: list[Signature]
) -> None:
    bad: Path = write_file(tmp_path, "bad.jpg", JPG_HEADER + b"\x00")
    write_file(tmp_path, "good.jpg", JPG_HEADER + b"\x01")
    seen: list[str] = []
    lock = threading.Lock()

    def on_match(path: str, type_name: str) -> bool:
        with lock:
            seen.append(path)
        if path == str(bad):
            raise ValueError("callback failure")
        return True

    report: ScanReport = search(tmp_path, sample_signatures, on_match, poll_interval=POLL)
    assert len(seen) == 2
    assert not report.ok
    (fault,) = report.faults
    assert fault.path == str(bad)
    assert isinstance(fault.error, ValueError)


def test_cancellation_during_walk_is_observed(
    tmp_path: Path, sample_signatures: list[Signature]
) -> None:
    for i in range(100):
        write_file(tmp_path, f"img{i:03}.jpg", JPG_HEADER + b"\x00")
    token = CancellationToken()
    recorder_calls: list[str] = []
    lock = threading.Lock()

    def on_match(path: str, type_name: str) -> bool:
        with lock:
            recorder_calls.append(path)
        token.cancel()
        return True

    with pytest.raises(ScanCancelledError):
        search(tmp_path, sample_signatures, on_match, token=token, workers=1, poll_interval=POLL)
    assert len(recorder_calls) < 100


def test_cancellation_after_walk_with_queued_paths_raises(
    tmp_path: Path, sample_signatures: list[Signature], monkeypatch: pytest.MonkeyPatch
) -> None:
    for i in range(2):
        write_file(tmp_path, f"img{i}.jpg", JPG_HEADER + b"\x00")
    token = CancellationToken()
    walk_done = threading.Event()
    real_walk = scanner.walk

    def tracking_walk(*args: Any, **kwargs: Any) -> int:
        published: int = real_walk(*args, **kwargs)
        walk_done.set()
        return published

    def on_match(path: str, type_name: str) -> bool:
        # The second path is still queued when the token fires.
        assert walk_done.wait(5)
        token.cancel()
        return True

    monkeypatch.setattr(scanner, "walk", tracking_walk)
    with pytest.raises(ScanCancelledError):
        search(tmp_path, sample_signatures, on_match, token=token, workers=1, poll_interval=POLL)
    assert walk_done.is_set()


def test_package_exports_public_api() -> None:
    for name in ("search", "classify", "matches", "Signature", "ScanReport", "BUILTIN_SIGNATURES"):
        assert hasattr(magicscan, name)
