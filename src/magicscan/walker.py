# topmark:header:start
#
#   project      : MagicScan
#   file         : walker.py
#   file_relpath : src/magicscan/walker.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Recursive directory walker feeding candidate paths to a sink.

The walker visits the tree depth-first in lexical name order and publishes the
path of every regular file. Directories are traversed but never published;
symbolic links are neither published nor followed.

Errors are non-fatal: an unreadable root, directory or entry is logged and
the walk continues with what remains. The only exception the walker raises is
the cancellation token's error, checked before traversal and at every entry.
"""

from __future__ import annotations

import os
import stat
from typing import TYPE_CHECKING, Protocol

from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern

from magicscan.config.logging import MagicScanLogger, get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from magicscan.cancellation import CancellationToken

logger: MagicScanLogger = get_logger(__name__)


class PathSink(Protocol):
    """Destination for the paths the walker publishes."""

    def put(self, path: str) -> bool:
        """Publish `path`, blocking while the sink is full.

        Returns:
            bool: False if the sink no longer accepts paths (the scan was stopped).
        """
        ...


def build_exclude_spec(patterns: Iterable[str]) -> PathSpec | None:
    """Compile gitignore-style exclude patterns.

    Args:
        patterns (Iterable[str]): Patterns such as `".git/"` or `"*.tmp"`.

    Returns:
        PathSpec | None: The compiled spec, or None when no patterns are given.
    """
    lines: list[str] = [p.strip() for p in patterns if p and p.strip()]
    if not lines:
        return None
    return PathSpec.from_lines(GitWildMatchPattern, lines)


def _list_dir(directory: str) -> list[os.DirEntry[str]] | None:
    """Return the entries of `directory` sorted by name, or None if unreadable."""
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as exc:
        logger.warning("Unable to read directory %s: %s", directory, exc)
        return None


def _is_excluded(spec: PathSpec | None, root: str, path: str, is_dir: bool) -> bool:
    """Return True if `path` (relative to `root`) matches the exclude spec."""
    if spec is None:
        return False
    rel: str = os.path.relpath(path, root).replace(os.sep, "/")
    if is_dir:
        rel += "/"
    return spec.match_file(rel)


def walk(
    root: str | os.PathLike[str],
    sink: PathSink,
    *,
    token: CancellationToken | None = None,
    exclude: PathSpec | None = None,
) -> int:
    """Publish every regular file under `root` to `sink`.

    Args:
        root (str | os.PathLike[str]): Directory (or single file) to walk.
        sink (PathSink): Receives each regular file path.
        token (CancellationToken | None): Optional cancellation token.
        exclude (PathSpec | None): Optional exclude spec, matched against the POSIX
            path relative to `root` (directories carry a trailing `/`).

    Returns:
        int: Number of paths published.

    Raises:
        ScanCancelledError: If `token` fires before or during the walk.
    """
    if token is not None:
        token.raise_if_cancelled()

    root_path: str = os.fspath(root)
    logger.debug("Walking %s", root_path)

    try:
        root_stat: os.stat_result = os.stat(root_path)
    except OSError as exc:
        logger.warning("Unable to read directory %s: %s", root_path, exc)
        return 0

    if stat.S_ISREG(root_stat.st_mode):
        return 1 if sink.put(root_path) else 0
    if not stat.S_ISDIR(root_stat.st_mode):
        logger.debug("Root is neither a directory nor a regular file: %s", root_path)
        return 0

    top: list[os.DirEntry[str]] | None = _list_dir(root_path)
    if top is None:
        return 0

    published: int = 0
    stack: list[Iterator[os.DirEntry[str]]] = [iter(top)]
    while stack:
        entry: os.DirEntry[str] | None = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        if token is not None:
            token.raise_if_cancelled()

        try:
            if entry.is_dir(follow_symlinks=False):
                if _is_excluded(exclude, root_path, entry.path, True):
                    logger.trace("Excluded directory: %s", entry.path)
                    continue
                children: list[os.DirEntry[str]] | None = _list_dir(entry.path)
                if children:
                    stack.append(iter(children))
                continue
            if not entry.is_file(follow_symlinks=False):
                logger.trace("Skipping non-regular entry: %s", entry.path)
                continue
        except OSError as exc:
            logger.warning("Unable to stat %s: %s", entry.path, exc)
            continue

        if _is_excluded(exclude, root_path, entry.path, False):
            logger.trace("Excluded file: %s", entry.path)
            continue

        if not sink.put(entry.path):
            if token is not None:
                token.raise_if_cancelled()
            logger.debug("Sink stopped accepting paths after %d file(s)", published)
            return published
        published += 1

    logger.debug("Walk of %s published %d file(s)", root_path, published)
    return published
