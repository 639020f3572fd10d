# topmark:header:start
#
#   project      : MagicScan
#   file         : scan.py
#   file_relpath : src/magicscan/cli/commands/scan.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""MagicScan `scan` command.

Walks a directory tree and reports every regular file whose leading bytes
carry one of the effective signatures. Matches are printed as the workers
find them, so the output order is not deterministic.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from magicscan.cancellation import CancellationToken
from magicscan.cli.cli_types import EnumChoiceParam
from magicscan.cli.config_resolver import resolve_config
from magicscan.cli.errors import (
    MagicScanCancelledError,
    MagicScanUsageError,
    MagicScanWorkerFaultError,
)
from magicscan.cli.options import OutputFormat, common_signature_options
from magicscan.config.logging import MagicScanLogger, get_logger
from magicscan.errors import ScanCancelledError, TooManySignaturesError
from magicscan.scanner import search

if TYPE_CHECKING:
    from magicscan.cli.console import ConsoleLike
    from magicscan.config.model import Config
    from magicscan.scanner import ScanReport

logger: MagicScanLogger = get_logger(__name__)


class _MatchPrinter:
    """Thread-safe match callback that renders results as they arrive.

    Args:
        console (ConsoleLike): Output console.
        fmt (OutputFormat): Rendering format.
        limit (int | None): Stop the scan once this many matches were reported.
    """

    def __init__(self, console: ConsoleLike, fmt: OutputFormat, limit: int | None) -> None:
        self.console = console
        self.fmt = fmt
        self.limit = limit
        self.results: list[dict[str, str]] = []
        self._lock = threading.Lock()

    def __call__(self, path: str, type_name: str) -> bool:
        with self._lock:
            if self.limit is not None and len(self.results) >= self.limit:
                return False
            self.results.append({"path": path, "type": type_name})
            if self.fmt == OutputFormat.NDJSON:
                self.console.print(json.dumps({"path": path, "type": type_name}))
            elif self.fmt == OutputFormat.DEFAULT:
                label: str = self.console.styled(type_name, fg="cyan", bold=True)
                self.console.print(f"{label}\t{path}")
            return self.limit is None or len(self.results) < self.limit


@click.command(
    name="scan",
    help="Report files under PATH whose magic bytes match a known signature.",
)
@click.argument("path", type=click.Path(path_type=Path))
@common_signature_options
@click.option(
    "-w",
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of worker threads (default: CPU count).",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Abort the scan after this many seconds.",
)
@click.option(
    "-e",
    "--exclude",
    "exclude_patterns",
    multiple=True,
    help="Gitignore-style pattern of paths to skip (repeatable).",
)
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many matches.",
)
@click.option(
    "--format",
    "output_format",
    type=EnumChoiceParam(OutputFormat),
    default=None,
    help=f"Output format ({', '.join(v.value for v in OutputFormat)}).",
)
def scan_command(
    *,
    path: Path,
    config_files: tuple[Path, ...] = (),
    no_config: bool = False,
    signature_specs: tuple[str, ...] = (),
    no_builtin: bool = False,
    workers: int | None = None,
    timeout: float | None = None,
    exclude_patterns: tuple[str, ...] = (),
    limit: int | None = None,
    output_format: OutputFormat | None = None,
) -> None:
    """Scan PATH and print one line per matching file.

    Raises:
        MagicScanUsageError: If too many signatures are configured.
        MagicScanCancelledError: If the scan was interrupted or timed out.
        MagicScanWorkerFaultError: If some files could not be processed.
    """
    ctx = click.get_current_context()
    ctx.ensure_object(dict)
    console: ConsoleLike = ctx.obj["console"]
    vlevel: int = ctx.obj.get("verbosity_level", 0)

    config: Config = resolve_config(
        config_files=config_files,
        no_config=no_config,
        signature_specs=signature_specs,
        no_builtin=no_builtin,
        workers=workers,
        timeout=timeout,
        exclude_patterns=exclude_patterns,
    )
    signatures = config.effective_signatures()
    fmt: OutputFormat = output_format or OutputFormat.DEFAULT

    if not signatures:
        console.warn("No signatures configured; nothing to scan for.")
    if not path.exists():
        console.warn(f"Path not found: {path}")

    token: CancellationToken = (
        CancellationToken.with_timeout(config.timeout)
        if config.timeout is not None
        else CancellationToken()
    )
    printer = _MatchPrinter(console, fmt, limit)

    try:
        report: ScanReport = search(
            path,
            signatures,
            printer,
            token=token,
            workers=config.workers,
            exclude=config.exclude_patterns,
            poll_interval=config.poll_interval,
        )
    except TooManySignaturesError as exc:
        raise MagicScanUsageError(str(exc)) from exc
    except ScanCancelledError as exc:
        raise MagicScanCancelledError(str(exc)) from exc
    except KeyboardInterrupt as exc:
        token.cancel()
        raise MagicScanCancelledError("scan interrupted") from exc

    # Matches refused past --limit are delivered to the callback but never shown.
    shown: int = len(printer.results)
    if fmt == OutputFormat.JSON:
        console.print(json.dumps(_report_to_dict(report, printer.results), indent=2))
    elif fmt == OutputFormat.DEFAULT and vlevel > 0:
        console.print()
        summary: str = (
            f"Scanned {report.files_processed} of {report.files_published} file(s), "
            f"{shown} match(es)"
        )
        if report.stopped:
            summary += " (stopped early)"
        console.print(console.styled(summary, bold=True))

    if report.faults:
        for fault in report.faults:
            console.warn(f"Warning: {fault.describe()}")
        raise MagicScanWorkerFaultError(
            f"{len(report.faults)} file(s) could not be processed"
        )


def _report_to_dict(report: ScanReport, results: list[dict[str, str]]) -> dict[str, Any]:
    return {
        "root": report.root,
        "matches": results,
        "summary": {
            "files_published": report.files_published,
            "files_processed": report.files_processed,
            "matches": len(results),
            "stopped": report.stopped,
            "faults": [fault.describe() for fault in report.faults],
        },
    }
