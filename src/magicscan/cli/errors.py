# topmark:header:start
#
#   project      : MagicScan
#   file         : errors.py
#   file_relpath : src/magicscan/cli/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions for the MagicScan CLI.

Raise these in CLI commands to signal errors with standardized messages and
exit codes. They prefer the project console when one is present in the Click
context, and fall back to Click's default styling otherwise.
"""

from __future__ import annotations

from typing import IO, Any

import click

from magicscan.cli.exit_codes import ExitCode


class MagicScanCliError(click.ClickException):
    """Base class for all MagicScan CLI errors."""

    exit_code = ExitCode.FAILURE

    def format_message(self) -> str:
        """Return the plain error message text."""
        return str(getattr(self, "message", ""))

    def show(self, file: IO[Any] | None = None) -> None:
        """Display the error using the project console if available."""
        ctx = click.get_current_context(silent=True)
        if ctx is not None and isinstance(ctx.obj, dict):
            console = ctx.obj.get("console")
            if console is not None:
                console.error(console.styled(f"Error: {self.format_message()}", fg="bright_red"))
                return
        super().show(file)


class MagicScanUsageError(MagicScanCliError):
    """Error for command-line invocation errors (invalid flags/args)."""

    exit_code = ExitCode.USAGE_ERROR


class MagicScanConfigError(MagicScanCliError):
    """Error for configuration errors (missing/invalid/malformed config)."""

    exit_code = ExitCode.CONFIG_ERROR


class MagicScanCancelledError(MagicScanCliError):
    """Error for scans that were interrupted or ran past their timeout."""

    exit_code = ExitCode.CANCELLED


class MagicScanWorkerFaultError(MagicScanCliError):
    """Error for scans that completed with recorded worker faults."""

    exit_code = ExitCode.PIPELINE_ERROR
