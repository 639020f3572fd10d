# topmark:header:start
#
#   project      : MagicScan
#   file         : version.py
#   file_relpath : src/magicscan/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""MagicScan `version` command.

Prints the current MagicScan version as installed in the active Python environment.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import click

from magicscan.cli.cli_types import EnumChoiceParam
from magicscan.cli.options import OutputFormat
from magicscan.constants import MAGICSCAN_VERSION

if TYPE_CHECKING:
    from magicscan.cli.console import ConsoleLike


@click.command(
    name="version",
    help="Show the current version of MagicScan.",
)
@click.option(
    "--format",
    "output_format",
    type=EnumChoiceParam(OutputFormat, allowed=(OutputFormat.DEFAULT, OutputFormat.JSON)),
    default=None,
    help="Output format (default, json).",
)
def version_command(*, output_format: OutputFormat | None = None) -> None:
    """Show the current version of MagicScan.

    Args:
        output_format (OutputFormat | None): Optional output format.
    """
    ctx = click.get_current_context()
    ctx.ensure_object(dict)
    console: ConsoleLike = ctx.obj["console"]

    fmt: OutputFormat = output_format or OutputFormat.DEFAULT
    if fmt == OutputFormat.JSON:
        console.print(json.dumps({"version": MAGICSCAN_VERSION}))
        return

    vlevel: int = ctx.obj.get("verbosity_level", 0)
    if vlevel > 0:
        console.print(console.styled("MagicScan version:", bold=True, underline=True))
        console.print()
        console.print(f"    {console.styled(MAGICSCAN_VERSION, bold=True)}")
    else:
        console.print(MAGICSCAN_VERSION)
