# topmark:header:start
#
#   project      : MagicScan
#   file         : signatures.py
#   file_relpath : src/magicscan/cli/commands/signatures.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""MagicScan `signatures` command.

Lists the signatures a scan would use, in the order they are tried.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from magicscan.cli.cli_types import EnumChoiceParam
from magicscan.cli.config_resolver import resolve_config
from magicscan.cli.options import OutputFormat, common_signature_options
from magicscan.signatures.base import format_hex_pattern

if TYPE_CHECKING:
    from magicscan.cli.console import ConsoleLike
    from magicscan.config.model import Config
    from magicscan.signatures.base import Signature


@click.command(
    name="signatures",
    help="List the effective signatures, in priority order.",
)
@common_signature_options
@click.option(
    "--format",
    "output_format",
    type=EnumChoiceParam(OutputFormat),
    default=None,
    help=f"Output format ({', '.join(v.value for v in OutputFormat)}).",
)
def signatures_command(
    *,
    config_files: tuple[Path, ...] = (),
    no_config: bool = False,
    signature_specs: tuple[str, ...] = (),
    no_builtin: bool = False,
    output_format: OutputFormat | None = None,
) -> None:
    """List the signatures a scan would try, first match wins."""
    ctx = click.get_current_context()
    ctx.ensure_object(dict)
    console: ConsoleLike = ctx.obj["console"]

    config: Config = resolve_config(
        config_files=config_files,
        no_config=no_config,
        signature_specs=signature_specs,
        no_builtin=no_builtin,
    )
    signatures: tuple[Signature, ...] = config.effective_signatures()
    fmt: OutputFormat = output_format or OutputFormat.DEFAULT

    if fmt == OutputFormat.JSON:
        console.print(json.dumps([s.to_dict() for s in signatures], indent=2))
        return
    if fmt == OutputFormat.NDJSON:
        for sig in signatures:
            console.print(json.dumps(sig.to_dict()))
        return

    if not signatures:
        console.warn("No signatures configured.")
        return

    vlevel: int = ctx.obj.get("verbosity_level", 0)
    if vlevel > 0:
        console.print(console.styled("Signatures (first match wins):", bold=True, underline=True))
        console.print()

    width: int = max(len(s.type_name) for s in signatures)
    for sig in signatures:
        name: str = console.styled(sig.type_name.ljust(width), fg="cyan")
        console.print(f"{name}  @{sig.offset:<6} {format_hex_pattern(sig.pattern)}")
