# topmark:header:start
#
#   project      : MagicScan
#   file         : config_resolver.py
#   file_relpath : src/magicscan/cli/config_resolver.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Build a runtime `Config` from config files and CLI overrides.

Precedence (lowest to highest): discovered project config, explicit
``--config`` files, command-line options.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from magicscan.cli.errors import MagicScanConfigError, MagicScanUsageError
from magicscan.config.logging import MagicScanLogger, get_logger
from magicscan.config.model import ConfigError, MutableConfig
from magicscan.signatures.base import Signature, parse_hex_pattern

if TYPE_CHECKING:
    from collections.abc import Sequence

    from magicscan.config.model import Config

logger: MagicScanLogger = get_logger(__name__)


def parse_signature_spec(spec: str) -> Signature:
    """Parse a ``TYPE:HEX[@OFFSET]`` command-line signature.

    Args:
        spec (str): The option value, e.g. ``"tar:75 73 74 61 72@257"``.

    Returns:
        Signature: The parsed signature.

    Raises:
        MagicScanUsageError: If the value is malformed.
    """
    type_name, sep, rest = spec.partition(":")
    if not sep or not type_name.strip() or not rest.strip():
        raise MagicScanUsageError(f"Invalid signature {spec!r}: expected TYPE:HEX[@OFFSET]")
    hex_part, at, offset_part = rest.partition("@")
    offset: int = 0
    if at:
        try:
            offset = int(offset_part.strip(), 0)
        except ValueError as exc:
            raise MagicScanUsageError(f"Invalid signature {spec!r}: bad offset") from exc
    try:
        return Signature(type_name.strip(), parse_hex_pattern(hex_part), offset)
    except ValueError as exc:
        raise MagicScanUsageError(f"Invalid signature {spec!r}: {exc}") from exc


def resolve_config(
    *,
    config_files: Sequence[Path] = (),
    no_config: bool = False,
    signature_specs: Sequence[str] = (),
    no_builtin: bool = False,
    workers: int | None = None,
    timeout: float | None = None,
    exclude_patterns: Sequence[str] = (),
) -> Config:
    """Merge file-based configuration with command-line overrides.

    Returns:
        Config: The frozen runtime configuration.

    Raises:
        MagicScanConfigError: If a config file holds invalid values.
        MagicScanUsageError: If a command-line value is invalid.
    """
    cli_signatures: list[Signature] = [parse_signature_spec(s) for s in signature_specs]
    try:
        merged: MutableConfig = MutableConfig.load_merged(
            config_files=config_files,
            no_config=no_config,
            cwd=Path.cwd(),
        )
        overrides = MutableConfig(
            workers=workers,
            timeout=timeout,
            exclude_patterns=list(exclude_patterns),
            use_builtin_signatures=False if no_builtin else None,
            config_files=["<CLI overrides>"],
        )
        merged = merged.merge_with(overrides)
        # Command-line signatures go first: they have the highest priority.
        merged.signatures = cli_signatures + merged.signatures
        config: Config = merged.freeze()
    except ConfigError as exc:
        raise MagicScanConfigError(str(exc)) from exc
    logger.debug("Resolved config: %s", config)
    return config
