# topmark:header:start
#
#   project      : MagicScan
#   file         : model.py
#   file_relpath : src/magicscan/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration model and merge policy.

This module defines:
    - `Config`: an immutable, runtime snapshot used by the CLI to run a scan.
    - `MutableConfig`: a mutable builder used while loading and merging; it
      can be frozen into `Config` and thawed back for edits.

TOML layout (``magicscan.toml``, or ``[tool.magicscan]`` in ``pyproject.toml``)::

    [scan]
    workers = 4
    timeout = 30.0
    poll_interval = 0.05
    exclude = [".git/", "*.tmp"]

    [signatures]
    builtin = true

    [[signatures.custom]]
    type = "xls"
    pattern = "D0 CF 11 E0 A1 B1 1A E1"
    offset = 0

Merge policy:
    Scalars set by a later layer win; ``exclude`` patterns and custom
    signatures accumulate in load order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from magicscan.config.loaders import discover_config_file, extract_config_table, load_toml_dict
from magicscan.config.logging import MagicScanLogger, get_logger
from magicscan.constants import DEFAULT_POLL_INTERVAL
from magicscan.signatures.base import Signature, parse_hex_pattern
from magicscan.signatures.builtins import BUILTIN_SIGNATURES

if TYPE_CHECKING:
    from collections.abc import Iterable

    from magicscan.config.loaders import TomlTable

logger: MagicScanLogger = get_logger(__name__)


class ConfigError(ValueError):
    """Raised when a configuration value is missing, malformed or out of range."""


@dataclass(frozen=True)
class Config:
    """Immutable runtime configuration.

    Attributes:
        workers (int | None): Worker thread count; None means the host CPU count.
        timeout (float | None): Scan deadline in seconds; None means no deadline.
        poll_interval (float): Seconds between stop/cancel re-checks while blocked.
        exclude_patterns (tuple[str, ...]): Gitignore-style exclude patterns.
        use_builtin_signatures (bool): Whether built-in signatures are appended.
        signatures (tuple[Signature, ...]): Custom signatures, in priority order.
        config_files (tuple[Path | str, ...]): Sources that contributed to this config.
    """

    workers: int | None = None
    timeout: float | None = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    exclude_patterns: tuple[str, ...] = ()
    use_builtin_signatures: bool = True
    signatures: tuple[Signature, ...] = ()
    config_files: tuple[Path | str, ...] = ()

    def effective_signatures(self) -> tuple[Signature, ...]:
        """Return the signatures a scan should use: custom first, then built-ins."""
        if self.use_builtin_signatures:
            return self.signatures + BUILTIN_SIGNATURES
        return self.signatures

    def thaw(self) -> MutableConfig:
        """Return a mutable copy of this configuration."""
        return MutableConfig(
            workers=self.workers,
            timeout=self.timeout,
            poll_interval=self.poll_interval,
            exclude_patterns=list(self.exclude_patterns),
            use_builtin_signatures=self.use_builtin_signatures,
            signatures=list(self.signatures),
            config_files=list(self.config_files),
        )


@dataclass
class MutableConfig:
    """Mutable configuration used during loading and merging.

    Fields left as None did not get a value from this layer and inherit from
    earlier layers during `merge_with`.
    """

    workers: int | None = None
    timeout: float | None = None
    poll_interval: float | None = None
    exclude_patterns: list[str] = field(default_factory=lambda: [])
    use_builtin_signatures: bool | None = None
    signatures: list[Signature] = field(default_factory=lambda: [])
    config_files: list[Path | str] = field(default_factory=lambda: [])

    # ---------------------------- Build/freeze ----------------------------
    def freeze(self) -> Config:
        """Validate and freeze this builder into an immutable `Config`.

        Raises:
            ConfigError: If a value is out of range.
        """
        if self.workers is not None and self.workers < 1:
            raise ConfigError(f"workers must be at least 1 (got {self.workers})")
        if self.timeout is not None and self.timeout < 0:
            raise ConfigError(f"timeout must not be negative (got {self.timeout})")
        poll: float = DEFAULT_POLL_INTERVAL if self.poll_interval is None else self.poll_interval
        if poll <= 0:
            raise ConfigError(f"poll_interval must be positive (got {poll})")

        return Config(
            workers=self.workers,
            timeout=self.timeout,
            poll_interval=poll,
            exclude_patterns=tuple(self.exclude_patterns),
            use_builtin_signatures=(
                True if self.use_builtin_signatures is None else self.use_builtin_signatures
            ),
            signatures=tuple(self.signatures),
            config_files=tuple(self.config_files),
        )

    def merge_with(self, other: MutableConfig) -> MutableConfig:
        """Return a new builder with `other` layered on top of this one.

        Args:
            other (MutableConfig): The higher-precedence layer.

        Returns:
            MutableConfig: The merged builder.
        """
        return MutableConfig(
            workers=other.workers if other.workers is not None else self.workers,
            timeout=other.timeout if other.timeout is not None else self.timeout,
            poll_interval=(
                other.poll_interval if other.poll_interval is not None else self.poll_interval
            ),
            exclude_patterns=[*self.exclude_patterns, *other.exclude_patterns],
            use_builtin_signatures=(
                other.use_builtin_signatures
                if other.use_builtin_signatures is not None
                else self.use_builtin_signatures
            ),
            signatures=[*self.signatures, *other.signatures],
            config_files=[*self.config_files, *other.config_files],
        )

    # --------------------------- Loaders/parsers --------------------------
    @classmethod
    def from_toml_file(cls, path: Path) -> MutableConfig | None:
        """Load configuration from a single TOML file.

        Supports ``magicscan.toml`` and the ``[tool.magicscan]`` table of
        ``pyproject.toml``.

        Args:
            path (Path): Path to the TOML file.

        Returns:
            MutableConfig | None: The loaded layer, or None if the file carries no
                MagicScan configuration.

        Raises:
            ConfigError: If a value in the file is invalid.
        """
        data: TomlTable = load_toml_dict(path)
        table: TomlTable | None = extract_config_table(path, data)
        if table is None:
            logger.debug("No MagicScan configuration in %s", path)
            return None
        return cls.from_toml_dict(table, config_file=path)

    @classmethod
    def from_toml_dict(cls, data: TomlTable, *, config_file: Path | None = None) -> MutableConfig:
        """Build a layer from a parsed TOML table.

        Args:
            data (TomlTable): The MagicScan table.
            config_file (Path | None): Source file, used in messages and provenance.

        Returns:
            MutableConfig: The parsed layer.

        Raises:
            ConfigError: If a value is invalid.
        """
        source: str = str(config_file) if config_file else "<dict>"
        scan: TomlTable = _get_table(data, "scan", source)
        sigs: TomlTable = _get_table(data, "signatures", source)

        draft = cls(
            workers=_get_int(scan, "workers", source),
            timeout=_get_float(scan, "timeout", source),
            poll_interval=_get_float(scan, "poll_interval", source),
            exclude_patterns=_get_str_list(scan, "exclude", source),
            use_builtin_signatures=_get_bool(sigs, "builtin", source),
            signatures=_parse_signature_entries(sigs.get("custom", []), source),
        )
        if config_file is not None:
            draft.config_files.append(config_file)
        return draft

    @classmethod
    def load_merged(
        cls,
        *,
        config_files: Iterable[Path] = (),
        no_config: bool = False,
        cwd: Path | None = None,
    ) -> MutableConfig:
        """Load the configuration layers in precedence order.

        Layers: the discovered project config in `cwd` (unless `no_config` or
        explicit files are given), then each explicit config file in order.

        Args:
            config_files (Iterable[Path]): Explicit config files (`--config`).
            no_config (bool): Skip discovery of project config files.
            cwd (Path | None): Directory used for discovery; defaults to `Path.cwd()`.

        Returns:
            MutableConfig: The merged builder (CLI overrides are layered by the caller).
        """
        merged = cls()
        explicit: list[Path] = list(config_files)
        if not explicit and not no_config:
            found: Path | None = discover_config_file(cwd or Path.cwd())
            if found is not None:
                explicit.append(found)
        for path in explicit:
            layer: MutableConfig | None = cls.from_toml_file(path)
            if layer is not None:
                merged = merged.merge_with(layer)
        logger.trace("Merged config: %s", merged)
        return merged


# ------------------------------ value getters -----------------------------


def _get_table(data: TomlTable, key: str, source: str) -> TomlTable:
    value: Any = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"{source}: [{key}] must be a table")
    return value


def _get_int(table: TomlTable, key: str, source: str) -> int | None:
    value: Any = table.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{source}: '{key}' must be an integer (got {value!r})")
    return value


def _get_float(table: TomlTable, key: str, source: str) -> float | None:
    value: Any = table.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{source}: '{key}' must be a number (got {value!r})")
    return float(value)


def _get_bool(table: TomlTable, key: str, source: str) -> bool | None:
    value: Any = table.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ConfigError(f"{source}: '{key}' must be a boolean (got {value!r})")
    return value


def _get_str_list(table: TomlTable, key: str, source: str) -> list[str]:
    value: Any = table.get(key, [])
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{source}: '{key}' must be a list of strings")
    return list(value)


def _parse_signature_entries(entries: Any, source: str) -> list[Signature]:
    if not isinstance(entries, list):
        raise ConfigError(f"{source}: [[signatures.custom]] must be an array of tables")
    result: list[Signature] = []
    for index, entry in enumerate(entries):
        where: str = f"{source}: signatures.custom[{index}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where} must be a table")
        type_name: Any = entry.get("type")
        pattern: Any = entry.get("pattern")
        offset: Any = entry.get("offset", 0)
        if not isinstance(type_name, str) or not type_name:
            raise ConfigError(f"{where}: 'type' must be a non-empty string")
        if not isinstance(pattern, str):
            raise ConfigError(f"{where}: 'pattern' must be a hex string")
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise ConfigError(f"{where}: 'offset' must be an integer")
        try:
            result.append(Signature(type_name, parse_hex_pattern(pattern), offset))
        except ValueError as exc:
            raise ConfigError(f"{where}: {exc}") from exc
    return result
