# topmark:header:start
#
#   project      : MagicScan
#   file         : loaders.py
#   file_relpath : src/magicscan/config/loaders.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Load TOML configuration sources.

This module provides I/O helpers for reading MagicScan configuration from
on-disk TOML files (`magicscan.toml` / `pyproject.toml`).

Parsing is done with `tomlkit` and returned as plain `dict` structures.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from magicscan.config.logging import MagicScanLogger, get_logger
from magicscan.constants import CONFIG_FILE_NAME, PYPROJECT_FILE_NAME, PYPROJECT_TOOL_SECTION

logger: MagicScanLogger = get_logger(__name__)

TomlTable = dict[str, Any]


def load_toml_dict(path: Path) -> TomlTable:
    """Load and parse a TOML file from the filesystem.

    Args:
        path: Path to a TOML document (e.g., ``magicscan.toml`` or ``pyproject.toml``).

    Returns:
        The parsed TOML content.

    Notes:
        - Errors are logged and an empty dict is returned on failure.
        - Encoding is assumed to be UTF-8.
    """
    try:
        text: str = path.read_text(encoding="utf-8")
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
        data_any: Any = doc.unwrap()
        return cast("TomlTable", data_any) if isinstance(data_any, dict) else {}
    except OSError as e:
        logger.error("Error loading TOML from %s: %s", path, e)
        return {}
    except TomlkitParseError as e:
        logger.error("Error decoding TOML from %s: %s", path, e)
        return {}
    except (TypeError, ValueError) as e:
        logger.error("Unknown error while reading TOML from %s: %s", path, e)
        return {}


def extract_config_table(path: Path, data: TomlTable) -> TomlTable | None:
    """Return the MagicScan table of a parsed TOML document.

    For ``pyproject.toml`` this is ``[tool.magicscan]`` (None when absent);
    any other file is a MagicScan config file as a whole.

    Args:
        path: The file the data was read from.
        data: The parsed document.

    Returns:
        The configuration table, or None if the file holds no MagicScan config.
    """
    if path.name != PYPROJECT_FILE_NAME:
        return data
    tool: Any = data.get("tool")
    if not isinstance(tool, dict):
        return None
    section: Any = cast("TomlTable", tool).get(PYPROJECT_TOOL_SECTION)
    return cast("TomlTable", section) if isinstance(section, dict) else None


def discover_config_file(start: Path) -> Path | None:
    """Find the configuration file for a working directory.

    ``magicscan.toml`` wins over ``pyproject.toml``; a ``pyproject.toml`` only
    counts when it has a ``[tool.magicscan]`` table.

    Args:
        start: Directory to look in.

    Returns:
        The config file path, or None.
    """
    candidate: Path = start / CONFIG_FILE_NAME
    if candidate.is_file():
        logger.debug("Discovered config file %s", candidate)
        return candidate
    pyproject: Path = start / PYPROJECT_FILE_NAME
    if pyproject.is_file() and extract_config_table(pyproject, load_toml_dict(pyproject)):
        logger.debug("Discovered [tool.%s] in %s", PYPROJECT_TOOL_SECTION, pyproject)
        return pyproject
    return None
