# topmark:header:start
#
#   project      : MagicScan
#   file         : __init__.py
#   file_relpath : src/magicscan/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration and logging for MagicScan.

Submodules:
    - `magicscan.config.logging`: TRACE level, colored formatter, logger factory.
    - `magicscan.config.loaders`: TOML discovery and parsing (`tomlkit`).
    - `magicscan.config.model`: `MutableConfig` builder and immutable `Config`.

This package module stays import-light so that `magicscan.config.logging` can be
imported from anywhere without pulling in the configuration model.
"""

from __future__ import annotations
