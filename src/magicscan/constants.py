# topmark:header:start
#
#   project      : MagicScan
#   file         : constants.py
#   file_relpath : src/magicscan/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""MagicScan Constants."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

try:
    MAGICSCAN_VERSION: str = get_version("magicscan")
except PackageNotFoundError:  # running from a source checkout
    MAGICSCAN_VERSION = "0.0.0"

# Upper bound for the number of signatures accepted by a single scan.
MAX_SIGNATURES: int = 1000

# Seconds a blocked queue operation waits before re-checking stop/cancel flags.
DEFAULT_POLL_INTERVAL: float = 0.05

# Configuration discovery
CONFIG_FILE_NAME: str = "magicscan.toml"
PYPROJECT_FILE_NAME: str = "pyproject.toml"
PYPROJECT_TOOL_SECTION: str = "magicscan"

# Environment variable honored by the logging setup.
LOG_LEVEL_ENV_VAR: str = "MAGICSCAN_LOG_LEVEL"

WORKER_THREAD_PREFIX: str = "magicscan-worker"
