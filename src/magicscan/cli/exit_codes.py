# topmark:header:start
#
#   project      : MagicScan
#   file         : exit_codes.py
#   file_relpath : src/magicscan/cli/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exit codes for the MagicScan CLI.

MagicScan aligns with the BSD `sysexits` convention where practical, so that
other tooling can interpret failures consistently.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized exit codes for the MagicScan CLI.

    Attributes:
        SUCCESS: The scan completed (matches or not).
        FAILURE: Generic failure. Prefer a more specific code if available.
        USAGE_ERROR: Invalid flags or arguments, including an oversized signature
            list. Mirrors BSD ``EX_USAGE (64)``.
        PIPELINE_ERROR: The scan completed but workers recorded faults.
            Mirrors BSD ``EX_SOFTWARE (70)``.
        CANCELLED: The scan was cancelled or its timeout elapsed. Mirrors BSD
            ``EX_TEMPFAIL (75)``.
        CONFIG_ERROR: Missing, invalid or malformed configuration. Mirrors BSD
            ``EX_CONFIG (78)``.
        UNEXPECTED_ERROR: Unhandled or unknown error (last resort).
    """

    SUCCESS = 0
    FAILURE = 1

    USAGE_ERROR = 64  # EX_USAGE
    PIPELINE_ERROR = 70  # EX_SOFTWARE
    CANCELLED = 75  # EX_TEMPFAIL
    CONFIG_ERROR = 78  # EX_CONFIG

    UNEXPECTED_ERROR = 255
