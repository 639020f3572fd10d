# topmark:header:start
#
#   project      : MagicScan
#   file         : __main__.py
#   file_relpath : src/magicscan/__main__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Allow ``python -m magicscan``."""

from magicscan.cli.main import cli

if __name__ == "__main__":
    cli(prog_name="magicscan")
