# topmark:header:start
#
#   project      : MagicScan
#   file         : __init__.py
#   file_relpath : src/magicscan/cli/commands/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""MagicScan CLI subcommands."""
