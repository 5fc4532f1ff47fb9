"""
Exit codes for focusguard commands.

Semantic exit codes so scripts wrapping the timer can tell what happened.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Settings or history could not be read or written
ERROR_PERSISTENCE = 3

# Resource not found (no running session, unknown setting)
ERROR_NOT_FOUND = 5

