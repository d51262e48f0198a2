"""
Exceptions that cross the planner's boundary.

Parsing and constraint repair never raise; only configuration problems,
permission refusals and generation failures reach the caller.
"""


class ConfigError(Exception):
    """Raised when config.yaml or the API key cannot be loaded."""


class PermissionDenied(Exception):
    """Raised when health or calendar access was not granted."""
