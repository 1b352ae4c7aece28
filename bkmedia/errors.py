"""
Exceptions raised by bkmedia
"""


class BkmediaError(Exception):
    """Base class for errors reported to the operator."""


class ConfigError(BkmediaError):
    """Malformed location line, out-of-range line number or missing config."""


class CollaboratorError(BkmediaError, RuntimeError):
    """SSH, SFTP or archive failure while talking to a remote host."""
