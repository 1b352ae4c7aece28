"""Utilities (logging, digests)"""
from .logging import log, vlog, warn, error, set_verbose
from .file_utils import md5_local, md5_remote

__all__ = [
    "log", "vlog", "warn", "error", "set_verbose",
    "md5_local", "md5_remote",
]
