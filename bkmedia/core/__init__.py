"""Core functionality"""
from .ssh_manager import SSHManager

__all__ = ["SSHManager"]
