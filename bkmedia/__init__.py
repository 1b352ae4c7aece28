"""bkmedia: timestamped SSH backups with checksum verification and restore"""

__version__ = "0.1.0"
