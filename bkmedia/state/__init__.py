"""State management (checksum ledger)"""
from .ledger import ChecksumLedger

__all__ = ["ChecksumLedger"]
