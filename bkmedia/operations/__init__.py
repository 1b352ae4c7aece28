"""Operations (scan, integrity, transfer, delete)"""
from .scanner import list_remote_files, snapshot_checksums
from .integrity import check_integrity
from .transfer import pull_tree, push_tree, copy_tree
from .delete import clear_staging, clear_remote_destination

__all__ = [
    "list_remote_files", "snapshot_checksums",
    "check_integrity",
    "pull_tree", "push_tree", "copy_tree",
    "clear_staging", "clear_remote_destination",
]
