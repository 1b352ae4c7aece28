"""
Restore orchestration - pick a snapshot by rank, stage it, push it back
"""
from pathlib import Path
from typing import Optional

from .. import config as _cfg
from ..errors import BkmediaError, ConfigError
from ..locations import distinct_hosts, find_location_for_host, get_location, load_locations
from ..operations.delete import clear_remote_destination, clear_staging, is_safe_remote_dir
from ..operations.transfer import copy_tree, push_tree
from ..utils.logging import log, warn, error
from .ssh_manager import SSHManager


def list_snapshots(host_key: str, backup_dir: Optional[Path] = None) -> list[Path]:
    """Snapshot folders for *host_key*, most recently modified first."""
    root = Path(backup_dir or _cfg.BACKUP_DIR)
    if not root.is_dir():
        return []
    prefix = f"{host_key}_"
    found = [p for p in root.iterdir() if p.is_dir() and p.name.startswith(prefix)]
    found.sort(key=lambda p: (p.stat().st_mtime, p.name), reverse=True)
    return found


def select_snapshot(host_key: str, version: int,
                    backup_dir: Optional[Path] = None) -> Optional[Path]:
    """The *version*-th most recent snapshot (1 = newest), or None."""
    if version < 1:
        raise ConfigError(f"backup version must be 1 or greater, got {version}")
    snapshots = list_snapshots(host_key, backup_dir)
    if len(snapshots) < version:
        return None
    return snapshots[version - 1]


def restore_host(version: int, host_key: str, lines: list[str],
                 manager_factory=SSHManager) -> bool:
    """
    Restore the rank-*version* snapshot of *host_key* to its location.

    The destination is the first configured location on that host. Its
    contents are deleted before the snapshot is pushed back. Returns True
    when the snapshot reached the destination.
    """
    snapshot = select_snapshot(host_key, version)
    if snapshot is None:
        warn(f"No such backups found for {host_key}")
        warn(f"The requested backup version is {version}")
        return False

    destination = find_location_for_host(lines, host_key)
    staging = _cfg.RESTORE_DIR

    clear_staging(staging)
    log(f"Directory: {destination if destination else '(unresolved)'}")

    if destination is None or not is_safe_remote_dir(destination.path):
        copy_tree(snapshot, staging)
        warn(f"no usable destination for {host_key}; {snapshot.name} staged in {staging} only")
        return False

    with manager_factory(destination.user, destination.host) as mgr:
        clear_remote_destination(mgr, destination.path)

        log(f"Copying {snapshot.name} to {staging} for restore preparation")
        copy_tree(snapshot, staging)

        log(f"Restoring files to {destination}")
        push_tree(mgr, staging, destination.path)

    log(f"Restore completed for {destination.host}")
    return True


def restore(version: int = 1, line_number: Optional[int] = None,
            lines: Optional[list[str]] = None, manager_factory=SSHManager) -> bool:
    """
    Restore rank-*version* snapshots to the host of *line_number*, or to
    every distinct configured host when no line is given.
    """
    if lines is None:
        lines = load_locations()

    if line_number is not None:
        hosts = [get_location(lines, line_number).host_key]
    else:
        hosts = sorted(distinct_hosts(lines))

    ok = True
    for host_key in hosts:
        try:
            if not restore_host(version, host_key, lines, manager_factory=manager_factory):
                ok = False
        except (BkmediaError, OSError) as exc:
            error(f"restore of {host_key} failed: {exc}")
            ok = False
    return ok
