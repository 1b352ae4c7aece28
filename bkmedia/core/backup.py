"""
Backup orchestration - snapshot checksums, pull, verify
"""
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .. import config as _cfg
from ..errors import BkmediaError
from ..locations import Location, load_locations, parse_location
from ..operations.integrity import check_integrity
from ..operations.scanner import snapshot_checksums
from ..operations.transfer import pull_tree
from ..state.ledger import ChecksumLedger
from ..utils.logging import log, error
from .ssh_manager import SSHManager


def snapshot_dir_for(location: Location, timestamp: str) -> Path:
    """`<backup_dir>/<host_with_underscores>_<basename(path)>_<timestamp>`"""
    return _cfg.BACKUP_DIR / f"{location.host_key}_{location.name}_{timestamp}"


def backup_location(location: Union[str, Location],
                    ledger: Optional[ChecksumLedger] = None,
                    manager_factory=SSHManager) -> Path:
    """
    Back up one location into a fresh timestamped snapshot folder.

    The remote checksums are recorded before the transfer and the copied
    files are checked against them afterwards. If the checksum snapshot or
    the transfer fails, the new folder is removed and the error propagates;
    no integrity check runs on a partial copy.
    """
    loc = location if isinstance(location, Location) else parse_location(location)
    ledger = ledger or ChecksumLedger()
    timestamp = datetime.now().strftime(_cfg.TIMESTAMP_FORMAT)
    dest = snapshot_dir_for(loc, timestamp)

    log(f"Backing up {loc} to {dest}")
    created = not dest.exists()
    dest.mkdir(parents=True, exist_ok=True)

    try:
        with manager_factory(loc.user, loc.host) as mgr:
            snapshot_checksums(mgr, loc, ledger)
            print("\n++++++++++++ BACKING UP ++++++++++++", flush=True)
            pull_tree(mgr, loc.path, dest)
            print("+++++++++++ END OF BACK UP +++++++++++\n", flush=True)
    except BkmediaError:
        if created:
            shutil.rmtree(dest, ignore_errors=True)
        raise

    log("Comparing checksums")
    check_integrity(dest, ledger)
    return dest


def backup_all(lines: Optional[list[str]] = None, ledger: Optional[ChecksumLedger] = None,
               manager_factory=SSHManager) -> bool:
    """Back up every configured location in order; True if all succeeded."""
    if lines is None:
        lines = load_locations()
    ledger = ledger or ChecksumLedger()

    ok = True
    for line_number, line in enumerate(lines, start=1):
        log(f"Processing line {line_number}: {line}")
        try:
            backup_location(line, ledger=ledger, manager_factory=manager_factory)
        except (BkmediaError, OSError) as exc:
            error(f"backup of line {line_number} ({line}) failed: {exc}")
            ok = False
    return ok
