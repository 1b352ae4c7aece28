"""
Remote file scanning and pre-transfer checksum snapshot
"""
import shlex
from pathlib import PurePosixPath

from ..core.ssh_manager import SSHManager
from ..locations import Location
from ..state.ledger import ChecksumLedger
from ..utils.file_utils import md5_remote
from ..utils.logging import log, vlog


def list_remote_files(mgr: SSHManager, remote_dir: str) -> list[str]:
    """
    Enumerate regular files under *remote_dir* with one `find` on the remote.
    A non-zero exit (missing path, permission) raises CollaboratorError.
    """
    out, _ = mgr.exec(f"find {shlex.quote(remote_dir)} -type f")
    return [line for line in out.splitlines() if line.strip()]


def snapshot_checksums(mgr: SSHManager, location: Location, ledger: ChecksumLedger) -> int:
    """
    Record the remote checksum of every file under *location* in the ledger.

    One md5sum per file, run on the remote host. Returns the number of
    entries written.
    """
    log(f"Generating integrity checksums for files in {location.path} …")
    files = list_remote_files(mgr, location.path)
    for remote_file in files:
        checksum = md5_remote(mgr, remote_file)
        name = PurePosixPath(remote_file).name
        ledger.upsert(name, checksum)
        vlog(f"  [SUM] {checksum} {name}")
    log(f"[scan] {len(files)} checksum(s) recorded")
    return len(files)
