"""
File utilities (MD5 digests, local and remote)
"""
import hashlib
import shlex
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import CollaboratorError

if TYPE_CHECKING:
    from ..core.ssh_manager import SSHManager


def md5_local(path: Path) -> str:
    """Compute MD5 hash of a local file"""
    h = hashlib.md5()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def md5_remote(mgr: "SSHManager", remote_path: str) -> str:
    """Return MD5 hex digest of a remote file using md5sum."""
    # Read from stdin so the name is never escaped: "<hash>  -"
    out, _ = mgr.exec(f"md5sum < {shlex.quote(remote_path)}")
    parts = out.strip().split()
    if not parts:
        raise CollaboratorError(f"md5sum returned no output for {remote_path}")
    return parts[0]
