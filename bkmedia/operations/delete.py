"""
Delete operations for restore (staging area, remote destination)
"""
import shlex
import shutil
from pathlib import Path, PurePosixPath

from ..core.ssh_manager import SSHManager
from ..errors import ConfigError
from ..utils.logging import log, vlog


def clear_staging(staging: Path):
    """Remove everything inside *staging*; the directory itself is kept."""
    resolved = staging.resolve()
    if resolved == Path(resolved.anchor):
        raise ConfigError(f"refusing to clear filesystem root as staging area: {staging}")
    staging.mkdir(parents=True, exist_ok=True)
    for p in staging.iterdir():
        if p.is_dir() and not p.is_symlink():
            shutil.rmtree(p)
        else:
            p.unlink()
        vlog(f"  [DEL-STAGING] {p.name}")


def is_safe_remote_dir(path: str) -> bool:
    """True for absolute, non-root remote paths."""
    if not path or not path.strip():
        return False
    p = PurePosixPath(path.strip())
    if not p.is_absolute():
        return False
    if ".." in p.parts:
        return False
    # "/" and "//" both have a single part
    return len(p.parts) > 1


def clear_remote_destination(mgr: SSHManager, remote_dir: str) -> bool:
    """
    Delete the contents of *remote_dir* on the remote host (exact path,
    no globbing). Unsafe paths are refused and nothing is run.
    Returns True when the contents were cleared.
    """
    if not is_safe_remote_dir(remote_dir):
        log(f"[restore] refusing to clear unsafe destination {remote_dir!r}")
        return False
    q = shlex.quote(str(PurePosixPath(remote_dir.strip())))
    mgr.exec(f"mkdir -p {q} && find {q} -mindepth 1 -delete")
    log(f"[restore] cleared {remote_dir}")
    return True
