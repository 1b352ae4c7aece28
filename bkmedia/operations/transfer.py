"""
Directory transfer operations (remote tree pull, staging push, local copy)
"""
import os
import shlex
import shutil
import tarfile
import tempfile
import uuid
from pathlib import Path

from ..core.ssh_manager import SSHManager
from .. import config as _cfg
from ..errors import CollaboratorError
from ..utils.logging import log, warn


def _safe_member_path(dest: Path, name: str) -> Path:
    target = (dest / name).resolve()
    root = dest.resolve()
    if target != root and root not in target.parents:
        raise CollaboratorError(f"archive member escapes destination: {name!r}")
    return target


def _remove_remote_quietly(mgr: SSHManager, remote: str):
    try:
        mgr.sftp_remove(remote)
    except CollaboratorError as exc:
        warn(f"could not remove remote temp file {remote}: {exc}")


def pull_tree(mgr: SSHManager, remote_dir: str, dest: Path) -> int:
    """
    Copy the tree under *remote_dir* into *dest* as one tar.gz.
    Relative structure and mtimes are kept; nothing in *dest* is deleted.
    Returns the number of files extracted.
    """
    remote_tar = f"{_cfg.REMOTE_TMP}/bkmedia_pull_{uuid.uuid4().hex}.tar.gz"
    fd, tmp_name = tempfile.mkstemp(suffix=".tar.gz")
    os.close(fd)
    tmp_tar = Path(tmp_name)
    dest.mkdir(parents=True, exist_ok=True)

    try:
        # ── Pack on remote ──────────────────────────────────────────────────
        log(f"  [PULL] packing {remote_dir} on remote …")
        mgr.exec(f"tar czf {shlex.quote(remote_tar)} -C {shlex.quote(remote_dir)} .")

        # ── Download ────────────────────────────────────────────────────────
        mgr.sftp_get(remote_tar, str(tmp_tar))
        log(f"  [PULL] downloaded {tmp_tar.stat().st_size // 1024} KB, extracting …")

        # ── Extract locally ─────────────────────────────────────────────────
        count = 0
        try:
            with tarfile.open(tmp_tar, "r:gz") as tar:
                for member in tar.getmembers():
                    target = _safe_member_path(dest, member.name)
                    if member.isdir():
                        target.mkdir(parents=True, exist_ok=True)
                        continue
                    if member.issym():
                        warn(f"skipping symlink {member.name} -> {member.linkname}")
                        continue
                    # Hard links resolve to their target through extractfile()
                    if not (member.isfile() or member.islnk()):
                        warn(f"skipping special file {member.name}")
                        continue
                    target.parent.mkdir(parents=True, exist_ok=True)
                    with tar.extractfile(member) as src_f, open(target, "wb") as dst_f:
                        shutil.copyfileobj(src_f, dst_f)
                    os.utime(target, (member.mtime, member.mtime))
                    count += 1
        except (tarfile.TarError, OSError) as exc:
            raise CollaboratorError(f"cannot extract archive from {remote_dir}: {exc}") from exc
        log(f"  [PULL ✓] {count} file(s) → {dest}")
        return count

    finally:
        tmp_tar.unlink(missing_ok=True)
        _remove_remote_quietly(mgr, remote_tar)


def push_tree(mgr: SSHManager, src: Path, remote_dir: str) -> int:
    """
    Upload the contents of *src* into *remote_dir* as one tar.gz.
    Returns the number of files packed.
    """
    remote_tar = f"{_cfg.REMOTE_TMP}/bkmedia_push_{uuid.uuid4().hex}.tar.gz"
    fd, tmp_name = tempfile.mkstemp(suffix=".tar.gz")
    os.close(fd)
    tmp_tar = Path(tmp_name)

    try:
        # ── Pack ────────────────────────────────────────────────────────────
        with tarfile.open(tmp_tar, "w:gz", compresslevel=6) as tar:
            for p in sorted(src.iterdir()):
                tar.add(str(p), arcname=p.name)
            count = sum(1 for m in tar.getmembers() if m.isfile())
        log(f"  [PUSH] packed {count} file(s) → {tmp_tar.stat().st_size // 1024} KB")

        # ── Upload ──────────────────────────────────────────────────────────
        mgr.sftp_put(str(tmp_tar), remote_tar)

        # ── Extract on remote ───────────────────────────────────────────────
        log(f"  [PUSH] extracting into {remote_dir} on remote …")
        mgr.exec(
            f"mkdir -p {shlex.quote(remote_dir)} && "
            f"tar xzf {shlex.quote(remote_tar)} -C {shlex.quote(remote_dir)} --no-same-owner"
        )
        log(f"  [PUSH ✓] {count} file(s)")
        return count

    finally:
        tmp_tar.unlink(missing_ok=True)
        _remove_remote_quietly(mgr, remote_tar)


def copy_tree(src: Path, dest: Path) -> int:
    """Additive local copy of the contents of *src* into *dest*."""
    dest.mkdir(parents=True, exist_ok=True)
    try:
        shutil.copytree(src, dest, dirs_exist_ok=True)
    except (shutil.Error, OSError) as exc:
        raise CollaboratorError(f"cannot copy {src} to {dest}: {exc}") from exc
    return sum(1 for p in dest.rglob("*") if p.is_file())
