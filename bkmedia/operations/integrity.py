"""
Post-transfer integrity check and phantom quarantine
"""
from pathlib import Path
from typing import Optional

from .. import config as _cfg
from ..state.ledger import ChecksumLedger
from ..utils.file_utils import md5_local
from ..utils.logging import log, vlog, warn


def _record_phantom(log_file: Path, path: Path, old: Optional[str], new: str):
    """Append a four-line incident record to the phantom audit log."""
    with log_file.open("a", encoding="utf-8") as f:
        f.write(f"{path}\n")
        f.write(f"Original: {old or ''}\n")
        f.write(f"New: {new}\n")
        f.write(f"File {path} has been altered.\n")


def _quarantined_paths(log_file: Path) -> set[str]:
    """Original paths of files this tool already renamed, from the audit log."""
    if not log_file.exists():
        return set()
    lines = log_file.read_text(encoding="utf-8").splitlines()
    # Records are four lines; the first holds the original path
    return set(lines[0::4])


def check_integrity(directory: Path, ledger: ChecksumLedger,
                    log_file: Optional[Path] = None) -> list[Path]:
    """
    Compare every file under *directory* with its ledger checksum.

    Files with no entry or a different digest are phantoms: they get an
    audit record and are renamed in place with the phantom suffix. Files
    that vanish or cannot be read mid-scan are logged and skipped.
    Returns the quarantined paths (after renaming).
    """
    log_file = Path(log_file or _cfg.PHANTOM_LOG)
    suffix = _cfg.PHANTOM_SUFFIX
    phantoms: list[Path] = []
    quarantined = _quarantined_paths(log_file)

    for p in sorted(Path(directory).rglob("*")):
        if not p.is_file() or p.is_symlink():
            continue
        # Already quarantined by an earlier check
        if p.name.endswith(suffix) and str(p)[: -len(suffix)] in quarantined:
            continue
        try:
            new = md5_local(p)
        except OSError as exc:
            warn(f"cannot hash {p}: {exc}; skipped")
            continue

        old = ledger.lookup(p.name)
        if new == old:
            vlog(f"INTEGRITY CHECK PASS - {p}")
            continue

        log(f"FOUND PHANTOM!! - {p}")
        _record_phantom(log_file, p, old, new)
        target = p.with_name(p.name + suffix)
        try:
            p.rename(target)
        except OSError as exc:
            warn(f"cannot quarantine {p}: {exc}")
            continue
        phantoms.append(target)

    if phantoms:
        warn(f"{len(phantoms)} phantom file(s) quarantined in {directory}")
    else:
        log(f"Integrity check passed for {directory}")
    return phantoms
