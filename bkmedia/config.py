"""
Configuration constants for bkmedia
"""
import os
from pathlib import Path
from typing import Optional

# ══════════════════════════════════════════════════════════════════════════════
#  DEFAULTS  ── overridden by YAML config or apply_profile()
# ══════════════════════════════════════════════════════════════════════════════

# One `user@host:path` per line
LOCATIONS_FILE = Path("locations.cfg")

# Timestamped snapshot folders land here
BACKUP_DIR = Path("backups")
# Staging area, emptied at the start of every restore
RESTORE_DIR = Path("restores")

CHECKSUM_FILE = Path("checksums.txt")
PHANTOM_LOG = Path("phantom_log.txt")
PHANTOM_SUFFIX = ".phantom"

# "exact": basename field must equal the key
# "substring": first line containing the key (legacy grep behaviour)
LEDGER_MATCH = "exact"

SSH_PORT = 22
# Path to your private key, or None to use ssh-agent / ~/.ssh/id_*
SSH_KEY_PATH: Optional[str] = None
SSH_PASSWORD: Optional[str] = None  # only if you use password auth
SSH_TIMEOUT = 20

# Remote temp dir for transfer tarballs
REMOTE_TMP = "/tmp"

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


# ══════════════════════════════════════════════════════════════════════════════
#  GLOBAL CONFIG FILE  ── $XDG_CONFIG_HOME/bkmedia/config.yaml
# ══════════════════════════════════════════════════════════════════════════════

def get_global_config_dir() -> Path:
    """Return the global config directory for bkmedia."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "bkmedia"
    return Path.home() / ".config" / "bkmedia"


def load_global_config() -> dict:
    """Load global config from the bkmedia config directory."""
    import yaml

    cfg_path = get_global_config_dir() / "config.yaml"
    if not cfg_path.is_file():
        return {}
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


# ══════════════════════════════════════════════════════════════════════════════
#  PROJECT CONFIG FILE  ── .bkmedia (searched upward)
# ══════════════════════════════════════════════════════════════════════════════

def find_bkmedia(start: Optional[Path] = None) -> Optional[Path]:
    """
    Search upward from *start* (default: cwd) for a .bkmedia YAML file.
    Returns the Path if found, or None if no .bkmedia exists in any parent.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / ".bkmedia"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_bkmedia_file(path: Path) -> dict:
    """Parse a .bkmedia YAML file and return its contents as a dict."""
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_profile(data: dict, profile_name: str = "default") -> dict:
    """
    Extract a named profile from a .bkmedia or config.yaml data dict.
    Falls back to the first profile if the named one is not found.
    Returns a flat profile dict merged with top-level defaults.
    """
    defaults = data.get("defaults", {})
    profiles = data.get("profiles", [])
    if not profiles:
        return defaults.copy()
    profile = next((p for p in profiles if p.get("name") == profile_name), None)
    if profile is None:
        profile = profiles[0]
    merged = defaults.copy()
    merged.update(profile)
    return merged


# ══════════════════════════════════════════════════════════════════════════════
#  APPLY PROFILE  ── mutates module-level variables
# ══════════════════════════════════════════════════════════════════════════════

def _path(value) -> Path:
    return Path(str(value)).expanduser()


def apply_profile(profile: dict):
    """
    Apply a profile dict to the module-level config variables.
    Supports keys: locations_file, backup_dir, restore_dir, checksum_file,
                   phantom_log, ledger_match, port, ssh_key, ssh_password,
                   ssh_timeout, remote_tmp.
    """
    global LOCATIONS_FILE, BACKUP_DIR, RESTORE_DIR, CHECKSUM_FILE, PHANTOM_LOG
    global LEDGER_MATCH, SSH_PORT, SSH_KEY_PATH, SSH_PASSWORD, SSH_TIMEOUT, REMOTE_TMP

    if "locations_file" in profile:
        LOCATIONS_FILE = _path(profile["locations_file"])
    if "backup_dir" in profile:
        BACKUP_DIR = _path(profile["backup_dir"])
    if "restore_dir" in profile:
        RESTORE_DIR = _path(profile["restore_dir"])
    if "checksum_file" in profile:
        CHECKSUM_FILE = _path(profile["checksum_file"])
    if "phantom_log" in profile:
        PHANTOM_LOG = _path(profile["phantom_log"])
    if "ledger_match" in profile:
        mode = str(profile["ledger_match"]).lower()
        if mode not in ("exact", "substring"):
            raise ValueError(f"ledger_match must be 'exact' or 'substring', got {mode!r}")
        LEDGER_MATCH = mode
    if "port" in profile:
        SSH_PORT = int(profile["port"])
    if "ssh_key" in profile:
        SSH_KEY_PATH = str(profile["ssh_key"]) if profile["ssh_key"] else None
    if "ssh_password" in profile:
        SSH_PASSWORD = str(profile["ssh_password"]) if profile["ssh_password"] else None
    if "ssh_timeout" in profile:
        SSH_TIMEOUT = int(profile["ssh_timeout"])
    if "remote_tmp" in profile:
        REMOTE_TMP = str(profile["remote_tmp"]).rstrip("/") or "/"


def ensure_layout():
    """Create the backup root, staging area, ledger and audit log if missing."""
    BACKUP_DIR.mkdir(parents=True, exist_ok=True)
    RESTORE_DIR.mkdir(parents=True, exist_ok=True)
    for f in (CHECKSUM_FILE, PHANTOM_LOG):
        if not f.exists():
            f.parent.mkdir(parents=True, exist_ok=True)
            f.touch()
