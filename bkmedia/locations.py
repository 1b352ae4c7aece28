"""
Location list handling (locations.cfg)

Each non-blank line is one `user@host:path` location. Lines are addressed
1-based, counting only non-blank lines, which is also the numbering shown by
the default listing.
"""
import re
from pathlib import Path, PurePosixPath
from typing import NamedTuple, Optional

from . import config as _cfg
from .errors import ConfigError
from .utils.logging import warn

_LOCATION_RE = re.compile(r"^(?P<user>[^@:\s]+)@(?P<host>[^@:\s/]+):(?P<path>[^@]+)$")


class Location(NamedTuple):
    user: str
    host: str
    path: str

    def __str__(self) -> str:
        return f"{self.user}@{self.host}:{self.path}"

    @property
    def host_key(self) -> str:
        """Host with dots replaced by underscores, as used in snapshot names."""
        return normalize_host(self.host)

    @property
    def name(self) -> str:
        """Last component of the remote path."""
        return PurePosixPath(self.path).name


def normalize_host(host: str) -> str:
    return host.replace(".", "_")


def parse_location(line: str) -> Location:
    """Parse `user@host:path`; raises ConfigError on anything else."""
    text = line.strip()
    m = _LOCATION_RE.match(text)
    if not m:
        raise ConfigError(f"invalid location {text!r} (expected user@host:path)")
    return Location(m.group("user"), m.group("host"), m.group("path").strip())


def load_locations(path: Optional[Path] = None) -> list[str]:
    """Return the configured location lines in file order."""
    cfg_file = Path(path or _cfg.LOCATIONS_FILE)
    if not cfg_file.is_file():
        raise ConfigError(f"locations file not found: {cfg_file}")
    text = cfg_file.read_text(encoding="utf-8")
    return [line.strip() for line in text.splitlines() if line.strip()]


def get_location(lines: list[str], line_number: int) -> Location:
    """Resolve a 1-based line number to a parsed Location."""
    if line_number < 1 or line_number > len(lines):
        raise ConfigError(
            f"location line {line_number} out of range (1-{len(lines)} configured)"
        )
    return parse_location(lines[line_number - 1])


def distinct_hosts(lines: list[str]) -> set[str]:
    """Normalized hosts appearing anywhere in the location list."""
    hosts: set[str] = set()
    for line in lines:
        try:
            hosts.add(parse_location(line).host_key)
        except ConfigError as exc:
            warn(f"skipping {exc}")
    return hosts


def find_location_for_host(lines: list[str], host_key: str) -> Optional[Location]:
    """First location whose normalized host equals *host_key*, or None."""
    for line in lines:
        try:
            loc = parse_location(line)
        except ConfigError:
            continue
        if loc.host_key == host_key:
            return loc
    return None
