"""
Checksum ledger (persistent across runs)

On-disk format, one entry per line:
    <checksum> <basename>

Entries are keyed by basename only, so two files with the same name in
different directories share one entry.
"""
from pathlib import Path
from typing import Optional

from .. import config as _cfg


class ChecksumLedger:
    """
    Flat-file mapping of basename -> last known checksum.

    `match` selects how a basename finds its line:
      exact      the basename field must equal the key
      substring  the first line containing the key anywhere wins
    """

    def __init__(self, path: Optional[Path] = None, match: Optional[str] = None):
        self.path = Path(path or _cfg.CHECKSUM_FILE)
        self.match = match or _cfg.LEDGER_MATCH
        if self.match not in ("exact", "substring"):
            raise ValueError(f"unknown ledger match mode: {self.match!r}")

    def _read_lines(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    def _write_lines(self, lines: list[str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        text = "\n".join(lines) + "\n" if lines else ""
        self.path.write_text(text, encoding="utf-8")

    def _matches(self, line: str, basename: str) -> bool:
        if self.match == "substring":
            return basename in line
        parts = line.split(" ", 1)
        return len(parts) == 2 and parts[1] == basename

    def _find(self, lines: list[str], basename: str) -> Optional[int]:
        for i, line in enumerate(lines):
            if line.strip() and self._matches(line, basename):
                return i
        return None

    def lookup(self, basename: str) -> Optional[str]:
        """Checksum recorded for *basename*, or None."""
        lines = self._read_lines()
        i = self._find(lines, basename)
        if i is None:
            return None
        return lines[i].split(" ", 1)[0] or None

    def upsert(self, basename: str, checksum: str):
        """Rewrite the entry for *basename* in place, or append a new one."""
        lines = self._read_lines()
        entry = f"{checksum} {basename}"
        i = self._find(lines, basename)
        if i is None:
            lines.append(entry)
        else:
            lines[i] = entry
        self._write_lines(lines)

    def entries(self) -> dict[str, str]:
        """All entries as {basename: checksum}; later duplicates are ignored."""
        result: dict[str, str] = {}
        for line in self._read_lines():
            parts = line.split(" ", 1)
            if len(parts) == 2 and parts[1] not in result:
                result[parts[1]] = parts[0]
        return result
