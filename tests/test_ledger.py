"""
Tests for the checksum ledger (checksums.txt).
"""
import tempfile
import unittest
from pathlib import Path

from bkmedia.state.ledger import ChecksumLedger


class TestChecksumLedger(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self.tmpdir.name) / "checksums.txt"

    def tearDown(self):
        self.tmpdir.cleanup()

    def _lines(self):
        return self.path.read_text(encoding="utf-8").splitlines()

    def test_lookup_missing_file_returns_none(self):
        ledger = ChecksumLedger(self.path, match="exact")
        self.assertIsNone(ledger.lookup("a.txt"))

    def test_upsert_appends_new_entry(self):
        ledger = ChecksumLedger(self.path, match="exact")
        ledger.upsert("a.txt", "aaa")
        ledger.upsert("b.txt", "bbb")
        self.assertEqual(self._lines(), ["aaa a.txt", "bbb b.txt"])

    def test_upsert_twice_keeps_one_entry_with_latest_checksum(self):
        ledger = ChecksumLedger(self.path, match="exact")
        ledger.upsert("a.txt", "c1")
        ledger.upsert("b.txt", "zz")
        ledger.upsert("a.txt", "c2")
        self.assertEqual(ledger.lookup("a.txt"), "c2")
        referencing = [line for line in self._lines() if line.endswith(" a.txt")]
        self.assertEqual(referencing, ["c2 a.txt"])
        # Updated in place, not moved to the end
        self.assertEqual(self._lines()[0], "c2 a.txt")

    def test_exact_mode_does_not_match_substrings(self):
        """'a.txt' must not pick up the line for 'data.txt'."""
        ledger = ChecksumLedger(self.path, match="exact")
        ledger.upsert("data.txt", "d1")
        self.assertIsNone(ledger.lookup("a.txt"))
        ledger.upsert("a.txt", "a1")
        self.assertEqual(ledger.lookup("data.txt"), "d1")
        self.assertEqual(ledger.lookup("a.txt"), "a1")

    def test_substring_mode_keeps_legacy_behaviour(self):
        """In substring mode the first line containing the name wins."""
        ledger = ChecksumLedger(self.path, match="substring")
        ledger.upsert("data.txt", "d1")
        self.assertEqual(ledger.lookup("a.txt"), "d1")
        ledger.upsert("a.txt", "a1")
        self.assertEqual(self._lines(), ["a1 a.txt"])

    def test_basename_with_spaces(self):
        ledger = ChecksumLedger(self.path, match="exact")
        ledger.upsert("my file.txt", "f1")
        self.assertEqual(ledger.lookup("my file.txt"), "f1")
        self.assertEqual(ledger.entries(), {"my file.txt": "f1"})

    def test_unknown_match_mode_rejected(self):
        with self.assertRaises(ValueError):
            ChecksumLedger(self.path, match="fuzzy")

    def test_mode_defaults_to_config(self):
        import bkmedia.config as cfg
        saved = cfg.LEDGER_MATCH
        cfg.LEDGER_MATCH = "substring"
        try:
            self.assertEqual(ChecksumLedger(self.path).match, "substring")
        finally:
            cfg.LEDGER_MATCH = saved


if __name__ == "__main__":
    unittest.main()
