#!/usr/bin/env python3
"""
bkmedia  —  Timestamped SSH backups with checksum verification
==============================================================

Invocations:
  bkmedia                 List configured locations.
  bkmedia -B              Back up all locations.
  bkmedia -B -L N         Back up only the location on line N.
  bkmedia -R [N]          Restore the rank-N backup (default 1 = newest) to all hosts.
  bkmedia -R [N] -L M     Restore the rank-N backup to the host of line M only.

WARNING: restore deletes everything under the destination path before the
snapshot is copied back. There is no confirmation prompt.
"""
import sys
import argparse
from pathlib import Path

from .errors import BkmediaError, ConfigError
from .utils.logging import error, set_verbose


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return n


def _banner(text: str):
    rule = "=" * len(text)
    print(rule)
    print(text)
    print(rule, flush=True)


# ── config ───────────────────────────────────────────────────────────────────

def load_settings(args):
    """Apply global config, then the nearest .bkmedia, then CLI overrides."""
    import yaml
    from . import config as _cfg

    try:
        global_cfg = _cfg.load_global_config()
        _cfg.apply_profile(_cfg.get_profile(global_cfg, args.profile))

        bkmedia_path = Path(args.config) if args.config else _cfg.find_bkmedia()
        if bkmedia_path is not None:
            if args.verbose:
                print(f"[config] Using {bkmedia_path}")
            data = _cfg.load_bkmedia_file(bkmedia_path)
            _cfg.apply_profile(_cfg.get_profile(data, args.profile))
    except (OSError, yaml.YAMLError, ValueError) as exc:
        raise ConfigError(f"cannot load configuration: {exc}") from exc

    if args.locations:
        _cfg.LOCATIONS_FILE = Path(args.locations)

    _cfg.ensure_layout()


# ── list ─────────────────────────────────────────────────────────────────────

def cmd_list(args) -> int:
    """Print the configured locations, numbered from 1."""
    from .locations import load_locations

    lines = load_locations()
    print("Configured Locations:")
    for n, line in enumerate(lines, start=1):
        print(f"{n:>2}. {line}")
    return 0


# ── backup ───────────────────────────────────────────────────────────────────

def cmd_backup(args) -> int:
    """Back up one location (-L) or all of them."""
    from .core import backup
    from .locations import get_location, load_locations

    lines = load_locations()
    if args.line is not None:
        _banner(f"Back up for certain location {args.line}")
        location = get_location(lines, args.line)
        backup.backup_location(location)
        return 0

    _banner("Back up for all locations")
    return 0 if backup.backup_all(lines) else 1


# ── restore ──────────────────────────────────────────────────────────────────

def cmd_restore(args) -> int:
    """Restore rank-N snapshots to one host (-L) or to every host."""
    from .core import restore

    version = args.restore
    if args.line is not None:
        _banner(f"Restore certain location {args.line} with backup version {version} "
                f"(1 = most recent)")
    else:
        _banner(f"Restore backup version {version} (1 = most recent) to all locations")
    return 0 if restore.restore(version, args.line) else 1


# ── main ──────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bkmedia",
        description="Timestamped SSH backups with checksum verification",
        epilog="Restore empties the destination before copying the snapshot back.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-B", "--backup", action="store_true",
                      help="Back up all locations, or only the one given with -L")
    mode.add_argument("-R", "--restore", nargs="?", const=1, type=_positive_int, metavar="N",
                      help="Restore the N-th most recent backup (default: 1)")
    parser.add_argument("-L", "--line", type=_positive_int, metavar="N",
                        help="Limit -B/-R to the location on line N of the locations file")
    parser.add_argument("--locations", metavar="PATH",
                        help="Locations file (default: locations.cfg)")
    parser.add_argument("--config", metavar="PATH",
                        help="Explicit .bkmedia file (default: nearest in cwd or parents)")
    parser.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile to use (default: default)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show every file checked and every remote command")
    return parser


def main(argv=None) -> int:
    """CLI entry point for bkmedia"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.line is not None and not args.backup and args.restore is None:
        parser.error("-L requires -B or -R")

    set_verbose(args.verbose)

    try:
        load_settings(args)
        if args.backup:
            return cmd_backup(args)
        if args.restore is not None:
            return cmd_restore(args)
        return cmd_list(args)
    except (BkmediaError, OSError) as exc:
        error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
