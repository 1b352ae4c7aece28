"""
Shared test helpers: a fake SSH manager and a config sandbox.

FakeRemote stands in for every remote host: absolute remote paths are
mapped under a local temp directory and the handful of shell commands
bkmedia sends (find, md5sum, mkdir, tar) are emulated in Python.
"""
import hashlib
import shlex
import shutil
import tarfile
import tempfile
from pathlib import Path

import bkmedia.config as cfg
from bkmedia.errors import CollaboratorError

_CONFIG_NAMES = [
    "LOCATIONS_FILE", "BACKUP_DIR", "RESTORE_DIR", "CHECKSUM_FILE", "PHANTOM_LOG",
    "LEDGER_MATCH", "SSH_PORT", "SSH_KEY_PATH", "SSH_PASSWORD", "SSH_TIMEOUT", "REMOTE_TMP",
]


class ConfigSandbox:
    """Mixin: point every bkmedia path at a fresh temp dir, restore afterwards."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self._saved = {name: getattr(cfg, name) for name in _CONFIG_NAMES}
        cfg.LOCATIONS_FILE = self.root / "locations.cfg"
        cfg.BACKUP_DIR = self.root / "backups"
        cfg.RESTORE_DIR = self.root / "restores"
        cfg.CHECKSUM_FILE = self.root / "checksums.txt"
        cfg.PHANTOM_LOG = self.root / "phantom_log.txt"
        cfg.LEDGER_MATCH = "exact"
        cfg.REMOTE_TMP = "/tmp"
        cfg.ensure_layout()

    def tearDown(self):
        for name, value in self._saved.items():
            setattr(cfg, name, value)
        self.tmpdir.cleanup()


class FakeRemote:
    """A pretend remote filesystem rooted at a local directory."""

    def __init__(self, root: Path, unreachable=(), before_pack=None):
        self.root = Path(root)
        self.unreachable = set(unreachable)
        self.before_pack = before_pack
        self.managers = []
        (self.root / "tmp").mkdir(parents=True, exist_ok=True)

    def local(self, remote_path: str) -> Path:
        return self.root / remote_path.lstrip("/")

    def write(self, remote_path: str, content: str):
        p = self.local(remote_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")

    def read(self, remote_path: str) -> str:
        return self.local(remote_path).read_text(encoding="utf-8")

    def files(self, remote_dir: str) -> dict:
        base = self.local(remote_dir)
        return {
            p.relative_to(base).as_posix(): p.read_text(encoding="utf-8")
            for p in sorted(base.rglob("*")) if p.is_file()
        }

    def factory(self, user, host):
        mgr = FakeSSHManager(self, user, host)
        self.managers.append(mgr)
        return mgr

    @property
    def commands(self) -> list:
        return [c for m in self.managers for c in m.commands]


class FakeSSHManager:

    def __init__(self, remote: FakeRemote, user: str, host: str):
        self.remote = remote
        self.user = user
        self.host = host
        self.commands = []

    def __enter__(self):
        if self.host in self.remote.unreachable:
            raise CollaboratorError(f"cannot connect to {self.user}@{self.host}:22: timed out")
        return self

    def __exit__(self, exc_type, exc, tb):
        return None

    # ── exec emulation ───────────────────────────────────────────────────────

    def exec(self, cmd: str, timeout: int = 300):
        self.commands.append(cmd)
        argv = shlex.split(cmd)
        out = []
        part = []
        for tok in argv + ["&&"]:
            if tok == "&&":
                out.append(self._run(part, cmd))
                part = []
            else:
                part.append(tok)
        return "".join(out), ""

    def _fail(self, cmd, msg):
        raise CollaboratorError(f"remote command exited 1 on {self.host}: {cmd!r}\nstderr: {msg}")

    def _run(self, argv, cmd) -> str:
        prog = argv[0]
        if prog == "find" and "-delete" in argv:
            base = self.remote.local(argv[1])
            for p in list(base.iterdir()):
                if p.is_dir():
                    shutil.rmtree(p)
                else:
                    p.unlink()
            return ""
        if prog == "find":
            base = self.remote.local(argv[1])
            if not base.is_dir():
                self._fail(cmd, f"find: '{argv[1]}': No such file or directory")
            root = argv[1].rstrip("/")
            return "".join(
                f"{root}/{p.relative_to(base).as_posix()}\n"
                for p in sorted(base.rglob("*")) if p.is_file() and not p.is_symlink()
            )
        if prog == "md5sum":
            stdin = argv[1] == "<"
            name = argv[2] if stdin else argv[1]
            p = self.remote.local(name)
            if not p.is_file():
                self._fail(cmd, f"md5sum: {name}: No such file or directory")
            digest = hashlib.md5(p.read_bytes()).hexdigest()
            if stdin:
                return f"{digest}  -\n"
            # coreutils escapes awkward names and flags the line with a backslash
            if "\\" in name or "\n" in name:
                escaped = name.replace("\\", "\\\\").replace("\n", "\\n")
                return f"\\{digest}  {escaped}\n"
            return f"{digest}  {name}\n"
        if prog == "mkdir":
            self.remote.local(argv[-1]).mkdir(parents=True, exist_ok=True)
            return ""
        if prog == "tar" and argv[1] == "czf":
            archive, src = argv[2], argv[4]
            if not self.remote.local(src).is_dir():
                self._fail(cmd, f"tar: {src}: Cannot open: No such file or directory")
            if self.remote.before_pack:
                self.remote.before_pack(self.remote)
            with tarfile.open(self.remote.local(archive), "w:gz") as tar:
                tar.add(str(self.remote.local(src)), arcname=".")
            return ""
        if prog == "tar" and argv[1] == "xzf":
            archive, dest = argv[2], argv[4]
            with tarfile.open(self.remote.local(archive), "r:gz") as tar:
                tar.extractall(self.remote.local(dest), filter="data")
            return ""
        self._fail(cmd, f"{prog}: command not emulated")

    # ── sftp emulation ───────────────────────────────────────────────────────

    def sftp_get(self, remote: str, local: str):
        src = self.remote.local(remote)
        if not src.is_file():
            raise CollaboratorError(f"download of {self.host}:{remote} failed: no such file")
        shutil.copyfile(src, local)

    def sftp_put(self, local: str, remote: str):
        dest = self.remote.local(remote)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(local, dest)

    def sftp_remove(self, remote: str):
        self.remote.local(remote).unlink(missing_ok=True)
