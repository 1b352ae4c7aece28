"""
SSH connection manager for one remote location
"""
import socket
from typing import Optional

import paramiko

from .. import config as _cfg
from ..errors import CollaboratorError
from ..utils.logging import log, vlog


class SSHManager:
    """
    Wraps paramiko SSHClient + SFTPClient for a single user@host.
    Every paramiko/socket failure surfaces as CollaboratorError.
    Usable as a context manager; disconnects on exit.
    """

    def __init__(self, user: str, host: str):
        self.user = user
        self.host = host
        self._ssh: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    # ── connection ─────────────────────────────────────────────────────────

    def connect(self):
        if self._ssh:
            return

        log(f"[SSH] connecting to {self.user}@{self.host}:{_cfg.SSH_PORT} …")
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        kw: dict = dict(hostname=self.host, port=_cfg.SSH_PORT, username=self.user,
                        timeout=_cfg.SSH_TIMEOUT, banner_timeout=30, auth_timeout=30)
        if _cfg.SSH_KEY_PATH:
            kw["key_filename"] = _cfg.SSH_KEY_PATH
        if _cfg.SSH_PASSWORD:
            kw["password"] = _cfg.SSH_PASSWORD

        try:
            client.connect(**kw)
            # Keep-alive: send a NOP every 30s
            client.get_transport().set_keepalive(30)
            self._sftp = client.open_sftp()
        except (paramiko.SSHException, socket.error) as exc:
            client.close()
            raise CollaboratorError(
                f"cannot connect to {self.user}@{self.host}:{_cfg.SSH_PORT}: {exc}"
            ) from exc

        self._ssh = client
        log("[SSH] connected ✓")

    def _close_quietly(self):
        try:
            if self._sftp:
                self._sftp.close()
        except Exception:
            pass
        try:
            if self._ssh:
                self._ssh.close()
        except Exception:
            pass
        self._ssh = None
        self._sftp = None

    def disconnect(self):
        if self._ssh:
            self._close_quietly()
            log("[SSH] disconnected.")

    def _require(self):
        if not self._ssh:
            raise CollaboratorError(f"not connected to {self.host}")

    # ── raw exec ────────────────────────────────────────────────────────────

    def exec(self, cmd: str, timeout: int = 300) -> tuple[str, str]:
        """Run a command; return (stdout, stderr). Raises on non-zero exit."""
        self._require()
        vlog(f"  [SSH] $ {cmd}")
        try:
            _, stdout, stderr = self._ssh.exec_command(cmd, timeout=timeout)
            out = stdout.read().decode("utf-8", errors="replace")
            err = stderr.read().decode("utf-8", errors="replace")
            rc = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, socket.error) as exc:
            raise CollaboratorError(f"remote command failed on {self.host}: {cmd!r}: {exc}") from exc
        if rc != 0:
            raise CollaboratorError(
                f"remote command exited {rc} on {self.host}: {cmd!r}\nstderr: {err.strip()}"
            )
        return out, err

    # ── sftp ops ────────────────────────────────────────────────────────────

    def sftp_put(self, local: str, remote: str):
        self._require()
        try:
            self._sftp.put(local, remote)
        except (paramiko.SSHException, OSError) as exc:
            raise CollaboratorError(f"upload to {self.host}:{remote} failed: {exc}") from exc

    def sftp_get(self, remote: str, local: str):
        self._require()
        try:
            self._sftp.get(remote, local)
        except (paramiko.SSHException, OSError) as exc:
            raise CollaboratorError(f"download of {self.host}:{remote} failed: {exc}") from exc

    def sftp_remove(self, remote: str):
        self._require()
        try:
            self._sftp.remove(remote)
        except (paramiko.SSHException, OSError) as exc:
            raise CollaboratorError(f"cannot remove {self.host}:{remote}: {exc}") from exc
