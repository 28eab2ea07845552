# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/client/runner.py

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

import paramiko

from .errors import ExecutionError

log = logging.getLogger("cephstate")


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str
    stderr: str = ""


class CommandRunner(Protocol):
    def run(self, argv: Sequence[str], *, timeout: Optional[float] = None) -> CommandResult: ...

    def close(self) -> None: ...


class LocalRunner:
    """
    Runs argv on this host with subprocess.run.
    ``env`` entries (e.g. CEPH_ARGS) are layered over the current environment.
    Testable by mocking subprocess.run.
    """

    def __init__(self, env: dict[str, str] | None = None):
        self.env = env or {}

    def _environ(self) -> Optional[dict[str, str]]:
        if not self.env:
            return None
        return {**os.environ, **self.env}

    def run(self, argv: Sequence[str], *, timeout: Optional[float] = None) -> CommandResult:
        argv = list(argv)
        if not argv:
            raise ExecutionError("command failed: empty argv", command=argv)
        try:
            cp = subprocess.run(
                argv,
                check=False,
                text=True,
                capture_output=True,
                timeout=timeout,
                env=self._environ(),
            )
        except subprocess.TimeoutExpired:
            raise ExecutionError(
                f"command timed out after {timeout}s: {shlex.join(argv)}",
                command=argv,
            )
        except OSError as e:
            raise ExecutionError(
                f"command failed to start: {shlex.join(argv)}: {e}",
                command=argv,
            ) from e
        return CommandResult(cp.returncode, cp.stdout or "", cp.stderr or "")

    def close(self) -> None:
        pass


class SSHRunner:
    """Runs argv on a remote admin host (e.g. a mon node) over SSH."""

    def __init__(self, client: paramiko.SSHClient, *, sudo: bool = False):
        self.client = client
        self.sudo = sudo

    def run(self, argv: Sequence[str], *, timeout: Optional[float] = None) -> CommandResult:
        cmd = shlex.join(list(argv))
        if self.sudo:
            cmd = f"sudo -H -E bash -c {shlex.quote(cmd)}"

        log.debug("[ssh] $ %s", cmd)
        try:
            stdin, stdout, stderr = self.client.exec_command(cmd, timeout=timeout)
            out = stdout.read().decode("utf-8", "replace")
            err = stderr.read().decode("utf-8", "replace")
            rc = stdout.channel.recv_exit_status()
        except (paramiko.SSHException, OSError) as e:
            raise ExecutionError(f"ssh command failed: {cmd}: {e}", command=list(argv)) from e
        return CommandResult(rc, out, err)

    def close(self) -> None:
        self.client.close()


def open_ssh(host, *, connect_timeout: float = 20.0, sudo: bool = False) -> SSHRunner:
    """
    Connect to ``host`` (anything with address/port/username/password/pkey_path)
    and wrap the client in an SSHRunner.
    """
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    pkey = None
    if host.pkey_path:
        for key_cls in (
            paramiko.RSAKey,
            paramiko.Ed25519Key,
            paramiko.ECDSAKey,
        ):
            try:
                pkey = key_cls.from_private_key_file(str(host.pkey_path))
                break
            except paramiko.SSHException:
                continue

    client.connect(
        hostname=host.address,
        port=host.port,
        username=host.username,
        password=host.password if not pkey else None,
        pkey=pkey,
        timeout=connect_timeout,
        allow_agent=True,
        look_for_keys=True,
    )

    return SSHRunner(client, sudo=sudo)
