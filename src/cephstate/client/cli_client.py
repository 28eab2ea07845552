# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/client/cli_client.py

from __future__ import annotations

import logging
import shlex
import time
from typing import List, Optional, Sequence

from .context import Command, CommandBuilder, ConnectionContext
from .errors import ExecutionError
from .runner import CommandRunner, LocalRunner

log = logging.getLogger("cephstate")


class CephClient:
    """
    A thin wrapper around the `ceph` and `rbd` CLIs.
    - One instance per provider lifetime, handed to every reconciler.
    - No retries; every call blocks until the tool exits or `timeout` passes.
    """

    def __init__(
        self,
        context: ConnectionContext | None = None,
        runner: CommandRunner | None = None,
        *,
        ceph_bin: str = "ceph",
        rbd_bin: str = "rbd",
        command_prefix: Sequence[str] = (),
        timeout: Optional[float] = 300,
    ):
        self.context = context or ConnectionContext()
        self.builder = CommandBuilder(self.context)
        self.runner = runner or LocalRunner()
        self.ceph_bin = ceph_bin
        self.rbd_bin = rbd_bin
        self.command_prefix = list(command_prefix)
        self.timeout = timeout

    # ------------------------- internal helpers -------------------------

    def argv(self, command: Command) -> List[str]:
        return self.command_prefix + self.builder.build(command)

    # ------------------------- public API -------------------------

    def execute(self, command: Command) -> str:
        """
        Run a logical command and return its stdout.
        Raises ExecutionError on non-zero exit, spawn failure or timeout.
        """
        argv = self.argv(command)
        logical = command if isinstance(command, str) else shlex.join(list(command))

        log.debug("$ %s", shlex.join(argv))
        start = time.time()
        res = self.runner.run(argv, timeout=self.timeout)
        elapsed = round(time.time() - start, 2)

        if res.returncode != 0:
            detail = (res.stderr or res.stdout or "").strip()
            log.debug("[exit %s] (%ss) %s", res.returncode, elapsed, detail)
            raise ExecutionError(
                f"command failed (rc={res.returncode}): {logical}: {detail}",
                command=argv,
                returncode=res.returncode,
                output=detail,
            )

        log.debug("[exit 0] (%ss)", elapsed)
        return res.stdout

    def ceph(self, *args: str) -> str:
        return self.execute([self.ceph_bin, *args])

    def rbd(self, *args: str) -> str:
        return self.execute([self.rbd_bin, *args])

    def close(self) -> None:
        """Release the runner (closes the SSH session when there is one)."""
        self.runner.close()
