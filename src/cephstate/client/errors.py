# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/client/errors.py

from __future__ import annotations

from typing import Callable, Optional, Sequence


class CephError(RuntimeError):
    """Base class for Ceph control-plane failures."""


class ExecutionError(CephError):
    """
    Raised when a control-plane command exits non-zero, times out or cannot
    be spawned. ``output`` holds what the tool itself printed and stays empty
    when it never ran (``returncode`` is None then).
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: Optional[int] = None,
        output: str = "",
    ):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.output = output


class ReconcileError(CephError):
    """Raised when a create/observe/update/delete step fails."""


class ConfigError(CephError):
    """Invalid provider config or state file."""


NotFoundPredicate = Callable[[ExecutionError], bool]


def not_found(*substrings: str) -> NotFoundPredicate:
    """
    Build an ``is_not_found`` predicate matching any of ``substrings``.

    The substrings are whatever the target Ceph release prints for a missing
    entity, e.g. ``"entity does not exist"`` for ``ceph auth get``. A release
    that rewords these messages breaks absence detection.

    Only the tool's own output is matched. Spawn failures and timeouts never
    count as not-found, whatever their message says.
    """
    needles = tuple(s for s in substrings if s)

    def _match(err: ExecutionError) -> bool:
        if err.returncode is None:
            return False
        return any(n in err.output for n in needles)

    return _match
