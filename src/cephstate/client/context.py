# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/client/context.py

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Union

Command = Union[str, Sequence[str]]


@dataclass(frozen=True)
class ConnectionContext:
    """
    Connection flags appended to every ceph / rbd invocation.
    Empty fields are never emitted.
    """

    config_file: str = ""
    keyring: str = ""
    user: str = ""

    def flags(self) -> List[str]:
        out: List[str] = []
        if self.config_file:
            out += ["--conf", self.config_file]
        if self.keyring:
            out += ["--keyring", self.keyring]
        if self.user:
            out += ["--user", self.user]
        return out


class CommandBuilder:
    def __init__(self, context: ConnectionContext | None = None):
        self.context = context or ConnectionContext()

    def build(self, command: Command) -> List[str]:
        """
        Turn a logical command into an argv.

        A string is split on whitespace; a sequence is taken token for token,
        so values with spaces (capability strings, odd pool names) survive.
        """
        if isinstance(command, str):
            tokens = command.split()
        else:
            tokens = [str(t) for t in command]
        return tokens + self.context.flags()
