# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/resources/principal.py

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from cephstate.client.errors import ExecutionError, NotFoundPredicate, ReconcileError, not_found
from cephstate.observers.events import ResourceFailed
from cephstate.parsers.output import parse_keyring_caps, parse_keyring_key
from cephstate.resources.base import ResourceReconciler
from cephstate.resources.models import DesiredPrincipal, ObservedPrincipal

log = logging.getLogger("cephstate")


def caps_args(caps: Dict[str, str]) -> List[str]:
    """
    Flatten caps into ``daemon cap daemon cap ...``.
    Each capability string stays a single argv token.
    """
    args: List[str] = []
    for daemon, cap in caps.items():
        args += [daemon, cap]
    return args


class PrincipalReconciler(ResourceReconciler[DesiredPrincipal, ObservedPrincipal]):
    """
    Manages ceph auth entities. Capabilities are always granted as one full
    set; the control plane has no partial grant.
    """

    kind = "user"

    def default_not_found(self) -> NotFoundPredicate:
        # newer releases answer `auth get` with "failed to find <name> in keyring"
        return not_found("entity does not exist", "failed to find")

    def key(self, record: DesiredPrincipal) -> str:
        return record.name

    def create(self, desired: DesiredPrincipal) -> ObservedPrincipal:
        name = desired.name
        output = self._step(
            name, "create", "create user",
            self.client.ceph,
            "auth", "get-or-create", name, *caps_args(desired.caps),
        )
        secret = parse_keyring_key(output)
        if secret is None:
            log.warning("[user] %s: no key found in get-or-create output", name)

        self._emit(name, "created", f"created user {name}")
        return ObservedPrincipal(name=name, caps=dict(desired.caps), key=secret)

    def observe(self, prior: ObservedPrincipal) -> Optional[ObservedPrincipal]:
        name = prior.name
        try:
            output = self.client.ceph("auth", "get", name)
        except ExecutionError as e:
            if self.is_not_found(e):
                self._emit(name, "absent", f"user {name} no longer exists")
                return None
            self.bus.emit(ResourceFailed(
                kind=self.kind, name=name, action="observe", error=str(e), **self.run_ctx,
            ))
            raise ReconcileError(f"Failed to read user: {e}") from e

        if name not in output:
            self._emit(name, "absent", f"user {name} missing from auth listing")
            return None

        caps = parse_keyring_caps(output) or dict(prior.caps)
        # the secret is fixed at creation; only fill it if we never had it
        secret = prior.key or parse_keyring_key(output)
        return ObservedPrincipal(name=name, caps=caps, key=secret)

    def update(self, desired: DesiredPrincipal, prior: ObservedPrincipal) -> ObservedPrincipal:
        name = desired.name
        if desired.caps != prior.caps:
            self._step(
                name, "update", "update user caps",
                self.client.ceph,
                "auth", "caps", name, *caps_args(desired.caps),
            )
            self._emit(name, "updated", f"updated caps of user {name}")
        else:
            log.debug("[user] %s already up to date", name)
        return ObservedPrincipal(name=name, caps=dict(desired.caps), key=prior.key)

    def delete(self, prior: ObservedPrincipal) -> None:
        name = prior.name
        self._step(name, "delete", "delete user", self.client.ceph, "auth", "del", name)
        self._emit(name, "deleted", f"deleted user {name}")
