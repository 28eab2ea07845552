# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/resources/pool.py

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from cephstate.client.errors import ExecutionError, NotFoundPredicate, ReconcileError, not_found
from cephstate.observers.events import ResourceFailed
from cephstate.parsers.output import parse_properties
from cephstate.resources.base import ResourceReconciler
from cephstate.resources.models import DesiredPool, ObservedPool

log = logging.getLogger("cephstate")

# `ceph osd pool get <pool> all` keys we track, and how to parse them
POOL_FIELDS = {
    "size": int,
    "min_size": int,
    "pg_num": int,
    "pgp_num": int,
    "crush_rule": str,
}

# settable with `ceph osd pool set`, in the order they are applied
CREATE_FOLLOW_UPS = (
    ("size", "set pool size"),
    ("min_size", "set pool min_size"),
    ("crush_rule", "set crush rule"),
)
UPDATABLE = ("size", "min_size", "pg_num", "pgp_num", "crush_rule")

DELETE_CONFIRMATION = "--yes-i-really-really-mean-it"


class PoolReconciler(ResourceReconciler[DesiredPool, ObservedPool]):
    kind = "pool"

    def default_not_found(self) -> NotFoundPredicate:
        # ceph osd pool get: "Error ENOENT: unrecognized pool 'x'"
        return not_found("unrecognized pool")

    def key(self, record: DesiredPool) -> str:
        return record.name

    def _set(self, name: str, prop: str, value: Any) -> str:
        return self.client.ceph("osd", "pool", "set", name, prop, str(value))

    def create(self, desired: DesiredPool) -> ObservedPool:
        name = desired.name
        pool_type = desired.type or "replicated"
        pgp_num = desired.pgp_num if desired.pgp_num is not None else desired.pg_num

        self._step(
            name, "create", "create pool",
            self.client.ceph,
            "osd", "pool", "create", name, str(desired.pg_num), str(pgp_num), pool_type,
        )

        for prop, what in CREATE_FOLLOW_UPS:
            value = getattr(desired, prop)
            if value is not None:
                self._step(name, "create", what, self._set, name, prop, value)

        self._emit(name, "created", f"created pool {name}")
        return ObservedPool.model_validate(
            {**desired.model_dump(), "pgp_num": pgp_num, "type": pool_type}
        )

    def observe(self, prior: ObservedPool) -> Optional[ObservedPool]:
        name = prior.name
        try:
            output = self.client.ceph("osd", "pool", "get", name, "all")
        except ExecutionError as e:
            if self.is_not_found(e):
                self._emit(name, "absent", f"pool {name} no longer exists")
                return None
            self.bus.emit(ResourceFailed(
                kind=self.kind, name=name, action="observe", error=str(e), **self.run_ctx,
            ))
            raise ReconcileError(f"Failed to read pool: {e}") from e

        parsed = parse_properties(output, POOL_FIELDS)
        log.debug("[pool] %s observed %s", name, parsed)
        return prior.model_copy(update=parsed)

    def update(self, desired: DesiredPool, prior: ObservedPool) -> ObservedPool:
        name = desired.name

        if desired.type and prior.type and desired.type != prior.type:
            log.warning(
                "[pool] %s: type %s -> %s cannot be changed in place; ignoring",
                name, prior.type, desired.type,
            )

        changed = []
        for prop in UPDATABLE:
            want = getattr(desired, prop)
            if want is None or want == getattr(prior, prop):
                continue
            self._step(name, "update", f"update pool {prop}", self._set, name, prop, want)
            changed.append(prop)

        merged: Dict[str, Any] = prior.model_dump()
        merged.update({k: v for k, v in desired.model_dump().items() if v is not None and k != "type"})
        observed = ObservedPool.model_validate(merged)

        if changed:
            self._emit(name, "updated", f"updated pool {name} ({', '.join(changed)})")
        else:
            log.debug("[pool] %s already up to date", name)
        return observed

    def delete(self, prior: ObservedPool) -> None:
        name = prior.name
        # ceph refuses pool deletion unless the name is repeated and the flag given
        self._step(
            name, "delete", "delete pool",
            self.client.ceph,
            "osd", "pool", "delete", name, name, DELETE_CONFIRMATION,
        )
        self._emit(name, "deleted", f"deleted pool {name}")
