# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/observer/cluster.py

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from cephstate.client.cli_client import CephClient
from cephstate.client.errors import ExecutionError, ReconcileError
from cephstate.observers.dispatcher import EventBus
from cephstate.observers.events import SnapshotTaken, new_ctx
from cephstate.parsers.output import json_path, parse_json, parse_line_list, parse_properties
from cephstate.resources.models import ClusterSnapshot, PoolInfo

log = logging.getLogger("cephstate")

DAEMON_TYPES = {
    "osd_count": "osd",
    "mon_count": "mon",
    "mgr_count": "mgr",
}


class ClusterObserver:
    """
    Read-only views of the cluster. Each sub-query is independent: one
    failing leaves its fields at their zero value.
    """

    def __init__(
        self,
        client: CephClient,
        *,
        bus: Optional[EventBus] = None,
        run_ctx: Optional[Dict[str, Any]] = None,
    ):
        self.client = client
        self.bus = bus or EventBus()
        self.run_ctx = run_ctx or new_ctx(env="default", cluster=client.context.config_file or None)

    def snapshot(self) -> ClusterSnapshot:
        snap = ClusterSnapshot()

        try:
            status = parse_json(self.client.ceph("status", "--format", "json"))
        except ExecutionError as e:
            log.warning("[status] ceph status failed: %s", e)
            status = {}

        health = json_path(status, "health.status")
        if isinstance(health, str):
            snap.health = health

        for attr, daemon in DAEMON_TYPES.items():
            daemons = json_path(status, f"servicemap.services.{daemon}.daemons")
            if isinstance(daemons, (dict, list)):
                setattr(snap, attr, len(daemons))

        try:
            pools = parse_line_list(self.client.ceph("osd", "pool", "ls"))
            snap.pool_count = len(pools)
        except ExecutionError as e:
            log.warning("[status] ceph osd pool ls failed: %s", e)

        self.bus.emit(SnapshotTaken(
            health=snap.health,
            osd_count=snap.osd_count,
            mon_count=snap.mon_count,
            mgr_count=snap.mgr_count,
            pool_count=snap.pool_count,
            **self.run_ctx,
        ))
        return snap

    def pool_info(self, name: str) -> PoolInfo:
        """Look up an existing pool that is not necessarily managed here."""
        try:
            output = self.client.ceph("osd", "pool", "get", name, "all")
        except ExecutionError as e:
            raise ReconcileError(f"Failed to get pool information: {e}") from e

        props = parse_properties(output, {"pg_num": int, "size": int, "min_size": int})
        info = PoolInfo(name=name, **props)

        try:
            typed = parse_properties(self.client.ceph("osd", "pool", "get", name, "type"), {"type": str})
            info.type = typed.get("type")
        except ExecutionError as e:
            log.debug("[pool] %s: type lookup failed: %s", name, e)
        return info
