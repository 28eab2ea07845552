# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str                 # ISO timestamp
    run_id: str             # correlates all events in a single reconcile invocation
    env: str                # dev/staging/prod
    cluster: Optional[str]  # ceph.conf path, None for the default cluster

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(env: str, cluster: Optional[str] = None, run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "env": env,
        "cluster": cluster,
    }


# ---------------------------------------------------------------------
# Resource lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ResourceEvent(BaseEvent):
    kind: str           # "pool" | "user" | "image"
    name: str
    action: str         # "created" | "updated" | "deleted" | "observed" | "absent"
    message: str

@dataclass(frozen=True)
class ResourceFailed(BaseEvent):
    kind: str
    name: str
    action: str
    error: str


# ---------------------------------------------------------------------
# Cluster view & summary
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class SnapshotTaken(BaseEvent):
    health: str
    osd_count: int
    mon_count: int
    mgr_count: int
    pool_count: int

@dataclass(frozen=True)
class ReconcileSummary(BaseEvent):
    ok: int
    unchanged: int
    failed: int
