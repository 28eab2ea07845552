# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/deploy/executor.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from ..client.cli_client import CephClient
from ..client.errors import CephError
from ..config.models import ProviderConfig
from ..resources.base import ResourceReconciler
from ..resources.block_image import BlockImageReconciler
from ..resources.pool import PoolReconciler
from ..resources.principal import PrincipalReconciler
from ..state.store import ObservedState

# Observer bits
from ..observers.dispatcher import EventBus
from ..observers.events import BaseEvent, ResourceEvent, ReconcileSummary, new_ctx

log = logging.getLogger("cephstate")

# apply order; deletions run in reverse
KINDS = ("pools", "users", "images")


@dataclass
class ResourceOutcome:
    kind: str
    name: str
    action: str                 # "create" | "update" | "delete" | "observe"
    status: str                 # "OK" | "UNCHANGED" | "FAILED" | "GONE"
    error: Optional[str] = None


@dataclass
class ReconcileReport:
    state: ObservedState
    outcomes: List[ResourceOutcome] = field(default_factory=list)

    def add(self, outcome: ResourceOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def failed(self) -> bool:
        return self.count("FAILED") > 0

    def summary(self) -> str:
        return (
            f"OK={self.count('OK')} UNCHANGED={self.count('UNCHANGED')} "
            f"GONE={self.count('GONE')} FAILED={self.count('FAILED')}"
        )


class _ChangeRecorder:
    """Remembers which resources a reconciler actually changed."""

    def __init__(self):
        self.changed: Set[Tuple[str, str]] = set()

    def notify(self, event: BaseEvent) -> None:
        if isinstance(event, ResourceEvent) and event.action in ("created", "updated", "deleted"):
            self.changed.add((event.kind, event.name))


def build_reconcilers(
    client: CephClient,
    bus: EventBus,
    run_ctx: Dict[str, Any],
) -> Dict[str, ResourceReconciler]:
    return {
        "pools": PoolReconciler(client, bus=bus, run_ctx=run_ctx),
        "users": PrincipalReconciler(client, bus=bus, run_ctx=run_ctx),
        "images": BlockImageReconciler(client, bus=bus, run_ctx=run_ctx),
    }


def _desired_by_kind(cfg: ProviderConfig) -> Dict[str, Dict[str, Any]]:
    return {
        "pools": cfg.pools_by_name(),
        "users": cfg.users_by_name(),
        "images": cfg.images_by_spec(),
    }


def _converge(
    rec: ResourceReconciler,
    key: str,
    want: Any,
    stored: Dict[str, Any],
    recorder: _ChangeRecorder,
    report: ReconcileReport,
) -> None:
    prior = stored.get(key)
    if prior is not None:
        current = rec.observe(prior)
        if current is None:
            del stored[key]
        else:
            stored[key] = current
            stored[key] = rec.update(want, current)
            status = "OK" if (rec.kind, key) in recorder.changed else "UNCHANGED"
            report.add(ResourceOutcome(rec.kind, key, "update", status))
            return

    stored[key] = rec.create(want)
    report.add(ResourceOutcome(rec.kind, key, "create", "OK"))


def reconcile_all(
    cfg: ProviderConfig,
    client: CephClient,
    state: ObservedState,
    *,
    observers: Optional[List] = None,
    run_ctx: Optional[Dict[str, Any]] = None,
    destroy: bool = False,
) -> ReconcileReport:
    """
    Converge every resource kind toward ``cfg``.

    Resources are independent: a failure is recorded and the run moves on.
    State is only touched for operations that succeeded. With ``destroy``
    every stored resource is deleted.
    """
    recorder = _ChangeRecorder()
    bus = EventBus([*(observers or []), recorder])
    run_ctx = run_ctx or new_ctx(env=cfg.environment, cluster=cfg.connection.config_file)

    work = state.model_copy(deep=True)
    report = ReconcileReport(state=work)
    reconcilers = build_reconcilers(client, bus, run_ctx)
    desired = {k: {} for k in KINDS} if destroy else _desired_by_kind(cfg)

    # 1) create / update
    for kind in KINDS:
        rec = reconcilers[kind]
        stored = getattr(work, kind)
        for key, want in desired[kind].items():
            try:
                _converge(rec, key, want, stored, recorder, report)
            except CephError as e:
                log.error("[%s] %s: %s", rec.kind, key, e)
                action = "update" if key in stored else "create"
                report.add(ResourceOutcome(rec.kind, key, action, "FAILED", error=str(e)))

    # 2) delete what is no longer desired
    for kind in reversed(KINDS):
        rec = reconcilers[kind]
        stored = getattr(work, kind)
        for key in [k for k in stored if k not in desired[kind]]:
            try:
                rec.delete(stored[key])
            except CephError as e:
                log.error("[%s] %s: %s", rec.kind, key, e)
                report.add(ResourceOutcome(rec.kind, key, "delete", "FAILED", error=str(e)))
                continue
            del stored[key]
            report.add(ResourceOutcome(rec.kind, key, "delete", "OK"))

    bus.emit(ReconcileSummary(
        ok=report.count("OK"),
        unchanged=report.count("UNCHANGED"),
        failed=report.count("FAILED"),
        **run_ctx,
    ))
    return report


def refresh_all(
    client: CephClient,
    state: ObservedState,
    *,
    observers: Optional[List] = None,
    run_ctx: Optional[Dict[str, Any]] = None,
) -> ReconcileReport:
    """Re-read every stored resource; forget the ones the cluster no longer has."""
    bus = EventBus(observers or [])
    run_ctx = run_ctx or new_ctx(env="default", cluster=client.context.config_file or None)

    work = state.model_copy(deep=True)
    report = ReconcileReport(state=work)
    reconcilers = build_reconcilers(client, bus, run_ctx)

    for kind in KINDS:
        rec = reconcilers[kind]
        stored = getattr(work, kind)
        for key in list(stored):
            try:
                current = rec.observe(stored[key])
            except CephError as e:
                report.add(ResourceOutcome(rec.kind, key, "observe", "FAILED", error=str(e)))
                continue
            if current is None:
                del stored[key]
                report.add(ResourceOutcome(rec.kind, key, "observe", "GONE"))
            else:
                stored[key] = current
                report.add(ResourceOutcome(rec.kind, key, "observe", "UNCHANGED"))

    bus.emit(ReconcileSummary(
        ok=report.count("OK"),
        unchanged=report.count("UNCHANGED"),
        failed=report.count("FAILED"),
        **run_ctx,
    ))
    return report
