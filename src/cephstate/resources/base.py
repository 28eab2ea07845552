# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/resources/base.py

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, TypeVar

from cephstate.client.cli_client import CephClient
from cephstate.client.errors import ExecutionError, NotFoundPredicate, ReconcileError
from cephstate.observers.dispatcher import EventBus
from cephstate.observers.events import ResourceEvent, ResourceFailed, new_ctx

log = logging.getLogger("cephstate")

D = TypeVar("D")
O = TypeVar("O")


class ResourceReconciler(ABC, Generic[D, O]):
    """
    Create / observe / update / delete contract shared by every resource kind.

    Reconcilers hold no state of their own: the desired record comes in, a
    freshly built observed record goes out.
    """

    kind: str = "resource"

    def __init__(
        self,
        client: CephClient,
        *,
        bus: Optional[EventBus] = None,
        run_ctx: Optional[Dict[str, Any]] = None,
        is_not_found: Optional[NotFoundPredicate] = None,
    ):
        self.client = client
        self.bus = bus or EventBus()
        self.run_ctx = run_ctx or new_ctx(env="default", cluster=client.context.config_file or None)
        self.is_not_found = is_not_found or self.default_not_found()

    # ------------------------------------------------------------------
    # contract
    # ------------------------------------------------------------------

    @abstractmethod
    def key(self, record: D) -> str: ...

    @abstractmethod
    def create(self, desired: D) -> O: ...

    @abstractmethod
    def observe(self, prior: O) -> Optional[O]: ...

    @abstractmethod
    def update(self, desired: D, prior: O) -> O: ...

    @abstractmethod
    def delete(self, prior: O) -> None: ...

    @abstractmethod
    def default_not_found(self) -> NotFoundPredicate: ...

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _step(self, name: str, action: str, what: str, fn, *args):
        """
        Run one control-plane call; on failure emit ResourceFailed and raise
        ReconcileError("Failed to <what>: <tool output>").
        """
        try:
            return fn(*args)
        except ExecutionError as e:
            self.bus.emit(ResourceFailed(
                kind=self.kind, name=name, action=action, error=str(e), **self.run_ctx,
            ))
            raise ReconcileError(f"Failed to {what}: {e}") from e

    def _emit(self, name: str, action: str, message: str) -> None:
        log.info("[%s] %s", self.kind, message)
        self.bus.emit(ResourceEvent(
            kind=self.kind, name=name, action=action, message=message, **self.run_ctx,
        ))
