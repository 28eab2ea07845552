# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/observers/dispatcher.py
from __future__ import annotations

import logging
from typing import List, Optional

from .events import BaseEvent
from .interface import Observer

log = logging.getLogger("cephstate")


class EventBus:
    def __init__(self, observers: Optional[List[Observer]] = None):
        self._observers = observers or []

    def emit(self, event: BaseEvent) -> None:
        for ob in self._observers:
            try:
                ob.notify(event)
            except Exception:
                # observers must not break a reconcile run
                log.debug("observer %r failed on %s", ob, type(event).__name__, exc_info=True)
