# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/state/store.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field, ValidationError

from cephstate.client.errors import ConfigError
from cephstate.resources.models import ObservedBlockImage, ObservedPool, ObservedPrincipal

log = logging.getLogger("cephstate")


class ObservedState(BaseModel):
    """Last observed record of every managed resource, keyed by identity."""
    pools: Dict[str, ObservedPool] = Field(default_factory=dict)
    users: Dict[str, ObservedPrincipal] = Field(default_factory=dict)
    images: Dict[str, ObservedBlockImage] = Field(default_factory=dict)

    def count(self) -> int:
        return len(self.pools) + len(self.users) + len(self.images)


class StateStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> ObservedState:
        if not self.path.exists():
            log.debug("no state at %s, starting empty", self.path)
            return ObservedState()
        try:
            return ObservedState.model_validate(json.loads(self.path.read_text()))
        except (ValueError, ValidationError) as e:
            raise ConfigError(f"{self.path}: unreadable state file: {e}") from e

    def save(self, state: ObservedState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(state.model_dump(mode="json"), indent=2, sort_keys=True) + "\n")
        os.replace(tmp, self.path)
        log.debug("state saved to %s (%d resources)", self.path, state.count())
