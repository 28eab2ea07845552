# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/resources/block_image.py

from __future__ import annotations

import logging
from typing import List, Optional

from cephstate.client.errors import ExecutionError, NotFoundPredicate, ReconcileError, not_found
from cephstate.observers.events import ResourceFailed
from cephstate.parsers.output import json_path, parse_json, parse_size
from cephstate.resources.base import ResourceReconciler
from cephstate.resources.models import DesiredBlockImage, ObservedBlockImage

log = logging.getLogger("cephstate")


def same_size(a: str, b: str) -> bool:
    """Compare two rbd sizes by byte count, falling back to the raw strings."""
    na, nb = parse_size(a), parse_size(b)
    if na is None or nb is None:
        return a == b
    return na == nb


class BlockImageReconciler(ResourceReconciler[DesiredBlockImage, ObservedBlockImage]):
    """
    RBD images. Features are only applied at creation and never read back.
    """

    kind = "image"

    def default_not_found(self) -> NotFoundPredicate:
        # rbd: error opening image x: (2) No such file or directory
        return not_found("No such file or directory")

    def key(self, record: DesiredBlockImage) -> str:
        return record.spec

    def create(self, desired: DesiredBlockImage) -> ObservedBlockImage:
        spec = desired.spec
        args: List[str] = ["create", "--size", desired.size, spec]
        if desired.features:
            args += ["--image-feature", ",".join(sorted(desired.features))]

        self._step(spec, "create", "create block image", self.client.rbd, *args)
        self._emit(spec, "created", f"created image {spec} ({desired.size})")
        return ObservedBlockImage.model_validate(desired.model_dump())

    def observe(self, prior: ObservedBlockImage) -> Optional[ObservedBlockImage]:
        spec = prior.spec
        try:
            output = self.client.rbd("info", spec, "--format", "json")
        except ExecutionError as e:
            if self.is_not_found(e):
                self._emit(spec, "absent", f"image {spec} no longer exists")
                return None
            self.bus.emit(ResourceFailed(
                kind=self.kind, name=spec, action="observe", error=str(e), **self.run_ctx,
            ))
            raise ReconcileError(f"Failed to read block image: {e}") from e

        size = json_path(parse_json(output), "size")
        if isinstance(size, bool) or not isinstance(size, (int, float)):
            log.debug("[image] %s: no usable size in rbd info output", spec)
            return prior.model_copy()
        return prior.model_copy(update={"size": f"{int(size)}B"})

    def update(self, desired: DesiredBlockImage, prior: ObservedBlockImage) -> ObservedBlockImage:
        spec = desired.spec

        # TODO: shrinking needs --allow-shrink; rbd refuses it as issued here
        if not same_size(desired.size, prior.size):
            self._step(
                spec, "update", "resize block image",
                self.client.rbd,
                "resize", "--size", desired.size, spec,
            )
            self._emit(spec, "updated", f"resized image {spec} {prior.size} -> {desired.size}")
        else:
            log.debug("[image] %s already %s", spec, prior.size)

        if set(desired.features) != set(prior.features):
            log.warning(
                "[image] %s: features can only be set at creation; keeping %s",
                spec, sorted(prior.features),
            )

        return ObservedBlockImage(
            name=desired.name,
            pool=desired.pool,
            size=desired.size,
            features=set(prior.features),
        )

    def delete(self, prior: ObservedBlockImage) -> None:
        spec = prior.spec
        self._step(spec, "delete", "delete block image", self.client.rbd, "rm", spec)
        self._emit(spec, "deleted", f"deleted image {spec}")
