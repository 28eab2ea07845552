# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/resources/models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Set

from pydantic import BaseModel, Field, field_serializer, field_validator


# ---------------------------------------------------------------------
# Pools
# ---------------------------------------------------------------------
class DesiredPool(BaseModel):
    name: str
    pg_num: int = Field(gt=0)
    pgp_num: Optional[int] = None                                 # defaults to pg_num on create
    size: Optional[int] = None                                    # replica count
    min_size: Optional[int] = None
    type: Optional[Literal["replicated", "erasure"]] = None       # "replicated" when unset
    crush_rule: Optional[str] = None


class ObservedPool(DesiredPool):
    pass


# ---------------------------------------------------------------------
# Auth principals (ceph users)
# ---------------------------------------------------------------------
class DesiredPrincipal(BaseModel):
    name: str                       # "<entity-type>.<id>", e.g. client.rbd
    caps: Dict[str, str]            # daemon -> capability string

    @field_validator("name")
    @classmethod
    def _entity_name(cls, v: str) -> str:
        etype, dot, ident = v.partition(".")
        if not dot or not etype or not ident:
            raise ValueError(f"principal name must look like '<type>.<id>', got {v!r}")
        return v


class ObservedPrincipal(DesiredPrincipal):
    key: Optional[str] = None       # secret, set once by get-or-create


# ---------------------------------------------------------------------
# RBD images
# ---------------------------------------------------------------------
class DesiredBlockImage(BaseModel):
    name: str
    pool: str
    size: str                       # "10G", "1T", or "<N>B" after read-back
    features: Set[str] = Field(default_factory=set)

    @field_serializer("features", when_used="json")
    def _sorted_features(self, features: Set[str]) -> List[str]:
        return sorted(features)

    @property
    def spec(self) -> str:
        """rbd image spec, also the resource identity."""
        return f"{self.pool}/{self.name}"


class ObservedBlockImage(DesiredBlockImage):
    pass


# ---------------------------------------------------------------------
# Read-only views
# ---------------------------------------------------------------------
@dataclass
class ClusterSnapshot:
    """
    Point-in-time cluster summary; fields stay at zero when their query fails.
    """
    health: str = ""
    osd_count: int = 0
    mon_count: int = 0
    mgr_count: int = 0
    pool_count: int = 0


@dataclass
class PoolInfo:
    name: str
    pg_num: Optional[int] = None
    size: Optional[int] = None
    min_size: Optional[int] = None
    type: Optional[str] = None
