# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/config/models.py

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from cephstate.client.context import ConnectionContext
from cephstate.resources.models import DesiredBlockImage, DesiredPool, DesiredPrincipal


class ConnectionSpec(BaseModel):
    config_file: Optional[str] = None   # --conf
    keyring: Optional[str] = None       # --keyring
    user: Optional[str] = None          # --user (without the "client." prefix)

    def to_context(self) -> ConnectionContext:
        return ConnectionContext(
            config_file=self.config_file or "",
            keyring=self.keyring or "",
            user=self.user or "",
        )


class SSHHost(BaseModel):
    """Admin host the ceph/rbd CLIs run on, when not local."""
    address: str
    username: str = "ubuntu"
    port: int = 22
    password: Optional[str] = None
    pkey_path: Optional[str] = None
    sudo: bool = False


class ProviderConfig(BaseModel):
    environment: Literal["dev", "staging", "prod"] = "dev"
    connection: ConnectionSpec = ConnectionSpec()
    ceph_bin: str = "ceph"
    rbd_bin: str = "rbd"
    command_prefix: List[str] = Field(default_factory=list)   # e.g. ["cephadm", "shell", "--"]
    timeout_seconds: int = 300
    extra_env: Dict[str, str] = Field(default_factory=dict)     # local runs only, e.g. CEPH_ARGS
    ssh: Optional[SSHHost] = None

    pools: List[DesiredPool] = Field(default_factory=list)
    users: List[DesiredPrincipal] = Field(default_factory=list)
    images: List[DesiredBlockImage] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_keys(self) -> "ProviderConfig":
        for kind, keys in (
            ("pool", [p.name for p in self.pools]),
            ("user", [u.name for u in self.users]),
            ("image", [i.spec for i in self.images]),
        ):
            seen = set()
            for k in keys:
                if k in seen:
                    raise ValueError(f"duplicate {kind} '{k}'")
                seen.add(k)
        return self

    # Helper methods
    def pools_by_name(self) -> Dict[str, DesiredPool]:
        return {p.name: p for p in self.pools}

    def users_by_name(self) -> Dict[str, DesiredPrincipal]:
        return {u.name: u for u in self.users}

    def images_by_spec(self) -> Dict[str, DesiredBlockImage]:
        return {i.spec: i for i in self.images}
