# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cephstate/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from cephstate.client.cli_client import CephClient
from cephstate.client.errors import CephError
from cephstate.client.runner import LocalRunner, open_ssh
from cephstate.config.loader import load_config
from cephstate.config.models import ProviderConfig
from cephstate.deploy.executor import ReconcileReport, reconcile_all, refresh_all
from cephstate.logging.log import init_logging
from cephstate.observer.cluster import ClusterObserver
from cephstate.observers.console import ConsoleObserver
from cephstate.observers.events import new_ctx
from cephstate.observers.interface import Observer
from cephstate.observers.jsonfile import JsonFileObserver
from cephstate.observers.logger import LoggerObserver
from cephstate.state.store import StateStore


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Reconcile Ceph pools, users and RBD images from a YAML file")

CONFIG_ARG = typer.Argument(..., exists=True, dir_okay=False, help="Provider config YAML")
STATE_OPT = typer.Option(None, "--state", help="State file (default: <config>.state.json)")
DEBUG_OPT = typer.Option(False, "--debug", help="Log every command to the console")


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------

def _load(config: Path) -> ProviderConfig:
    try:
        return load_config(config)
    except CephError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)


def _state_path(config: Path, state: Optional[Path]) -> Path:
    return state or config.with_name(config.stem + ".state.json")


def build_client(cfg: ProviderConfig) -> CephClient:
    """One context + client per run, shared by every reconciler."""
    if cfg.ssh:
        runner = open_ssh(cfg.ssh, sudo=cfg.ssh.sudo)
    else:
        runner = LocalRunner(env=cfg.extra_env)
    return CephClient(
        cfg.connection.to_context(),
        runner,
        ceph_bin=cfg.ceph_bin,
        rbd_bin=cfg.rbd_bin,
        command_prefix=cfg.command_prefix,
        timeout=cfg.timeout_seconds,
    )


def _observers(logger, run_id: str, log_path: Path) -> List[Observer]:
    return [
        ConsoleObserver(),
        LoggerObserver(logger),
        JsonFileObserver(log_path.parent, run_id),
    ]


def _close(client: CephClient, observers: List[Observer]) -> None:
    client.close()
    for ob in observers:
        if isinstance(ob, JsonFileObserver):
            ob.close()


def _finish(report: ReconcileReport, store: StateStore) -> None:
    store.save(report.state)
    typer.echo("")
    typer.secho(f"Summary: {report.summary()}", bold=True)
    for o in report.outcomes:
        if o.status == "FAILED":
            typer.secho(f"  {o.kind} {o.name} ({o.action}): {o.error}", fg=typer.colors.RED)
    if report.failed:
        raise typer.Exit(code=1)


def _run(config: Path, state: Optional[Path], debug: bool, *, destroy: bool) -> None:
    cfg = _load(config)
    logger, run_id, log_path = init_logging(verbose=debug)
    store = StateStore(_state_path(config, state))
    prior = store.load()

    run_ctx = new_ctx(env=cfg.environment, cluster=cfg.connection.config_file, run_id=run_id)
    observers = _observers(logger, run_id, log_path)
    client = build_client(cfg)
    try:
        report = reconcile_all(
            cfg,
            client,
            prior,
            observers=observers,
            run_ctx=run_ctx,
            destroy=destroy,
        )
    finally:
        _close(client, observers)
    _finish(report, store)


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def apply(
    config: Path = CONFIG_ARG,
    state: Optional[Path] = STATE_OPT,
    debug: bool = DEBUG_OPT,
):
    """Create, update and delete resources until the cluster matches CONFIG."""
    _run(config, state, debug, destroy=False)


@app.command()
def destroy(
    config: Path = CONFIG_ARG,
    state: Optional[Path] = STATE_OPT,
    debug: bool = DEBUG_OPT,
    yes: bool = typer.Option(False, "--yes", help="Do not ask for confirmation"),
):
    """Delete every resource recorded in the state file."""
    if not yes:
        typer.confirm("Delete all managed pools, users and images?", abort=True)
    _run(config, state, debug, destroy=True)


@app.command()
def refresh(
    config: Path = CONFIG_ARG,
    state: Optional[Path] = STATE_OPT,
    debug: bool = DEBUG_OPT,
):
    """Re-read managed resources and drop the ones that disappeared."""
    cfg = _load(config)
    logger, run_id, log_path = init_logging(verbose=debug)
    store = StateStore(_state_path(config, state))
    prior = store.load()

    run_ctx = new_ctx(env=cfg.environment, cluster=cfg.connection.config_file, run_id=run_id)
    observers = _observers(logger, run_id, log_path)
    client = build_client(cfg)
    try:
        report = refresh_all(client, prior, observers=observers, run_ctx=run_ctx)
    finally:
        _close(client, observers)
    _finish(report, store)


@app.command()
def status(config: Path = CONFIG_ARG):
    """Print a cluster health snapshot."""
    cfg = _load(config)
    client = build_client(cfg)
    try:
        snap = ClusterObserver(client).snapshot()
    finally:
        client.close()

    typer.secho("Cluster status", bold=True)
    typer.echo(f"  health : {snap.health or 'unknown'}")
    typer.echo(f"  mons   : {snap.mon_count}")
    typer.echo(f"  mgrs   : {snap.mgr_count}")
    typer.echo(f"  osds   : {snap.osd_count}")
    typer.echo(f"  pools  : {snap.pool_count}")


@app.command()
def pool(
    config: Path = CONFIG_ARG,
    name: str = typer.Argument(..., help="Pool name"),
):
    """Show the properties of any pool, managed or not."""
    cfg = _load(config)
    client = build_client(cfg)
    try:
        info = ClusterObserver(client).pool_info(name)
    except CephError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    finally:
        client.close()

    typer.secho(f"Pool {info.name}", bold=True)
    for field in ("type", "pg_num", "size", "min_size"):
        value = getattr(info, field)
        typer.echo(f"  {field:<9}: {'-' if value is None else value}")


if __name__ == "__main__":
    app()
