# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/cephstate/logging/log.py

from __future__ import annotations

import logging
from pathlib import Path
from datetime import datetime, timezone
import uuid

# per-run artefacts written into the log dir
RUN_FILE_PATTERNS = ("cephstate-*.log", "events-*.jsonl")


def prune_runs(base_dir: Path, keep: int) -> int:
    """Delete all but the newest ``keep`` files of each per-run kind."""
    removed = 0
    for pattern in RUN_FILE_PATTERNS:
        files = sorted(base_dir.glob(pattern), key=lambda p: p.stat().st_mtime, reverse=True)
        for old in files[keep:]:
            old.unlink(missing_ok=True)
            removed += 1
    return removed


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "cephstate",
    verbose: bool = False,
    keep: int = 20,
) -> tuple[logging.Logger, str, Path]:
    """
    Initializes:
      - full trace log file (every ceph/rbd argv and exit code)
      - console handler, INFO unless verbose
      - paramiko chatter capped at WARNING unless verbose
      - prunes run logs beyond the newest ``keep``
      - returns run_id so observers can reuse it
    """
    run_id = str(uuid.uuid4())

    if base_dir is None:
        base_dir = Path.home() / ".cephstate" / "logs"
    base_dir.mkdir(parents=True, exist_ok=True)
    prune_runs(base_dir, keep=max(keep - 1, 0))

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{name}-{ts}-{run_id[:8]}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for h in list(logger.handlers):
        h.close()
        logger.removeHandler(h)
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # File = FULL TRACE
    fh = logging.FileHandler(log_path)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)

    # Console = INFO by default, DEBUG when --debug is passed
    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    logging.getLogger("paramiko").setLevel(logging.DEBUG if verbose else logging.WARNING)

    logger.info("=== cephstate run started ===")
    logger.info(f"run_id={run_id}")
    logger.info(f"log_file={log_path}")

    return logger, run_id, log_path
