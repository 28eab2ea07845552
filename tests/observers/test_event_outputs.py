import json
import logging
import os

import pytest

from cephstate.logging.log import init_logging, prune_runs
from cephstate.observers.dispatcher import EventBus
from cephstate.observers.events import ReconcileSummary, ResourceEvent, new_ctx
from cephstate.observers.interface import Observer
from cephstate.observers.jsonfile import JsonFileObserver


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("cephstate")
    for h in list(logger.handlers):
        h.close()
        logger.removeHandler(h)
    logger.propagate = True
    logging.getLogger("paramiko").setLevel(logging.NOTSET)


def test_jsonfile_writes_one_line_per_event_of_its_run(tmp_path):
    ctx = new_ctx(env="dev", run_id="run-1")
    other = new_ctx(env="dev", run_id="run-2")
    ob = JsonFileObserver(tmp_path, "run-1")
    assert isinstance(ob, Observer)

    bus = EventBus([ob])
    bus.emit(ResourceEvent(kind="pool", name="rbd", action="created", message="created pool rbd", **ctx))
    bus.emit(ResourceEvent(kind="pool", name="x", action="created", message="other run", **other))
    bus.emit(ReconcileSummary(ok=1, unchanged=0, failed=0, **ctx))
    ob.close()

    lines = (tmp_path / "events-run-1.jsonl").read_text().splitlines()
    records = [json.loads(line) for line in lines]
    assert [r["event"] for r in records] == ["ResourceEvent", "ReconcileSummary"]
    assert records[0]["name"] == "rbd"
    assert all(r["run_id"] == "run-1" for r in records)


def test_jsonfile_creates_nothing_without_events(tmp_path):
    JsonFileObserver(tmp_path / "logs", "run-1").close()
    assert list((tmp_path / "logs").iterdir()) == []


def test_init_logging_levels_and_trace_file(tmp_path):
    logger, run_id, log_path = init_logging(base_dir=tmp_path)
    logger.debug("$ ceph osd pool ls")
    for h in logger.handlers:
        h.flush()

    assert log_path.parent == tmp_path
    assert run_id[:8] in log_path.name
    assert "$ ceph osd pool ls" in log_path.read_text()

    console = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
    assert console[0].level == logging.INFO
    assert logging.getLogger("paramiko").level == logging.WARNING

    logger, _, _ = init_logging(base_dir=tmp_path, verbose=True)
    console = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
    assert console[0].level == logging.DEBUG
    assert len(logger.handlers) == 2


def test_prune_runs_keeps_newest(tmp_path):
    for i in range(5):
        for name in (f"cephstate-{i}.log", f"events-{i}.jsonl"):
            p = tmp_path / name
            p.write_text("x")
            os.utime(p, (1000 + i, 1000 + i))
    (tmp_path / "notes.txt").write_text("keep me")

    removed = prune_runs(tmp_path, keep=2)

    assert removed == 6
    assert sorted(p.name for p in tmp_path.iterdir()) == [
        "cephstate-3.log", "cephstate-4.log", "events-3.jsonl", "events-4.jsonl", "notes.txt",
    ]
