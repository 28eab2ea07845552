import json

import pytest

from cephstate.client.errors import ReconcileError
from cephstate.observer.cluster import ClusterObserver
from cephstate.observers.events import SnapshotTaken

STATUS = {
    "fsid": "9c4f1c2e-0000-0000-0000-000000000000",
    "health": {"status": "HEALTH_WARN", "checks": {}},
    "servicemap": {
        "services": {
            "osd": {"daemons": {"0": {}, "1": {}, "2": {}}},
            "mon": {"daemons": {"a": {}, "b": {}, "c": {}}},
            "mgr": {"daemons": {"x": {}}},
        }
    },
}


def test_snapshot_aggregates_status_and_pool_listing(client, runner, bus, capture):
    runner.on("ceph status --format json", stdout=json.dumps(STATUS))
    runner.on("ceph osd pool ls", stdout=".mgr\nrbd\nvolumes\n")

    snap = ClusterObserver(client, bus=bus).snapshot()

    assert runner.calls == [
        ["ceph", "status", "--format", "json"],
        ["ceph", "osd", "pool", "ls"],
    ]
    assert snap.health == "HEALTH_WARN"
    assert (snap.osd_count, snap.mon_count, snap.mgr_count) == (3, 3, 1)
    assert snap.pool_count == 3
    assert isinstance(capture.events[-1], SnapshotTaken)


def test_snapshot_status_failure_keeps_pool_count(client, runner):
    runner.on("status --format json", rc=1, stderr="[errno 110] RADOS timed out")
    runner.on("osd pool ls", stdout="rbd\n")

    snap = ClusterObserver(client).snapshot()

    assert snap.health == ""
    assert (snap.osd_count, snap.mon_count, snap.mgr_count) == (0, 0, 0)
    assert snap.pool_count == 1


def test_snapshot_pool_listing_failure_keeps_status(client, runner):
    runner.on("status --format json", stdout=json.dumps(STATUS))
    runner.on("osd pool ls", rc=1, stderr="boom")

    snap = ClusterObserver(client).snapshot()

    assert snap.health == "HEALTH_WARN"
    assert snap.pool_count == 0


def test_snapshot_tolerates_partial_documents(client, runner):
    doc = {"health": "HEALTH_OK", "servicemap": {"services": {"osd": {"daemons": "n/a"}, "mon": {"daemons": {"a": {}}}}}}
    runner.on("status --format json", stdout=json.dumps(doc))

    snap = ClusterObserver(client).snapshot()

    assert snap.health == ""
    assert snap.osd_count == 0
    assert snap.mon_count == 1
    assert snap.mgr_count == 0
    assert snap.pool_count == 0


def test_snapshot_invalid_json(client, runner):
    runner.on("status --format json", stdout="HEALTH_OK")
    assert ClusterObserver(client).snapshot().health == ""


def test_pool_info_reads_properties_and_type(client, runner):
    runner.on("pool get rbd all", stdout="size: 3\nmin_size: 2\npg_num: 32\npgp_num: 32\n")
    runner.on("pool get rbd type", stdout="type: replicated\n")

    info = ClusterObserver(client).pool_info("rbd")

    assert (info.name, info.pg_num, info.size, info.min_size, info.type) == ("rbd", 32, 3, 2, "replicated")


def test_pool_info_type_failure_is_tolerated(client, runner):
    runner.on("pool get rbd all", stdout="size: 3\n")
    runner.on("pool get rbd type", rc=22, stderr="Error EINVAL: invalid choice")

    info = ClusterObserver(client).pool_info("rbd")

    assert info.size == 3
    assert info.pg_num is None
    assert info.type is None


def test_pool_info_missing_pool_raises(client, runner):
    runner.on("pool get nope all", rc=2, stderr="Error ENOENT: unrecognized pool 'nope'")
    with pytest.raises(ReconcileError, match="Failed to get pool information"):
        ClusterObserver(client).pool_info("nope")
