import pytest
from pydantic import ValidationError

from cephstate.client.errors import ReconcileError
from cephstate.resources.models import DesiredPrincipal, ObservedPrincipal
from cephstate.resources.principal import PrincipalReconciler

CAPS = {"mon": "allow r", "osd": "allow rw pool=rbd"}

KEYRING = (
    "[client.test]\n"
    "\tkey = AQBxZ2ZlAAAAABAAxZ9lQkx1Qm9vZg==\n"
    '\tcaps mon = "allow r"\n'
    '\tcaps osd = "allow rw pool=rbd"\n'
)


def _prior(**kw):
    base = dict(name="client.test", caps=dict(CAPS), key="AQBxZ2ZlAAAAABAAxZ9lQkx1Qm9vZg==")
    base.update(kw)
    return ObservedPrincipal(**base)


def test_create_grants_all_caps_at_once_and_extracts_key(client, runner):
    runner.on("auth get-or-create client.test", stdout="[client.test]\n\tkey = AQBxZ2ZlAAAAABAAxZ9lQkx1Qm9vZg==\n")
    rec = PrincipalReconciler(client)

    observed = rec.create(DesiredPrincipal(name="client.test", caps=CAPS))

    assert runner.calls == [
        ["ceph", "auth", "get-or-create", "client.test", "mon", "allow r", "osd", "allow rw pool=rbd"],
    ]
    assert observed.key == "AQBxZ2ZlAAAAABAAxZ9lQkx1Qm9vZg=="
    assert observed.caps == CAPS


def test_create_failure_raises(client, runner):
    runner.on("get-or-create", rc=22, stderr="Error EINVAL: key for client.test exists but cap mon does not match")
    with pytest.raises(ReconcileError, match="Failed to create user"):
        PrincipalReconciler(client).create(DesiredPrincipal(name="client.test", caps=CAPS))


def test_observe_keeps_secret_and_reads_caps(client, runner):
    runner.on("auth get client.test", stdout=KEYRING.replace("AQBxZ2ZlAAAAABAAxZ9lQkx1Qm9vZg==", "AQother=="))
    rec = PrincipalReconciler(client)

    observed = rec.observe(_prior(caps={"mon": "allow *"}))

    assert runner.calls == [["ceph", "auth", "get", "client.test"]]
    assert observed.key == "AQBxZ2ZlAAAAABAAxZ9lQkx1Qm9vZg=="
    assert observed.caps == CAPS


def test_observe_fills_missing_secret(client, runner):
    runner.on("auth get client.test", stdout=KEYRING)
    observed = PrincipalReconciler(client).observe(_prior(key=None))
    assert observed.key == "AQBxZ2ZlAAAAABAAxZ9lQkx1Qm9vZg=="


def test_observe_without_caps_lines_keeps_prior_caps(client, runner):
    runner.on("auth get client.test", stdout="[client.test]\n\tkey = AQ==\n")
    assert PrincipalReconciler(client).observe(_prior()).caps == CAPS


@pytest.mark.parametrize(
    "stderr",
    [
        "Error ENOENT: entity does not exist",
        "Error ENOENT: failed to find client.test in keyring",
    ],
)
def test_observe_missing_user_is_absent(client, runner, stderr):
    runner.on("auth get client.test", rc=2, stderr=stderr)
    assert PrincipalReconciler(client).observe(_prior()) is None


def test_observe_other_error_is_not_absent(client, runner):
    runner.on("auth get client.test", rc=1, stderr="Error EACCES: access denied")
    with pytest.raises(ReconcileError, match="Failed to read user"):
        PrincipalReconciler(client).observe(_prior())


def test_observe_output_without_name_is_absent(client, runner):
    runner.on("auth get client.test", stdout="[client.other]\n\tkey = AQ==\n")
    assert PrincipalReconciler(client).observe(_prior()) is None


def test_update_replaces_full_cap_set_when_changed(client, runner):
    desired = DesiredPrincipal(name="client.test", caps={"mon": "allow r", "osd": "allow rwx pool=rbd", "mgr": "allow r"})

    observed = PrincipalReconciler(client).update(desired, _prior())

    assert runner.calls == [
        ["ceph", "auth", "caps", "client.test",
         "mon", "allow r", "osd", "allow rwx pool=rbd", "mgr", "allow r"],
    ]
    assert observed.caps == desired.caps
    assert observed.key == _prior().key


def test_update_same_caps_is_noop(client, runner):
    PrincipalReconciler(client).update(DesiredPrincipal(name="client.test", caps=dict(CAPS)), _prior())
    assert runner.calls == []


def test_delete_has_no_confirmation(client, runner):
    PrincipalReconciler(client).delete(_prior())
    assert runner.calls == [["ceph", "auth", "del", "client.test"]]


@pytest.mark.parametrize("bad", ["admin", ".x", "client."])
def test_principal_name_must_be_typed(bad):
    with pytest.raises(ValidationError):
        DesiredPrincipal(name=bad, caps={})
