import types

import pytest

from cephstate.client import runner as runner_mod
from cephstate.client.errors import ExecutionError
from cephstate.client.runner import SSHRunner


class _FakeChannel:
    def __init__(self, rc=0): self._rc = rc
    def recv_exit_status(self): return self._rc

class _Buf:
    def __init__(self, s=""): self._s = s
    def read(self): return self._s.encode()

class FakeSSHClient:
    def __init__(self, responses=None, fail=False):
        self.log = []
        self._responses = responses or {}
        self._fail = fail
        self.connected = None
    def set_missing_host_key_policy(self, policy): pass
    def connect(self, **kw):
        self.connected = kw
    def exec_command(self, cmd, timeout=None):
        if self._fail:
            raise OSError("connection reset")
        self.log.append((cmd, timeout))
        out, err, rc = self._responses.get(cmd, ("", "", 0))
        stdout = _Buf(out)
        stdout.channel = _FakeChannel(rc)
        return types.SimpleNamespace(), stdout, _Buf(err)
    def close(self):
        self.log.append(("close",))


def test_ssh_runner_quotes_argv_and_returns_result():
    cli = FakeSSHClient({
        "ceph auth get-or-create client.x mon 'allow r'": ("[client.x]\n\tkey = AQ==\n", "", 0),
    })
    res = SSHRunner(cli).run(["ceph", "auth", "get-or-create", "client.x", "mon", "allow r"], timeout=30)

    assert res.returncode == 0
    assert "key = AQ==" in res.stdout
    assert cli.log[0] == ("ceph auth get-or-create client.x mon 'allow r'", 30)


def test_ssh_runner_sudo_wraps_command():
    cli = FakeSSHClient()
    SSHRunner(cli, sudo=True).run(["ceph", "status"])
    assert cli.log[0][0].startswith("sudo -H -E bash -c ")
    assert "ceph status" in cli.log[0][0]


def test_ssh_runner_reports_remote_failure_exit_code():
    cli = FakeSSHClient({"rbd info rbd/x": ("", "No such file or directory", 2)})
    res = SSHRunner(cli).run(["rbd", "info", "rbd/x"])
    assert res.returncode == 2
    assert res.stderr == "No such file or directory"


def test_ssh_transport_error_becomes_execution_error():
    with pytest.raises(ExecutionError, match="connection reset"):
        SSHRunner(FakeSSHClient(fail=True)).run(["ceph", "status"])


def test_open_ssh_connects_with_password(monkeypatch):
    made = []

    def make_client():
        c = FakeSSHClient()
        made.append(c)
        return c

    monkeypatch.setattr(runner_mod.paramiko, "SSHClient", make_client)
    host = types.SimpleNamespace(address="10.0.0.11", port=22, username="ubuntu", password="pw", pkey_path=None)

    r = runner_mod.open_ssh(host)

    assert isinstance(r, SSHRunner)
    assert made[0].connected["hostname"] == "10.0.0.11"
    assert made[0].connected["password"] == "pw"
    assert made[0].connected["pkey"] is None
