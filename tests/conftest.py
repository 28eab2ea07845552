# tests/conftest.py
from __future__ import annotations

import pytest

from cephstate.client.cli_client import CephClient
from cephstate.client.context import ConnectionContext
from cephstate.client.runner import CommandResult
from cephstate.observers.dispatcher import EventBus


class FakeRunner:
    """
    Records every argv and answers with canned results.
    Rules match on a substring of the space-joined argv; first match wins.
    """

    def __init__(self):
        self.calls = []
        self.rules = []
        self.closed = False

    def on(self, needle, stdout="", rc=0, stderr=""):
        self.rules.append((needle, CommandResult(rc, stdout, stderr)))
        return self

    def run(self, argv, *, timeout=None):
        self.calls.append(list(argv))
        joined = " ".join(argv)
        for needle, res in self.rules:
            if needle in joined:
                return res
        return CommandResult(0, "", "")

    def close(self):
        self.closed = True


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def client(runner):
    return CephClient(ConnectionContext(), runner)


@pytest.fixture
def capture():
    return Capture()


@pytest.fixture
def bus(capture):
    return EventBus([capture])
