from __future__ import annotations

import queue
import threading
from typing import Optional

import pytest

from webtunnel_ssh.core.interfaces import PromptProvider, RelayConnection, WebSocketFactory


class FakePromptProvider(PromptProvider):
    def __init__(self, answers=None):
        self.answers = dict(answers or {})
        self.calls = []

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        self.calls.append((message, password))
        return self.answers.get(message, "")


class FakeRelay(RelayConnection):
    """In-memory relay: bytes sent by the forwarder land in ``sent``, ``feed`` simulates the device."""

    def __init__(self):
        self.sent = bytearray()
        self.received = threading.Event()
        self.closed = False
        self._incoming: queue.Queue = queue.Queue()

    def feed(self, data: bytes) -> None:
        self._incoming.put(data)

    def send(self, data: bytes) -> None:
        if self.closed:
            raise ConnectionError("relay closed")
        self.sent.extend(data)
        self.received.set()

    def recv(self, timeout: Optional[float] = None) -> bytes:
        try:
            return self._incoming.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError("no data")

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._incoming.put(b"")


class FakeWebSocketFactory(WebSocketFactory):
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.relays = []
        self.calls = []

    def create(self, uri: str, remote_port: int) -> FakeRelay:
        self.calls.append((uri, remote_port))
        if self.error is not None:
            raise self.error
        relay = FakeRelay()
        self.relays.append(relay)
        return relay


@pytest.fixture
def fake_factory():
    return FakeWebSocketFactory()
