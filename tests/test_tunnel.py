from __future__ import annotations

import socket
import time

import pytest

from webtunnel_ssh.core.exceptions import (
    AuthenticationError,
    InvalidRemoteURIError,
    LocalBindError,
    RelayUnreachableError,
)
from webtunnel_ssh.domain.session import ConnectionParameters, Credentials, TunnelSession
from webtunnel_ssh.infrastructure.forwarder import LocalPortForwarder

from conftest import FakeWebSocketFactory

URI = "https://device.example/"
CREDS = Credentials("alice", "s3cret")


def _session(factory):
    def build(local_port, remote_port, uri, _websocket_factory):
        return LocalPortForwarder(local_port, remote_port, uri, factory)
    return TunnelSession(forwarder_factory=build)


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_ephemeral_port_is_reported(fake_factory):
    with _session(fake_factory).open(ConnectionParameters(URI), CREDS) as tunnel:
        assert 0 < tunnel.local_port <= 65535
    assert tunnel.closed
    assert fake_factory.calls == [(URI, 22)]


def test_relay_is_verified_during_open_and_port_released_on_failure():
    factory = FakeWebSocketFactory(error=AuthenticationError("HTTP 401"))
    with pytest.raises(AuthenticationError):
        _session(factory).open(ConnectionParameters(URI, local_port=0), CREDS)

    factory = FakeWebSocketFactory(error=RelayUnreachableError("no route"))
    with pytest.raises(RelayUnreachableError):
        _session(factory).open(ConnectionParameters(URI), CREDS)


def test_invalid_uri_fails_before_any_connection(fake_factory):
    with pytest.raises(InvalidRemoteURIError):
        _session(fake_factory).open(ConnectionParameters("ftp://device.example/"), CREDS)
    assert fake_factory.calls == []


def test_local_port_in_use(fake_factory):
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen(1)
    try:
        port = blocker.getsockname()[1]
        with pytest.raises(LocalBindError, match=str(port)):
            _session(fake_factory).open(ConnectionParameters(URI, local_port=port), CREDS)
    finally:
        blocker.close()
    assert fake_factory.calls == []


def test_fixed_local_port(fake_factory):
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()

    with _session(fake_factory).open(ConnectionParameters(URI, local_port=port), CREDS) as tunnel:
        assert tunnel.local_port == port


def test_bytes_are_relayed_both_ways(fake_factory):
    with _session(fake_factory).open(ConnectionParameters(URI, remote_port=2222), CREDS) as tunnel:
        relay = fake_factory.relays[0]
        client = socket.create_connection(("127.0.0.1", tunnel.local_port), timeout=5)
        try:
            client.sendall(b"SSH-2.0-test\r\n")
            assert _wait_for(lambda: bytes(relay.sent) == b"SSH-2.0-test\r\n")

            relay.feed(b"SSH-2.0-device\r\n")
            assert client.recv(1024) == b"SSH-2.0-device\r\n"
        finally:
            client.close()

        assert _wait_for(lambda: relay.closed)
    assert fake_factory.calls == [(URI, 2222)]


def test_second_client_gets_a_new_relay_connection(fake_factory):
    with _session(fake_factory).open(ConnectionParameters(URI), CREDS) as tunnel:
        first = socket.create_connection(("127.0.0.1", tunnel.local_port), timeout=5)
        second = socket.create_connection(("127.0.0.1", tunnel.local_port), timeout=5)
        try:
            assert _wait_for(lambda: len(fake_factory.relays) == 2)
        finally:
            first.close()
            second.close()


def test_remote_idle_timeout_drops_local_connection(fake_factory):
    params = ConnectionParameters(URI, remote_timeout=0.2)
    with _session(fake_factory).open(params, CREDS) as tunnel:
        client = socket.create_connection(("127.0.0.1", tunnel.local_port), timeout=5)
        try:
            assert client.recv(1024) == b""
        finally:
            client.close()


def test_remote_close_drops_local_connection(fake_factory):
    with _session(fake_factory).open(ConnectionParameters(URI), CREDS) as tunnel:
        client = socket.create_connection(("127.0.0.1", tunnel.local_port), timeout=5)
        try:
            fake_factory.relays[0].close()
            assert client.recv(1024) == b""
        finally:
            client.close()


def test_closing_the_tunnel_stops_listening(fake_factory):
    tunnel = _session(fake_factory).open(ConnectionParameters(URI), CREDS)
    port = tunnel.local_port
    tunnel.close()
    tunnel.close()
    with pytest.raises(OSError):
        socket.create_connection(("127.0.0.1", port), timeout=1).close()


@pytest.mark.parametrize("module", [
    "webtunnel_ssh",
    "webtunnel_ssh.infrastructure.forwarder",
    "webtunnel_ssh.infrastructure.websocket",
    "webtunnel_ssh.adapters.cli.app",
])
def test_package_modules_import(module):
    import importlib

    assert importlib.import_module(module) is not None
