from __future__ import annotations

import pytest

from webtunnel_ssh.core.exceptions import ClientProcessError, InvalidRemoteURIError, LocalBindError
from webtunnel_ssh.domain.session import (
    ClientSpec,
    ConnectionParameters,
    Launcher,
    LaunchOptions,
    SessionState,
    TunnelSession,
)
from webtunnel_ssh.domain.session.credentials import PASSWORD_PROMPT, USERNAME_PROMPT

from conftest import FakePromptProvider

URI = "https://device.example/"
EPHEMERAL = 40123


class FakeHandle:
    def __init__(self, port):
        self.local_port = port
        self.closed = False

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeTunnelSession:
    def __init__(self, error=None):
        self.error = error
        self.opened = []
        self.handle = FakeHandle(EPHEMERAL)

    def open(self, params, credentials, transport=None):
        self.opened.append((params, credentials, transport))
        if self.error:
            raise self.error
        return self.handle


class FakeRunner:
    def __init__(self, rc=0, error=None):
        self.rc = rc
        self.error = error
        self.calls = []

    def run(self, executable, args):
        self.calls.append([executable, *args])
        if self.error:
            raise self.error
        return self.rc


def _launcher(tunnel=None, runner=None, prompts=None):
    return Launcher(
        prompts or FakePromptProvider(),
        tunnel_session=tunnel or FakeTunnelSession(),
        runner=runner or FakeRunner(),
        locate=lambda spec: spec.executable,
    )


def _options(executable="ssh", **kwargs):
    kwargs.setdefault("username", "alice")
    kwargs.setdefault("password", "s3cret")
    return LaunchOptions(
        params=ConnectionParameters(URI),
        client=ClientSpec.for_executable(executable),
        **kwargs,
    )


def test_ssh_scenario():
    runner = FakeRunner()
    tunnel = FakeTunnelSession()
    launcher = _launcher(tunnel, runner)

    assert launcher.run(_options("ssh")) == 0
    assert runner.calls == [["ssh", "-p", str(EPHEMERAL), "localhost"]]
    assert tunnel.handle.closed
    assert launcher.state is SessionState.EXIT


def test_scp_scenario():
    runner = FakeRunner()
    _launcher(runner=runner).run(_options("scp", trailing_args=["file.txt", "remote:/tmp/"]))
    assert runner.calls == [["scp", "-P", str(EPHEMERAL), "file.txt", "remote:/tmp/"]]


def test_login_name_is_passed_to_ssh():
    runner = FakeRunner()
    _launcher(runner=runner).run(_options("ssh", login_name="root", trailing_args=["-v"]))
    assert runner.calls == [["ssh", "-p", str(EPHEMERAL), "-l", "root", "-v", "localhost"]]


def test_child_exit_code_is_returned():
    assert _launcher(runner=FakeRunner(rc=255)).run(_options()) == 255


def test_bad_uri_never_spawns_client():
    runner = FakeRunner()
    launcher = _launcher(tunnel=TunnelSession(), runner=runner)
    with pytest.raises(InvalidRemoteURIError):
        launcher.run(LaunchOptions(
            params=ConnectionParameters("not a uri"),
            client=ClientSpec.for_executable("ssh"),
            username="alice",
            password="pw",
        ))
    assert runner.calls == []
    assert launcher.state is SessionState.EXIT


def test_tunnel_failure_never_spawns_client():
    runner = FakeRunner()
    with pytest.raises(LocalBindError):
        _launcher(FakeTunnelSession(error=LocalBindError("in use")), runner).run(_options())
    assert runner.calls == []


def test_tunnel_is_closed_when_spawn_fails():
    tunnel = FakeTunnelSession()
    with pytest.raises(ClientProcessError):
        _launcher(tunnel, FakeRunner(error=ClientProcessError("gone"))).run(_options())
    assert tunnel.handle.closed


def test_credentials_are_prompted_before_tunnel_opens():
    prompts = FakePromptProvider({USERNAME_PROMPT: "bob", PASSWORD_PROMPT: "pw"})
    tunnel = FakeTunnelSession()
    _launcher(tunnel, prompts=prompts).run(_options(username=None, password=None))
    _, credentials, transport = tunnel.opened[0]
    assert (credentials.username, credentials.password) == ("bob", "pw")
    assert transport.ssl_context is not None


def test_supplied_credentials_skip_prompts():
    prompts = FakePromptProvider()
    _launcher(prompts=prompts).run(_options())
    assert prompts.calls == []


def test_unlocatable_client_fails_before_prompting_or_tunnel():
    from webtunnel_ssh.core.exceptions import ConfigError
    from webtunnel_ssh.domain.session import locate_client

    prompts = FakePromptProvider()
    tunnel = FakeTunnelSession()
    launcher = Launcher(prompts, tunnel_session=tunnel, runner=FakeRunner(), locate=locate_client)
    with pytest.raises(ConfigError):
        launcher.run(_options("no-such-ssh-client-xyz", username=None, password=None))
    assert prompts.calls == []
    assert tunnel.opened == []
