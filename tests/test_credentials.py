from __future__ import annotations

import io
from types import SimpleNamespace

import pytest
from rich.console import Console

from webtunnel_ssh.adapters.cli.prompts import RichPromptProvider
from webtunnel_ssh.core import terminal
from webtunnel_ssh.domain.session import CredentialResolver
from webtunnel_ssh.domain.session.credentials import PASSWORD_PROMPT, USERNAME_PROMPT

from conftest import FakePromptProvider


def test_supplied_credentials_are_not_prompted():
    prompts = FakePromptProvider()
    creds = CredentialResolver(prompts).resolve("alice", "s3cret")
    assert (creds.username, creds.password) == ("alice", "s3cret")
    assert prompts.calls == []


def test_missing_password_is_prompted_without_echo_flag():
    prompts = FakePromptProvider({PASSWORD_PROMPT: "typed"})
    creds = CredentialResolver(prompts).resolve("alice", None)
    assert creds.password == "typed"
    assert prompts.calls == [(PASSWORD_PROMPT, True)]


def test_missing_username_is_prompted():
    prompts = FakePromptProvider({USERNAME_PROMPT: "bob"})
    creds = CredentialResolver(prompts).resolve("", "pw")
    assert creds.username == "bob"
    assert prompts.calls == [(USERNAME_PROMPT, False)]


def test_both_missing_prompts_username_then_password():
    prompts = FakePromptProvider({USERNAME_PROMPT: "bob", PASSWORD_PROMPT: "pw"})
    CredentialResolver(prompts).resolve()
    assert [message for message, _ in prompts.calls] == [USERNAME_PROMPT, PASSWORD_PROMPT]


def test_blank_password_from_prompt_is_accepted_as_is():
    prompts = FakePromptProvider({USERNAME_PROMPT: "bob"})
    creds = CredentialResolver(prompts).resolve()
    assert creds.password == ""
    assert not creds.is_complete()
    assert len(prompts.calls) == 2


def test_credentials_repr_hides_password():
    creds = CredentialResolver(FakePromptProvider()).resolve("alice", "hunter2")
    assert "hunter2" not in repr(creds)


def _provider(text: str):
    out = io.StringIO()
    console = Console(file=out, force_terminal=False, width=120)
    return RichPromptProvider(console=console, stdin=io.StringIO(text)), out


def test_rich_prompt_reads_password_line():
    provider, out = _provider("secret\n")
    assert provider.prompt(PASSWORD_PROMPT, password=True) == "secret"
    assert "Remote Manager Password: " in out.getvalue()
    assert "secret" not in out.getvalue()


def test_rich_prompt_blank_and_eof_password():
    provider, _ = _provider("\n")
    assert provider.prompt(PASSWORD_PROMPT, password=True) == ""
    provider, _ = _provider("")
    assert provider.prompt(PASSWORD_PROMPT, password=True) == ""


def test_rich_prompt_reads_username():
    provider, _ = _provider("alice\n")
    assert provider.prompt(USERNAME_PROMPT) == "alice"


class _TtyStream(io.StringIO):
    def isatty(self):
        return True

    def fileno(self):
        return 0


class _FakeTermios:
    ECHO = 0o10
    TCSANOW = 0

    def __init__(self):
        self.lflag = 0o10 | 0o2
        self.history = []

    def tcgetattr(self, fd):
        return [0, 0, 0, self.lflag, 0, 0, []]

    def tcsetattr(self, fd, when, attrs):
        self.lflag = attrs[3]
        self.history.append(attrs[3])


def test_no_echo_restores_terminal_after_read_error(monkeypatch):
    fake = _FakeTermios()
    monkeypatch.setattr(terminal, "termios", fake)

    with pytest.raises(OSError):
        with terminal.no_echo(_TtyStream()):
            assert not fake.lflag & fake.ECHO
            raise OSError("read failed")

    assert fake.lflag & fake.ECHO
    assert fake.history == [0o2, 0o10 | 0o2]


def test_no_echo_ignores_non_tty(monkeypatch):
    fake = _FakeTermios()
    monkeypatch.setattr(terminal, "termios", fake)
    with terminal.no_echo(io.StringIO()):
        pass
    assert fake.history == []


def test_password_prompt_runs_inside_no_echo(monkeypatch):
    fake = _FakeTermios()
    monkeypatch.setattr(terminal, "termios", fake)
    seen = SimpleNamespace(lflag=None)

    class Stream(_TtyStream):
        def readline(self, *args):
            seen.lflag = fake.lflag
            return "pw\n"

    out = io.StringIO()
    provider = RichPromptProvider(console=Console(file=out), stdin=Stream())
    assert provider.prompt(PASSWORD_PROMPT, password=True) == "pw"
    assert not seen.lflag & fake.ECHO
    assert fake.lflag & fake.ECHO
