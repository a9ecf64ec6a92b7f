"""
Session domain models
"""
from dataclasses import dataclass
from pathlib import PurePath, PureWindowsPath
from typing import Optional, Dict, Any, List, Sequence
from urllib.parse import quote

from ...core.constants import (
    EPHEMERAL_PORT,
    DEFAULT_REMOTE_PORT,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_REMOTE_TIMEOUT,
    DEFAULT_LOCAL_TIMEOUT,
    DEFAULT_TLS_CIPHERS,
    DEFAULT_PROXY_PORT,
    TUNNEL_DESTINATION_HOST,
)
from ...core.exceptions import ConfigError


@dataclass
class ConnectionParameters:
    """Tunnel connection parameters"""
    remote_uri: str
    local_port: int = EPHEMERAL_PORT
    remote_port: int = DEFAULT_REMOTE_PORT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    remote_timeout: float = DEFAULT_REMOTE_TIMEOUT
    local_timeout: float = DEFAULT_LOCAL_TIMEOUT

    @property
    def ephemeral(self) -> bool:
        """True if the OS should choose the local port"""
        return self.local_port == EPHEMERAL_PORT

    def validate(self) -> None:
        """Validate configuration"""
        if not self.remote_uri:
            raise ConfigError("Remote URI must not be empty")
        if not self.ephemeral and not (1 <= self.local_port <= 65535):
            raise ConfigError(f"Invalid local_port: {self.local_port}")
        if not (1 <= self.remote_port <= 65535):
            raise ConfigError(f"Invalid remote_port: {self.remote_port}")
        for name in ("connect_timeout", "remote_timeout", "local_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"Invalid {name}: {getattr(self, name)}")


@dataclass
class Credentials:
    """Relay credentials"""
    username: str = ""
    password: str = ""

    def is_complete(self) -> bool:
        return bool(self.username) and bool(self.password)

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class TlsPolicy:
    """TLS trust policy for relay connections"""
    accept_unknown_certificate: bool = True
    ciphers: str = DEFAULT_TLS_CIPHERS
    ca_location: str = ""
    extended_verification: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "accept_unknown_certificate": self.accept_unknown_certificate,
            "ciphers": self.ciphers,
            "ca_location": self.ca_location,
            "extended_verification": self.extended_verification,
        }


@dataclass(frozen=True)
class ProxySettings:
    """HTTP proxy used for relay connections"""
    host: str
    port: int = DEFAULT_PROXY_PORT
    username: str = ""
    password: str = ""

    def validate(self) -> None:
        """Validate configuration"""
        if not self.host:
            raise ConfigError("http.proxy.host must be set when http.proxy.enable is true")
        if not (1 <= self.port <= 65535):
            raise ConfigError(f"Invalid proxy port: {self.port}")

    @property
    def url(self) -> str:
        """Proxy URL, with percent-encoded credentials if any"""
        userinfo = ""
        if self.username:
            userinfo = quote(self.username, safe="")
            if self.password:
                userinfo += ":" + quote(self.password, safe="")
            userinfo += "@"
        return f"http://{userinfo}{self.host}:{self.port}"


@dataclass(frozen=True)
class ClientStyle:
    """
    Argument conventions of an SSH-compatible client.

    Attributes:
        name: Classification name
        prefixes: Executable base-name prefixes (lowercase) selecting this style
        port_flag: Flag introducing the port number
        passes_login: Whether the login name is passed with ``-l``
        destination: Host argument appended last, or None
    """
    name: str
    prefixes: Sequence[str]
    port_flag: str
    passes_login: bool
    destination: Optional[str]

    def matches(self, executable: str) -> bool:
        base = executable_name(executable).lower()
        return any(base.startswith(prefix) for prefix in self.prefixes)

    def build_args(
        self,
        local_port: int,
        login_name: Optional[str] = None,
        trailing_args: Sequence[str] = (),
    ) -> List[str]:
        """Build the client argument vector for a tunnel listening on ``local_port``"""
        args = [self.port_flag, str(local_port)]
        if login_name and self.passes_login:
            args.extend(["-l", login_name])
        args.extend(trailing_args)
        if self.destination:
            args.append(self.destination)
        return args


PUTTY_STYLE = ClientStyle(
    name="putty-style",
    prefixes=("putty",),
    port_flag="-P",
    passes_login=True,
    destination=TUNNEL_DESTINATION_HOST,
)

# scp takes the login as part of the user's own "user@localhost:path" arguments
SCP_STYLE = ClientStyle(
    name="scp-style",
    prefixes=("scp",),
    port_flag="-P",
    passes_login=False,
    destination=None,
)

GENERIC_SSH_STYLE = ClientStyle(
    name="generic-ssh",
    prefixes=(),
    port_flag="-p",
    passes_login=True,
    destination=TUNNEL_DESTINATION_HOST,
)

CLIENT_STYLES = (PUTTY_STYLE, SCP_STYLE)


def executable_name(executable: str) -> str:
    """Base name of an executable given as a bare name or a POSIX/Windows path"""
    if "\\" in executable:
        return PureWindowsPath(executable).name
    return PurePath(executable).name


def classify_client(executable: str) -> ClientStyle:
    """Pick the argument conventions for ``executable``"""
    for style in CLIENT_STYLES:
        if style.matches(executable):
            return style
    return GENERIC_SSH_STYLE


@dataclass(frozen=True)
class ClientSpec:
    """Resolved SSH client executable and its argument conventions"""
    executable: str
    style: ClientStyle = GENERIC_SSH_STYLE

    @classmethod
    def for_executable(cls, executable: str) -> "ClientSpec":
        return cls(executable=executable, style=classify_client(executable))

    @property
    def is_scp(self) -> bool:
        return self.style is SCP_STYLE
