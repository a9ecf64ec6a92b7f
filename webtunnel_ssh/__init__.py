"""
webtunnel-ssh - SSH/SCP client launcher for devices behind a Remote Manager

Opens a local tunnel port that relays to a remote device over the Remote
Manager's WebSocket transport, then runs an SSH-compatible client against
localhost:
- TLS trust policy and HTTP proxy configuration for the relay connection
- Interactive credential prompting with terminal echo disabled
- ssh, PuTTY and scp argument conventions
- Exit status passthrough from the client process
"""

__version__ = "0.1.0"

# Export domain models
from .domain.session import (
    ConnectionParameters,
    Credentials,
    TlsPolicy,
    ProxySettings,
    ClientSpec,
    TunnelSession,
    TunnelHandle,
    ClientInvocationBuilder,
    SessionRunner,
    Launcher,
    LaunchOptions,
)

__all__ = [
    # Version
    "__version__",
    # Session models
    "ConnectionParameters",
    "Credentials",
    "TlsPolicy",
    "ProxySettings",
    "ClientSpec",
    # Session components
    "TunnelSession",
    "TunnelHandle",
    "ClientInvocationBuilder",
    "SessionRunner",
    "Launcher",
    "LaunchOptions",
]
