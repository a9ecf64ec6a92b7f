"""
Session domain module
"""
from .models import (
    ConnectionParameters,
    Credentials,
    TlsPolicy,
    ProxySettings,
    ClientStyle,
    ClientSpec,
    GENERIC_SSH_STYLE,
    PUTTY_STYLE,
    SCP_STYLE,
    classify_client,
)
from .transport import TransportSettings, TransportConfigurator
from .credentials import CredentialResolver
from .tunnel import TunnelHandle, TunnelSession
from .invocation import ClientInvocationBuilder, select_client, locate_client
from .runner import SessionRunner
from .service import Launcher, LaunchOptions, SessionState

__all__ = [
    "ConnectionParameters",
    "Credentials",
    "TlsPolicy",
    "ProxySettings",
    "ClientStyle",
    "ClientSpec",
    "GENERIC_SSH_STYLE",
    "PUTTY_STYLE",
    "SCP_STYLE",
    "classify_client",
    "TransportSettings",
    "TransportConfigurator",
    "CredentialResolver",
    "TunnelHandle",
    "TunnelSession",
    "ClientInvocationBuilder",
    "select_client",
    "locate_client",
    "SessionRunner",
    "Launcher",
    "LaunchOptions",
    "SessionState",
]
