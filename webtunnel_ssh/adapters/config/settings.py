"""
Mapping from configuration properties to session models
"""
from typing import Optional

from ...core.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_REMOTE_TIMEOUT,
    DEFAULT_LOCAL_TIMEOUT,
    DEFAULT_TLS_CIPHERS,
    DEFAULT_PROXY_PORT,
    EPHEMERAL_PORT,
    DEFAULT_REMOTE_PORT,
)
from ...domain.session.models import ConnectionParameters, TlsPolicy, ProxySettings
from .loader import PropertyConfig


def connection_parameters(
    config: PropertyConfig,
    remote_uri: str,
    local_port: Optional[int] = None,
    remote_port: Optional[int] = None,
) -> ConnectionParameters:
    """Build connection parameters from options and ``webtunnel.*`` timeouts"""
    return ConnectionParameters(
        remote_uri=remote_uri,
        local_port=local_port if local_port is not None else EPHEMERAL_PORT,
        remote_port=remote_port if remote_port is not None else DEFAULT_REMOTE_PORT,
        connect_timeout=config.get_int("webtunnel.connectTimeout", DEFAULT_CONNECT_TIMEOUT),
        remote_timeout=config.get_int("webtunnel.remoteTimeout", DEFAULT_REMOTE_TIMEOUT),
        local_timeout=config.get_int("webtunnel.localTimeout", DEFAULT_LOCAL_TIMEOUT),
    )


def tls_policy(config: PropertyConfig) -> TlsPolicy:
    """Build the TLS trust policy from ``tls.*``"""
    return TlsPolicy(
        accept_unknown_certificate=config.get_bool("tls.acceptUnknownCertificate", True),
        ciphers=config.get_string("tls.ciphers", DEFAULT_TLS_CIPHERS),
        ca_location=config.get_string("tls.caLocation", ""),
        extended_verification=config.get_bool("tls.extendedCertificateVerification", False),
    )


def proxy_settings(config: PropertyConfig) -> Optional[ProxySettings]:
    """Build HTTP proxy settings from ``http.proxy.*``, or None if proxying is disabled"""
    if not config.get_bool("http.proxy.enable", False):
        return None
    return ProxySettings(
        host=config.get_string("http.proxy.host", ""),
        port=config.get_int("http.proxy.port", DEFAULT_PROXY_PORT),
        username=config.get_string("http.proxy.username", ""),
        password=config.get_string("http.proxy.password", ""),
    )
