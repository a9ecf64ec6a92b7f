"""
Unified exception definitions
"""


class WebTunnelError(Exception):
    """Base exception class"""
    pass


class ConfigError(WebTunnelError):
    """Configuration error"""
    pass


class InvalidRemoteURIError(ConfigError):
    """Remote URI is malformed or uses an unsupported scheme"""
    pass


class TunnelError(WebTunnelError):
    """Tunnel setup error"""
    pass


class AuthenticationError(TunnelError):
    """Relay rejected the supplied credentials"""
    pass


class RelayUnreachableError(TunnelError):
    """Relay could not be reached or refused the WebSocket upgrade"""
    pass


class LocalBindError(TunnelError):
    """Local listening port could not be bound"""
    pass


class ClientProcessError(WebTunnelError):
    """SSH client process could not be spawned"""
    pass
