"""
Tunnel session: owns the local forwarding endpoint for one run
"""
from typing import Callable, Optional

from ...core.interfaces import WebSocketFactory
from ...core.logging import get_logger
from ...infrastructure.forwarder import LocalPortForwarder
from ...infrastructure.websocket import DefaultWebSocketFactory, to_websocket_uri
from .models import ConnectionParameters, Credentials
from .transport import TransportSettings

logger = get_logger(__name__)

ForwarderFactory = Callable[[int, int, str, WebSocketFactory], LocalPortForwarder]


class TunnelHandle:
    """
    Open tunnel.

    Exposes the bound local port; closing the handle stops the listener and
    every relay connection. Usable as a context manager.
    """

    def __init__(self, forwarder: LocalPortForwarder):
        self._forwarder = forwarder
        self._local_port = forwarder.local_port
        self._closed = False

    @property
    def local_port(self) -> int:
        return self._local_port

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._forwarder.stop()
        logger.debug(f"Tunnel on local port {self._local_port} closed")

    def __enter__(self) -> "TunnelHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class TunnelSession:
    """Opens the forwarding channel to the remote device"""

    def __init__(self, forwarder_factory: Optional[ForwarderFactory] = None):
        """
        Initialize tunnel session.

        Args:
            forwarder_factory: Builds the forwarding engine (default: LocalPortForwarder)
        """
        self.forwarder_factory = forwarder_factory or LocalPortForwarder

    def open(
        self,
        params: ConnectionParameters,
        credentials: Credentials,
        transport: Optional[TransportSettings] = None,
    ) -> TunnelHandle:
        """
        Open the tunnel.

        Args:
            params: Connection parameters
            credentials: Resolved relay credentials
            transport: TLS and proxy settings built at startup

        Returns:
            Handle of the open tunnel

        Raises:
            ConfigError: If the parameters or remote URI are invalid
            AuthenticationError: If the relay rejects the credentials
            RelayUnreachableError: If the relay cannot be reached
            LocalBindError: If the local port is already in use
        """
        params.validate()
        to_websocket_uri(params.remote_uri)

        websocket_factory = DefaultWebSocketFactory(
            credentials.username,
            credentials.password,
            params.connect_timeout,
            transport,
        )
        forwarder = self.forwarder_factory(
            params.local_port,
            params.remote_port,
            params.remote_uri,
            websocket_factory,
        )
        forwarder.set_remote_timeout(params.remote_timeout)
        forwarder.set_local_timeout(params.local_timeout)
        forwarder.start()

        handle = TunnelHandle(forwarder)
        logger.info(
            f"Tunnel open: localhost:{handle.local_port} -> {params.remote_uri} port {params.remote_port}"
        )
        return handle
