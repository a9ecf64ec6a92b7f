"""
WebSocket relay connections to the Remote Manager
"""
import base64
import socket
import ssl
from typing import Optional, Dict, TYPE_CHECKING
from urllib.parse import urlsplit, urlunsplit

from websockets.exceptions import ConnectionClosed, InvalidStatus, WebSocketException
from websockets.sync.client import ClientConnection, connect

from ..core.constants import (
    WEBTUNNEL_PROTOCOL,
    WEBTUNNEL_REMOTE_PORT_HEADER,
)
from ..core.exceptions import (
    AuthenticationError,
    InvalidRemoteURIError,
    RelayUnreachableError,
)
from ..core.interfaces import RelayConnection, WebSocketFactory
from ..core.logging import get_logger

if TYPE_CHECKING:
    from ..domain.session.transport import TransportSettings

logger = get_logger(__name__)

_SCHEMES = {
    "http": "ws",
    "https": "wss",
    "ws": "ws",
    "wss": "wss",
}


def to_websocket_uri(uri: str) -> str:
    """
    Map a Remote Manager device URI to the WebSocket URI of its tunnel endpoint.

    Raises:
        InvalidRemoteURIError: If the scheme is unsupported or the host is missing
    """
    try:
        parts = urlsplit(uri)
        parts.port  # raises ValueError on a non-numeric port
    except ValueError as e:
        raise InvalidRemoteURIError(f"Invalid remote URI '{uri}': {e}") from e

    scheme = _SCHEMES.get(parts.scheme.lower())
    if scheme is None:
        raise InvalidRemoteURIError(
            f"Invalid remote URI '{uri}': scheme must be http or https"
        )
    if not parts.hostname:
        raise InvalidRemoteURIError(f"Invalid remote URI '{uri}': missing host name")

    return urlunsplit((scheme, parts.netloc, parts.path or "/", parts.query, ""))


class WebSocketRelayConnection(RelayConnection):
    """RelayConnection over a websockets client connection"""

    def __init__(self, websocket: ClientConnection):
        self.websocket = websocket

    def send(self, data: bytes) -> None:
        self.websocket.send(data)

    def recv(self, timeout: Optional[float] = None) -> bytes:
        try:
            message = self.websocket.recv(timeout=timeout)
        except ConnectionClosed:
            return b""
        if isinstance(message, str):
            return message.encode("utf-8")
        return message

    def close(self) -> None:
        self.websocket.close()


class DefaultWebSocketFactory(WebSocketFactory):
    """
    Opens authenticated WebSocket connections through the relay.

    Each connection carries HTTP Basic credentials, the target device port
    and the WebTunnel subprotocol. TLS and proxy behavior comes from the
    transport settings built at startup.
    """

    def __init__(
        self,
        username: str,
        password: str,
        connect_timeout: float,
        transport: Optional["TransportSettings"] = None,
    ):
        """
        Initialize factory.

        Args:
            username: Remote Manager username
            password: Remote Manager password
            connect_timeout: Seconds allowed for connect and handshake
            transport: TLS and proxy settings
        """
        self.username = username
        self.password = password
        self.connect_timeout = connect_timeout
        self.transport = transport

    def _headers(self, remote_port: int) -> Dict[str, str]:
        token = base64.b64encode(f"{self.username}:{self.password}".encode("utf-8")).decode("ascii")
        return {
            "Authorization": f"Basic {token}",
            WEBTUNNEL_REMOTE_PORT_HEADER: str(remote_port),
        }

    def _ssl_context(self) -> ssl.SSLContext:
        if self.transport is not None and self.transport.ssl_context is not None:
            return self.transport.ssl_context
        return ssl.create_default_context()

    def create(self, uri: str, remote_port: int) -> WebSocketRelayConnection:
        """
        Open a relay connection to ``remote_port`` on the device behind ``uri``.

        Raises:
            InvalidRemoteURIError: If the URI is malformed
            AuthenticationError: If the relay rejects the credentials
            RelayUnreachableError: If the relay cannot be reached or refuses the upgrade
        """
        ws_uri = to_websocket_uri(uri)
        secure = ws_uri.startswith("wss:")
        logger.debug(f"Connecting to {ws_uri} (remote port {remote_port})")

        try:
            websocket = connect(
                ws_uri,
                ssl=self._ssl_context() if secure else None,
                additional_headers=self._headers(remote_port),
                subprotocols=[WEBTUNNEL_PROTOCOL],
                proxy=self.transport.proxy_url if self.transport else None,
                open_timeout=self.connect_timeout,
                compression=None,
                max_size=None,
            )
        except InvalidStatus as e:
            status = e.response.status_code
            if status in (401, 403):
                raise AuthenticationError(
                    f"Remote Manager rejected the credentials for {uri} (HTTP {status})"
                ) from e
            raise RelayUnreachableError(
                f"Remote Manager refused the tunnel to {uri} (HTTP {status})"
            ) from e
        except WebSocketException as e:
            raise RelayUnreachableError(f"WebSocket handshake with {uri} failed: {e}") from e
        except (OSError, TimeoutError, socket.timeout) as e:
            raise RelayUnreachableError(f"Cannot connect to {uri}: {e}") from e

        return WebSocketRelayConnection(websocket)
