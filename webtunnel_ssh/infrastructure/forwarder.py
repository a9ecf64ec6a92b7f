"""
Local port forwarder: relays local TCP connections through the Remote Manager
"""
import errno
import os
import socket
import threading
from typing import Optional

from ..core.constants import (
    DEFAULT_LOCAL_BIND_ADDRESS,
    DEFAULT_LOCAL_TIMEOUT,
    DEFAULT_REMOTE_TIMEOUT,
    EPHEMERAL_PORT,
    RELAY_BUFFER_SIZE,
)
from ..core.exceptions import LocalBindError
from ..core.interfaces import RelayConnection, WebSocketFactory
from ..core.logging import get_logger

logger = get_logger(__name__)


class LocalPortForwarder:
    """
    Forwards connections accepted on a local port to a port on the remote device.

    How it works:
    1. Bind a listening socket on the local port (ephemeral if 0)
    2. Open one relay connection up front, so relay and credential errors
       surface in start(); it is handed to the first local client
    3. An acceptor thread accepts local clients and opens a relay
       connection per client through the WebSocket factory
    4. Two threads per client copy bytes in each direction until either
       side closes or stays idle longer than its timeout
    """

    def __init__(
        self,
        local_port: int,
        remote_port: int,
        uri: str,
        websocket_factory: WebSocketFactory,
        bind_address: str = DEFAULT_LOCAL_BIND_ADDRESS,
    ):
        """
        Initialize forwarder.

        Args:
            local_port: Local port to listen on (0 = ephemeral)
            remote_port: Port on the remote device
            uri: Remote device URI on the relay
            websocket_factory: Factory opening relay connections
            bind_address: Local address to listen on
        """
        self.uri = uri
        self.remote_port = remote_port
        self.websocket_factory = websocket_factory
        self.remote_timeout: float = DEFAULT_REMOTE_TIMEOUT
        self.local_timeout: float = DEFAULT_LOCAL_TIMEOUT
        self._requested_port = local_port
        self._bind_address = bind_address
        self._server: Optional[socket.socket] = None
        self._pending: Optional[RelayConnection] = None
        self._running = False
        self._acceptor_thread: Optional[threading.Thread] = None
        self._connections: set = set()
        self._lock = threading.Lock()

    @property
    def local_port(self) -> int:
        """Port the listening socket is bound to"""
        if self._server is None:
            raise RuntimeError("Forwarder is not started")
        return self._server.getsockname()[1]

    def set_remote_timeout(self, seconds: float) -> None:
        self.remote_timeout = seconds

    def set_local_timeout(self, seconds: float) -> None:
        self.local_timeout = seconds

    def start(self) -> None:
        """
        Bind the local port, verify the relay and start accepting.

        Raises:
            RuntimeError: If the forwarder is already running
            LocalBindError: If the local port cannot be bound
            TunnelError: If the first relay connection fails
        """
        with self._lock:
            if self._running:
                raise RuntimeError("Forwarder is already running")

            self._server = self._bind()
            try:
                self._pending = self.websocket_factory.create(self.uri, self.remote_port)
            except Exception:
                self._server.close()
                self._server = None
                raise

            self._running = True
            self._acceptor_thread = threading.Thread(
                target=self._run_acceptor,
                daemon=True,
                name=f"LocalPortForwarder-Acceptor-{self.local_port}",
            )
            self._acceptor_thread.start()

        logger.debug(f"Forwarding {self._bind_address}:{self.local_port} to remote port {self.remote_port}")

    def stop(self) -> None:
        """Stop accepting and close every relay connection"""
        with self._lock:
            if not self._running:
                return
            self._running = False
            server = self._server
            pending, self._pending = self._pending, None
            connections = list(self._connections)

        try:
            server.close()
        except OSError:
            pass
        if pending is not None:
            _close_quietly(pending)
        for local_sock, relay in connections:
            _shutdown_quietly(local_sock)
            _close_quietly(relay)

        if self._acceptor_thread and self._acceptor_thread.is_alive():
            self._acceptor_thread.join(timeout=2.0)

    def _bind(self) -> socket.socket:
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        if self._requested_port != EPHEMERAL_PORT and hasattr(socket, "SO_REUSEADDR") and not _is_windows():
            server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            server.bind((self._bind_address, self._requested_port))
            server.listen(socket.SOMAXCONN)
        except OSError as e:
            server.close()
            if e.errno == errno.EADDRINUSE:
                raise LocalBindError(f"Local port {self._requested_port} is already in use") from e
            raise LocalBindError(
                f"Cannot listen on {self._bind_address}:{self._requested_port}: {e}"
            ) from e
        server.settimeout(1.0)
        return server

    def _run_acceptor(self) -> None:
        """
        Main acceptor loop.

        Accepts local clients and spawns a handler thread for each.
        """
        while self._running:
            try:
                local_sock, address = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                if self._running:
                    logger.error("Local listening socket failed", exc_info=True)
                break

            local_sock.settimeout(None)
            logger.debug(f"Accepted local connection from {address[0]}:{address[1]}")
            handler_thread = threading.Thread(
                target=self._handle_connection,
                args=(local_sock,),
                daemon=True,
                name=f"LocalPortForwarder-Handler-{address[1]}",
            )
            handler_thread.start()

    def _take_relay(self) -> RelayConnection:
        with self._lock:
            relay, self._pending = self._pending, None
        if relay is not None:
            return relay
        return self.websocket_factory.create(self.uri, self.remote_port)

    def _handle_connection(self, local_sock: socket.socket) -> None:
        """
        Relay one local client through the remote manager.

        Args:
            local_sock: Accepted local socket
        """
        try:
            relay = self._take_relay()
        except Exception as e:
            logger.error(f"Cannot open relay connection: {e}")
            local_sock.close()
            return

        entry = (local_sock, relay)
        with self._lock:
            self._connections.add(entry)

        remote_thread = threading.Thread(
            target=self._pump_remote_to_local,
            args=(relay, local_sock),
            daemon=True,
            name=f"LocalPortForwarder-Remote-{id(relay)}",
        )
        remote_thread.start()
        try:
            self._pump_local_to_remote(local_sock, relay)
        finally:
            _close_quietly(relay)
            remote_thread.join(timeout=5.0)
            local_sock.close()
            with self._lock:
                self._connections.discard(entry)
            logger.debug("Relay connection closed")

    def _pump_local_to_remote(self, local_sock: socket.socket, relay: RelayConnection) -> None:
        local_sock.settimeout(self.local_timeout)
        while True:
            try:
                data = local_sock.recv(RELAY_BUFFER_SIZE)
            except socket.timeout:
                logger.info(f"Local connection idle for {self.local_timeout}s, closing")
                return
            except OSError:
                return
            if not data:
                return
            try:
                relay.send(data)
            except Exception as e:
                logger.debug(f"Relay send failed: {e}")
                return

    def _pump_remote_to_local(self, relay: RelayConnection, local_sock: socket.socket) -> None:
        try:
            while True:
                try:
                    data = relay.recv(timeout=self.remote_timeout)
                except TimeoutError:
                    logger.info(f"Remote connection idle for {self.remote_timeout}s, closing")
                    return
                except Exception as e:
                    logger.debug(f"Relay receive failed: {e}")
                    return
                if not data:
                    return
                try:
                    local_sock.sendall(data)
                except OSError:
                    return
        finally:
            _shutdown_quietly(local_sock)


def _is_windows() -> bool:
    return os.name == "nt"


def _shutdown_quietly(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass


def _close_quietly(relay: RelayConnection) -> None:
    try:
        relay.close()
    except Exception:
        pass
