"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from typing import Optional


class PromptProvider(ABC):
    """User prompt interface"""

    @abstractmethod
    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        pass


class RelayConnection(ABC):
    """Byte channel to the remote device through the relay"""

    @abstractmethod
    def send(self, data: bytes) -> None:
        """Send bytes to the remote side"""
        pass

    @abstractmethod
    def recv(self, timeout: Optional[float] = None) -> bytes:
        """
        Receive bytes from the remote side.

        Returns b"" once the remote side has closed the channel and raises
        TimeoutError when nothing arrives within ``timeout`` seconds.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the channel"""
        pass


class WebSocketFactory(ABC):
    """Relay connection factory interface"""

    @abstractmethod
    def create(self, uri: str, remote_port: int) -> RelayConnection:
        """Open an authenticated relay connection to ``remote_port`` on the device"""
        pass
