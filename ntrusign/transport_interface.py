"""
Transport Interface - Abstract base for the token byte stream

This defines the capability the serial session needs from an open port.
Allows swapping the pyserial backend for a simulated token in tests.
"""

from abc import ABC, abstractmethod


class TransportInterface(ABC):
    """
    Abstract interface for an exclusively-owned byte stream.

    Implementations must provide:
    - Reads that return zero or more bytes without blocking past the timeout
    - Writes that complete or raise
    - A configurable per-read timeout
    """

    @abstractmethod
    def set_timeout(self, seconds: float) -> None:
        """
        Set the per-read timeout.

        Args:
            seconds: Maximum time a single read may block
        """
        pass

    @abstractmethod
    def read(self, size: int) -> bytes:
        """
        Read up to size bytes.

        Args:
            size: Maximum number of bytes to return

        Returns:
            Bytes received, empty if the read timed out

        Raises:
            ProtocolError: If the underlying stream failed
        """
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """
        Write all bytes.

        Raises:
            ProtocolError: If the data could not be written
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the stream"""
        pass
