"""
Serial communication handler for the Host-Token AT protocol.
"""

import time
from typing import Optional

import serial

from .config import (
    DEFAULT_BAUDRATE, SERIAL_TIMEOUT, WRITE_TIMEOUT,
    INIT_TIMEOUT, CMD_TIMEOUT, PROBE_INTERVAL, READ_CHUNK_SIZE,
)
from .errors import PortOpenFailure, ProtocolError, ProtocolTimeout
from .locator import find_token_port
from .logger import Logger
from .parser import LineFramer
from .protocol import Command, Response, EXPECTED_LINES, HANDSHAKE, build_command, get_command_name
from .transport_interface import TransportInterface


class SerialTransport(TransportInterface):
    """
    pyserial-backed transport (8 data bits, no parity, 1 stop bit).
    """

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUDRATE) -> None:
        """
        Open the serial port.

        Args:
            port: Serial port name (e.g., '/dev/ttyACM0', 'COM3')
            baudrate: Baud rate for serial communication

        Raises:
            PortOpenFailure: If the port cannot be opened
        """
        try:
            self._serial = serial.Serial(
                port=port,
                baudrate=baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=SERIAL_TIMEOUT,
                write_timeout=WRITE_TIMEOUT
            )
        except (serial.SerialException, OSError, ValueError) as e:
            raise PortOpenFailure(f"Failed to open serial port {port}: {e}") from e

    def set_timeout(self, seconds: float) -> None:
        self._serial.timeout = seconds

    def read(self, size: int) -> bytes:
        try:
            # Block for the first byte only, then take whatever is buffered
            waiting = self._serial.in_waiting
            return self._serial.read(min(size, waiting) if waiting else 1)
        except (serial.SerialException, OSError) as e:
            raise ProtocolError(f"Serial read failed: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            self._serial.write(data)
            self._serial.flush()
        except (serial.SerialException, OSError) as e:
            raise ProtocolError(f"Serial write failed: {e}") from e

    def close(self) -> None:
        if self._serial.is_open:
            self._serial.close()


class SerialSession:
    """
    Manages the half-duplex command/response session with the token.
    One command is in flight at a time; replies are framed by line count.
    """

    def __init__(
        self,
        port: Optional[str] = None,
        baudrate: int = DEFAULT_BAUDRATE,
        transport: Optional[TransportInterface] = None,
        init_timeout: float = INIT_TIMEOUT,
        command_timeout: float = CMD_TIMEOUT
    ) -> None:
        """
        Initialize the session.

        Args:
            port: Serial port name, or None to locate the token on connect
            baudrate: Baud rate for serial communication
            transport: Already-open transport to use instead of a serial port
            init_timeout: Handshake deadline in seconds
            command_timeout: Per-command deadline in seconds
        """
        self.port = port
        self.baudrate = baudrate
        self.init_timeout = init_timeout
        self.command_timeout = command_timeout
        self._transport = transport

    def connect(self) -> None:
        """
        Open the serial port, locating the token first if no port was given.

        Raises:
            DeviceNotFound: If the token is not attached
            PortOpenFailure: If the port cannot be opened
        """
        if self._transport is not None:
            return
        if self.port is None:
            self.port = find_token_port()
        self._transport = SerialTransport(self.port, self.baudrate)
        Logger.debug("SERIAL", f"Opened {self.port} at {self.baudrate} baud")

    def disconnect(self) -> None:
        """Release the transport"""
        if self._transport is not None:
            self._transport.close()
        self._transport = None

    def init(self) -> None:
        """
        Perform the startup handshake: send a bare line terminator and wait
        for any newline-terminated reply.

        Raises:
            ProtocolTimeout: If no newline arrives within the handshake deadline
        """
        transport = self._require_transport()
        transport.set_timeout(SERIAL_TIMEOUT)
        transport.write(HANDSHAKE)
        Logger.debug("TX", "HANDSHAKE")

        framer = LineFramer(1)
        if not self._collect(framer, self.init_timeout):
            raise ProtocolTimeout("No response from token during handshake")
        Logger.debug("RX", repr(framer.received))

    def exchange(self, command: bytes, expected_lines: int) -> bytes:
        """
        Send a command and wait for a reply of expected_lines lines.

        Args:
            command: Framed command bytes, terminator included
            expected_lines: Number of newline-terminated lines to wait for

        Returns:
            Reply bytes with trailing terminators removed

        Raises:
            ProtocolTimeout: If the reply is incomplete at the command deadline
        """
        transport = self._require_transport()
        framer = LineFramer(expected_lines)

        transport.write(command)
        Logger.debug("TX", _preview(command))

        if not self._collect(framer, self.command_timeout):
            raise ProtocolTimeout(
                f"No response to {get_command_name(command)} "
                f"({framer.remaining} of {expected_lines} line(s) missing)"
            )

        reply = framer.payload()
        Logger.debug("RX", _preview(reply))
        return reply

    def send(self, command: Command, argument: bytes = b"") -> Response:
        """
        Frame and exchange an AT command.

        Args:
            command: Command to send
            argument: Optional ASCII argument

        Returns:
            The token's framed reply
        """
        raw = self.exchange(build_command(command, argument), EXPECTED_LINES[command])
        return Response(command=command, raw=raw)

    @property
    def is_connected(self) -> bool:
        return self._transport is not None

    def _require_transport(self) -> TransportInterface:
        if self._transport is None:
            raise RuntimeError("Serial port not connected")
        return self._transport

    def _collect(self, framer: LineFramer, timeout: float) -> bool:
        """Read into the framer until it completes or the deadline passes"""
        start = time.monotonic()
        while True:
            data = self._transport.read(READ_CHUNK_SIZE)
            if data and framer.feed(data):
                return True
            if time.monotonic() - start > timeout:
                return False
            if not data:
                time.sleep(PROBE_INTERVAL)


def _preview(data: bytes, limit: int = 48) -> str:
    text = data.decode('ascii', errors='replace').rstrip("\r\n")
    if len(text) > limit:
        return f"{text[:limit]}... ({len(data)} bytes)"
    return text
