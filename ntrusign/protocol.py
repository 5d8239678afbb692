"""
Protocol definitions for the Host-Token AT command interface.
Commands are ASCII lines terminated by CRLF; replies are counted in lines.
"""

from enum import Enum
from typing import NamedTuple

# Protocol constants
LINE_TERMINATOR = b"\r\n"
HANDSHAKE = LINE_TERMINATOR
ARGUMENT_SEPARATOR = b" "
ERROR_TOKEN = "ERROR"


class Command(Enum):
    """AT commands understood by the token"""

    INFO = b"AT+I"      # Device info, last line ends with max message length
    SIGN = b"AT+S"      # Sign a hex payload, reply is the envelope hex text
    VERIFY = b"AT+V"    # Verify a stored envelope


# Number of reply lines the token sends for each command
EXPECTED_LINES = {
    Command.INFO: 4,
    Command.SIGN: 1,
    Command.VERIFY: 1,
}


class Response(NamedTuple):
    """A framed reply with trailing terminators removed"""
    command: Command
    raw: bytes

    @property
    def text(self) -> str:
        """Reply decoded for display and keyword checks"""
        return self.raw.decode('utf-8', errors='replace')

    @property
    def is_error(self) -> bool:
        """Check if the token reported an error"""
        return ERROR_TOKEN in self.text

    @property
    def lines(self) -> list[str]:
        return self.text.splitlines()


def build_command(command: Command, argument: bytes = b"") -> bytes:
    """
    Frame a command for transmission.

    Args:
        command: Command to send
        argument: Optional ASCII argument appended after a single space

    Returns:
        Command bytes including the CRLF terminator
    """
    if argument:
        return command.value + ARGUMENT_SEPARATOR + argument + LINE_TERMINATOR
    return command.value + LINE_TERMINATOR


def get_command_name(command_bytes: bytes) -> str:
    """Get human-readable name for framed command bytes"""
    head = command_bytes.split(ARGUMENT_SEPARATOR, 1)[0].rstrip(b"\r\n")
    for command in Command:
        if command.value == head:
            return command.name
    if not head:
        return "HANDSHAKE"
    return f"UNKNOWN({head.decode('ascii', errors='replace')})"
