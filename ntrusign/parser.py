"""
Line framer for token replies.
Counts newline bytes as they arrive and trims trailing terminators once the
expected number of lines has been received.
"""

NEWLINE = 0x0A
CARRIAGE_RETURN = 0x0D
TERMINATORS = (NEWLINE, CARRIAGE_RETURN)


def strip_terminator_runs(buffer: bytearray, runs: int) -> None:
    """
    Remove trailing line terminators from the buffer in place.

    Each pass removes one whole trailing run of CR/LF bytes and counts it.
    Trailing non-terminator bytes are dropped without counting, so content
    that arrived after the last expected line is discarded.

    Args:
        buffer: Accumulated reply bytes
        runs: Number of terminator runs to remove
    """
    while runs > 0 and buffer:
        if buffer[-1] in TERMINATORS:
            while buffer and buffer[-1] in TERMINATORS:
                buffer.pop()
            runs -= 1
        else:
            buffer.pop()


class LineFramer:
    """
    Stateful accumulator for a reply of a known number of lines.
    """

    def __init__(self, expected_lines: int):
        """
        Initialize the framer.

        Args:
            expected_lines: Number of newline-terminated lines to wait for
        """
        if expected_lines < 1:
            raise ValueError(f"expected_lines must be positive, got {expected_lines}")
        self.expected_lines = expected_lines
        self._buffer = bytearray()
        self._remaining = expected_lines

    @property
    def remaining(self) -> int:
        """Lines still outstanding; zero or negative once complete"""
        return self._remaining

    @property
    def complete(self) -> bool:
        return self._remaining <= 0

    @property
    def received(self) -> bytes:
        """Raw bytes accumulated so far"""
        return bytes(self._buffer)

    def feed(self, data: bytes) -> bool:
        """
        Feed bytes read from the port.

        Args:
            data: Bytes to append

        Returns:
            True once the expected line count has been reached
        """
        self._buffer.extend(data)
        self._remaining -= data.count(NEWLINE)
        return self.complete

    def payload(self) -> bytes:
        """
        Get the framed reply with trailing terminators removed.

        Surplus lines beyond the expected count are trimmed from the end.

        Raises:
            RuntimeError: If called before the reply is complete
        """
        if not self.complete:
            raise RuntimeError(f"Reply incomplete: {self._remaining} line(s) outstanding")
        trimmed = bytearray(self._buffer)
        strip_terminator_runs(trimmed, 1 - self._remaining)
        return bytes(trimmed)
