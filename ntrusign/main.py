"""
ntrusign - Sign and verify files with the STM32 NTRU hardware token

This is the main entry point. Signing math happens inside the token; the host
hashes files, negotiates capacity and moves envelopes between disk and device.

WORKFLOWS:
  Sign (path does not end in .sig):
    - Hash the file (SHA3-512)
    - Connect, handshake, query capacity (AT+I)
    - Send AT+S <hex(timestamp | '|' | digest)>
    - Store the token's reply as <path>.sig

  Verify (path ends in .sig):
    - Validate the sidecar layout before touching the device
    - Connect, handshake, query capacity (AT+I)
    - Send AT+V <sidecar text>
    - Decode timestamp and digest, re-hash the base file and compare

Usage:
    python -m ntrusign.main document.pdf          # writes document.pdf.sig
    python -m ntrusign.main document.pdf.sig      # verifies document.pdf
    python -m ntrusign.main file --port /dev/ttyACM0 -v
"""

import sys
import os
import argparse
import tempfile
import time
from datetime import datetime
from email.utils import format_datetime
from typing import Callable, NamedTuple, Optional

from .config import DEFAULT_BAUDRATE, MIN_DEVICE_CAPACITY, SIGNATURE_SUFFIX
from .crypto import hash_file
from .envelope import build_sign_request, encode_hex, parse_envelope, validate_sidecar
from .errors import (
    TokenError, CapacityInsufficient, FileIOError, HashMismatch, ProtocolError,
)
from .logger import Logger, Colors
from .protocol import Command, LINE_TERMINATOR
from .serial_handler import SerialSession


class VerificationResult(NamedTuple):
    """Outcome of a successful verification"""
    file_path: str
    created: datetime
    digest: bytes


class TokenSigner:
    """
    Sign and verify workflows on top of a token session.

    To use:
        session = SerialSession()          # locates the token on connect
        signer = TokenSigner(session)
        exit_code = signer.run("document.pdf")
    """

    def __init__(self, session: SerialSession, clock: Callable[[], float] = time.time):
        """
        Initialize the signer.

        Args:
            session: Session to the token (connected lazily)
            clock: Wall-clock source in Unix seconds
        """
        self.session = session
        self.clock = clock
        self.device_info: Optional[str] = None
        self.capacity: Optional[int] = None

    # ========================================================================
    # DEVICE PREPARATION
    # ========================================================================

    def _open_session(self) -> None:
        """Connect, handshake and check the token can take our payload"""
        self.session.connect()
        self.session.init()
        self.query_capacity()

    def query_capacity(self) -> int:
        """
        Ask the token for its maximum accepted message length.

        Returns:
            Capacity reported on the last info line

        Raises:
            ProtocolError: If the info reply cannot be parsed
            CapacityInsufficient: If the capacity is below MIN_DEVICE_CAPACITY
        """
        response = self.session.send(Command.INFO)
        self.device_info = response.text
        lines = response.lines
        Logger.success("Found a token! Device info:")
        for line in lines:
            Logger.substep(line)

        tokens = lines[-1].split() if lines else []
        if not tokens or not (tokens[-1].isascii() and tokens[-1].isdigit()):
            raise ProtocolError(f"Unexpected device info reply: {response.text!r}")

        self.capacity = int(tokens[-1])
        if self.capacity < MIN_DEVICE_CAPACITY:
            raise CapacityInsufficient(
                f"Device message capacity insufficient ({self.capacity} < {MIN_DEVICE_CAPACITY})"
            )
        return self.capacity

    # ========================================================================
    # SIGN
    # ========================================================================

    def sign(self, file_path: str) -> str:
        """
        Sign a file and write its sidecar.

        Args:
            file_path: File to sign

        Returns:
            Path of the written sidecar

        Raises:
            TokenError: On any failure; the sidecar is only written after a
                successful reply
        """
        digest = hash_file(file_path)
        payload = build_sign_request(digest, int(self.clock()))
        Logger.debug("SIGN", f"SHA3-512: {digest.hex()}")

        self._open_session()

        response = self.session.send(Command.SIGN, encode_hex(payload).encode('ascii'))
        if response.is_error:
            raise ProtocolError("Signature creation failed")

        sig_path = file_path + SIGNATURE_SUFFIX
        _write_atomic(sig_path, response.raw + LINE_TERMINATOR)
        return sig_path

    # ========================================================================
    # VERIFY
    # ========================================================================

    def verify(self, sig_path: str) -> VerificationResult:
        """
        Verify a sidecar with the token and against its base file.

        Args:
            sig_path: Path to the .sig file

        Returns:
            VerificationResult with the base file path and creation time

        Raises:
            MalformedEnvelope: If the sidecar is malformed (checked before any
                device communication)
            ProtocolError: If the token rejects the signature
            HashMismatch: If the base file changed since signing
        """
        try:
            with open(sig_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise FileIOError(f"Could not read signature file ({sig_path}): {e.strerror or e}") from e
        envelope_text = validate_sidecar(data)

        self._open_session()

        response = self.session.send(Command.VERIFY, envelope_text)
        if response.is_error:
            raise ProtocolError("Signature is invalid")

        envelope = parse_envelope(envelope_text)
        Logger.debug("VERIFY", str(envelope))
        file_path = base_path(sig_path)
        file_digest = hash_file(file_path)
        if file_digest != envelope.digest:
            raise HashMismatch(f"Signature does not match base file ({file_path})")

        return VerificationResult(file_path=file_path, created=envelope.created, digest=file_digest)

    # ========================================================================
    # ENTRY
    # ========================================================================

    def run(self, file_path: str) -> int:
        """
        Sign or verify depending on the path suffix.

        Returns:
            0 on success
            1 on failure
        """
        try:
            if file_path.endswith(SIGNATURE_SUFFIX):
                Logger.info(f"Verifying {file_path}")
                result = self.verify(file_path)
                Logger.success("Signature verified successfully.")
                Logger.substep(f"Creation time: {format_datetime(result.created)}")
                Logger.substep(f"Matches file: {result.file_path}")
            else:
                Logger.info(f"Signing {file_path}")
                sig_path = self.sign(file_path)
                Logger.success(f"Signature written to file: {sig_path}")
            return 0

        except TokenError as e:
            Logger.error(f"{type(e).__name__}: {e}")
            return 1
        except KeyboardInterrupt:
            Logger.tagged("ABORTED", Colors.YELLOW, "Interrupted")
            return 1
        finally:
            self.session.disconnect()


def base_path(sig_path: str) -> str:
    """Path of the file a sidecar belongs to"""
    if sig_path.endswith(SIGNATURE_SUFFIX):
        return sig_path[:-len(SIGNATURE_SUFFIX)]
    return sig_path


def _write_atomic(path: str, data: bytes) -> None:
    """Write data to path so readers see either the old or the full new content"""
    directory = os.path.dirname(os.path.abspath(path))
    try:
        fd, tmp_path = tempfile.mkstemp(prefix='.', suffix='.tmp', dir=directory)
    except OSError as e:
        raise FileIOError(f"Error writing signature to file ({path}): {e.strerror or e}") from e
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise FileIOError(f"Error writing signature to file ({path}): {e.strerror or e}") from e


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


# ============================================================================
# COMMAND LINE INTERFACE
# ============================================================================

class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def main(argv=None):
    """
    Main entry point for the ntrusign command.

    Usage:
        python -m ntrusign.main report.txt             # sign
        python -m ntrusign.main report.txt.sig         # verify
        python -m ntrusign.main report.txt -p COM3     # skip auto-detection
    """
    parser = _ArgumentParser(
        description='Sign and verify files with the STM32 NTRU token'
    )
    parser.add_argument(
        'file',
        help='File to sign, or a .sig file to verify'
    )
    parser.add_argument(
        '-p', '--port',
        help='Serial port of the token (default: auto-detect)'
    )
    parser.add_argument(
        '-b', '--baudrate',
        type=int,
        default=DEFAULT_BAUDRATE,
        help=f'Serial baud rate (default: {DEFAULT_BAUDRATE})'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Show serial traffic'
    )

    args = parser.parse_args(argv)
    Logger.verbose = args.verbose

    session = SerialSession(port=args.port, baudrate=args.baudrate)
    signer = TokenSigner(session)
    return signer.run(args.file)


if __name__ == '__main__':
    sys.exit(main())
