"""
Signature envelope codec.

The token answers a sign command with the envelope as hex text, and that text
is stored verbatim in the sidecar file:

    nonce (NONCE_LEN hex) | timestamp (16 hex, u64 LE) | separator (2 hex) | SHA3-512 (128 hex)

The host never builds an envelope. It builds the sign request payload and
parses envelopes back during verification.
"""

import binascii
import struct
from datetime import datetime, timezone
from typing import NamedTuple, Union

from .config import (
    NONCE_LEN, TIMESTAMP_HEX_LEN, SEPARATOR_HEX_LEN,
    DIGEST_SIZE, DIGEST_HEX_LEN,
)
from .errors import MalformedEnvelope, TimestampInvalid

SEPARATOR = b"|"
TIMESTAMP_FORMAT = "<Q"

TIMESTAMP_OFFSET = NONCE_LEN
DIGEST_OFFSET = NONCE_LEN + TIMESTAMP_HEX_LEN + SEPARATOR_HEX_LEN
MIN_ENVELOPE_LEN = DIGEST_OFFSET + DIGEST_HEX_LEN


class SignatureEnvelope(NamedTuple):
    """Fields recovered from a stored signature"""
    nonce: bytes
    timestamp: int
    created: datetime
    digest: bytes

    def __str__(self) -> str:
        return f"SignatureEnvelope(created={self.created.isoformat()}, digest={self.digest[:8].hex()}...)"


def encode_hex(data: bytes) -> str:
    """Encode bytes as lowercase hex text"""
    return data.hex()


def decode_hex(text: Union[str, bytes]) -> bytes:
    """
    Decode hex text.

    Raises:
        MalformedEnvelope: If the length is odd or a character is not hex
    """
    if len(text) % 2 != 0:
        raise MalformedEnvelope(f"Odd-length hex text ({len(text)} characters)")
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as e:
        raise MalformedEnvelope(f"Invalid hex text: {e}") from e


def build_sign_request(file_digest: bytes, now: int) -> bytes:
    """
    Build the payload of a sign command.

    Args:
        file_digest: SHA3-512 digest of the file being signed
        now: Current Unix time in seconds

    Returns:
        Timestamp (8 bytes LE) + separator + digest, not yet hex-encoded
    """
    if len(file_digest) != DIGEST_SIZE:
        raise ValueError(f"Digest must be {DIGEST_SIZE} bytes, got {len(file_digest)}")
    return struct.pack(TIMESTAMP_FORMAT, now) + SEPARATOR + file_digest


def validate_sidecar(data: bytes) -> bytes:
    """
    Check stored signature text before it is sent to the token.

    Args:
        data: Raw sidecar file contents

    Returns:
        The envelope text with trailing CR/LF removed

    Raises:
        MalformedEnvelope: If the length is odd, shorter than a full envelope,
            or the text is not all hex
    """
    envelope = data.rstrip(b"\r\n")
    if len(envelope) % 2 != 0 or len(envelope) < MIN_ENVELOPE_LEN:
        raise MalformedEnvelope(
            f"Invalid signature file: {len(envelope)} characters "
            f"(expected an even length of at least {MIN_ENVELOPE_LEN})"
        )
    decode_hex(envelope)
    return envelope


def parse_envelope(sig_bytes: bytes) -> SignatureEnvelope:
    """
    Parse stored signature text.

    Args:
        sig_bytes: Envelope hex text, trailing terminators allowed

    Returns:
        SignatureEnvelope with the decoded nonce, timestamp and digest

    Raises:
        MalformedEnvelope: If the text fails length or hex checks
        TimestampInvalid: If the timestamp is zero or out of range
    """
    envelope = validate_sidecar(sig_bytes)

    nonce = decode_hex(envelope[:TIMESTAMP_OFFSET])
    timestamp_raw = decode_hex(envelope[TIMESTAMP_OFFSET:TIMESTAMP_OFFSET + TIMESTAMP_HEX_LEN])
    digest = decode_hex(envelope[DIGEST_OFFSET:DIGEST_OFFSET + DIGEST_HEX_LEN])

    (timestamp,) = struct.unpack(TIMESTAMP_FORMAT, timestamp_raw)
    if timestamp == 0:
        raise TimestampInvalid("Malformed timestamp in signature")
    try:
        created = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise TimestampInvalid(f"Invalid timestamp in signature: {timestamp}") from e

    return SignatureEnvelope(nonce=nonce, timestamp=timestamp, created=created, digest=digest)
