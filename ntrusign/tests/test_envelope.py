import unittest
import hashlib
import os
import struct
import tempfile
from datetime import datetime, timezone

from ntrusign.config import NONCE_LEN, DIGEST_SIZE
from ntrusign.crypto import hash_file
from ntrusign.envelope import (
    encode_hex, decode_hex, build_sign_request, validate_sidecar, parse_envelope,
    MIN_ENVELOPE_LEN,
)
from ntrusign.errors import MalformedEnvelope, TimestampInvalid, FileIOError


def sha3_512(data: bytes) -> bytes:
    return hashlib.sha3_512(data).digest()


def make_envelope(timestamp: int, digest: bytes, nonce: bytes = None) -> bytes:
    """Envelope hex text laid out the way the token returns it"""
    nonce = nonce if nonce is not None else bytes(range(NONCE_LEN // 2))
    return (nonce.hex() + build_sign_request(digest, timestamp).hex()).encode('ascii')


class TestHex(unittest.TestCase):
    def test_encode_is_lowercase(self):
        self.assertEqual(encode_hex(b"\x00\xab\xff"), "00abff")

    def test_decode_accepts_str_and_bytes(self):
        self.assertEqual(decode_hex("00abff"), b"\x00\xab\xff")
        self.assertEqual(decode_hex(b"00ABFF"), b"\x00\xab\xff")

    def test_decode_round_trip(self):
        data = os.urandom(97)
        self.assertEqual(decode_hex(encode_hex(data)), data)

    def test_decode_rejects_odd_length(self):
        with self.assertRaises(MalformedEnvelope):
            decode_hex("abc")

    def test_decode_rejects_non_hex(self):
        with self.assertRaises(MalformedEnvelope):
            decode_hex("zz")
        with self.assertRaises(MalformedEnvelope):
            decode_hex("é0")


class TestSignRequest(unittest.TestCase):
    def test_layout(self):
        digest = sha3_512(b"hi")
        payload = build_sign_request(digest, 1700000000)
        self.assertEqual(len(payload), 8 + 1 + DIGEST_SIZE)
        self.assertEqual(payload[:8], struct.pack('<Q', 1700000000))
        self.assertEqual(payload[8:9], b"|")
        self.assertEqual(payload[9:], digest)

    def test_rejects_wrong_digest_size(self):
        with self.assertRaises(ValueError):
            build_sign_request(b"\x00" * 32, 1)


class TestValidateSidecar(unittest.TestCase):
    def test_minimum_length(self):
        self.assertEqual(MIN_ENVELOPE_LEN, NONCE_LEN + 16 + 2 + 128)

    def test_strips_trailing_terminators(self):
        envelope = make_envelope(1700000000, sha3_512(b"hi"))
        self.assertEqual(validate_sidecar(envelope + b"\r\n\n"), envelope)

    def test_rejects_odd_length(self):
        envelope = make_envelope(1700000000, sha3_512(b"hi"))
        with self.assertRaises(MalformedEnvelope):
            validate_sidecar(envelope + b"0")

    def test_rejects_embedded_line_break(self):
        envelope = bytearray(make_envelope(1700000000, sha3_512(b"hi")))
        envelope[10:12] = b"\r\n"
        with self.assertRaises(MalformedEnvelope):
            validate_sidecar(bytes(envelope))

    def test_rejects_non_hex_text(self):
        envelope = bytearray(make_envelope(1700000000, sha3_512(b"hi")))
        envelope[100:102] = b"g "
        with self.assertRaises(MalformedEnvelope):
            validate_sidecar(bytes(envelope))

    def test_rejects_short_sidecar(self):
        # Long enough for the nonce and two digests, but not a full envelope
        with self.assertRaises(MalformedEnvelope):
            validate_sidecar(b"0" * (NONCE_LEN + DIGEST_SIZE * 2 + 4))


class TestParseEnvelope(unittest.TestCase):
    def test_recovers_timestamp_and_digest(self):
        digest = sha3_512(b"hi")
        nonce = os.urandom(NONCE_LEN // 2)
        envelope = parse_envelope(make_envelope(1700000000, digest, nonce) + b"\r\n")

        self.assertEqual(envelope.timestamp, 1700000000)
        self.assertEqual(envelope.digest, digest)
        self.assertEqual(envelope.nonce, nonce)
        self.assertEqual(envelope.created, datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc))

    def test_str_summarizes_envelope(self):
        digest = sha3_512(b"hi")
        envelope = parse_envelope(make_envelope(1700000000, digest))
        text = str(envelope)
        self.assertIn("2023-11-14T22:13:20+00:00", text)
        self.assertIn(digest[:8].hex(), text)
        self.assertNotIn(digest.hex(), text)

    def test_zero_timestamp(self):
        with self.assertRaises(TimestampInvalid) as ctx:
            parse_envelope(make_envelope(0, sha3_512(b"hi")))
        self.assertIsInstance(ctx.exception, MalformedEnvelope)

    def test_out_of_range_timestamp(self):
        with self.assertRaises(TimestampInvalid):
            parse_envelope(make_envelope(2 ** 64 - 1, sha3_512(b"hi")))

    def test_non_hex_digest(self):
        envelope = bytearray(make_envelope(1700000000, sha3_512(b"hi")))
        envelope[-2:] = b"zz"
        with self.assertRaises(MalformedEnvelope):
            parse_envelope(bytes(envelope))


class TestHashing(unittest.TestCase):
    def test_hash_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "data.bin")
            content = os.urandom(200 * 1024)
            with open(path, 'wb') as f:
                f.write(content)
            self.assertEqual(hash_file(path), hashlib.sha3_512(content).digest())

    def test_hash_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileIOError):
                hash_file(os.path.join(tmp, "missing.txt"))


if __name__ == '__main__':
    unittest.main()
