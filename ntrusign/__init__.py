"""
ntrusign Host Package
Host-side signing and verification client for the STM32 NTRU token.
"""

__version__ = '0.1.0'

from .protocol import Command, Response, build_command, get_command_name
from .parser import LineFramer
from .errors import (
    TokenError,
    DeviceNotFound,
    PortOpenFailure,
    ProtocolTimeout,
    ProtocolError,
    MalformedEnvelope,
    TimestampInvalid,
    CapacityInsufficient,
    FileIOError,
    HashMismatch,
)
from .envelope import SignatureEnvelope, encode_hex, decode_hex, build_sign_request, parse_envelope
from .locator import find_token_port
from .serial_handler import SerialSession, SerialTransport
from .main import TokenSigner, VerificationResult

__all__ = [
    'Command',
    'Response',
    'build_command',
    'get_command_name',
    'LineFramer',
    'TokenError',
    'DeviceNotFound',
    'PortOpenFailure',
    'ProtocolTimeout',
    'ProtocolError',
    'MalformedEnvelope',
    'TimestampInvalid',
    'CapacityInsufficient',
    'FileIOError',
    'HashMismatch',
    'SignatureEnvelope',
    'encode_hex',
    'decode_hex',
    'build_sign_request',
    'parse_envelope',
    'find_token_port',
    'SerialSession',
    'SerialTransport',
    'TokenSigner',
    'VerificationResult',
]
