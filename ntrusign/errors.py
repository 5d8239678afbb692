"""
Error taxonomy for the token client.

Every failure that ends an invocation is raised as a TokenError subclass and
reported once by the command-line entry point.
"""


class TokenError(Exception):
    """Base exception for all token client failures"""
    pass


class DeviceNotFound(TokenError):
    """Raised when no attached serial device matches the token identity"""
    pass


class PortOpenFailure(TokenError):
    """Raised when the token's serial port cannot be opened"""
    pass


class ProtocolTimeout(TokenError):
    """Raised when the token does not answer within the deadline"""
    pass


class ProtocolError(TokenError):
    """Raised when the token replies with an error or an unusable response"""
    pass


class MalformedEnvelope(TokenError):
    """Raised when signature envelope text fails length, hex or layout checks"""
    pass


class TimestampInvalid(MalformedEnvelope):
    """Raised when the envelope timestamp is zero or cannot be represented"""
    pass


class CapacityInsufficient(TokenError):
    """Raised when the token's maximum message length is too small"""
    pass


class FileIOError(TokenError):
    """Raised when the target file or its sidecar cannot be read or written"""
    pass


class HashMismatch(TokenError):
    """Raised when the base file digest differs from the signed digest"""
    pass
