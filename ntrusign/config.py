"""
ntrusign Configuration Constants

Configuration values for the token session and the signature envelope.
"""

# Serial Port Configuration
# The token enumerates as a USB CDC device and is opened at 115200 8N1.
# The port can be overridden via command-line arguments.
DEFAULT_BAUDRATE = 115200

# Per-read timeout applied to the serial handle (seconds)
SERIAL_TIMEOUT = 0.4

# Write timeout for a single command (seconds)
WRITE_TIMEOUT = 1.0

# Overall deadline for the startup handshake (seconds)
INIT_TIMEOUT = 1.5

# Overall deadline for a single command/response exchange (seconds)
CMD_TIMEOUT = 3.0

# Idle interval between reads that returned no data (seconds)
PROBE_INTERVAL = 0.025

# Maximum bytes requested from the port per read
READ_CHUNK_SIZE = 64

# Token Identity
# USB descriptor values reported by the token firmware
TOKEN_VID = 0x0420
TOKEN_PID = 0x2137
TOKEN_MANUFACTURER = "ABW"
TOKEN_PRODUCT = "STM32 NTRU Token"

# Signature Envelope Layout (hex characters)
# nonce (42 bytes) | timestamp (8 bytes LE) | separator (1 byte) | SHA3-512 (64 bytes)
NONCE_LEN = (40 + 2) * 2
TIMESTAMP_HEX_LEN = 8 * 2
SEPARATOR_HEX_LEN = 1 * 2
DIGEST_SIZE = 64
DIGEST_HEX_LEN = DIGEST_SIZE * 2

# Sidecar files are named after the signed file plus this suffix
SIGNATURE_SUFFIX = ".sig"

# Smallest device message capacity able to hold digest + timestamp + separator
# plus the line terminator
MIN_DEVICE_CAPACITY = DIGEST_SIZE + 8 + 2
