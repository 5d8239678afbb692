"""
SHA3-512 digests of signed content.

The signing math runs inside the token; the host only hashes files.
"""

from cryptography.hazmat.primitives import hashes

from .errors import FileIOError

# Read files in chunks so large inputs are not loaded at once
CHUNK_SIZE = 64 * 1024


def hash_file(path: str) -> bytes:
    """
    Compute the SHA3-512 digest of a file's full contents.

    Args:
        path: File to hash

    Returns:
        64-byte digest

    Raises:
        FileIOError: If the file cannot be opened or read
    """
    digest = hashes.Hash(hashes.SHA3_512())
    try:
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b''):
                digest.update(chunk)
    except OSError as e:
        raise FileIOError(f"Could not read file ({path}): {e.strerror or e}") from e
    return digest.finalize()
