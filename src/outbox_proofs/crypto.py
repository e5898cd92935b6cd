from __future__ import annotations
import base64
import hashlib

import rfc8785

from .settings import settings

DIGEST_SIZE = 32
ZERO = bytes(DIGEST_SIZE)


def B64(b: bytes) -> str:
    """Base64-encode bytes to ASCII string."""
    return base64.b64encode(b).decode("ascii")


def B64D(s: str) -> bytes:
    """Decode base64 ASCII string to bytes with strict validation."""
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except Exception as e:
        raise ValueError("invalid base64") from e


def digest(data: bytes) -> bytes:
    return hashlib.new(settings.hash_algorithm, data).digest()


def hash_pair(left: bytes, right: bytes) -> bytes:
    """Parent digest of two children: H(left || right)."""
    return digest(left + right)


def leaf_digest(data: bytes) -> bytes:
    """Digest raw leaf content (e.g. a serialized withdrawal) into a 32-byte leaf."""
    return digest(data)


def is_digest(value) -> bool:
    return isinstance(value, (bytes, bytearray)) and len(value) == DIGEST_SIZE


def jcs_dumps(obj) -> bytes:
    """Deterministic canonical JSON bytes per RFC8785."""
    return rfc8785.dumps(obj)
