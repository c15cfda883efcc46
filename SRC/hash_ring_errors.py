"""Error kinds raised by the ring.

Each one also derives from the nearest builtin so callers catching
ValueError / LookupError keep working.
"""
from __future__ import annotations


class HashRingError(Exception):
    """Base class for all ring errors."""


class InvalidArgument(HashRingError, ValueError):
    pass


class DuplicateKey(HashRingError, ValueError):
    pass


class NotFound(HashRingError, LookupError):
    pass


class ResourceExhausted(HashRingError, MemoryError):
    pass


class HashFailure(HashRingError, RuntimeError):
    """Digest computation failed. Not retried."""
