"""
Cryptographic utilities for secure memory handling and random byte generation.

This module provides the random byte source, secure memory helpers and the
byte operations used throughout keyforge.
"""

import logging
import os
import secrets
from typing import Callable, Tuple, Union

logger = logging.getLogger(__name__)


class RandomSourceError(RuntimeError):
    """Raised when no secure random source could produce bytes."""
    pass


# Tried in order; a provider that is unavailable on this platform raises
# NotImplementedError or OSError and the next one is used.
RANDOM_PROVIDERS: Tuple[Callable[[int], bytes], ...] = (
    secrets.token_bytes,
    os.urandom,
)


def secure_zero(data: Union[bytes, bytearray, memoryview]) -> None:
    """
    Overwrite sensitive data in memory with zeros.

    Args:
        data: Bytes, bytearray, or memoryview to zero out
    """
    if isinstance(data, (bytearray, memoryview)):
        for i in range(len(data)):
            data[i] = 0
    elif isinstance(data, bytes):
        # Immutable; callers holding real secrets should use bytearray
        pass
    else:
        raise TypeError("Data must be bytes, bytearray, or memoryview")


def generate_random_bytes(length: int, providers=None) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Each provider is tried in order until one succeeds.

    Args:
        length: Number of random bytes to generate
        providers: Optional override of the provider chain

    Returns:
        Cryptographically secure random bytes

    Raises:
        ValueError: If length is negative
        RandomSourceError: If every provider failed
    """
    if length < 0:
        raise ValueError("Length must be non-negative")

    if providers is None:
        providers = RANDOM_PROVIDERS

    for provider in providers:
        try:
            data = provider(length)
        except (NotImplementedError, OSError) as e:
            logger.debug("Random provider %r unavailable: %s",
                         getattr(provider, "__name__", provider), e)
            continue
        if len(data) == length:
            return data

    raise RandomSourceError("Failed to generate secure random bytes")


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Compare two byte sequences in constant time.

    Args:
        a: First byte sequence
        b: Second byte sequence

    Returns:
        True if sequences are equal, False otherwise
    """
    return secrets.compare_digest(a, b)


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """
    XOR two byte sequences of equal length.

    Raises:
        ValueError: If sequences have different lengths
    """
    if len(a) != len(b):
        raise ValueError("Byte sequences must have equal length")

    return bytes(x ^ y for x, y in zip(a, b))


class SecureBytes:
    """
    A container for sensitive byte data that zeros itself when cleared.

    Usable as a context manager; the data is wiped on exit and on deletion.
    """

    def __init__(self, data: bytes):
        self._data = bytearray(data)
        self._is_valid = True

    def __len__(self) -> int:
        if not self._is_valid:
            raise ValueError("SecureBytes has been cleared")
        return len(self._data)

    def __bytes__(self) -> bytes:
        if not self._is_valid:
            raise ValueError("SecureBytes has been cleared")
        return bytes(self._data)

    def __repr__(self) -> str:
        state = "cleared" if not self._is_valid else f"{len(self._data)} bytes"
        return f"SecureBytes(<{state}>)"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.clear()

    def __del__(self):
        if hasattr(self, '_data'):
            self.clear()

    def clear(self) -> None:
        """Explicitly clear the stored data."""
        if self._is_valid:
            secure_zero(self._data)
            self._is_valid = False

    def is_cleared(self) -> bool:
        """Check if the SecureBytes has been cleared."""
        return not self._is_valid
