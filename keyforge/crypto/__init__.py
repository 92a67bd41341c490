"""
Cryptographic primitives for keyforge.

This module provides:
- Key derivation (HKDF with purpose info strings)
- One-time-pad stream encryption
- Deterministic seeded shuffling
- Authenticated encryption (AES-GCM)
"""

from .kdf import (
    KeyDerivationEngine, KeyContext, create_key,
    KeyDerivationError, InvalidKeyEncoding, InvalidKeyLength, DerivationFailure
)
from .otp import crypt
from .shuffle import shuffle, GeneratorVariant
from .aead import AEADDecryptionError
from .digests import hash_size, UnsupportedAlgorithm
from .utils import generate_random_bytes, RandomSourceError

__all__ = [
    'KeyDerivationEngine',
    'KeyContext',
    'create_key',
    'crypt',
    'shuffle',
    'GeneratorVariant',
    'hash_size',
    'generate_random_bytes',
    'KeyDerivationError',
    'InvalidKeyEncoding',
    'InvalidKeyLength',
    'DerivationFailure',
    'AEADDecryptionError',
    'UnsupportedAlgorithm',
    'RandomSourceError',
]
