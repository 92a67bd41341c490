"""
keyforge: purpose-bound key derivation and a derivation-based stream cipher.

Key Features:
- HKDF subkey derivation from one base64 master key, separated by purpose
- One-time-pad stream cipher whose keystream comes from HKDF
- Deterministic seeded shuffle with secure and legacy generators
- AES-256-GCM encryption keyed through the derivation engine

Basic Usage:
    >>> from keyforge import create_key, crypt
    >>>
    >>> key = create_key()
    >>> ciphertext = crypt(b"Hello, world!", key)
    >>> crypt(ciphertext, key)
    b'Hello, world!'
"""

__version__ = "1.0.0"
__author__ = "keyforge developers"

from .crypto.kdf import (
    KeyDerivationEngine, KeyContext, create_key,
    KeyDerivationError, InvalidKeyEncoding, InvalidKeyLength, DerivationFailure
)
from .crypto.otp import crypt
from .crypto.shuffle import shuffle, GeneratorVariant
from .crypto import aead
from .crypto.utils import generate_random_bytes, SecureBytes
from .config import KeyforgeConfig, ConfigError

__all__ = [
    'KeyDerivationEngine',
    'KeyContext',
    'create_key',
    'crypt',
    'shuffle',
    'GeneratorVariant',
    'aead',
    'generate_random_bytes',
    'SecureBytes',
    'KeyforgeConfig',
    'ConfigError',
    'KeyDerivationError',
    'InvalidKeyEncoding',
    'InvalidKeyLength',
    'DerivationFailure',
]
