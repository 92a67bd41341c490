"""
Key Derivation Engine for keyforge.

Derives purpose-bound subkeys from a single master secret:
- The master key is supplied base64 encoded and must decode to >= 32 bytes
- Subkeys come from HKDF over (hash algorithm, secret, salt/IV, info)
- Purposes are separated only by their info strings, so one secret and
  salt pair serves any number of purposes
"""

import base64
import binascii
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Tuple, Union

from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .digests import get_hash_algorithm
from .utils import SecureBytes, constant_time_compare, generate_random_bytes

logger = logging.getLogger(__name__)


class KeyDerivationError(Exception):
    """Base class for key handling failures."""
    pass


class InvalidKeyEncoding(KeyDerivationError):
    """Raised when a master key is not valid base64."""
    pass


class InvalidKeyLength(KeyDerivationError):
    """Raised when a master key decodes to fewer than MIN_KEY_LENGTH bytes."""
    pass


class DerivationFailure(KeyDerivationError):
    """Raised when the HKDF or HMAC primitive fails."""
    pass


MIN_KEY_LENGTH = 32

_KEY_WHITESPACE = re.compile(rb"[\t\n\r ]")

AUTHENTICATION_PURPOSE = "authenticationKey"
ENCRYPTION_PURPOSE = "encryptionKey"


def purpose_info(purpose: str, cipher_tag: str) -> str:
    """
    Build the HKDF info string for a named purpose.

    The format is ``<purpose>|<cipher tag>`` with no escaping, matching
    keys derived by earlier releases.
    """
    return f"{purpose}|{cipher_tag}"


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


def decode_key(key: Union[str, bytes]) -> bytes:
    """
    Decode a base64 master key and check its length.

    Tabs, newlines, carriage returns and spaces are ignored so keys may be
    wrapped over several lines; any other character outside the base64
    alphabet is rejected. Trailing "=" padding may be omitted.

    Args:
        key: Encoded master key

    Returns:
        The decoded key bytes

    Raises:
        InvalidKeyEncoding: If the key is not valid base64
        InvalidKeyLength: If the decoded key is shorter than 32 bytes
    """
    try:
        compact = _KEY_WHITESPACE.sub(b"", _to_bytes(key))
        if b"=" not in compact:
            compact += b"=" * (-len(compact) % 4)
        decoded = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise InvalidKeyEncoding("Key is not valid base64") from e

    if len(decoded) < MIN_KEY_LENGTH:
        raise InvalidKeyLength(
            f"Key must decode to at least {MIN_KEY_LENGTH} bytes, got {len(decoded)}"
        )

    return decoded


@dataclass(frozen=True)
class KeyContext:
    """Everything a derivation depends on. Never modified once built."""

    secret: SecureBytes = field(repr=False, compare=False)
    hash_algorithm: str
    salt: bytes = b""
    cipher_tag: str = ""


class KeyDerivationEngine:
    """
    Derives subkeys and message checksums from one master secret.

    The decoded secret is kept in a SecureBytes container; use the engine
    as a context manager (or call ``clear``) to wipe it when done.
    """

    def __init__(self, key: Union[str, bytes], hash_algorithm: str,
                 cipher_tag: str = "", iv: bytes = b""):
        """
        Initialize the engine from an encoded master key.

        Args:
            key: Base64 encoded master key (>= 32 bytes once decoded)
            hash_algorithm: Hash used by HKDF and HMAC (e.g. "sha3-512")
            cipher_tag: Label mixed into the purpose info strings
            iv: Salt handed to HKDF, may be empty

        Raises:
            InvalidKeyEncoding: If the key is not valid base64
            InvalidKeyLength: If the decoded key is too short
        """
        secret = SecureBytes(decode_key(key))
        self._context = KeyContext(secret, hash_algorithm, bytes(iv), cipher_tag)

    @classmethod
    def from_context(cls, context: KeyContext) -> 'KeyDerivationEngine':
        """Build an engine over an existing context, skipping key decoding."""
        engine = cls.__new__(cls)
        engine._context = context
        return engine

    @property
    def hash_algorithm(self) -> str:
        return self._context.hash_algorithm

    @property
    def cipher_tag(self) -> str:
        return self._context.cipher_tag

    def derive_key(self, info: Union[str, bytes]) -> bytes:
        """
        Derive a subkey for the given info string.

        The output length is the native digest size of the hash algorithm.

        Args:
            info: Context string separating this key from every other purpose

        Returns:
            Derived key bytes

        Raises:
            DerivationFailure: If the algorithm is unsupported or HKDF fails
        """
        context = self._context
        try:
            algorithm = get_hash_algorithm(context.hash_algorithm)
            hkdf = HKDF(
                algorithm=algorithm,
                length=algorithm.digest_size,
                salt=context.salt or None,
                info=_to_bytes(info),
            )
            return hkdf.derive(bytes(context.secret))
        except Exception as e:
            raise DerivationFailure(f"Key derivation failed: {e}") from e

    def authentication_key(self) -> bytes:
        """Derive the key used for message checksums."""
        return self.derive_key(purpose_info(AUTHENTICATION_PURPOSE, self.cipher_tag))

    def encryption_key(self) -> bytes:
        """Derive the key handed to the cipher."""
        return self.derive_key(purpose_info(ENCRYPTION_PURPOSE, self.cipher_tag))

    def message_checksum(self, message: bytes) -> bytes:
        """
        Calculate the raw HMAC of a message under the authentication key.

        Raises:
            DerivationFailure: If the key derivation or HMAC fails
        """
        key = self.authentication_key()
        try:
            mac = hmac.HMAC(key, get_hash_algorithm(self.hash_algorithm))
            mac.update(message)
            return mac.finalize()
        except Exception as e:
            raise DerivationFailure(f"Message checksum failed: {e}") from e

    def verify_checksum(self, message: bytes, checksum: bytes) -> bool:
        """Check a checksum produced by ``message_checksum`` in constant time."""
        return constant_time_compare(self.message_checksum(message), checksum)

    def wrapper_variables(self) -> Tuple[bytes, bytes, str]:
        """
        Read-only access to what an external cipher needs.

        Returns:
            Tuple of (iv, encryption_key, cipher_tag)
        """
        return self._context.salt, self.encryption_key(), self.cipher_tag

    def clear(self) -> None:
        """Wipe the master secret held by this engine."""
        self._context.secret.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.clear()


def create_key(num_bytes: int = MIN_KEY_LENGTH) -> str:
    """
    Generate a new base64 encoded master key.

    Args:
        num_bytes: Size of the key in bytes

    Returns:
        Base64 text of the random key

    Raises:
        InvalidKeyLength: If num_bytes is below 32
    """
    if num_bytes < MIN_KEY_LENGTH:
        raise InvalidKeyLength(f"Keys must be at least {MIN_KEY_LENGTH} bytes")

    return base64.b64encode(generate_random_bytes(num_bytes)).decode('ascii')


def load_key_file(key_file_path: str) -> str:
    """
    Load an encoded master key from a file.

    Surrounding whitespace is dropped and the key is validated before it
    is returned.

    Raises:
        FileNotFoundError: If the key file doesn't exist
        KeyDerivationError: If the key inside is invalid
    """
    if not os.path.exists(key_file_path):
        raise FileNotFoundError(f"Key file not found: {key_file_path}")

    with open(key_file_path, 'r', encoding='ascii', errors='replace') as f:
        key = f.read().strip()

    decode_key(key)
    return key


def create_key_file(key_file_path: str, key: str = None) -> str:
    """
    Write an encoded master key to a file, generating one if none is given.

    Returns:
        The encoded key that was saved
    """
    if key is None:
        key = create_key()
    else:
        decode_key(key)

    with open(key_file_path, 'w', encoding='ascii') as f:
        f.write(key + "\n")

    try:
        os.chmod(key_file_path, 0o600)  # rw-------
    except (OSError, AttributeError):
        logger.warning("Could not set restrictive permissions on %s", key_file_path)

    return key
