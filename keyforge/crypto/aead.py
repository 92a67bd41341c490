"""
AES-256-GCM authenticated encryption keyed by the key derivation engine.

Each message gets a fresh random IV. The IV doubles as the HKDF salt, so
every message is encrypted under its own derived key. Wire format:

    IV (12 bytes) || tag (16 bytes) || ciphertext
"""

import base64
import binascii
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .kdf import KeyDerivationEngine
from .utils import generate_random_bytes

CIPHER = "aes-256-gcm"
HASH_ALGORITHM = "sha3-256"
IV_SIZE = 12
TAG_SIZE = 16


class AEADDecryptionError(Exception):
    """Exception raised when AEAD decryption fails."""
    pass


def encrypt(data: bytes, key: Union[str, bytes]) -> bytes:
    """
    Encrypt and authenticate data.

    Args:
        data: Plaintext to encrypt
        key: Base64 encoded master key

    Returns:
        IV, tag and ciphertext concatenated

    Raises:
        KeyDerivationError: If the key is invalid or derivation fails
    """
    iv = generate_random_bytes(IV_SIZE)

    with KeyDerivationEngine(key, HASH_ALGORITHM, CIPHER, iv) as engine:
        nonce, enc_key, cipher_tag = engine.wrapper_variables()

    # AES-GCM returns ciphertext with tag appended
    ciphertext_with_tag = AESGCM(enc_key).encrypt(nonce, data, cipher_tag.encode('ascii'))

    return iv + ciphertext_with_tag[-TAG_SIZE:] + ciphertext_with_tag[:-TAG_SIZE]


def decrypt(data: bytes, key: Union[str, bytes]) -> bytes:
    """
    Verify and decrypt data produced by ``encrypt``.

    Raises:
        AEADDecryptionError: If the data is truncated or fails authentication
        KeyDerivationError: If the key is invalid or derivation fails
    """
    if len(data) < IV_SIZE + TAG_SIZE:
        raise AEADDecryptionError("Ciphertext too short to contain IV and tag")

    iv = data[:IV_SIZE]
    tag = data[IV_SIZE:IV_SIZE + TAG_SIZE]
    ciphertext = data[IV_SIZE + TAG_SIZE:]

    with KeyDerivationEngine(key, HASH_ALGORITHM, CIPHER, iv) as engine:
        nonce, enc_key, cipher_tag = engine.wrapper_variables()

    try:
        return AESGCM(enc_key).decrypt(nonce, ciphertext + tag, cipher_tag.encode('ascii'))
    except InvalidTag as e:
        raise AEADDecryptionError("Authentication failed - data may be tampered") from e


def encrypt_base64(data: bytes, key: Union[str, bytes]) -> str:
    """Encrypt data and return the result as base64 text."""
    return base64.b64encode(encrypt(data, key)).decode('ascii')


def decrypt_base64(data: Union[str, bytes], key: Union[str, bytes]) -> bytes:
    """Decrypt base64 text produced by ``encrypt_base64``."""
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AEADDecryptionError("Ciphertext is not valid base64") from e

    return decrypt(raw, key)
