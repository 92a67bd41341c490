"""
Test suite for AES-256-GCM encryption keyed through the derivation engine.
"""

import base64

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from keyforge.crypto import aead
from keyforge.crypto.aead import AEADDecryptionError, IV_SIZE, TAG_SIZE
from keyforge.crypto.kdf import KeyDerivationEngine, create_key, InvalidKeyEncoding


# Same layout as a key produced by `head -c 256 /dev/urandom | base64 --wrap 64`
WRAPPED_KEY = "\n".join(
    "        " + line
    for line in (
        base64.b64encode(b"A" * 256).decode('ascii')[i:i + 64]
        for i in range(0, 344, 64)
    )
)


class TestAEAD:
    """Test encryption and decryption."""

    def test_roundtrip(self):
        """Test AEAD encryption/decryption roundtrip."""
        key = create_key()
        plaintext = b"Hello, AEAD world!"

        ciphertext = aead.encrypt(plaintext, key)

        assert len(ciphertext) == IV_SIZE + TAG_SIZE + len(plaintext)
        assert aead.decrypt(ciphertext, key) == plaintext

    def test_empty_plaintext(self):
        """Test that empty messages round trip."""
        key = create_key()
        assert aead.decrypt(aead.encrypt(b"", key), key) == b""

    def test_fresh_iv(self):
        """Test that encrypting twice gives different ciphertexts."""
        key = create_key()
        assert aead.encrypt(b"same", key) != aead.encrypt(b"same", key)

    def test_wire_format(self):
        """Test that the output is IV, tag, ciphertext under the derived key."""
        key = create_key()
        plaintext = b"layout check"
        data = aead.encrypt(plaintext, key)

        iv = data[:IV_SIZE]
        tag = data[IV_SIZE:IV_SIZE + TAG_SIZE]
        ciphertext = data[IV_SIZE + TAG_SIZE:]

        engine = KeyDerivationEngine(key, "sha3-256", "aes-256-gcm", iv)
        enc_key = engine.encryption_key()
        assert AESGCM(enc_key).decrypt(iv, ciphertext + tag, b"aes-256-gcm") == plaintext

    def test_tampered_ciphertext(self):
        """Test that modified data is rejected."""
        key = create_key()
        data = bytearray(aead.encrypt(b"do not touch", key))
        data[-1] ^= 0x01

        with pytest.raises(AEADDecryptionError):
            aead.decrypt(bytes(data), key)

    def test_tampered_iv(self):
        """Test that a modified IV is rejected."""
        key = create_key()
        data = bytearray(aead.encrypt(b"do not touch", key))
        data[0] ^= 0x01

        with pytest.raises(AEADDecryptionError):
            aead.decrypt(bytes(data), key)

    def test_wrong_key(self):
        """Test that another key cannot decrypt."""
        data = aead.encrypt(b"private", create_key())

        with pytest.raises(AEADDecryptionError):
            aead.decrypt(data, create_key())

    def test_truncated(self):
        """Test that data shorter than IV and tag is rejected."""
        with pytest.raises(AEADDecryptionError):
            aead.decrypt(b"\x00" * (IV_SIZE + TAG_SIZE - 1), create_key())

    def test_invalid_key(self):
        """Test that key errors propagate."""
        with pytest.raises(InvalidKeyEncoding):
            aead.encrypt(b"data", "not a base64 key!")


class TestBase64Helpers:
    """Test the base64 convenience functions."""

    def test_roundtrip_wrapped_key(self):
        """Test base64 round trip with a multi-line key."""
        text = aead.encrypt_base64(b"Hello, base64!", WRAPPED_KEY)

        assert isinstance(text, str)
        assert aead.decrypt_base64(text, WRAPPED_KEY) == b"Hello, base64!"

    def test_invalid_base64(self):
        """Test that malformed base64 ciphertext is rejected."""
        with pytest.raises(AEADDecryptionError):
            aead.decrypt_base64("***", create_key())
