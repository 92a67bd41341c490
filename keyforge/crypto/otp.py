"""
One-time-pad stream cipher built on the key derivation engine.

The keystream is produced one digest-sized chunk at a time: chunk ``i`` of
a message of ``n`` bytes is XORed with HKDF(secret, salt=str(n),
info=str(n) + str(i)). Encryption and decryption are the same operation.
"""

from typing import Union

from .digests import UnsupportedAlgorithm, hash_size
from .kdf import DerivationFailure, KeyContext, KeyDerivationEngine
from .utils import SecureBytes, xor_bytes

DEFAULT_ALGORITHM = "sha3-512"


def crypt(data: Union[str, bytes], key: Union[str, bytes],
          hash_algorithm: str = DEFAULT_ALGORITHM) -> bytes:
    """
    Encrypt or decrypt a binary input string.

    Args:
        data: Input data to encrypt or decrypt; text is UTF-8 encoded
        key: Key material, used as-is (text keys are UTF-8 encoded)
        hash_algorithm: Hash used to generate the keystream

    Returns:
        Bytes of the same length as the encoded input

    Raises:
        DerivationFailure: If the algorithm is unsupported or derivation fails
    """
    try:
        chunk_size = hash_size(hash_algorithm)
    except UnsupportedAlgorithm as e:
        raise DerivationFailure(str(e)) from e

    if isinstance(data, str):
        data = data.encode('utf-8')

    length = str(len(data))
    secret = key.encode('utf-8') if isinstance(key, str) else bytes(key)

    context = KeyContext(
        secret=SecureBytes(secret),
        hash_algorithm=hash_algorithm,
        salt=length.encode('ascii'),
    )

    output = []
    with KeyDerivationEngine.from_context(context) as engine:
        for i, offset in enumerate(range(0, len(data), chunk_size)):
            chunk = bytes(data[offset:offset + chunk_size])
            keystream = engine.derive_key(length + str(i))
            output.append(xor_bytes(chunk, keystream[:len(chunk)]))

    return b"".join(output)
