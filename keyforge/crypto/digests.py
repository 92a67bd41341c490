"""
Hash algorithm lookup for keyforge.

Maps the algorithm names accepted throughout the package to the hash
objects of the ``cryptography`` library, and answers digest size queries
used to size keystream chunks and derived keys.
"""

from typing import Dict, Type

from cryptography.hazmat.primitives import hashes


class UnsupportedAlgorithm(ValueError):
    """Raised when a hash algorithm name is not recognised."""
    pass


_ALGORITHMS: Dict[str, Type[hashes.HashAlgorithm]] = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha512/224": hashes.SHA512_224,
    "sha512/256": hashes.SHA512_256,
    "sha3-224": hashes.SHA3_224,
    "sha3-256": hashes.SHA3_256,
    "sha3-384": hashes.SHA3_384,
    "sha3-512": hashes.SHA3_512,
}


def get_hash_algorithm(name: str) -> hashes.HashAlgorithm:
    """
    Build a hash object for the given algorithm name.

    Args:
        name: Algorithm name, case-insensitive (e.g. "sha256", "sha3-512")

    Returns:
        A fresh ``cryptography`` hash algorithm instance

    Raises:
        UnsupportedAlgorithm: If the name is unknown
    """
    try:
        return _ALGORITHMS[name.lower()]()
    except (KeyError, AttributeError):
        raise UnsupportedAlgorithm(f"Unsupported hash algorithm: {name!r}")


def hash_size(name: str) -> int:
    """Return the native digest size in bytes of the named algorithm."""
    return get_hash_algorithm(name).digest_size


def supported_algorithms() -> list:
    """List the accepted algorithm names."""
    return sorted(_ALGORITHMS)
