"""
Configuration management for keyforge.

Stores one base64 encoded master key in a key file and the default hash
algorithm used when building engines from it. Cryptographic file
operations are delegated to the kdf module.
"""

import logging
import os
from typing import Optional

from .crypto.kdf import (
    KeyDerivationEngine, KeyDerivationError, create_key, create_key_file, load_key_file
)

logger = logging.getLogger(__name__)

DEFAULT_HASH_ALGORITHM = "sha3-512"
KEY_FILE_NAME = "master_key.b64"


class ConfigError(Exception):
    """Raised when configuration operations fail."""
    pass


class KeyforgeConfig:
    """
    Simple configuration manager for keyforge.

    Handles loading and provisioning the master key file.
    """

    def __init__(self, config_dir: Optional[str] = None, hash_algorithm: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_dir: Directory for configuration files. Defaults to
                $KEYFORGE_HOME, then ~/.keyforge/
            hash_algorithm: Default hash algorithm. Defaults to
                $KEYFORGE_HASH_ALGORITHM, then sha3-512
        """
        if config_dir is None:
            config_dir = os.environ.get("KEYFORGE_HOME") or os.path.expanduser("~/.keyforge")

        if hash_algorithm is None:
            hash_algorithm = os.environ.get("KEYFORGE_HASH_ALGORITHM", DEFAULT_HASH_ALGORITHM)

        self.config_dir = config_dir
        self.hash_algorithm = hash_algorithm
        self.key_file_path = os.path.join(config_dir, KEY_FILE_NAME)

        os.makedirs(config_dir, exist_ok=True)

    def get_master_key(self) -> str:
        """
        Load the encoded master key.

        Returns:
            str: The base64 encoded master key

        Raises:
            ConfigError: If the key file is missing or holds an invalid key
        """
        try:
            return load_key_file(self.key_file_path)
        except FileNotFoundError as e:
            raise ConfigError(f"Master key file not found: {self.key_file_path}") from e
        except KeyDerivationError as e:
            raise ConfigError(f"Invalid master key: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load master key: {e}") from e

    def set_master_key(self, encoded_key: str) -> None:
        """
        Save an encoded master key.

        Raises:
            ConfigError: If the key is invalid or cannot be written
        """
        try:
            create_key_file(self.key_file_path, encoded_key.strip())
        except KeyDerivationError as e:
            raise ConfigError(f"Invalid master key: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to save master key: {e}") from e

        logger.info("Master key saved to %s", self.key_file_path)

    def set_master_key_from_file(self, source_file: str) -> None:
        """
        Copy the master key from another file.

        Raises:
            ConfigError: If the source file cannot be read or the key is invalid
        """
        try:
            key = load_key_file(source_file)
            create_key_file(self.key_file_path, key)
        except FileNotFoundError as e:
            raise ConfigError(f"Source key file not found: {source_file}") from e
        except KeyDerivationError as e:
            raise ConfigError(f"Invalid source key: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to copy master key: {e}") from e

        logger.info("Master key copied to %s", self.key_file_path)

    def create_new_master_key(self, num_bytes: int = 32) -> str:
        """
        Generate and save a new master key.

        Returns:
            str: The generated encoded key

        Raises:
            ConfigError: If key generation or saving fails
        """
        try:
            key = create_key_file(self.key_file_path, create_key(num_bytes))
        except KeyDerivationError as e:
            raise ConfigError(f"Failed to create master key: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to save master key: {e}") from e

        logger.info("Generated new master key in %s", self.key_file_path)
        return key

    def key_exists(self) -> bool:
        """Check if a master key file exists."""
        return os.path.exists(self.key_file_path)

    def create_engine(self, cipher_tag: str = "", iv: bytes = b"") -> KeyDerivationEngine:
        """Build a key derivation engine from the stored master key."""
        try:
            return KeyDerivationEngine(self.get_master_key(), self.hash_algorithm, cipher_tag, iv)
        except KeyDerivationError as e:
            raise ConfigError(f"Invalid master key: {e}") from e
