"""
Tests for the keyforge configuration layer.
"""

import base64
import os

import pytest

from keyforge.config import KeyforgeConfig, ConfigError, DEFAULT_HASH_ALGORITHM, KEY_FILE_NAME
from keyforge.crypto.kdf import create_key, decode_key


@pytest.fixture
def config(tmp_path):
    return KeyforgeConfig(config_dir=str(tmp_path / "keyforge"))


class TestConfig:
    """Test key file provisioning."""

    def test_creates_directory(self, tmp_path):
        """Test that the config directory is created."""
        config_dir = tmp_path / "nested" / "dir"
        config = KeyforgeConfig(config_dir=str(config_dir))

        assert config_dir.is_dir()
        assert config.key_file_path == os.path.join(str(config_dir), KEY_FILE_NAME)
        assert not config.key_exists()

    def test_environment_defaults(self, tmp_path, monkeypatch):
        """Test that environment variables supply the defaults."""
        monkeypatch.setenv("KEYFORGE_HOME", str(tmp_path / "home"))
        monkeypatch.setenv("KEYFORGE_HASH_ALGORITHM", "sha256")

        config = KeyforgeConfig()
        assert config.config_dir == str(tmp_path / "home")
        assert config.hash_algorithm == "sha256"

    def test_default_algorithm(self, config, monkeypatch):
        """Test the default hash algorithm."""
        monkeypatch.delenv("KEYFORGE_HASH_ALGORITHM", raising=False)
        assert KeyforgeConfig(config_dir=config.config_dir).hash_algorithm == DEFAULT_HASH_ALGORITHM

    def test_create_new_master_key(self, config):
        """Test generating and loading a master key."""
        key = config.create_new_master_key()

        assert config.key_exists()
        assert config.get_master_key() == key
        assert len(decode_key(key)) == 32

    def test_set_master_key(self, config):
        """Test saving a caller supplied key."""
        key = create_key(48)
        config.set_master_key(key + "\n")
        assert config.get_master_key() == key

    def test_set_invalid_master_key(self, config):
        """Test that invalid keys are refused."""
        with pytest.raises(ConfigError):
            config.set_master_key("too-short!")

        with pytest.raises(ConfigError):
            config.set_master_key(base64.b64encode(b"x" * 8).decode('ascii'))

        assert not config.key_exists()

    def test_missing_key(self, config):
        """Test loading before a key was provisioned."""
        with pytest.raises(ConfigError, match="not found"):
            config.get_master_key()

    def test_corrupt_key_file(self, config):
        """Test that a corrupt key file is reported."""
        with open(config.key_file_path, 'w') as f:
            f.write("!!! not a key !!!")

        with pytest.raises(ConfigError, match="Invalid master key"):
            config.get_master_key()

    def test_copy_from_file(self, config, tmp_path):
        """Test copying a key from another file."""
        source = tmp_path / "source.b64"
        key = create_key()
        source.write_text(key + "\n")

        config.set_master_key_from_file(str(source))
        assert config.get_master_key() == key

    def test_copy_from_missing_file(self, config, tmp_path):
        """Test copying from a file that does not exist."""
        with pytest.raises(ConfigError, match="not found"):
            config.set_master_key_from_file(str(tmp_path / "nope"))

    def test_create_too_short_key(self, config):
        """Test that short generated keys are refused."""
        with pytest.raises(ConfigError):
            config.create_new_master_key(8)

    def test_create_engine(self, tmp_path):
        """Test building an engine from the stored key."""
        config = KeyforgeConfig(config_dir=str(tmp_path), hash_algorithm="sha256")
        config.create_new_master_key()

        engine = config.create_engine(cipher_tag="tag")
        assert engine.hash_algorithm == "sha256"
        assert len(engine.encryption_key()) == 32

    def test_create_engine_without_key(self, config):
        """Test that a missing key is a config error."""
        with pytest.raises(ConfigError):
            config.create_engine()
