"""
Tests for configuration.
"""

import json
import tempfile
from pathlib import Path

import pytest

from homegraph.config import Config, get_config, reset_config, set_config


class TestConfig:
    """Tests for configuration."""

    def test_default_config(self):
        """Test default configuration."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config = Config(data_dir=Path(tmpdir))

            assert config.agent_user_id is None
            assert config.parallel_execution is False
            assert config.include_debug_strings is True
            assert config.strict_attributes is True
            assert config.log_level == "WARNING"

    def test_save_load(self):
        """Test saving and loading config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir)

            config1 = Config(
                data_dir=path,
                agent_user_id="user-123",
                parallel_execution=True,
            )
            config1.save()

            config2 = Config.load(path)

            assert config2.agent_user_id == "user-123"
            assert config2.parallel_execution is True
            assert config2.data_dir == path

    def test_load_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            config = Config.load(Path(tmpdir))
            assert config.agent_user_id is None

    def test_unknown_keys_ignored(self):
        """Older or newer config files still load."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir)
            with open(path / "config.json", "w") as f:
                json.dump({"strict_attributes": False, "mdns_enabled": True}, f)

            config = Config.load(path)
            assert config.strict_attributes is False

    def test_global_instance(self, tmp_path):
        reset_config()
        config = get_config(tmp_path)
        assert get_config() is config

        replacement = Config(data_dir=tmp_path, agent_user_id="other")
        set_config(replacement)
        assert get_config().agent_user_id == "other"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
