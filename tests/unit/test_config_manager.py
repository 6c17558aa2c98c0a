"""Tests for ConfigManager and the config schema."""

from pathlib import Path

import pytest
import yaml

from ytsage.config.manager import ConfigManager
from ytsage.config.schema import GlobalConfig, RetrySettings
from ytsage.utils.errors import InvalidConfigError
from ytsage.utils.retry import RetryPolicy


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_init_with_custom_dir(self, tmp_path: Path) -> None:
        """Test ConfigManager initialization with custom directory."""
        manager = ConfigManager(config_dir=tmp_path)
        assert manager.config_dir == tmp_path
        assert manager.config_file == tmp_path / "config.yaml"

    def test_load_config_creates_default_if_missing(self, tmp_path: Path) -> None:
        """Test that load_config creates default config if file doesn't exist."""
        manager = ConfigManager(config_dir=tmp_path)
        config = manager.load_config()

        assert config == GlobalConfig()
        assert manager.config_file.exists()

    def test_load_config_from_existing_file(self, tmp_path: Path) -> None:
        """Test loading config from existing file with partial sections."""
        (tmp_path / "config.yaml").write_text(
            yaml.safe_dump({"ai": {"provider": "claude"}, "retry": {"max_attempts": 5}})
        )

        config = ConfigManager(config_dir=tmp_path).load_config()

        assert config.ai.provider == "claude"
        assert config.retry.max_attempts == 5
        assert config.analysis.keyword_count == 15

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text("")
        assert ConfigManager(config_dir=tmp_path).load_config() == GlobalConfig()

    def test_invalid_config_raises(self, tmp_path: Path) -> None:
        """Test invalid values surface as InvalidConfigError."""
        (tmp_path / "config.yaml").write_text(yaml.safe_dump({"ai": {"provider": "llama"}}))

        with pytest.raises(InvalidConfigError, match="Invalid configuration"):
            ConfigManager(config_dir=tmp_path).load_config()

    def test_save_and_reload(self, tmp_path: Path) -> None:
        """Test saving configuration round-trips through YAML."""
        manager = ConfigManager(config_dir=tmp_path / "nested")
        config = GlobalConfig(log_level="DEBUG")

        manager.save_config(config)

        assert manager.load_config().log_level == "DEBUG"
        assert yaml.safe_load(manager.config_file.read_text())["log_level"] == "DEBUG"

    def test_set_value(self, tmp_path: Path) -> None:
        """Test dotted keys with YAML-typed values."""
        manager = ConfigManager(config_dir=tmp_path)

        manager.set_value("retry.max_attempts", "4")
        manager.set_value("transcripts.preferred_languages", "[es, en]")

        config = manager.load_config()
        assert config.retry.max_attempts == 4
        assert config.transcripts.preferred_languages == ["es", "en"]

    @pytest.mark.parametrize("key", ["nope", "ai.nope", "ai.provider.deeper"])
    def test_set_unknown_key(self, tmp_path: Path, key: str) -> None:
        with pytest.raises(InvalidConfigError, match="Unknown configuration key"):
            ConfigManager(config_dir=tmp_path).set_value(key, "1")

    def test_set_invalid_value_leaves_file_unchanged(self, tmp_path: Path) -> None:
        manager = ConfigManager(config_dir=tmp_path)

        with pytest.raises(InvalidConfigError, match="Invalid value"):
            manager.set_value("retry.max_attempts", "0")

        assert manager.load_config().retry.max_attempts == 3


class TestRetrySettings:
    def test_to_policy(self) -> None:
        """Test settings become the policy handed to call sites."""
        policy = RetrySettings(
            max_attempts=4, initial_delay_seconds=0.5, max_delay_seconds=2
        ).to_policy()

        assert isinstance(policy, RetryPolicy)
        assert (policy.max_attempts, policy.initial_delay, policy.max_delay) == (4, 0.5, 2.0)
        assert policy.backoff_multiplier == 2
