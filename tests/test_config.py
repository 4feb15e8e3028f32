"""
Tests for Configuration
========================
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.utils.config import Config

CONFIG_DIR = Path(__file__).parent.parent / "config"


@pytest.fixture(autouse=True)
def fresh_config():
    Config.reset()
    yield
    Config.reset()


class TestConfig:
    """Test suite for Config."""

    def test_singleton(self):
        assert Config() is Config()

    def test_load_shipped_files(self):
        config = Config().load(
            config_path=str(CONFIG_DIR / "config.yaml"),
            catalogue_path=str(CONFIG_DIR / "catalogue.yaml"),
        )
        assert config.get("gesture.open_threshold") == 3.0
        assert config.get("gesture.close_threshold") == 2.0
        assert config.get("gesture.rearm_cooldown_ms") == 500
        assert config.get("gesture.max_open_ms") == 10000
        assert config.resolver["random_on_timeout"] is True
        assert len(config.catalogue["entries"]) == 18
        assert config.warnings == []

    def test_missing_files_use_defaults(self, tmp_path):
        config = Config().load(
            config_path=str(tmp_path / "none.yaml"),
            catalogue_path=str(tmp_path / "none2.yaml"),
        )
        assert config.gesture == {}
        assert config.catalogue is None
        assert config.get("gesture.max_open_ms", 10000) == 10000

    def test_dot_path_default(self):
        config = Config().load_dict({"capture": {"cooldown_ms": 250}})
        assert config.get("capture.cooldown_ms") == 250
        assert config.get("capture.missing", "x") == "x"
        assert config.get("nope.deeper") is None

    def test_validation_flags_bad_types(self):
        config = Config().load_dict({"gesture": {"max_open_ms": "long", "open_threshold": True}})
        assert len(config.warnings) == 2

    def test_validation_flags_inverted_thresholds(self):
        config = Config().load_dict({"gesture": {"open_threshold": 2, "close_threshold": 3}})
        assert any("close_threshold" in w for w in config.warnings)

    def test_int_accepted_for_float(self):
        config = Config().load_dict({"gesture": {"open_threshold": 3, "close_threshold": 2}})
        assert config.warnings == []

    def test_override(self):
        config = Config().load_dict({"camera": {"device_id": 0, "width": 640}})
        config.override({"camera": {"device_id": 2}})
        assert config.camera == {"device_id": 2, "width": 640}
