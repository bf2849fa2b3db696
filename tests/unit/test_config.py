"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from gnss_diag.core.config_loader import ConfigLoader
from gnss_diag.gps_core.config import DEFAULT_CONFIG_PATH, DiagConfig, load_config


class TestConfigLoader:
    """Test ConfigLoader parsing."""

    def test_missing_file_returns_defaults(self, tmp_path):
        defaults = {"baud_rate": 9600}
        assert ConfigLoader.load(tmp_path / "missing.txt", defaults) == defaults

    def test_typed_values(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text(
            "# comment\n"
            "\n"
            "baud_rate = 038400\n"
            "publish_interval_s = 0.25  # faster\n"
            "console_output = off\n"
            "log_dir = /var/log/gnss\n"
            "serial_port = /dev/ttyUSB0\n"
            "not a setting\n",
            encoding="utf-8",
        )
        defaults = {
            "baud_rate": 9600,
            "publish_interval_s": 0.5,
            "console_output": True,
            "log_dir": Path("gps_logs"),
            "serial_port": "/dev/serial0",
        }

        config = ConfigLoader.load(path, defaults)

        assert config["baud_rate"] == 38400
        assert config["publish_interval_s"] == pytest.approx(0.25)
        assert config["console_output"] is False
        assert config["log_dir"] == Path("/var/log/gnss")
        assert config["serial_port"] == "/dev/ttyUSB0"

    def test_bad_number_keeps_default(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("baud_rate = fast\npublish_interval_s = soon\n", encoding="utf-8")
        config = ConfigLoader.load(path, {"baud_rate": 9600, "publish_interval_s": 0.5})
        assert config == {"baud_rate": 9600, "publish_interval_s": 0.5}

    def test_untyped_guessing(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("a = yes\nb = 12\nc = 1.5\nd = text\n", encoding="utf-8")
        assert ConfigLoader.load(path) == {"a": True, "b": 12, "c": 1.5, "d": "text"}

    def test_strict_ignores_unknown(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("mystery = 1\n", encoding="utf-8")
        assert ConfigLoader.load(path, {"known": 2}, strict=True) == {"known": 2}


class TestDiagConfig:
    """Test DiagConfig."""

    def test_defaults(self):
        config = DiagConfig()
        assert config.publish_interval_s == pytest.approx(0.5)
        assert config.janitor_interval_s == pytest.approx(30.0)
        assert (config.registry_max_size, config.registry_trim_target) == (100, 80)
        assert (config.display_max_size, config.display_trim_target) == (50, 40)
        assert (config.event_log_max_entries, config.event_log_trim_target) == (200, 150)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"registry_trim_target": 101},
            {"display_trim_target": 51},
            {"event_log_trim_target": 201},
            {"publish_interval_s": 0},
            {"janitor_interval_s": -1},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            DiagConfig(**overrides)

    def test_from_dict_ignores_unknown(self):
        config = DiagConfig.from_dict({"baud_rate": 4800, "log_dir": "logs", "colour": "red"})
        assert config.baud_rate == 4800
        assert config.log_dir == Path("logs")

    def test_to_dict_round_trip(self):
        config = DiagConfig(baud_rate=115200)
        assert DiagConfig.from_dict(config.to_dict()) == config


class TestLoadConfig:
    """Test load_config."""

    def test_bundled_file_matches_defaults(self):
        assert DEFAULT_CONFIG_PATH.exists()
        assert load_config() == DiagConfig()

    def test_override_file(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("publish_interval_s = 1.0\nregistry_max_size = 200\n", encoding="utf-8")

        config = load_config(path)

        assert config.publish_interval_s == pytest.approx(1.0)
        assert config.registry_max_size == 200
        assert config.registry_trim_target == 80
