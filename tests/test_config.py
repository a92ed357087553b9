"""
Configuration Tests
===================

YAML loading, environment overrides, and threshold mapping.
"""

import pytest

from surfacing_engine.config import Settings, load_config
from surfacing_engine.engine import SurfacingThresholds


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SURFACING_CONFIG_PATH", "SURFACING_WINDOW_MS", "SURFACING_PERSISTENCE_GAP_MS",
        "SURFACING_CELL_DEG", "SURFACING_FIRE_CONF", "SURFACING_FIRE_AUTO_CONF",
        "SURFACING_PERSON_CONF", "SURFACING_CHEMICAL_CONF", "SURFACING_ASSET_RADIUS_M",
        "SURFACING_DECISION_LOG_SIZE", "SURFACING_PORT", "SURFACING_LOG_LEVEL", "PORT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "engine:\n"
        "  window_ms: 45000\n"
        "  ignored_labels: [Animal]\n"
        "thresholds:\n"
        "  fire:\n"
        "    auto_conf: 0.97\n"
        "  cluster:\n"
        "    count: 4\n"
        "server:\n"
        "  port: 9000\n"
    )
    return path


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self):
        settings = Settings()
        assert settings.engine.cell_deg == 0.00035
        assert settings.thresholds.fire.conf == 0.88
        assert settings.session.decision_log_size == 1000

    def test_yaml_values(self, config_file):
        settings = load_config(str(config_file))

        assert settings.engine.window_ms == 45000
        assert settings.thresholds.fire.auto_conf == 0.97
        assert settings.thresholds.fire.conf == 0.88
        assert settings.server.port == 9000

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_config(str(tmp_path / "missing.yaml"))
        assert settings.engine.window_ms == 60_000

    def test_config_path_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("SURFACING_CONFIG_PATH", str(config_file))
        assert load_config().engine.window_ms == 45000

    def test_env_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("SURFACING_WINDOW_MS", "30000")
        monkeypatch.setenv("SURFACING_FIRE_CONF", "0.8")
        monkeypatch.setenv("SURFACING_ASSET_RADIUS_M", "75")
        monkeypatch.setenv("SURFACING_LOG_LEVEL", "DEBUG")

        settings = load_config(str(config_file))
        assert settings.engine.window_ms == 30000
        assert settings.thresholds.fire.conf == 0.8
        assert settings.thresholds.asset.radius_m == 75.0
        assert settings.logging.level == "DEBUG"

    def test_port_precedence(self, config_file, monkeypatch):
        monkeypatch.setenv("SURFACING_PORT", "9100")
        assert load_config(str(config_file)).server.port == 9100

        monkeypatch.setenv("PORT", "8080")
        assert load_config(str(config_file)).server.port == 8080

    def test_invalid_value_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("thresholds:\n  fire:\n    conf: 1.5\n")
        with pytest.raises(ValueError):
            load_config(str(path))


class TestThresholdsFromSettings:
    """Tests for mapping settings onto engine thresholds."""

    def test_mapping(self, config_file):
        thresholds = SurfacingThresholds.from_settings(load_config(str(config_file)))

        assert thresholds.window_ms == 45000
        assert thresholds.fire_auto_conf == 0.97
        assert thresholds.cluster_count == 4
        assert thresholds.ignored_labels == frozenset({"animal"})

    def test_defaults_match(self):
        assert SurfacingThresholds.from_settings(Settings()) == SurfacingThresholds()
