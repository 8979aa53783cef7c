import json
import pytest

from finance_dashboard.config.settings import CONFIG_DIR_ENV, ConfigLoader, Settings, load_settings


@pytest.mark.unit
class TestConfigLoader:

    def test_falls_back_to_packaged_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))

        config = ConfigLoader.load_settings_config()

        assert config["insight_threshold"] == 5
        assert "Food & Drink" in config["default_categories"]

    def test_user_config_wins(self, monkeypatch, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"db_path": "elsewhere.db"}))
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))

        settings = load_settings()

        assert settings.db_path == "elsewhere.db"
        assert settings.top_expenses_n == 10

    def test_missing_config(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))

        with pytest.raises(FileNotFoundError):
            ConfigLoader.load_config("nope.json")

    def test_parsers_config_lists_formats(self):
        formats = [p["format"] for p in ConfigLoader.load_parsers_config()["parsers"]]

        assert formats == ["csv", "json"]


@pytest.mark.unit
class TestSettings:

    def test_unknown_keys_are_ignored(self):
        settings = load_settings({"distribution_top_n": 3, "theme": "dark"})

        assert settings.distribution_top_n == 3
        assert not hasattr(settings, "theme")

    def test_defaults(self):
        assert Settings().insight_threshold == 5
