import yaml

from bingers.config import ConfigManager


class TestConfigManager:
    def test_creates_default_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "share"))
        config_path = tmp_path / "bingers" / "config.yaml"

        config = ConfigManager(str(config_path)).load()

        assert config_path.exists()
        assert yaml.safe_load(config_path.read_text()) == ConfigManager.DEFAULT_CONFIG
        assert config["api"]["base_url"] == "https://api.tvmaze.com"
        assert config["data_dir"] == str(tmp_path / "share" / "bingers")

    def test_merges_with_defaults(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"data_dir": str(tmp_path), "api": {"timeout": 30}}))

        config = ConfigManager(str(config_path)).load()

        assert config["api"]["timeout"] == 30
        assert config["api"]["retries"] == 3
        assert config["search"]["statuses"] == ["Running"]
        assert ConfigManager.DEFAULT_CONFIG["api"]["timeout"] == 10

    def test_expands_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BINGERS_TEST_DIR", str(tmp_path))
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"data_dir": "$BINGERS_TEST_DIR/data"}))

        config = ConfigManager(str(config_path)).load()

        assert config["data_dir"] == f"{tmp_path}/data"

    def test_invalid_yaml_falls_back_to_defaults(self, tmp_path, caplog):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("api: [unclosed")

        config = ConfigManager(str(config_path)).load()

        assert config["api"]["timeout"] == 10
        assert "Error loading config" in caplog.text

    def test_default_path_uses_xdg(self, tmp_path, monkeypatch):
        monkeypatch.setattr("sys.platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert ConfigManager().config_path == tmp_path / "bingers" / "config.yaml"

    def test_scalar_section_keeps_defaults(self, tmp_path, caplog):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"data_dir": str(tmp_path), "search": "Running", "api": 5}))

        config = ConfigManager(str(config_path)).load()

        assert config["search"] == {"statuses": ["Running"], "languages": ["English"]}
        assert config["api"]["base_url"] == "https://api.tvmaze.com"
        assert "Ignoring 'search'" in caplog.text
