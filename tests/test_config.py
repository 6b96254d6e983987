import json

from tunedir.config import AppConfig, ConfigManager, default_theme


class TestConfigManager:
    """Tests for loading and validating config.json."""

    def write(self, path, data):
        path.write_text(json.dumps(data) if not isinstance(data, str) else data)
        return path

    def test_creates_default_file(self, tmp_path):
        """Test a missing config file is created with defaults."""
        path = tmp_path / "tunedir" / "config.json"

        manager = ConfigManager(path)

        assert path.exists()
        assert manager.config == AppConfig()
        assert json.loads(path.read_text())["move_step"] == 5

    def test_loads_values(self, tmp_path):
        path = self.write(tmp_path / "config.json", {
            "music_directory": str(tmp_path),
            "move_step": 3,
            "initial_volume": 0.5,
        })

        config = ConfigManager(path).config

        assert config.music_directory == str(tmp_path)
        assert config.move_step == 3
        assert config.initial_volume == 0.5

    def test_invalid_json_uses_defaults(self, tmp_path):
        path = self.write(tmp_path / "config.json", "{not json")

        assert ConfigManager(path).config == AppConfig()

    def test_non_object_root_uses_defaults(self, tmp_path):
        path = self.write(tmp_path / "config.json", [1, 2])

        assert ConfigManager(path).config == AppConfig()

    def test_bad_values_are_skipped(self, tmp_path):
        """Test unknown keys and values of the wrong type are ignored."""
        path = self.write(tmp_path / "config.json", {
            "bogus": 1,
            "initial_volume": "loud",
            "move_step": True,
            "volume_step": 0.1,
        })

        config = ConfigManager(path).config

        assert config.initial_volume == 1.0
        assert config.move_step == 5
        assert config.volume_step == 0.1

    def test_theme_is_merged(self, tmp_path):
        """Test a partial theme only overrides the given elements."""
        path = self.write(tmp_path / "config.json", {"theme": {"gauge": "#00ff00"}})

        theme = ConfigManager(path).config.theme

        assert theme["gauge"] == "#00ff00"
        assert theme["list_folder"] == default_theme()["list_folder"]

    def test_save_config(self, tmp_path):
        path = tmp_path / "config.json"
        manager = ConfigManager(path)
        manager.config.audio_player = "ffplay"

        assert manager.save_config()
        assert ConfigManager(path).config.audio_player == "ffplay"

    def test_validate(self, tmp_path):
        manager = ConfigManager(tmp_path / "config.json")
        manager.config.music_directory = str(tmp_path)
        assert manager.validate_config()

        manager.config.audio_player = "vlc"
        assert not manager.validate_config()
        assert manager.config.audio_player == "auto"
        assert manager.validate_config()

    def test_validate_missing_music_dir(self, tmp_path):
        """Test a missing music directory is reported but kept."""
        manager = ConfigManager(tmp_path / "config.json")
        manager.config.music_directory = str(tmp_path / "nope")

        assert not manager.validate_config()
        assert manager.config.music_directory == str(tmp_path / "nope")

    def test_validate_resets_invalid_fields(self, tmp_path):
        """Test invalid values fall back to their defaults."""
        manager = ConfigManager(tmp_path / "config.json")
        config = manager.config
        config.music_directory = str(tmp_path)
        config.poll_timeout = -1.0
        config.tick_interval = 0.0
        config.initial_volume = 9.0
        config.move_step = 0
        config.log_level = "LOUD"
        config.volume_step = 0.2

        assert not manager.validate_config()

        defaults = AppConfig()
        assert config.poll_timeout == defaults.poll_timeout
        assert config.tick_interval == defaults.tick_interval
        assert config.initial_volume == defaults.initial_volume
        assert config.move_step == defaults.move_step
        assert config.log_level == defaults.log_level
        assert config.volume_step == 0.2

    def test_log_file_path(self, tmp_path):
        manager = ConfigManager(tmp_path / "config.json")
        manager.config.log_file = None
        assert manager.get_log_file_path() is None

        manager.config.log_file = "~/x.log"
        assert not str(manager.get_log_file_path()).startswith("~")
