"""
Configuration management for tunedir.
"""
import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from tunedir.audio import MAX_VOLUME
from tunedir.logging_config import get_logger

logger = get_logger('config')

VALID_PLAYERS = ["auto", "mpg123", "ffplay"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def default_theme() -> Dict[str, str]:
    return {
        "list_title": "bold",
        "list_page": "gray",
        "list_border": "gray",
        "list_music": "default",
        "list_folder": "blue",
        "list_selection": "reverse",
        "search_border": "yellow",
        "playlist_title": "bold",
        "playlist_border": "gray",
        "playing_title": "bold",
        "playing_name": "green",
        "gauge": "cyan",
        "usage": "gray",
        "error": "red",
    }


@dataclass
class AppConfig:
    """Application configuration settings."""
    
    # Music library; the browser never goes above it
    music_directory: str = "~/Music"
    
    # Audio settings
    audio_player: str = "auto"  # auto, mpg123, ffplay
    initial_volume: float = 1.0
    volume_step: float = 0.05
    
    # Navigation
    move_step: int = 5
    
    # Main loop timing, in seconds
    tick_interval: float = 1.0
    poll_timeout: float = 0.1
    
    # Logging settings
    log_level: str = "INFO"
    log_file: Optional[str] = "~/.local/state/tunedir/tunedir.log"

    # UI colors: ANSI color names or #RRGGBB
    theme: Dict[str, str] = field(default_factory=default_theme)


class ConfigManager:
    """Manages configuration loading, saving, and validation."""
    
    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or self._get_default_config_path()
        self.config: AppConfig = AppConfig()
        self._load_config()
    
    def _get_default_config_path(self) -> Path:
        """Get default configuration file path."""
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "tunedir" / "config.json"
        return Path.home() / ".config" / "tunedir" / "config.json"
    
    def _load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            self._create_default_config()
            return
        
        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to load config: {e}")
            logger.info("Using default configuration")
            return

        if not isinstance(data, dict):
            logger.error(f"Config root must be an object, got {type(data).__name__}")
            return
        self._apply_config_data(data)
        logger.info(f"Loaded configuration from {self.config_path}")
    
    def _create_default_config(self) -> None:
        """Create a default configuration file."""
        if self.save_config():
            logger.info(f"Created default config at {self.config_path}")
    
    def _apply_config_data(self, data: Dict[str, Any]) -> None:
        """Apply configuration data to AppConfig object."""
        known = {f.name: f for f in fields(AppConfig)}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Unknown config key: {key}")
                continue
            if key == "theme":
                if isinstance(value, dict):
                    self.config.theme.update({str(k): str(v) for k, v in value.items()})
                else:
                    logger.warning(f"Invalid config value for theme: {value!r}")
                continue
            default = getattr(self.config, key)
            try:
                setattr(self.config, key, _coerce(value, default))
            except (TypeError, ValueError) as e:
                logger.warning(f"Invalid config value for {key}: {value} ({e})")
    
    def save_config(self) -> bool:
        """Save current configuration to file."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                json.dump(asdict(self.config), f, indent=2)
            logger.info(f"Configuration saved to {self.config_path}")
            return True
        except IOError as e:
            logger.error(f"Failed to save configuration: {e}")
            return False
    
    def validate_config(self) -> bool:
        """Validate current configuration.

        Fields with invalid values are reset to their defaults. The music
        directory is only reported; the caller decides whether to go on.

        Returns:
            True if every field was valid
        """
        issues = []
        defaults = AppConfig()
        config = self.config

        def reset(name: str, message: str) -> None:
            issues.append(message)
            setattr(config, name, getattr(defaults, name))

        music_dir = self.get_music_directory_path()
        if not music_dir.is_dir():
            issues.append(f"Music directory does not exist: {music_dir}")
        
        if config.audio_player not in VALID_PLAYERS:
            reset("audio_player", f"Invalid audio player: {config.audio_player}")
        
        if not (0.0 <= config.initial_volume <= MAX_VOLUME):
            reset("initial_volume", f"Initial volume must be 0-{MAX_VOLUME}, got {config.initial_volume}")

        if not (0.0 < config.volume_step <= 0.5):
            reset("volume_step", f"Volume step must be in (0, 0.5], got {config.volume_step}")
        
        if config.move_step < 1:
            reset("move_step", f"Move step must be at least 1, got {config.move_step}")

        if config.tick_interval <= 0:
            reset("tick_interval", f"Tick interval must be positive, got {config.tick_interval}")

        if config.poll_timeout <= 0:
            reset("poll_timeout", f"Poll timeout must be positive, got {config.poll_timeout}")
        
        if config.log_level.upper() not in VALID_LOG_LEVELS:
            reset("log_level", f"Invalid log level: {config.log_level}")
        
        if issues:
            logger.warning(f"Configuration validation issues: {issues}")
            return False
        
        return True
    
    def get_music_directory_path(self) -> Path:
        """Get the actual path to music directory."""
        return Path(self.config.music_directory).expanduser()

    def get_log_file_path(self) -> Optional[Path]:
        if not self.config.log_file:
            return None
        return Path(self.config.log_file).expanduser()


def _coerce(value: Any, default: Any) -> Any:
    """Convert ``value`` to the type of the field's default."""
    if default is None or value is None:
        return value
    if isinstance(default, (int, float)) and isinstance(value, bool):
        raise TypeError("expected a number, got a boolean")
    return type(default)(value)
