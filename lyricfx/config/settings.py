"""
Configuration management for lyricfx

This module handles loading, validation, and management of application settings
from YAML files and environment variables. It is the settings collaborator of
the overlay: the core reads it at the start of every track cycle and never
mutates it.

The configuration is organized into logical sections using dataclasses:
- Lyrics search settings (API endpoint, tolerances, modification keywords)
- AI effects settings (credential, model, race timeout, retry policy)
- Translation settings (enabled flag, target language)
- Synchronization cadence and track-change tolerance
- Effects damping, display and player options
- Logging configuration

The generative API key can be provided through the environment (or a .env
file) so it never has to be written to a configuration file.
"""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()


@dataclass
class LyricsConfig:
    """
    Lyrics search configuration

    Controls how the resolver talks to the lyrics corpus and how strictly it
    matches candidate durations against the playing track.
    """
    api_base: str = "https://lrclib.net/api"
    user_agent: str = "lyricfx/0.3.0 (https://github.com/lyricfx/lyricfx)"
    request_timeout: int = 15
    rate_limit: int = 2          # requests per second towards the corpus
    duration_tolerance: float = 5.0
    modified_keywords: list = field(default_factory=lambda: ["sped up", "nightcore", "slowed", "reverb"])


@dataclass
class AIConfig:
    """
    Generative effects configuration

    The AI effects generator is only started when enabled and a credential is
    present. race_timeout bounds how long a track cycle waits for it before
    publishing lyrics; the generation itself keeps running in the background.
    """
    enabled: bool = True
    api_key: str = ""
    endpoint: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.0-flash"
    request_timeout: int = 30
    race_timeout: float = 4.0
    max_attempts: int = 3
    batch_size: int = 3


@dataclass
class TranslationConfig:
    """
    Line-by-line translation configuration

    Translation reuses the generative API credential from the AI section.
    """
    enabled: bool = False
    target_language: str = "English"
    max_line_drift: int = 5


@dataclass
class SyncConfig:
    """
    Polling cadence for the two periodic tasks

    sync_interval drives active-line detection, poll_interval drives
    track-change detection. track_change_confirmations > 1 debounces metadata
    jitter by requiring the same new track on consecutive polls.
    """
    sync_interval: float = 0.2
    poll_interval: float = 1.0
    track_change_tolerance: float = 5.0
    track_change_confirmations: int = 1


@dataclass
class EffectsConfig:
    """
    Effects rule engine configuration

    The fire rates damp the probabilistic rules whose trigger words are so
    common they would otherwise fire on most lines.
    """
    enabled: bool = True
    vision_fire_rate: float = 0.8
    thinking_fire_rate: float = 0.8


@dataclass
class DisplayConfig:
    """
    Rendering hints passed to the renderer
    """
    epic_threshold: float = 5.0
    last_line_duration: float = 5.0
    show_on_track_change: bool = True
    colored_output: bool = True


@dataclass
class PlayerConfig:
    """
    Player-state collaborator configuration

    player_name restricts playerctl to one MPRIS player (e.g. "spotify");
    empty means whichever player playerctl picks.
    """
    backend: str = "playerctl"
    player_name: str = ""
    command_timeout: float = 1.0


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


class Settings:
    """
    Main settings class that manages all configuration

    Loads settings from the first YAML file found, overrides them with
    environment variables and exposes one dataclass per section.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".lyricfx"

        # Initialize all configuration objects with default values
        self.lyrics = LyricsConfig()
        self.ai = AIConfig()
        self.translation = TranslationConfig()
        self.sync = SyncConfig()
        self.effects = EffectsConfig()
        self.display = DisplayConfig()
        self.player = PlayerConfig()
        self.logging = LoggingConfig()

        # Load configuration from various sources in order of precedence
        self._load_config()
        self._load_environment_variables()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in multiple locations in order of
        precedence. The first file found will be used.
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except Exception as e:
                    print(f"Warning: Failed to load config from {path}: {e}")

        self._apply_config(config_data)

    def _sections(self) -> Dict[str, Any]:
        return {
            'lyrics': self.lyrics,
            'ai': self.ai,
            'translation': self.translation,
            'sync': self.sync,
            'effects': self.effects,
            'display': self.display,
            'player': self.player,
            'logging': self.logging,
        }

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Only attributes that exist on the target dataclass are updated;
        unknown sections and keys are ignored.

        Args:
            config_data: Dictionary containing configuration sections
        """
        if not isinstance(config_data, dict):
            return

        config_mapping = self._sections()
        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Load sensitive configuration from environment variables

        Environment variables take precedence over file-based configuration.
        """
        env_mappings = {
            'GEMINI_API_KEY': lambda v: setattr(self.ai, 'api_key', v),
            'LYRICFX_TARGET_LANGUAGE': lambda v: setattr(self.translation, 'target_language', v),
            'LRCLIB_API_BASE': lambda v: setattr(self.lyrics, 'api_base', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def get_config_directory(self) -> Path:
        """
        Get the expanded config directory path

        Returns:
            Path object for the configuration directory
        """
        return self.config_dir.expanduser()

    @property
    def ai_available(self) -> bool:
        """True when AI calls can be made (flag on and credential present)."""
        return bool(self.ai.enabled and self.ai.api_key)

    @property
    def translation_available(self) -> bool:
        """True when translation can run; it shares the generative credential."""
        return bool(self.translation.enabled and self.ai.api_key and self.translation.target_language)

    def snapshot(self) -> 'Settings':
        """
        Independent copy of the current settings

        A track cycle reads one snapshot at its start so that edits made while
        it runs only take effect from the next track.
        """
        return copy.deepcopy(self)

    def save_config(self, path: Optional[str] = None) -> None:
        """
        Save current configuration to file

        Serializes the current configuration to a YAML file, excluding
        the API key.

        Args:
            path: Custom path to save config, defaults to user config directory

        Raises:
            Exception: If the configuration cannot be saved
        """
        if not path:
            path = self.get_config_directory() / "config.yaml"
        else:
            path = Path(path)

        config_data = {name: self._dataclass_to_dict(obj) for name, obj in self._sections().items()}

        # Remove sensitive data from saved config
        config_data['ai']['api_key'] = ""

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)
        except Exception as e:
            raise Exception(f"Failed to save config to {path}: {e}")

    def _dataclass_to_dict(self, obj) -> Dict[str, Any]:
        """Convert dataclass to dictionary for YAML output"""
        result = {}
        for key, value in obj.__dict__.items():
            result[key] = value
        return result

    def validation_errors(self) -> list:
        """
        Collect configuration problems

        Returns:
            List of human-readable error strings (empty when valid)
        """
        errors = []

        if self.sync.sync_interval <= 0 or self.sync.poll_interval <= 0:
            errors.append("sync.sync_interval and sync.poll_interval must be positive")

        if self.sync.track_change_confirmations < 1:
            errors.append("sync.track_change_confirmations must be at least 1")

        if self.lyrics.duration_tolerance < 0:
            errors.append(f"Invalid lyrics.duration_tolerance: {self.lyrics.duration_tolerance}")

        for name in ('vision_fire_rate', 'thinking_fire_rate'):
            rate = getattr(self.effects, name)
            if not 0.0 <= rate <= 1.0:
                errors.append(f"effects.{name} must be between 0 and 1, got {rate}")

        if self.ai.max_attempts < 1 or self.ai.batch_size < 1:
            errors.append("ai.max_attempts and ai.batch_size must be at least 1")

        if self.ai.race_timeout < 0:
            errors.append(f"Invalid ai.race_timeout: {self.ai.race_timeout}")

        if self.player.backend not in ['playerctl']:
            errors.append(f"Invalid player backend: {self.player.backend}")

        return errors

    def validate(self) -> bool:
        """
        Validate current configuration

        Returns:
            True if configuration is valid, False otherwise
        """
        errors = self.validation_errors()

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True

    def __str__(self) -> str:
        """Concise summary of key configuration values"""
        sections = [
            f"Lyrics: {self.lyrics.api_base}",
            f"AI: {'enabled' if self.ai_available else 'disabled'}",
            f"Translation: {self.translation.target_language if self.translation_available else 'disabled'}",
            f"Sync: {self.sync.sync_interval}s/{self.sync.poll_interval}s",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Creates a new settings instance with updated configuration from files
    and environment variables.

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
