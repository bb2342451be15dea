"""Configuration Management Package"""

import json
import os
import sys
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from pushit.context import ContextConfig

# Valid configuration values
VALID_PROVIDERS = {"openrouter", "claude"}

# Credentials come from the environment only, never from .pushitrc
API_KEY_ENV = {
    "openrouter": "OPENROUTER_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
}


class ConfigError(Exception):
    """Raised when the configuration cannot support a run."""
    pass


@dataclass
class Config:
    """User configuration with sensible defaults."""
    provider: str = "openrouter"
    model: Optional[str] = None
    api_url: Optional[str] = None
    include_file_contents: bool = True
    max_diff_chars: int = 30_000
    max_prompt_chars: int = 60_000
    max_file_size: int = 50 * 1024
    max_lines_per_file: int = 500
    history_count: int = 20
    timeout: int = 60  # seconds, network leg only
    push: bool = True
    max_file_display: int = 8  # Max files shown before collapsing list

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults silently after warning.
        """
        warnings = []
        defaults = Config()

        if self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            self.provider = defaults.provider

        for name in ("max_diff_chars", "max_prompt_chars", "max_file_size",
                     "max_lines_per_file", "history_count", "timeout", "max_file_display"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                default = getattr(defaults, name)
                warnings.append(f"Invalid {name} '{value}', using {default}")
                setattr(self, name, default)

        return warnings

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        # Validate and print warnings to stderr
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config

    def apply_env(self, environ: dict | None = None) -> None:
        """Apply PUSHIT_* environment overrides."""
        environ = os.environ if environ is None else environ
        self.provider = environ.get("PUSHIT_PROVIDER") or self.provider
        self.model = environ.get("PUSHIT_MODEL") or self.model
        self.api_url = environ.get("PUSHIT_API_URL") or self.api_url
        timeout = environ.get("PUSHIT_TIMEOUT", "")
        if timeout.isdigit() and int(timeout) > 0:
            self.timeout = int(timeout)

    def context_config(self) -> ContextConfig:
        return ContextConfig(
            max_diff_chars=self.max_diff_chars,
            history_count=self.history_count,
            include_file_contents=self.include_file_contents,
            max_file_size=self.max_file_size,
            max_lines_per_file=self.max_lines_per_file,
        )


@dataclass(frozen=True)
class GenerationSettings:
    """Immutable endpoint settings handed to the generation client."""
    api_key: str
    model: Optional[str] = None
    api_url: Optional[str] = None


def resolve_settings(config: Config, environ: dict | None = None) -> GenerationSettings:
    """Build GenerationSettings, failing when the provider has no API key."""
    environ = os.environ if environ is None else environ
    env_name = API_KEY_ENV.get(config.provider)
    if env_name is None:
        raise ConfigError(f"Unknown provider: {config.provider}")

    api_key = environ.get(env_name)
    if not api_key:
        raise ConfigError(
            f"No API key found. Set {env_name} environment variable:\n"
            f"  export {env_name}='your-key-here'"
        )
    return GenerationSettings(api_key=api_key, model=config.model, api_url=config.api_url)


class ConfigManager:
    """Manages loading and saving configuration."""

    CONFIG_FILENAME = ".pushitrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        local_path = Path.cwd() / self.CONFIG_FILENAME
        if local_path.exists():
            self._config = self._load_from_file(local_path)
            self._config_path = local_path
            return self._config

        home_path = Path.home() / self.CONFIG_FILENAME
        if home_path.exists():
            self._config = self._load_from_file(home_path)
            self._config_path = home_path
            return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top level must be an object")
            return Config.from_dict(data)
        except (json.JSONDecodeError, ValueError, IOError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()

    def save(self, config: Config, global_config: bool = True) -> Path:
        path = Path.home() / self.CONFIG_FILENAME if global_config else Path.cwd() / self.CONFIG_FILENAME
        with open(path, 'w') as f:
            json.dump(config.to_dict(), f, indent=2)
        return path

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def save_config(config: Config, global_config: bool = True) -> Path:
    return _manager.save(config, global_config)


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "ConfigError",
    "GenerationSettings",
    "load_config",
    "save_config",
    "get_config_path",
    "resolve_settings",
    "VALID_PROVIDERS",
    "API_KEY_ENV",
]
