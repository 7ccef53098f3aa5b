"""
Configuration Management Package

Looks for a JSON .gortexrc in (order):
1. the current directory (project-specific)
2. the home directory (global default)
3. built-in defaults

The user's file is a partial document; it is merged over the defaults field
by field, and per provider section:
{
    "provider": "ollama",
    "types": ["feat", "fix", "docs"],
    "ollama": {"model": "qwen2.5-coder:7b", "timeout": 60}
}
"""

import json
import logging
import re
import sys
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path
from typing import Optional

from gortex import COMMIT_TYPE_NAMES, MAX_DIFF_SIZE, MAX_SUBJECT_LENGTH, MIN_BODY_LENGTH, STYLE_HISTORY_COUNT

logger = logging.getLogger(__name__)

PROVIDER_NAMES = ("ollama", "claude", "mistral")
VALID_PROVIDERS = {"auto", *PROVIDER_NAMES}

_TOKEN_RE = re.compile(r'^[a-z0-9-]+$')


def _known_keys(cls, data: dict) -> dict:
    valid_keys = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_keys}


@dataclass
class OllamaSettings:
    base_url: str = "http://localhost:11434"
    model: str = "mistral:7b"
    timeout: int = 30

    @classmethod
    def from_dict(cls, data: dict) -> 'OllamaSettings':
        return cls(**_known_keys(cls, data))


@dataclass
class ClaudeSettings:
    model: str = "claude-sonnet-4-20250514"
    api_key: Optional[str] = None  # falls back to ANTHROPIC_API_KEY
    timeout: int = 60

    @classmethod
    def from_dict(cls, data: dict) -> 'ClaudeSettings':
        return cls(**_known_keys(cls, data))


@dataclass
class MistralSettings:
    base_url: str = "https://api.mistral.ai"
    model: str = "mistral-small-latest"
    api_key: Optional[str] = None  # falls back to MISTRAL_API_KEY
    timeout: int = 60

    @classmethod
    def from_dict(cls, data: dict) -> 'MistralSettings':
        return cls(**_known_keys(cls, data))


PROVIDER_SETTINGS = {
    "ollama": OllamaSettings,
    "claude": ClaudeSettings,
    "mistral": MistralSettings,
}


@dataclass
class Config:
    """User configuration with sensible defaults. Built once, then read-only."""
    # Commit conventions
    types: list[str] = field(default_factory=lambda: list(COMMIT_TYPE_NAMES))
    scopes: list[str] = field(default_factory=list)
    detect_scope: bool = True
    max_subject_length: int = MAX_SUBJECT_LENGTH
    min_body_length: int = MIN_BODY_LENGTH
    max_diff_size: int = MAX_DIFF_SIZE
    style_history: int = STYLE_HISTORY_COUNT  # past commits read for style, 0 turns it off

    # LLM selection and generation
    provider: str = "auto"
    preference: list[str] = field(default_factory=lambda: list(PROVIDER_NAMES))
    model: Optional[str] = None  # overrides the chosen provider's model
    temperature: float = 0.3
    max_tokens: int = 500

    ollama: OllamaSettings = field(default_factory=OllamaSettings)
    claude: ClaudeSettings = field(default_factory=ClaudeSettings)
    mistral: MistralSettings = field(default_factory=MistralSettings)

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def settings_for(self, provider: str):
        return getattr(self, provider)

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', using '{defaults.provider}'")
            self.provider = defaults.provider

        if not self._is_token_list(self.preference) or not set(self.preference) <= set(PROVIDER_NAMES) \
                or not self.preference:
            warnings.append(f"Invalid preference {self.preference!r}, using {defaults.preference}")
            self.preference = defaults.preference

        if not self._is_token_list(self.types) or not self.types:
            warnings.append(f"Invalid types {self.types!r}, using the default commit types")
            self.types = defaults.types

        if not self._is_token_list(self.scopes):
            warnings.append(f"Invalid scopes {self.scopes!r}, scopes must be lowercase words")
            self.scopes = defaults.scopes

        for name in ("max_subject_length", "min_body_length", "max_diff_size", "max_tokens"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                warnings.append(f"Invalid {name} '{value}', using {getattr(defaults, name)}")
                setattr(self, name, getattr(defaults, name))

        if isinstance(self.style_history, bool) or not isinstance(self.style_history, int) or self.style_history < 0:
            warnings.append(f"Invalid style_history '{self.style_history}', using {defaults.style_history}")
            self.style_history = defaults.style_history

        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)) \
                or not 0 <= self.temperature <= 2:
            warnings.append(f"Invalid temperature '{self.temperature}', using {defaults.temperature}")
            self.temperature = defaults.temperature

        for name in PROVIDER_NAMES:
            settings = self.settings_for(name)
            timeout = settings.timeout
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                default_timeout = defaults.settings_for(name).timeout
                warnings.append(f"Invalid {name}.timeout '{timeout}', using {default_timeout}")
                settings.timeout = default_timeout

        return warnings

    @staticmethod
    def _is_token_list(value) -> bool:
        return isinstance(value, list) and all(isinstance(v, str) and _TOKEN_RE.match(v) for v in value)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        """Merge a partial user document over the defaults, ignoring unknown keys."""
        filtered = _known_keys(cls, data)
        for name, settings_cls in PROVIDER_SETTINGS.items():
            section = filtered.pop(name, None)
            if isinstance(section, dict):
                filtered[name] = settings_cls.from_dict(section)
            elif section is not None:
                print(f"Config warning: section '{name}' must be an object, using defaults", file=sys.stderr)

        config = cls(**filtered)
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


class ConfigManager:
    """Manages loading configuration."""

    CONFIG_FILENAME = ".gortexrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.exists():
                self._config = self._load_from_file(path)
                self._config_path = path
                logger.debug("Loaded config from %s", path)
                return self._config

        logger.debug("No %s found, using defaults", self.CONFIG_FILENAME)
        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()

        if not isinstance(data, dict):
            print(f"Warning: {path} must contain a JSON object, using defaults", file=sys.stderr)
            return Config()
        return Config.from_dict(data)

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


__all__ = [
    "Config",
    "ConfigManager",
    "OllamaSettings",
    "ClaudeSettings",
    "MistralSettings",
    "PROVIDER_NAMES",
    "VALID_PROVIDERS",
]
