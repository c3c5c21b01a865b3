"""
Configuration file parsing and management.

Supports YAML configuration files (``.json`` files are read as JSON).
Merges configurations from multiple sources (explicit → project → user → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .common import vlog
from .collectors import DEFAULT_TIMEOUT
from .http_cache import DEFAULT_CACHE_DURATION


PROJECT_CONFIG_NAMES = (".container-versions.yml", ".container-versions.yaml")

USER_CONFIG_LOCATIONS = [
    os.path.expanduser("~/.config/container-versions/config.yml"),
    os.path.expanduser("~/.config/container-versions/config.yaml"),
]

MAX_CACHE_DURATION = 7 * 24 * 3600


class ConfigError(ValueError):
    """Raised when a configuration file cannot be loaded or is invalid."""
    pass


@dataclass(frozen=True)
class ToolConfig:
    """
    Per-tool overrides.

    Attributes:
        skip: Leave the tool out of the run entirely
        manual: Report the tool as needing a manual check instead of fetching
    """
    skip: bool = False
    manual: bool = False

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ToolConfig:
        """Create ToolConfig from dictionary."""
        return ToolConfig(
            skip=bool(data.get("skip", False)),
            manual=bool(data.get("manual", False)),
        )


@dataclass(frozen=True)
class UpdatePreferences:
    """
    Preferences for update-versions.

    Attributes:
        auto_commit: Commit rewritten pins with git
        bump_version: Bump the project patch version after committing
    """
    auto_commit: bool = True
    bump_version: bool = True

    @staticmethod
    def from_dict(data: dict[str, Any]) -> UpdatePreferences:
        """Create UpdatePreferences from dictionary."""
        return UpdatePreferences(
            auto_commit=bool(data.get("auto_commit", True)),
            bump_version=bool(data.get("bump_version", True)),
        )


@dataclass(frozen=True)
class Preferences:
    """
    Check preferences.

    Attributes:
        use_cache: Read and write the HTTP response cache
        cache_duration: Cache time-to-live in seconds
        timeout_seconds: Per-request HTTP timeout
    """
    use_cache: bool = True
    cache_duration: int = DEFAULT_CACHE_DURATION
    timeout_seconds: int = DEFAULT_TIMEOUT

    def __post_init__(self):
        """Validate preferences after initialization."""
        if not isinstance(self.cache_duration, int) or self.cache_duration < 0 or self.cache_duration > MAX_CACHE_DURATION:
            raise ConfigError(
                f"Invalid cache_duration: {self.cache_duration}. "
                f"Must be between 0 and {MAX_CACHE_DURATION} seconds"
            )

        if not isinstance(self.timeout_seconds, int) or self.timeout_seconds < 1 or self.timeout_seconds > 120:
            raise ConfigError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 120"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from dictionary."""
        return Preferences(
            use_cache=bool(data.get("use_cache", True)),
            cache_duration=data.get("cache_duration", DEFAULT_CACHE_DURATION),
            timeout_seconds=data.get("timeout_seconds", DEFAULT_TIMEOUT),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete configuration.

    Attributes:
        version: Config schema version
        tools: Per-tool overrides keyed by tool name
        preferences: Check preferences
        update: Update preferences
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    tools: dict[str, ToolConfig] = field(default_factory=dict)
    preferences: Preferences = field(default_factory=Preferences)
    update: UpdatePreferences = field(default_factory=UpdatePreferences)
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ConfigError(f"Unsupported config version: {self.version}. Expected version 1")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        tools_data = data.get("tools") or {}
        if not isinstance(tools_data, dict):
            raise ConfigError("'tools' must be a mapping of tool name to settings")

        tools = {}
        for tool_name, tool_config in tools_data.items():
            tool_config = tool_config or {}
            if not isinstance(tool_config, dict):
                raise ConfigError(f"Settings for tool '{tool_name}' must be a mapping")
            tools[str(tool_name)] = ToolConfig.from_dict(tool_config)

        preferences = data.get("preferences") or {}
        if not isinstance(preferences, dict):
            raise ConfigError("'preferences' must be a mapping")
        update = data.get("update") or {}
        if not isinstance(update, dict):
            raise ConfigError("'update' must be a mapping")

        return Config(
            version=data.get("version", 1),
            tools=tools,
            preferences=Preferences.from_dict(preferences),
            update=UpdatePreferences.from_dict(update),
            source=source,
        )

    def get_tool_config(self, tool_name: str) -> ToolConfig:
        """
        Get configuration for a specific tool.

        Returns:
            ToolConfig for the tool, or default ToolConfig if not configured
        """
        return self.tools.get(tool_name, ToolConfig())

    @property
    def skipped_tools(self) -> frozenset[str]:
        return frozenset(name for name, tc in self.tools.items() if tc.skip)

    @property
    def manual_tools(self) -> frozenset[str]:
        return frozenset(name for name, tc in self.tools.items() if tc.manual)

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Non-default values win; defaults fall through to ``other``.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        merged_tools = dict(other.tools)
        merged_tools.update(self.tools)

        defaults = Preferences()
        mine, theirs = self.preferences, other.preferences
        merged_preferences = Preferences(
            use_cache=mine.use_cache if mine.use_cache != defaults.use_cache else theirs.use_cache,
            cache_duration=mine.cache_duration if mine.cache_duration != defaults.cache_duration else theirs.cache_duration,
            timeout_seconds=mine.timeout_seconds if mine.timeout_seconds != defaults.timeout_seconds else theirs.timeout_seconds,
        )

        update_defaults = UpdatePreferences()
        merged_update = UpdatePreferences(
            auto_commit=self.update.auto_commit if self.update.auto_commit != update_defaults.auto_commit else other.update.auto_commit,
            bump_version=self.update.bump_version if self.update.bump_version != update_defaults.bump_version else other.update.bump_version,
        )

        return Config(
            version=self.version,
            tools=merged_tools,
            preferences=merged_preferences,
            update=merged_update,
            source=self.source or other.source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError):
        return None


def _load_json(file_path: str) -> dict[str, Any] | None:
    """
    Load JSON configuration file.

    Returns:
        Parsed configuration dictionary, or None if file invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file does not exist

    Raises:
        ConfigError: If the file exists but is unparsable or invalid
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    if file_path.endswith(".json"):
        data = _load_json(file_path)
    else:
        data = _load_yaml(file_path)

    if data is None:
        raise ConfigError(f"Invalid config file: {file_path}")

    try:
        config = Config.from_dict(data, source=file_path)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"Config validation failed for {file_path}: {e}") from e

    vlog(f"Loaded config successfully: {file_path}", verbose)
    return config


def config_locations(project_root: Path) -> list[str]:
    """Standard config file locations, highest priority first."""
    return [str(project_root / name) for name in PROJECT_CONFIG_NAMES] + USER_CONFIG_LOCATIONS


def load_config(
    project_root: Path,
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .container-versions.yml
    3. User ~/.config/container-versions/config.yml
    4. Default configuration

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ConfigError: If custom_path is provided but cannot be loaded, or any
            existing config file is invalid
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ConfigError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in config_locations(project_root):
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config()

    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config file(s)", verbose)
    return merged


def validate_config(config: Config, known_tools: set[str]) -> list[str]:
    """
    Validate configuration and return a list of warnings.

    Args:
        config: Config object to validate
        known_tools: Names of registered tools

    Returns:
        List of validation warning messages (empty if valid)
    """
    warnings = []

    for tool_name, tool_config in config.tools.items():
        if tool_name not in known_tools:
            warnings.append(f"Unknown tool in config: {tool_name}")
        if tool_config.skip and tool_config.manual:
            warnings.append(f"Tool '{tool_name}': both skip and manual set, skip wins")

    return warnings
