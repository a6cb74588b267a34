#!/usr/bin/env python3
"""
Hyper Demon Practice Patcher - Settings Manager
===============================================

Date: October 19, 2026
License: GNU General Public License v3.0 (GPL-3.0)

Description:
    Persistent configuration stored in an INI file. Missing sections
    and keys are filled in from DEFAULT_SETTINGS and written back, so an
    old config file keeps working after an upgrade.

Classes:
    SettingsError(Exception) - Configuration errors
    SettingsManager - Main configuration manager

Functions:
    get_settings_manager(config_file: Optional[Path]) -> SettingsManager
    reset_settings_manager() -> None

Variables (Module-level):
    DEFAULT_SETTINGS: Dict - Default configuration values
    DEFAULT_CONFIG_NAME: str - File name used when no path is given
    logger: logging.Logger - Module logger
"""

import configparser
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "practice_patcher.ini"

DEFAULT_SETTINGS: Dict[str, Dict[str, str]] = {
    'PATHS': {
        'binary_name': 'hyperdemon.exe',
        'catalog_file': 'practice_patches.json',
        'backups_directory': 'backups',
        'logs_directory': 'logs'
    },
    'SAFETY': {
        'backup_before_write': 'true'
    },
    'CATALOG': {
        # Refuse to run when two patches touch the same bytes
        'reject_overlaps': 'false'
    },
    'LOGGING': {
        'log_level': 'WARNING',
        'enable_operation_log': 'true'
    },
    'UI': {
        'enable_colors': 'true',
        'pause_on_exit': 'true'
    }
}


class SettingsError(Exception):
    """Raised when settings operation fails"""
    pass


class SettingsManager:
    """Manages application settings and configuration."""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            config_file: Path to the INI file. If None, uses
                practice_patcher.ini in the current directory.
        """
        if config_file is None:
            config_file = Path.cwd() / DEFAULT_CONFIG_NAME

        self.config_file = Path(config_file)
        self.config: configparser.ConfigParser = configparser.ConfigParser()

        if self.config_file.exists():
            self.load_settings()
        else:
            self.reset_to_defaults()
            logger.info(f"Created new settings file: {self.config_file}")

    def load_settings(self) -> Dict[str, Dict[str, str]]:
        """
        Load settings from config file.

        Returns:
            Dictionary with all settings organized by section

        Raises:
            SettingsError: If config file cannot be read
        """
        try:
            self.config.read(self.config_file, encoding='utf-8')
        except (configparser.Error, OSError) as e:
            logger.error(f"Error loading settings: {e}")
            raise SettingsError(f"Failed to load settings: {e}") from e

        missing = self._has_missing_settings()
        for section, defaults in DEFAULT_SETTINGS.items():
            if section not in self.config:
                self.config[section] = defaults
                logger.warning(f"Added missing section: {section}")
                continue
            for key, value in defaults.items():
                if key not in self.config[section]:
                    self.config[section][key] = value
                    logger.warning(f"Added missing setting: {section}.{key}")

        if missing:
            self.save_settings()

        logger.debug(f"Settings loaded from {self.config_file}")
        return self.get_current_settings()

    def save_settings(self, settings_dict: Optional[Dict[str, Dict[str, str]]] = None) -> bool:
        """
        Save settings to config file.

        Args:
            settings_dict: Settings to merge in before saving. If None,
                saves the current config state.

        Raises:
            SettingsError: If config file cannot be written
        """
        if settings_dict is not None:
            for section, values in settings_dict.items():
                if section not in self.config:
                    self.config[section] = {}
                for key, value in values.items():
                    self.config[section][key] = str(value)

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                self.config.write(f)
        except OSError as e:
            logger.error(f"Error saving settings: {e}")
            raise SettingsError(f"Failed to save settings: {e}") from e

        logger.debug(f"Settings saved to {self.config_file}")
        return True

    def get_current_settings(self) -> Dict[str, Dict[str, str]]:
        return {section: dict(self.config[section]) for section in self.config.sections()}

    def reset_to_defaults(self) -> bool:
        self.config.clear()
        for section, values in DEFAULT_SETTINGS.items():
            self.config[section] = values
        self.save_settings()
        logger.info("Settings reset to defaults")
        return True

    def get_setting(self, section: str, key: str, default: Any = None) -> Any:
        try:
            return self.config.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return default

    def get_bool_setting(self, section: str, key: str, default: bool = False) -> bool:
        """
        Get a boolean setting value.

        Example:
            >>> mgr = SettingsManager()
            >>> mgr.get_bool_setting('SAFETY', 'backup_before_write')
            True
        """
        try:
            return self.config.getboolean(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def set_setting(self, section: str, key: str, value: str) -> bool:
        if section not in self.config:
            self.config.add_section(section)
        self.config[section][key] = str(value)
        return self.save_settings()

    def _has_missing_settings(self) -> bool:
        """Check if any default settings are missing from current config."""
        for section, defaults in DEFAULT_SETTINGS.items():
            if section not in self.config:
                return True
            for key in defaults.keys():
                if key not in self.config[section]:
                    return True
        return False

    # Typed property accessors for common settings
    @property
    def binary_name(self) -> str:
        return self.get_setting('PATHS', 'binary_name', 'hyperdemon.exe')

    @property
    def catalog_file(self) -> Path:
        return Path(self.get_setting('PATHS', 'catalog_file', 'practice_patches.json'))

    @property
    def backups_directory(self) -> Path:
        return Path(self.get_setting('PATHS', 'backups_directory', 'backups'))

    @property
    def logs_directory(self) -> Path:
        return Path(self.get_setting('PATHS', 'logs_directory', 'logs'))

    @property
    def backup_before_write(self) -> bool:
        return self.get_bool_setting('SAFETY', 'backup_before_write', True)

    @property
    def reject_overlaps(self) -> bool:
        return self.get_bool_setting('CATALOG', 'reject_overlaps', False)

    @property
    def log_level(self) -> str:
        return self.get_setting('LOGGING', 'log_level', 'WARNING').upper()

    @property
    def enable_operation_log(self) -> bool:
        return self.get_bool_setting('LOGGING', 'enable_operation_log', True)

    @property
    def enable_colors(self) -> bool:
        return self.get_bool_setting('UI', 'enable_colors', True)

    @property
    def pause_on_exit(self) -> bool:
        return self.get_bool_setting('UI', 'pause_on_exit', True)


# Global settings manager instance
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager(config_file: Optional[Path] = None) -> SettingsManager:
    """
    Get the global settings manager instance (singleton pattern).

    Passing a config_file different from the current one replaces the
    instance.
    """
    global _settings_manager
    if _settings_manager is None or (
        config_file is not None and Path(config_file) != _settings_manager.config_file
    ):
        _settings_manager = SettingsManager(config_file)
    return _settings_manager


def reset_settings_manager() -> None:
    """Drop the global instance (used by tests)."""
    global _settings_manager
    _settings_manager = None
