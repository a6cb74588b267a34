import pytest

from practice_patcher import settings_manager
from practice_patcher.settings_manager import (
    DEFAULT_SETTINGS,
    SettingsError,
    SettingsManager,
    get_settings_manager,
)


def test_new_file_gets_defaults(tmp_path):
    config = tmp_path / "cfg" / "practice_patcher.ini"
    mgr = SettingsManager(config)

    assert config.exists()
    assert mgr.get_current_settings() == DEFAULT_SETTINGS
    assert mgr.binary_name == "hyperdemon.exe"
    assert mgr.backup_before_write is True
    assert mgr.reject_overlaps is False
    assert mgr.log_level == "WARNING"


def test_missing_keys_are_filled_and_saved(tmp_path):
    config = tmp_path / "old.ini"
    config.write_text("[PATHS]\nbinary_name = demon.exe\n", encoding="utf-8")

    mgr = SettingsManager(config)

    assert mgr.binary_name == "demon.exe"
    assert mgr.catalog_file.name == "practice_patches.json"
    assert "[SAFETY]" in config.read_text(encoding="utf-8")


def test_set_setting_persists(tmp_path):
    config = tmp_path / "cfg.ini"
    SettingsManager(config).set_setting("CATALOG", "reject_overlaps", "true")
    assert SettingsManager(config).reject_overlaps is True


def test_bad_boolean_falls_back_to_default(tmp_path):
    config = tmp_path / "cfg.ini"
    mgr = SettingsManager(config)
    mgr.set_setting("UI", "enable_colors", "sometimes")
    assert mgr.enable_colors is True


def test_unparseable_file_raises_settings_error(tmp_path):
    config = tmp_path / "broken.ini"
    config.write_text("no section header here\n", encoding="utf-8")
    with pytest.raises(SettingsError):
        SettingsManager(config)


def test_global_manager_follows_config_path(tmp_path):
    settings_manager.reset_settings_manager()
    first = get_settings_manager(tmp_path / "a.ini")
    assert get_settings_manager() is first
    second = get_settings_manager(tmp_path / "b.ini")
    assert second is not first
    settings_manager.reset_settings_manager()
