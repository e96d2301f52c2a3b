import os

import yaml

from recgrid.settings import LocalSettings, rotate_backups


def test_defaults(settings):
    assert settings.sort_rows is True
    assert settings.show_identity is False
    assert settings.last_root is None
    assert settings.column_widths("Item") == {}
    assert settings.get_setting("a.b.c", 3) == 3


def test_set_and_get(settings):
    settings.set_setting("a.b", 1)
    settings["a.c"] = [1, 2]

    assert settings.get_setting("a.b") == 1
    assert settings["a.b"] == 1
    assert list(settings["a.c"]) == [1, 2]
    assert settings.get_setting("a.b.x", "none") == "none"


def test_values_are_saved(settings, tmp_path):
    settings.set_setting("recgrid.grid.sort_rows", False)

    with open(settings.settings_file(), "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    assert data == {"recgrid": {"grid": {"sort_rows": False}}}

    again = LocalSettings(config_dir=settings.config_dir, debounce=0)
    assert again.sort_rows is False


def test_column_widths(settings):
    settings.set_column_width("Item", "damage", 120.0)
    settings.set_column_width("Item", "__name__", 80)
    settings.set_column_width("HealthPotion", "damage", 10)

    assert settings.column_widths("Item") == {"damage": 120, "__name__": 80}

    again = LocalSettings(config_dir=settings.config_dir, debounce=0)
    assert again.column_widths("HealthPotion") == {"damage": 10}


def test_last_root(settings):
    settings.last_root = "/data/records"
    assert settings.last_root == "/data/records"


def test_read_only(settings):
    settings.set_read_only(True)
    settings.set_setting("x", 1)
    assert settings["x"] == 1
    assert not os.path.exists(settings.settings_file())

    settings.set_read_only(False)
    settings.set_setting("x", 2)
    assert os.path.exists(settings.settings_file())


def test_debounced_save_and_flush(tmp_path):
    settings = LocalSettings(config_dir=str(tmp_path), debounce=60)
    settings.set_setting("x", 1)
    assert not os.path.exists(settings.settings_file())

    settings.flush()

    assert os.path.exists(settings.settings_file())
    assert settings._save_timer is None


def test_unreadable_file(tmp_path):
    with open(tmp_path / "settings.yaml", "w", encoding="utf-8") as f:
        f.write("just a string")
    settings = LocalSettings(config_dir=str(tmp_path), debounce=0)
    assert settings.get_setting("x") is None


class TestRotateBackups:
    def test_missing_file(self, tmp_path):
        assert rotate_backups(str(tmp_path / "s.yaml")) is False

    def test_rotation(self, tmp_path):
        path = tmp_path / "s.yaml"
        for i in range(4):
            path.write_text(f"v: {i}\n", encoding="utf-8")
            assert rotate_backups(str(path), max_backups=2) is True

        assert (tmp_path / "s.backup-1.yaml").read_text(
            encoding="utf-8"
        ) == "v: 3\n"
        assert (tmp_path / "s.backup-2.yaml").read_text(
            encoding="utf-8"
        ) == "v: 2\n"
        assert not (tmp_path / "s.backup-3.yaml").exists()
