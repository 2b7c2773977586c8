"""Unit tests for utility functions in the `glyph.utils` module."""

from pathlib import Path

import pytest

from glyph.utils import utils


@pytest.fixture
def fake_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Points `Path.home()` at a temporary directory."""
    monkeypatch.setattr(utils.Path, "home", classmethod(lambda cls: tmp_path))
    return tmp_path


def test_default_editor_section_lists_only_used_settings() -> None:
    """Every default editor key is read by the window, theme or event loop."""
    assert set(utils.DEFAULT_CONFIG["editor"]) == {
        "gutter_width",
        "line_numbers",
        "empty_line_char",
        "background",
        "theme",
        "poll_interval_ms",
    }


def test_deep_merge() -> None:
    """Verify that `deep_merge` correctly merges nested dictionaries.

    This test ensures:
    - Existing values are preserved if not overridden.
    - Nested dictionaries are merged recursively.
    - Conflicting keys are overridden by values from the second dictionary.
    """
    base = {"a": 1, "b": {"x": 10, "y": 20}}
    override = {"b": {"y": 99, "z": 100}, "c": 3}
    result = utils.deep_merge(base, override)
    expected = {"a": 1, "b": {"x": 10, "y": 99, "z": 100}, "c": 3}
    assert result == expected


def test_deep_merge_does_not_mutate_inputs() -> None:
    """The merged result is a new dict; nested defaults stay untouched."""
    base = {"keys": {"normal": {"h": "MoveLeft"}}}
    utils.deep_merge(base, {"keys": {"normal": {"h": "MoveRight"}}})
    assert base["keys"]["normal"]["h"] == "MoveLeft"


def test_hex_to_xterm_valid_color() -> None:
    """Ensure `hex_to_xterm` returns the correct xterm color code for valid hex values.

    Examples tested:
    - White (`#ffffff`) should map to 231.
    - Black (`000000`) should map to 16.
    - Pure red lands in the 6x6x6 cube at 196.
    """
    assert utils.hex_to_xterm("#ffffff") == 231
    assert utils.hex_to_xterm("000000") == 16
    assert utils.hex_to_xterm("#ff0000") == 196


def test_hex_to_xterm_invalid_color() -> None:
    """Verify that `hex_to_xterm` falls back to 255 for invalid hex strings."""
    assert utils.hex_to_xterm("#zzzzzz") == 255
    assert utils.hex_to_xterm("12") == 255


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("red", 1),
        ("Bright_Blue", 12),
        ("default", -1),
        (42, 42),
        ("42", 42),
        (300, None),
        (True, None),
        ("chartreuse-ish", None),
    ],
)
def test_parse_color(value, expected) -> None:
    """Names, indices and hex strings resolve; anything else stays unset."""
    assert utils.parse_color(value) == expected


def test_load_config_merges_user_file(tmp_path: Path) -> None:
    """User settings override defaults; keymaps merge per key."""
    path = tmp_path / "config.toml"
    path.write_text(
        '[editor]\nline_numbers = "relative"\n\n[keys.normal]\nq = "Quit"\n',
        encoding="utf-8",
    )
    config = utils.load_config(path)
    assert config["editor"]["line_numbers"] == "relative"
    assert config["editor"]["gutter_width"] == 6
    assert config["keys"]["normal"]["q"] == "Quit"
    assert config["keys"]["normal"]["h"] == "MoveLeft"


def test_load_config_falls_back_on_broken_toml(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """A config that does not parse is logged and the defaults are used."""
    path = tmp_path / "config.toml"
    path.write_text("[editor\nbroken = ", encoding="utf-8")
    config = utils.load_config(path)
    assert config == utils.DEFAULT_CONFIG
    assert "Could not parse user config" in caplog.text


def test_ensure_user_config_exists_writes_defaults_once(fake_home: Path) -> None:
    """The template is created on first run and left alone afterwards."""
    utils.ensure_user_config_exists()
    path = fake_home / ".config" / "glyph" / "config.toml"
    assert path.is_file()
    path.write_text('[editor]\ntheme = "mine"\n', encoding="utf-8")
    utils.ensure_user_config_exists()
    assert "mine" in path.read_text(encoding="utf-8")


def test_load_config_without_path_uses_user_dir(fake_home: Path) -> None:
    """With no explicit path the user config is created and read."""
    config = utils.load_config()
    assert (fake_home / ".config" / "glyph" / "config.toml").is_file()
    assert config["lsp"]["command"] == ["pylsp"]


def test_load_theme_file(fake_home: Path) -> None:
    """Themes are read by name; missing or empty names give an empty table."""
    themes = fake_home / ".config" / "glyph" / "themes"
    themes.mkdir(parents=True)
    (themes / "night.toml").write_text('[default]\nfg = "#ffffff"\n', encoding="utf-8")
    assert utils.load_theme_file("night") == {"default": {"fg": "#ffffff"}}
    assert utils.load_theme_file("night.toml") == {"default": {"fg": "#ffffff"}}
    assert utils.load_theme_file("absent") == {}
    assert utils.load_theme_file("") == {}
