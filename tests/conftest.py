from pathlib import Path

import pytest

import shared
from flatpak_info import FlatpakInfo


APP = "com.example.App"
APP_PATH = f"/var/lib/flatpak/app/{APP}/x86_64/stable/abc123/files"

INFO_FILE = f"""[Application]
name={APP}
runtime=runtime/org.freedesktop.Platform/x86_64/23.08

[Instance]
branch=stable
arch=x86_64
app-path={APP_PATH}
app-commit=abc123
"""


@pytest.fixture(autouse=True)
def environment(tmp_path, monkeypatch):
    """
    Point every XDG location into the test's temporary folder.
    """

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".var" / "app" / APP / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".var" / "app" / APP / "config"))
    monkeypatch.setenv("XDG_RUNTIME_DIR", str(tmp_path / "run"))
    monkeypatch.setenv("XDG_DESKTOP_DIR", str(home / "Desktop"))
    monkeypatch.delenv("CHROME_WRAPPER", raising=False)
    monkeypatch.setattr(shared, "verbose", False)
    return home


@pytest.fixture
def info():
    return FlatpakInfo(APP, "stable", "x86_64", APP_PATH, "abc123")


@pytest.fixture
def info_file(tmp_path):
    path = tmp_path / ".flatpak-info"
    path.write_text(INFO_FILE)
    return path


def write_entry(path, exec="foo --bar", extra=""):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"[Desktop Entry]\nType=Application\nName=Foo\nExec={exec}\n{extra}")
    return path
