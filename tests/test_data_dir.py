from errno import EACCES, ENOENT
from pathlib import Path

import pytest

import data_dir
from data_dir import DataDir
from shared import FlextopError


def test_new_host(environment, info):
    host = data_dir.new_host(info)
    share = environment / ".local" / "share"
    assert host.root == share
    assert host.applications == share / "applications" / "flatpak-com-example-App"
    assert host.icons == share / "icons"


def test_new_private(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    priv = data_dir.new_private()
    assert priv.applications == tmp_path / "data" / "applications"
    assert priv.icons == tmp_path / "data" / "icons"


def test_same_device_as_root_is_not_usable(tmp_path):
    share = tmp_path / "share"
    share.mkdir()
    target = DataDir(share, share / "applications" / "flatpak-x", share / "icons")
    assert not data_dir.data_dir_test_access(target, root=str(tmp_path))


def fake_filesystem(existing):
    """
    A query_path_info over a made up set of (device, writable) paths.
    """

    def query(path):
        path = str(path)
        if path in existing:
            return existing[path]
        raise FileNotFoundError(ENOENT, "No such file or directory", path)
    return query


def test_writable_other_device_is_usable(monkeypatch):
    monkeypatch.setattr(data_dir, "query_path_info", fake_filesystem({
        "/": (1, False),
        "/host/share": (2, True),
    }))
    target = data_dir.new_for_root("/host/share")
    assert data_dir.data_dir_test_access(target)


def test_read_only_other_device_is_not_usable(monkeypatch):
    monkeypatch.setattr(data_dir, "query_path_info", fake_filesystem({
        "/": (1, False),
        "/host/share": (2, False),
    }))
    assert not data_dir.data_dir_test_access(data_dir.new_for_root("/host/share"))


def test_root_device_is_not_usable_even_if_writable(monkeypatch):
    monkeypatch.setattr(data_dir, "query_path_info", fake_filesystem({
        "/": (1, True),
        "/host/share": (1, True),
    }))
    assert not data_dir.data_dir_test_access(data_dir.new_for_root("/host/share"))


def test_unexpected_errors_warn_and_keep_walking(monkeypatch, capsys):
    existing = fake_filesystem({"/": (1, False), "/host": (2, True)})

    def query(path):
        if str(path) == "/host/share":
            raise PermissionError(EACCES, "Permission denied", str(path))
        return existing(path)

    monkeypatch.setattr(data_dir, "query_path_info", query)
    assert data_dir.get_lowest_existing_parent_info(Path("/host/share/icons")) == (2, True)
    assert "Unexpected error from querying /host/share" in capsys.readouterr().err


def test_nothing_found_is_fatal(monkeypatch):
    monkeypatch.setattr(data_dir, "query_path_info", fake_filesystem({}))
    with pytest.raises(FlextopError) as e:
        data_dir.get_lowest_existing_parent_info(Path("/host/share"))
    assert e.value.kind == "fatal"


def test_query_path_info(tmp_path):
    device, writable = data_dir.query_path_info(tmp_path)
    assert device == tmp_path.stat().st_dev
    assert writable
