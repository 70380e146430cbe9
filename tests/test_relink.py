from os import readlink
from threading import Event, Thread

import pytest
from inotify_simple import INotify, flags

from relink import atomic_relink, is_real_directory, move_aside, query_exists
from shared import FlextopError


def test_relink_creates_link(tmp_path):
    target = tmp_path / "host"
    target.mkdir()
    link = tmp_path / "applications"
    atomic_relink(link, target)
    assert readlink(link) == str(target)
    assert not (tmp_path / "applications.tmp").exists()


def test_relink_replaces_link_and_stale_temporary(tmp_path):
    old, new = tmp_path / "old", tmp_path / "new"
    old.mkdir()
    new.mkdir()
    link = tmp_path / "applications"
    link.symlink_to(old)
    (tmp_path / "applications.tmp").symlink_to(tmp_path / "stale")

    atomic_relink(link, new)
    assert readlink(link) == str(new)
    assert not (tmp_path / "applications.tmp").is_symlink()


def test_relink_onto_a_directory_fails(tmp_path):
    link = tmp_path / "applications"
    link.mkdir()
    (link / "foo.desktop").write_text("")
    with pytest.raises(FlextopError) as e:
        atomic_relink(link, tmp_path / "host")
    assert "Overwriting symlink" in str(e.value)
    assert is_real_directory(link)


def test_relink_is_a_single_move(tmp_path):
    old, new = tmp_path / "old", tmp_path / "new"
    old.mkdir()
    new.mkdir()
    link = tmp_path / "applications"
    link.symlink_to(old)

    inotify = INotify()
    try:
        inotify.add_watch(str(tmp_path), flags.CREATE | flags.DELETE | flags.MOVED_FROM | flags.MOVED_TO)
        atomic_relink(link, new)
        events = [
            flags.from_mask(mask)
            for _, mask, _, name in inotify.read(timeout=1000)
            if name == "applications"
        ]
    finally:
        inotify.close()

    # The final name is never removed or created in place, only moved onto.
    assert events == [[flags.MOVED_TO]]


def test_readers_never_see_a_missing_link(tmp_path):
    a, b = tmp_path / "a", tmp_path / "b"
    a.mkdir()
    b.mkdir()
    link = tmp_path / "applications"
    atomic_relink(link, a)

    done = Event()
    seen = []

    def reader():
        while not done.is_set():
            try:
                seen.append(readlink(link))
            except OSError as e:
                seen.append(e)

    thread = Thread(target=reader)
    thread.start()
    try:
        for i in range(200):
            atomic_relink(link, b if i % 2 == 0 else a)
    finally:
        done.set()
        thread.join()

    assert seen
    assert set(seen) <= {str(a), str(b)}


def test_move_aside_takes_first_free_name(tmp_path):
    directory = tmp_path / "applications"
    directory.mkdir()
    (directory / "foo.desktop").write_text("foo")
    for i in range(5):
        (tmp_path / f"applications.{i}").mkdir()

    new = move_aside(directory)
    assert new == tmp_path / "applications.5"
    assert (new / "foo.desktop").read_text() == "foo"
    assert not directory.exists()


def test_move_aside_skips_files_and_links(tmp_path):
    directory = tmp_path / "applications"
    directory.mkdir()
    (tmp_path / "applications.0").write_text("")
    (tmp_path / "applications.1").symlink_to(tmp_path / "nowhere")
    assert move_aside(directory) == tmp_path / "applications.2"


def test_query_exists(tmp_path):
    link = tmp_path / "dangling"
    link.symlink_to(tmp_path / "nowhere")
    assert query_exists(link)
    assert not query_exists(tmp_path / "missing")
    assert not is_real_directory(link)
