"""
@brief Point the private applications folder at the host one.
"""


from errno import EEXIST, ENOTEMPTY
from os import rename, replace, symlink, unlink
from pathlib import Path

from shared import log, os_error


def atomic_relink(link, target):
    """
    @brief Make link a symlink to target, replacing whatever link was.
    @info The new link is created next to the old one and renamed over it. rename
    never follows the symlink and never copies, so anyone looking at link sees
    either the old state or the complete new link.
    @param link: The path to replace.
    @param target: What the link should point to.
    """

    link = Path(link)
    temp = link.with_name(link.name + ".tmp")

    try:
        unlink(temp)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise os_error("Deleting old symlink", e) from e

    try:
        symlink(str(target), temp)
    except OSError as e:
        raise os_error(f"Symlink {target} as {temp}", e) from e

    try:
        replace(temp, link)
    except OSError as e:
        raise os_error("Overwriting symlink", e) from e
    log("Linked", link, "->", target)


def move_aside(directory):
    """
    @brief Rename a directory to the first free name of directory.0, directory.1, ...
    @returns The new path.
    """

    directory = Path(directory)
    i = 0
    while True:
        new = directory.with_name(f"{directory.name}.{i}")
        i += 1

        # rename silently replaces an empty directory, so check first.
        if new.exists() or new.is_symlink():
            continue
        try:
            rename(directory, new)
        except OSError as e:
            if e.errno in (EEXIST, ENOTEMPTY):
                continue
            raise os_error(f"Rename {directory} -> {new}", e) from e

        log("Moved", directory, "to", new)
        return new


def is_real_directory(path):
    return Path(path).is_dir() and not Path(path).is_symlink()


def query_exists(path):
    """
    @brief Whether path exists, without following symlinks.
    """

    try:
        Path(path).lstat()
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        raise os_error(f"query {path}", e) from e
