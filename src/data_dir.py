"""
@brief The private and host data directories, and whether we can write to the host one.
@info Inside the sandbox, XDG_DATA_HOME is private to the app. The host's
~/.local/share is only reachable if the user granted access to it, and even then it
may be read-only, or be backed by the same filesystem as the sandbox's root, which is
an ephemeral overlay in which writes vanish once the app exits. data_dir_test_access
checks for both cases before anything is installed.
"""


from errno import ENOENT
from os import W_OK, access, lstat
from pathlib import Path
from typing import NamedTuple

from shared import FlextopError, data, home, log, warn


class DataDir(NamedTuple):
    root: Path
    applications: Path
    icons: Path


def new_for_root(root):
    root = Path(root)
    return DataDir(root, root / "applications", root / "icons")


def new_host(info):
    """
    @brief The host's data directory, as seen from the sandbox.
    @info Applications get a folder per app, so that every sandboxed app only
    ever sees its own entries.
    """

    share = new_for_root(Path(home(), ".local", "share"))
    return share._replace(applications=share.applications / f"flatpak-{info.escaped_app}")


def new_private():
    return new_for_root(data())


def query_path_info(path):
    """
    @brief Get the device a path is on, and whether we can write to it.
    @returns (device, writable)
    @throws OSError if the path can't be queried.
    """

    device = lstat(path).st_dev

    # Ownership says nothing about a read-only bind mount, so ask the kernel.
    writable = access(path, W_OK)
    return device, writable


def get_lowest_existing_parent_info(path):
    """
    @brief Walk up from path until something exists, and query that.
    @returns (device, writable) of the first existing path.
    @throws FlextopError with kind "fatal" if even / could not be queried.
    """

    current = Path(path)
    while True:
        try:
            return query_path_info(current)
        except OSError as e:
            if e.errno != ENOENT:
                warn(f"Unexpected error from querying {current} (for {path}): {e.strerror or e}")

        if current == current.parent:
            raise FlextopError(f"Reached {current} but no paths could have info retrieved (for {path})", "fatal")
        current = current.parent


def data_dir_test_access(data_dir, root="/"):
    """
    @brief Check if we can actually install into the data directory.
    @param data_dir: The DataDir to check.
    @param root: The path whose device is the sandbox's own.
    @returns True if both applications and icons are writable and not on the root device.
    """

    try:
        root_device, _ = query_path_info(root)
    except OSError as e:
        warn(f"Could not query {root}: {e.strerror or e}")
        return False
    log("root_device =", root_device)

    for path in (data_dir.applications, data_dir.icons):
        device, writable = get_lowest_existing_parent_info(path)
        if device == root_device or not writable:
            log(f"{path}: device = {device}, writable = {writable}")
            return False
    return True
