"""
@brief Serialize flextop-init runs for the same app.
@info Two launches of the same app at once would both try to relink and migrate
the applications folder. The lock is an flock on a file in the app's runtime
folder, so the kernel drops it when the holder exits, however it exits.
"""


from errno import EAGAIN, EWOULDBLOCK
from fcntl import LOCK_EX, LOCK_NB, flock
from os import O_CREAT, O_RDWR, close, open as os_open
from pathlib import Path

from inotify_simple import INotify, flags

from shared import FlextopError, log, mkdir_exists_ok, runtime


def lock_path(info):
    return Path(runtime(), "app", info.app, ".flextop-lock")


def try_lock(fd):
    try:
        flock(fd, LOCK_EX | LOCK_NB)
        return True
    except OSError as e:
        if e.errno in (EAGAIN, EWOULDBLOCK):
            return False
        raise


def wait(fd, lock_file):
    """
    @brief Block until we hold the lock.
    @info The holder keeps the file open for writing, so its exit shows up as a
    CLOSE_WRITE event. The read timeout covers a holder that unlocks without
    closing, or whose descriptor was inherited by a child that exits later.
    """

    inotify = INotify()
    try:
        wd = inotify.add_watch(str(lock_file), flags.CLOSE_WRITE)
        while not try_lock(fd):
            for src, _, _, _ in inotify.read(timeout=1000):
                if src == wd:
                    log("Lock file closed, retrying")
    finally:
        inotify.close()


def acquire(info):
    """
    @brief Take the lock for this app, waiting as long as it takes.
    @param info: The FlatpakInfo of the app.
    @returns The locked file descriptor. Keep it open for as long as the lock is needed.
    """

    lock_file = lock_path(info)
    mkdir_exists_ok(lock_file.parent)

    try:
        fd = os_open(lock_file, O_CREAT | O_RDWR, 0o600)
    except OSError as e:
        raise FlextopError(f"Failed to open lock: {e.strerror or e}") from e

    try:
        if not try_lock(fd):
            log("Waiting for lock:", lock_file)
            wait(fd, lock_file)
    except OSError as e:
        close(fd)
        raise FlextopError(f"Failed to set lock: {e.strerror or e}") from e

    log("Acquired lock:", lock_file)
    return fd
