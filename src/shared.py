"""
@brief Paths, logging and errors shared by every flextop tool.
"""


from errno import EEXIST, ENOENT, ENOTEMPTY
from os import environ
from os.path import expanduser
from pathlib import Path
import sys


# Set by the entry points from the parsed arguments.
verbose = False


class FlextopError(Exception):
    """
    @brief An error with a kind, and a message that accumulates context as it
    travels up through the callers.
    """

    def __init__(self, message, kind="io"):
        super().__init__(message)
        self.kind = kind

    @property
    def message(self):
        return self.args[0]

    def prefix(self, context):
        self.args = (f"{context}: {self.message}",)
        return self


def os_error(context, error):
    """
    @brief Convert an OSError into a FlextopError prefixed with what we were doing.
    @param context: A description of the operation, IE "Rename A -> B"
    @param error: The OSError
    """

    if error.errno == ENOENT:
        kind = "not-found"
    elif error.errno in (EEXIST, ENOTEMPTY):
        kind = "exists"
    else:
        kind = "io"
    return FlextopError(f"{context}: {error.strerror or error}", kind)


def log(*messages):
    """
    @brief Log messages, but only if verbose printing.
    """
    if verbose:
        print(*messages)


def warn(*messages):
    print("Warning:", *messages, file=sys.stderr)


def home():
    # Falls back to the password database, like glib.
    return environ.get("HOME") or expanduser("~")


def data():
    return environ.get("XDG_DATA_HOME") or f"{home()}/.local/share"


def config():
    return environ.get("XDG_CONFIG_HOME") or f"{home()}/.config"


def cache():
    return environ.get("XDG_CACHE_HOME") or f"{home()}/.cache"


def runtime():
    # glib uses the cache folder when there is no runtime folder.
    return environ.get("XDG_RUNTIME_DIR") or cache()


def desktop():
    """
    @brief Find the user's desktop folder.
    @info XDG_DESKTOP_DIR is normally only defined in user-dirs.dirs, but honor
    the environment first.
    """

    if "XDG_DESKTOP_DIR" in environ:
        return Path(environ["XDG_DESKTOP_DIR"])

    dirs = Path(config(), "user-dirs.dirs")
    if dirs.is_file():
        for line in dirs.read_text().splitlines():
            if line.startswith("XDG_DESKTOP_DIR="):
                value = line.split("=", 1)[1].strip().strip('"')
                return Path(value.replace("$HOME", home()))
    return Path(home(), "Desktop")


def mkdir_exists_ok(path):
    try:
        Path(path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise os_error(f"Creating {path}", e) from e


def flextop_data():
    """
    @brief Our own data folder, for state like the migration stamp.
    """
    path = Path(data(), "flextop")
    mkdir_exists_ok(path)
    return path


def ensure_running_inside_flatpak(info_path):
    if not Path(info_path).is_file():
        print("This may only be run inside a Flatpak!", file=sys.stderr)
        return False
    return True
