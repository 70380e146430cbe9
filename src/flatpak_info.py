"""
@brief The identity of the Flatpak we are running in.
"""


from typing import NamedTuple

from desktop_file import DesktopFile
from shared import FlextopError


# Inserted between the app ID and the original name of every desktop file we
# write to the host.
DESKTOP_FILE_MARKER = "flextop"


# (group, key, field) for every required value of /.flatpak-info
FIELDS = [
    ("Application", "name", "app"),
    ("Instance", "branch", "branch"),
    ("Instance", "arch", "arch"),
    ("Instance", "app-path", "app_path"),
    ("Instance", "app-commit", "app_commit"),
]


class FlatpakInfo(NamedTuple):
    app: str
    branch: str
    arch: str
    app_path: str
    app_commit: str

    @property
    def escaped_app(self):
        # Dashes are legal in app IDs but not in the prefixes we build from them.
        return self.app.replace("-", "_").replace(".", "-")

    @property
    def desktop_file_prefix(self):
        return f"{self.app}.{DESKTOP_FILE_MARKER}."

    def add_desktop_file_prefix(self, unprefixed):
        return self.desktop_file_prefix + unprefixed


def load(path="/.flatpak-info"):
    """
    @brief Load the Flatpak info file.
    @param path: Where the file is.
    @returns A FlatpakInfo
    @throws FlextopError with kind "load" if the file can't be read or is missing a key.
    """

    try:
        key_file = DesktopFile.load(path)
    except FlextopError as e:
        raise FlextopError(e.message, "load") from e

    values = {}
    for group, key, field in FIELDS:
        value = key_file.get(group, key)
        if value is None:
            raise FlextopError(f"Key {key} in group {group} of {path} does not exist", "load")
        values[field] = value
    return FlatpakInfo(**values)
