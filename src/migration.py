"""
@brief One-time rename of old desktop files into the prefixed form.
@info Older releases wrote desktop files under their original names, which could
collide with those of other apps sharing the host folder. Files are only renamed
if they are tagged as ours, and a stamp file records that the migration is done.
Nothing is stamped if any file fails, so the next run starts over.
"""


from os import rename, scandir
from pathlib import Path

from desktop_file import DESKTOP_GROUP, KEY_PART_OF, DesktopFile
from shared import FlextopError, flextop_data, log, os_error


MIGRATION_STAMP = "prefixed-app-ids"


def migrate_prefix_desktop_file(info, path):
    """
    @brief Rename a single desktop file, if it's ours and not prefixed yet.
    @returns The new path, or None if the file was left alone.
    """

    path = Path(path)
    if path.name.startswith(info.desktop_file_prefix):
        return None

    key_file = DesktopFile.load(path)
    if key_file.get(DESKTOP_GROUP, KEY_PART_OF) != info.app:
        # Not our file to worry about.
        return None

    log("Migrate file:", path)
    prefixed = path.with_name(info.add_desktop_file_prefix(path.name))
    if prefixed.exists() or prefixed.is_symlink():
        raise FlextopError(f"Migrating desktop file {path}: {prefixed} already exists", "exists")
    try:
        rename(path, prefixed)
    except OSError as e:
        raise os_error(f"Migrating desktop file {path}", e) from e
    return prefixed


def migrate_prefix_all_desktop_files(info, priv):
    """
    @brief Migrate every desktop file in the private applications folder.
    @param info: The FlatpakInfo of the app.
    @param priv: The private DataDir, whose applications folder is already linked to the host.
    @returns The list of renamed files. Empty if the migration already ran.
    """

    stamp = flextop_data() / MIGRATION_STAMP
    if stamp.exists():
        log("Already migrated")
        return []

    migrated = []
    try:
        entries = sorted(scandir(priv.applications), key=lambda entry: entry.name)
    except FileNotFoundError:
        entries = []
    except OSError as e:
        raise os_error("Enumerating files to migrate", e) from e

    for entry in entries:
        if entry.is_file(follow_symlinks=False) and entry.name.endswith(".desktop"):
            new = migrate_prefix_desktop_file(info, entry.path)
            if new is not None:
                migrated.append(new)

    try:
        stamp.write_text("")
    except OSError as e:
        raise os_error("Setting migration stamp", e) from e
    return migrated
