"""
@brief This file contains the desktop entry rewriting used by xdg-desktop-menu, and
the desktop shortcut cleanup used by flextop-init.
@info An app inside the sandbox writes desktop entries that run its own binaries
by their sandbox paths. On the host those have to go through the launcher instead,
so Exec lines become `flatpak run --command=<binary> <app> <args>`.
"""


from os import unlink
from pathlib import Path
from shlex import quote, split

from desktop_file import (
    DESKTOP_GROUP,
    KEY_ACTIONS,
    KEY_EXEC,
    KEY_ICON,
    KEY_PART_OF,
    KEY_TRY_EXEC,
    DesktopFile,
)
from shared import FlextopError, log, mkdir_exists_ok, os_error, warn


# We're tied to .png icons for now.
ICON_SUFFIX = "png"


def edit_exec_key(key_file, section, info, launcher="flatpak"):
    """
    @brief Rewrite the Exec key of a group to run through the launcher.
    @info A missing or empty Exec is skipped with a warning, but one that isn't
    valid shell is an error.
    @returns True if the key was rewritten.
    """

    exec = key_file.get(section, KEY_EXEC)
    if exec is None:
        warn(f"Missing Exec key in {section}")
        return False

    try:
        argv = split(exec)
    except ValueError as e:
        raise FlextopError(f"Getting command of {section}: {e}", "parse") from e

    if not argv:
        warn(f"Empty Exec key in {section}")
        return False

    command = [launcher, "run", f"--command={argv[0]}", info.app] + argv[1:]

    # The launcher itself is left unquoted, GNOME Shell matches on the bare name
    # to hide it from searches.
    command = [command[0]] + [quote(arg) for arg in command[1:]]
    key_file.set(section, KEY_EXEC, " ".join(command))
    return True


def drop_expected_path_suffixes(path, suffixes):
    """
    @brief Remove a list of path components from the end of a path.
    @param path: The path to strip.
    @param suffixes: The components, in the order they appear in the path.
    @returns The stripped path, or None if the path doesn't end with them.
    """

    result = path
    for suffix in reversed(suffixes):
        if len(suffix) + 1 >= len(result):
            return None
        if not result.endswith("/" + suffix):
            return None
        result = result[:-len(suffix) - 1]
    return result


def installation_root(info):
    """
    @brief Find the Flatpak installation an app was installed into.
    @info app_path is <installation>/app/<app>/<arch>/<branch>/<commit>/files.
    """
    return drop_expected_path_suffixes(info.app_path, [
        "app", info.app, info.arch, info.branch, info.app_commit, "files",
    ])


def edit_try_exec(key_file, info):
    root = installation_root(info)
    if root is None:
        warn(f"Could not detect installation root for {info.app}")
        return

    wrapper = Path(root, "exports", "bin", info.app)
    key_file.set(DESKTOP_GROUP, KEY_TRY_EXEC, str(wrapper))


def transform(path, info, launcher="flatpak"):
    """
    @brief Load a desktop entry and rewrite it for the host.
    @returns The rewritten DesktopFile.
    """

    try:
        key_file = DesktopFile.load(path)
    except FlextopError as e:
        raise e.prefix(f"Loading {path}")

    key_file.set(DESKTOP_GROUP, KEY_PART_OF, info.app)
    edit_exec_key(key_file, DESKTOP_GROUP, info, launcher)
    edit_try_exec(key_file, info)

    for action in key_file.get_list(DESKTOP_GROUP, KEY_ACTIONS):
        edit_exec_key(key_file, f"Desktop Action {action}", info, launcher)
    return key_file


def install(paths, info, host, launcher="flatpak"):
    """
    @brief Install desktop entries into the host applications folder.
    @param paths: The desktop entries to install.
    @param info: The FlatpakInfo of the app.
    @param host: The host DataDir.
    @param launcher: The program that Exec lines will run.
    @returns The paths that were written.
    """

    mkdir_exists_ok(host.applications)

    written = []
    for path in paths:
        key_file = transform(path, info, launcher)
        dest = host.applications / info.add_desktop_file_prefix(Path(path).name)
        key_file.save(dest)
        log("Installed", path, "as", dest)
        written.append(dest)
    return written


def find_all_files_for_app_icon(icons, icon):
    """
    @brief Find every installed size of an icon.
    @param icons: The icons folder.
    @param icon: The icon name, without a suffix.
    @returns A list of existing icon files.
    """

    result = []

    # Icon may also be an absolute path or a relative one, which never points into
    # the theme. Only bare names are looked up.
    if not icon or "/" in icon or icon in (".", ".."):
        log("Not removing icon outside the theme:", icon)
        return result

    hicolor = Path(icons, "hicolor")
    try:
        size_dirs = sorted(hicolor.iterdir())
    except OSError as e:
        warn(f"Failed to iterate over icon size dirs: {e.strerror or e}")
        return result

    for size_dir in size_dirs:
        if size_dir.is_symlink() or not size_dir.is_dir():
            continue
        icon_file = size_dir / "apps" / f"{icon}.{ICON_SUFFIX}"
        if icon_file.exists():
            result.append(icon_file)
    return result


def uninstall(filenames, info, host):
    """
    @brief Remove desktop entries installed by install, and their icons.
    @param filenames: The original, unprefixed, names of the entries.
    @param info: The FlatpakInfo of the app.
    @param host: The host DataDir.
    """

    for unprefixed in filenames:
        prefixed = info.add_desktop_file_prefix(unprefixed)
        path = host.applications / prefixed
        if not path.exists():
            raise FlextopError(f"Desktop file {prefixed} does not exist", "not-found")

        key_file = DesktopFile.load(path)
        icon = key_file.get(DESKTOP_GROUP, KEY_ICON)
        if icon is not None:
            for icon_file in find_all_files_for_app_icon(host.icons, icon):
                try:
                    unlink(icon_file)
                    log("Removed icon", icon_file)
                except FileNotFoundError:
                    pass
                except OSError as e:
                    warn(f"Unexpected error removing icon {icon_file}: {e.strerror or e}")

        try:
            unlink(path)
        except OSError as e:
            raise os_error(f"Deleting {path}", e) from e
        log("Uninstalled", path)


def delete_maybe_invalid_desktop_file(path, launcher_path):
    """
    @brief Delete a desktop shortcut that runs the in-sandbox launcher directly.
    @info Such shortcuts were written before the app's entries were rewritten, and
    can never work from the host.
    @returns True if the file was deleted.
    """

    key_file = DesktopFile.load(path)
    exec = key_file.get(DESKTOP_GROUP, KEY_EXEC)
    if exec is None:
        return False

    try:
        argv = split(exec)
    except ValueError as e:
        raise FlextopError(f"Getting command of {path}: {e}", "parse") from e

    if not argv or argv[0] != launcher_path:
        return False

    try:
        unlink(path)
    except OSError as e:
        raise os_error(f"Deleting {path}", e) from e
    log("Deleted invalid desktop file", path)
    return True


def delete_invalid_desktop_files(desktop_dir, launcher_path):
    """
    @brief Check every desktop file on the user's desktop.
    @param desktop_dir: The desktop folder.
    @param launcher_path: The in-sandbox launcher path. The caller decides what a
    missing one means.
    @returns The deleted paths.
    """

    try:
        children = sorted(Path(desktop_dir).iterdir())
    except FileNotFoundError:
        return []
    except OSError as e:
        raise os_error("Enumerating desktop files", e) from e

    deleted = []
    for child in children:
        if child.is_symlink() or not child.is_file() or not child.name.endswith(".desktop"):
            continue
        try:
            if delete_maybe_invalid_desktop_file(child, launcher_path):
                deleted.append(child)
        except FlextopError as e:
            warn(f"Failed to check desktop file: {e}")
    return deleted
