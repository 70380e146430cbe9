#!/bin/python

"""
@brief flextop-init: run once at app startup, before the app can install anything.
"""


from os import close, environ
import sys
from sys import exit

import arguments
import data_dir
import flatpak_info
import invocation_lock
import shared
from migration import migrate_prefix_all_desktop_files
from relink import atomic_relink, is_real_directory, move_aside, query_exists
from shared import FlextopError, log, mkdir_exists_ok, warn
from util import delete_invalid_desktop_files


def setup_applications_folder(info, host, priv):
    """
    @brief Make the private applications folder a link to the host one.
    @info If the private folder is a real directory, something created shortcuts
    before flextop ran. It is moved aside rather than deleted. The migration only
    runs if the private path existed before, since otherwise there's nothing of
    ours to migrate.
    """

    mkdir_exists_ok(host.applications)

    should_migrate = query_exists(priv.applications)
    if should_migrate and is_real_directory(priv.applications):
        move_aside(priv.applications)

    atomic_relink(priv.applications, host.applications)

    if should_migrate:
        for path in migrate_prefix_all_desktop_files(info, priv):
            log("Migrated", path)


def cleanup_desktop(launcher_env):
    launcher_path = environ.get(launcher_env)
    if not launcher_path:
        warn(f"{launcher_env} is not set, not checking desktop files")
        return
    delete_invalid_desktop_files(shared.desktop(), launcher_path)


def main(argv=None):
    args = arguments.parse(arguments.init_parser(), argv)
    shared.verbose = args["verbose"]

    if not shared.ensure_running_inside_flatpak(args["info"]):
        return 1

    try:
        info = flatpak_info.load(args["info"])
    except FlextopError as e:
        print(f"Failed to load flatpak info: {e}", file=sys.stderr)
        return 1

    try:
        lock = invocation_lock.acquire(info)
    except FlextopError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        return setup(info, args)
    finally:
        close(lock)


def setup(info, args):
    host = data_dir.new_host(info)
    priv = data_dir.new_private()

    try:
        setup_applications_folder(info, host, priv)
    except FlextopError as e:
        print(f"Failed to set up applications folder: {e}", file=sys.stderr)
        return 1

    try:
        cleanup_desktop(args["launcher_env"])
    except FlextopError as e:
        print(f"Failed to delete invalid desktop files: {e}", file=sys.stderr)
        return 1
    return 0


def run():
    exit(main())


if __name__ == "__main__":
    run()
