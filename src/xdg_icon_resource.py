#!/bin/python

"""
@brief xdg-icon-resource: install the app's icons on the host.
"""


from pathlib import Path
from shutil import copyfile
import sys
from sys import exit

import arguments
import data_dir
import flatpak_info
import shared
from shared import FlextopError, log, mkdir_exists_ok, os_error
from util import ICON_SUFFIX


def install(host, icon_file, icon_name, size):
    """
    @brief Copy an icon into the host's hicolor theme.
    @returns Where the icon was installed.
    """

    dest_dir = Path(host.icons, "hicolor", f"{size}x{size}", "apps")
    mkdir_exists_ok(dest_dir)

    dest = dest_dir / f"{icon_name}.{ICON_SUFFIX}"
    try:
        copyfile(icon_file, dest)
    except OSError as e:
        raise os_error(f"Copying {icon_file} to {dest}", e) from e
    log("Installed icon", dest)
    return dest


def main(argv=None):
    args = arguments.parse(arguments.icon_resource_parser(), argv)
    shared.verbose = args["verbose"]

    try:
        size = int(args["size"])
    except ValueError:
        print(f"Invalid size: {args['size']}", file=sys.stderr)
        return 1

    if not shared.ensure_running_inside_flatpak(args["info"]):
        return 1

    try:
        info = flatpak_info.load(args["info"])
    except FlextopError as e:
        print(f"Failed to load flatpak info: {e}", file=sys.stderr)
        return 1

    host = data_dir.new_host(info)
    try:
        # Chromium runs every xdg-icon-resource command regardless of how the others
        # went, so just fail quietly here instead of telling the user each time.
        if not data_dir.data_dir_test_access(host):
            print("Warning: no host access", file=sys.stderr)
            return 1
        install(host, args["file"], args["name"], size)
    except FlextopError as e:
        print(f"Failed to install icon file: {e}", file=sys.stderr)
        return 1
    return 0


def run():
    exit(main())


if __name__ == "__main__":
    run()
