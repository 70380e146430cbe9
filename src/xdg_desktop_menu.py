#!/bin/python

"""
@brief xdg-desktop-menu: install and uninstall the app's desktop entries on the host.
"""


import sys
from sys import exit

import arguments
import data_dir
import flatpak_info
import shared
import util
from shared import FlextopError


NO_ACCESS = (
    "This Flatpak does not have write access to ~/.local/share/applications"
    " and ~/.local/share/icons, so it cannot install or uninstall desktop entries."
    " Grant access to those two directories and try again."
)


def ensure_host_access(host):
    if not data_dir.data_dir_test_access(host):
        print(NO_ACCESS, file=sys.stderr)
        return False
    return True


def main(argv=None):
    args = arguments.parse(arguments.desktop_menu_parser(), argv)
    shared.verbose = args["verbose"]
    command = args["command"]

    if not shared.ensure_running_inside_flatpak(args["info"]):
        return 1

    try:
        info = flatpak_info.load(args["info"])
    except FlextopError as e:
        print(f"Failed to load flatpak app info: {e}", file=sys.stderr)
        return 1

    host = data_dir.new_host(info)
    files = [file for file in args["files"] + args["unknown"] if file.endswith(".desktop")]

    try:
        if command == "install":
            if not ensure_host_access(host):
                return 1
            util.install(files, info, host, args["launcher"])
        elif command == "uninstall":
            util.uninstall(files, info, host)
        else:
            print(f"Unknown command: {command}", file=sys.stderr)
            return 1
    except FlextopError as e:
        print(f"Failed to {command} file: {e}", file=sys.stderr)
        return 1
    return 0


def run():
    exit(main())


if __name__ == "__main__":
    run()
