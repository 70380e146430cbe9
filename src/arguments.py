"""
@brief This file contains the ArgumentParser logic for the flextop tools.
"""


import sys
from argparse import ArgumentParser
from pathlib import Path

from shared import config


def common(parser):
    """
    @brief Add the options that every tool shares.
    """

    # The Flatpak info file. Flatpak always puts it at the root, but it can be moved for testing.
    parser.add_argument("--info", action="store", default="/.flatpak-info", help="The Flatpak info file")

    # The program Exec lines are rewritten to run.
    parser.add_argument("--launcher", action="store", default="flatpak", help="The launcher that installed desktop entries run through")

    # Chromium embeds its wrapper's path, which it gets from the environment, into desktop shortcuts.
    parser.add_argument("--launcher-env", action="store", default="CHROME_WRAPPER", help="The environment variable holding the in-sandbox launcher path")

    # Be verbose in logging.
    parser.add_argument("--verbose", action="store_true", default=False, help="Verbose logging")


def init_parser():
    parser = ArgumentParser(prog="flextop-init", description="Link the app's applications folder to the host")
    common(parser)
    return parser


def desktop_menu_parser():
    parser = ArgumentParser(prog="xdg-desktop-menu", description="Install desktop entries onto the host")
    parser.add_argument("command", help="install or uninstall")

    # Only user mode makes sense in a sandbox, so the value is ignored.
    parser.add_argument("--mode", action="store", default="user", help="Ignored, always user")
    parser.add_argument("files", nargs="+", help="Desktop entries to install, or the names of entries to uninstall")
    common(parser)
    return parser


def icon_resource_parser():
    parser = ArgumentParser(prog="xdg-icon-resource", description="Install icons onto the host")
    parser.add_argument("command", choices=["install"], help="Only install is supported")
    parser.add_argument("--mode", action="store", default="user", help="Ignored, always user")
    parser.add_argument("--size", action="store", required=True, help="The icon size, in pixels")
    parser.add_argument("file", help="The icon to install")
    parser.add_argument("name", help="The name to install the icon as")
    common(parser)
    return parser


def parse(parser, argv=None):
    """
    @brief Parse the command line arguments, then fill in the config file.
    @param parser: One of the parsers above.
    @param argv: The arguments, defaulting to sys.argv.
    @returns The parsed arguments, as a dictionary.
    """

    # xdg-utils callers pass options we have no use for, like --novendor.
    # Usage errors exit with 1, like every other failure.
    try:
        arguments, unknown = parser.parse_known_args(argv)
    except SystemExit as e:
        if e.code:
            raise SystemExit(1) from e
        raise
    arguments.unknown = unknown
    arguments = vars(arguments)

    if argv is None:
        argv = sys.argv[1:]

    # flextop.conf contains keypairs separated by =.
    # The key is a case insensitive matching of the options above.
    # Only options can be set there, not positionals.
    options = {action.dest for action in parser._actions if action.option_strings}

    conf = Path(config(), "flextop", "flextop.conf")
    if conf.is_file():
        for line in conf.read_text().splitlines():
            if not line.strip() or line.startswith("#"):
                continue
            try:
                key, value = line.split("=", 1)
                key = key.strip().lower().replace("-", "_")
                value = value.strip()
                option = f"--{key.replace('_', '-')}"
                if key in options and not any(arg == option or arg.startswith(option + "=") for arg in argv):
                    if value == "True" or value == "False":
                        value = value == "True"
                    arguments[key] = value
                else:
                    print("Unrecognized or overwritten option:", key)
            except ValueError as e:
                print("Invalid configuration:", line, e)
    return arguments
