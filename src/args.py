"""Argument parsing functionality for devlock."""

import argparse

from constants import ProtocolMode


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="devlock",
        description=(
            "devlock - resolve versioned packages into lockable, platform-qualified references"
        ),
        add_help=True,
    )

    parser.add_argument("-p", "--package",
                        dest="PACKAGES",
                        help="Package to resolve as name@version (repeatable).",
                        action="append", type=str,
                        required=True)
    parser.add_argument("--protocol",
                        dest="PROTOCOL",
                        help="Search protocol to use (default: from config, else legacy)",
                        action="store",
                        type=str.lower,
                        choices=[mode.value for mode in ProtocolMode])
    store_group = parser.add_mutually_exclusive_group()
    store_group.add_argument("--store-paths",
                             dest="STORE_PATHS",
                             help="Look up binary cache store paths per platform (legacy protocol).",
                             action="store_true",
                             default=None)
    store_group.add_argument("--no-store-paths",
                             dest="STORE_PATHS",
                             help="Skip binary cache store path lookup.",
                             action="store_false")
    parser.add_argument("--search-url",
                        dest="SEARCH_URL",
                        help="Base URL of the package search service",
                        action="store",
                        type=str)
    parser.add_argument("--binary-cache",
                        dest="BINARY_CACHE",
                        help="Binary cache URL used for store path lookups",
                        action="store",
                        type=str)
    parser.add_argument("--system",
                        dest="SYSTEM",
                        help="Platform id to prefer, e.g. aarch64-darwin (default: current machine)",
                        action="store",
                        type=str)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output JSON file (default: stdout)",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to YAML configuration file",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")

    return parser.parse_args(argv)
