"""Argument parsing functionality for depfetch."""

import argparse
from constants import Constants


def _non_negative_int(value):
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError("must be zero or greater")
    return number


def build_parser():
    """Build the argument parser for the program."""
    parser = argparse.ArgumentParser(
        prog="depfetch",
        description=(
            "depfetch - Download Maven artifacts together with their transitive dependencies"
        ),
        add_help=True,
    )

    parser.add_argument("-f", "--file",
                        dest="INPUT_FILE",
                        help="Read group:artifact:version lines from a file (default: standard input)",
                        action="store",
                        type=str)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT_DIR",
                        help=f"Directory receiving downloaded artifacts (default: {Constants.DEFAULT_LIB_DIR})",
                        action="store",
                        type=str)
    parser.add_argument("--pom-dir",
                        dest="POM_DIR",
                        help=f"Directory receiving copies of fetched POM files (default: {Constants.DEFAULT_POM_DIR})",
                        action="store",
                        type=str)
    parser.add_argument("--base-url",
                        dest="BASE_URL",
                        help=f"Repository root URL (default: {Constants.MAVEN_BASE_URL})",
                        action="store",
                        type=str)
    parser.add_argument("--exclusion-key",
                        dest="EXCLUSION_KEY_MODE",
                        help="How exclusion rules are keyed: versioned, unversioned or legacy (default: versioned)",
                        action="store",
                        type=str.lower,
                        choices=Constants.EXCLUSION_KEY_MODES)
    parser.add_argument("--max-depth",
                        dest="MAX_DEPTH",
                        help="Do not descend more than N levels below a seed coordinate",
                        action="store",
                        type=_non_negative_int)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help=f"HTTP request timeout in seconds (default: {Constants.REQUEST_TIMEOUT})",
                        action="store",
                        type=float)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Only log errors to the console.",
                        action="store_true")
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if any download or POM failed.",
                        action="store_true")
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
