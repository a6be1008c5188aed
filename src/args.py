"""Argument parsing functionality for lockstep."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program.

    Args:
        argv (list, optional): Argument list; defaults to ``sys.argv[1:]``.
    """
    parser = argparse.ArgumentParser(
        prog="lockstep",
        description=(
            "lockstep - Deterministic dependency version resolver"
        ),
        add_help=True,
    )

    source_group = parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("-i", "--index",
                        dest="INDEX",
                        help="Package universe file (YAML or JSON)",
                        action="store", type=str)
    source_group.add_argument("--registry",
                        dest="REGISTRY",
                        nargs="?",
                        const="",
                        help="Resolve against an HTTP JSON index (default URL from config)",
                        action="store", type=str)

    parser.add_argument("-r", "--require",
                        dest="REQUIRE",
                        help="Root requirement as name:constraint, e.g. 'a:>=1.0' (repeatable)",
                        action="append", type=str,
                        default=[])
    parser.add_argument("-f", "--requirements-file",
                        dest="REQUIREMENTS_FILE",
                        help="Load root requirements from a file, one name:constraint per line",
                        action="store", type=str)
    parser.add_argument("-l", "--lock",
                        dest="LOCK",
                        help="Existing lock file (JSON) whose versions are tried first",
                        action="store", type=str)
    parser.add_argument("--prefer",
                        dest="PREFER",
                        help="Version preference when choosing candidates (default: from config, else newest)",
                        action="store", type=str.lower,
                        choices=Constants.SUPPORTED_PREFERENCES)
    parser.add_argument("--max-steps",
                        dest="MAX_STEPS",
                        help="Abort after this many decisions (0 = unbounded)",
                        action="store", type=int)
    parser.add_argument("--root-name",
                        dest="ROOT_NAME",
                        help="Name shown for the root project in explanations",
                        action="store", type=str)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to write the result as JSON",
                        action="store",
                        type=str)
    parser.add_argument("--json",
                        dest="JSON",
                        help="Print the result as JSON instead of text",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)

    return parser.parse_args(argv)
