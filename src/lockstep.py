"""lockstep - deterministic dependency version resolver.

Reads root requirements, resolves them against a universe file or an HTTP
index and prints the selected versions, or an explanation of why no
selection exists.

    Returns:
        int: Exit code
"""
import json
import logging
import sys

import yaml

from constants import ExitCodes, Constants
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import apply_resolver_overrides, load_config
from errors import (
    InternalInconsistency,
    ResolutionAborted,
    ResolutionCancelled,
    SourceUnavailable,
)
from solver import PreferLocked, resolve, preference_from_name
from sources import IndexFileSource, RegistrySource
from versioning.parser import parse_requirement

logger = logging.getLogger(__name__)


def load_pkgs_file(file_name):
    """Loads root requirements from a file.

    Blank lines and lines starting with ``#`` are skipped.

    Args:
        file_name (str): File path containing one ``name:constraint`` per line.

    Raises:
        OSError: If the file cannot be read.

    Returns:
        list: Requirement tokens
    """
    with open(file_name, encoding='utf-8') as file:
        return [
            line.strip() for line in file
            if line.strip() and not line.strip().startswith("#")
        ]


def load_lock_file(file_name):
    """Loads a previous lock as a ``{name: version}`` mapping.

    Accepts either a plain mapping or the JSON this tool writes with ``-o``.
    """
    with open(file_name, encoding='utf-8') as file:
        data = json.load(file)
    if isinstance(data, dict) and isinstance(data.get("solution"), dict):
        data = data["solution"]
    if not isinstance(data, dict):
        raise ValueError(f"{file_name}: expected a mapping of package to version")
    return {str(name): str(version) for name, version in data.items()}


def export_json(result, path):
    """Exports the lock result to a JSON file.

    Args:
        result (LockResult): Outcome of the run.
        path (str): File path to export the JSON.
    """
    with open(path, 'w', encoding='utf-8') as file:
        json.dump(result.to_dict(), file, ensure_ascii=False, indent=4)
    logging.info("JSON file has been successfully exported at: %s", path)


def _setup_logging(args):
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _build_source(args):
    if args.INDEX:
        return IndexFileSource(args.INDEX)
    return RegistrySource(Constants.REGISTRY_URL)


def _print_result(result, as_json):
    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=4))
        return
    if result.ok:
        for package, version in result.solution.items():
            print(f"{package} {version}")
    else:
        print(str(result.explanation))


def main(argv=None):
    """Main function of the program."""
    # pylint: disable=too-many-return-statements, too-many-branches
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        load_config(args)
        apply_resolver_overrides(args)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logging.error("Invalid configuration: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value

    try:
        source = _build_source(args)
        tokens = list(args.REQUIRE)
        if args.REQUIREMENTS_FILE:
            tokens.extend(load_pkgs_file(args.REQUIREMENTS_FILE))
        if tokens:
            requirements = [parse_requirement(token) for token in tokens]
        else:
            requirements = list(getattr(source, "requirements", []))
        preference = preference_from_name(Constants.DEFAULT_PREFERENCE)
        if args.LOCK:
            preference = PreferLocked(load_lock_file(args.LOCK), fallback=preference)
    except FileNotFoundError as e:
        logging.error("File not found: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        logging.error("Could not read input: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value
    except ValueError as e:
        logging.error("Invalid input: %s, aborting", e)
        return ExitCodes.FILE_ERROR.value

    if not requirements:
        logging.warning("No requirements given; nothing to resolve.")

    try:
        result = resolve(
            requirements,
            source,
            preference=preference,
            root_name=args.ROOT_NAME,
        )
    except SourceUnavailable as e:
        logging.error("%s", e)
        return ExitCodes.CONNECTION_ERROR.value
    except (ResolutionAborted, ResolutionCancelled) as e:
        logging.error("%s", e)
        return ExitCodes.INTERNAL_ERROR.value
    except InternalInconsistency as e:
        logging.critical("Internal solver error: %s", e)
        return ExitCodes.INTERNAL_ERROR.value

    if args.OUTPUT:
        try:
            export_json(result, args.OUTPUT)
        except OSError as e:
            logging.error("JSON file couldn't be written to disk: %s", e)
            return ExitCodes.FILE_ERROR.value

    if not args.QUIET:
        _print_result(result, args.JSON)

    if not result.ok:
        return ExitCodes.UNSATISFIABLE.value
    return ExitCodes.SUCCESS.value


if __name__ == "__main__":
    sys.exit(main())
