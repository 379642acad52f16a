"""devlock - resolve versioned packages into lockable references

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys

import requests

from constants import ExitCodes
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import apply_cli_overrides, apply_env_overrides, apply_file_config, build_strategy
from lock.errors import MissingVersionError, ResolutionError
from lock.resolve import PackageResolver
from lock.schema import SchemaError, validate_package

logger = logging.getLogger(__name__)


def _setup_logging(args) -> None:
    """Configure logging based on CLI arguments."""
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ["DEVLOCK_LOG_LEVEL"] = str(args.LOG_LEVEL).upper()
    configure_logging()
    if getattr(args, "QUIET", False):
        logging.getLogger().setLevel(logging.CRITICAL)

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        ))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def export_json(records, path):
    """Exports resolved package records to a JSON file.

    Args:
        records (dict): Mapping of package spec to lock record.
        path (str): File path to export the JSON.
    """
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump({"packages": records}, file, indent=2)
            file.write("\n")
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def resolve_packages(resolver, specs):
    """Resolve each spec and return ``{spec: lock record}``.

    Stops at the first failure by exiting with the matching code.
    """
    records = {}
    for spec in specs:
        try:
            package = resolver.resolve(spec)
            record = package.to_dict()
            validate_package(record)
        except SchemaError as exc:
            logging.error("Resolved record for %s is invalid: %s", spec, exc)
            sys.exit(ExitCodes.RESOLUTION_ERROR.value)
        except (MissingVersionError, ValueError) as exc:
            # MissingVersionError and malformed runx refs are user errors.
            logging.error("%s", exc)
            sys.exit(ExitCodes.USER_ERROR.value)
        except ResolutionError as exc:
            logging.error("Failed to resolve %s: %s", spec, exc)
            sys.exit(ExitCodes.RESOLUTION_ERROR.value)
        except (RuntimeError, requests.RequestException) as exc:
            # SearchError and unexpected GitHub responses are RuntimeErrors.
            logging.error("Connection error while resolving %s: %s", spec, exc)
            sys.exit(ExitCodes.CONNECTION_ERROR.value)
        records[spec] = record
        logging.info("Resolved %s -> %s", spec, record["resolved"])
    return records


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    apply_file_config(getattr(args, "CONFIG", None))
    apply_env_overrides()
    apply_cli_overrides(args)
    strategy = build_strategy()

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="main",
                protocol=strategy.protocol.value,
                fetch_store_paths=strategy.fetch_store_paths,
                count=len(args.PACKAGES),
            )
        )

    resolver = PackageResolver(strategy=strategy)
    records = resolve_packages(resolver, args.PACKAGES)

    if args.OUTPUT:
        export_json(records, args.OUTPUT)
    elif not args.QUIET:
        print(json.dumps({"packages": records}, indent=2))
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
