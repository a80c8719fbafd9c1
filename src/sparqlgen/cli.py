"""Command-line interface entrypoint for the sparqlgen package."""

from __future__ import annotations

import argparse
import importlib.metadata as importlib_metadata
import logging
from pathlib import Path
import sys

from sparqlgen import create_config, generate_queries
from sparqlgen.errors import SparqlGenError
from sparqlgen.utils.cli import configure_logging, parse_log_level, print_ascii_header

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------------------------ #
# Init                                                                                             #
# ------------------------------------------------------------------------------------------------ #

SCRIPT_USAGE_DESCRIPTION = "Ontology-driven SPARQL Query Generator"

# ------------------------------------------------------------------------------------------------ #
# Argument Parsing                                                                                 #
# ------------------------------------------------------------------------------------------------ #


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the sparqlgen CLI.

    Args:
        argv: Optional list of argument strings to parse instead of sys.argv.

    Returns:
        An argparse.Namespace containing the parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description=SCRIPT_USAGE_DESCRIPTION,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    try:
        dist_version = importlib_metadata.version("sparqlgen")
    except importlib_metadata.PackageNotFoundError:
        dist_version = "unknown"

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"sparqlgen {dist_version}",
        help="Show the sparqlgen version and exit.",
    )
    parser.add_argument(
        "--log",
        type=parse_log_level,
        default=20,  # INFO
        help=(
            "Logging level. "
            "Accepts either names or numeric values: debug (10), info (20), "
            "warning/warn (30), error/err (40), critical/crit (50)."
        ),
    )
    parser.add_argument(
        "-t",
        "--template",
        action="store_true",
        default=None,
        help="Create a config template in the current working directory.",
    )
    parser.add_argument(
        "-e",
        "--extension",
        type=str,
        choices=["json", "yaml", "yml"],
        default="yml",
        help="Config template extension.",
    )
    parser.add_argument(
        "-conf",
        "--config",
        type=str,
        default=None,
        help="Load a given config file.",
    )
    parser.add_argument(
        "-g",
        "--gen",
        type=str,
        choices=["generate"],
        default=None,
        help="Which function to call. Options: generate (extract the ontology and write queries).",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Base directory for generated queries (default: ./output_sparqlgen).",
    )

    return parser.parse_args(argv)


# ------------------------------------------------------------------------------------------------ #
# Main Entrypoint                                                                                  #
# ------------------------------------------------------------------------------------------------ #


def main(argv: list[str] | None = None) -> None:
    """Entry point for the sparqlgen command-line interface."""
    arguments = sys.argv[1:] if argv is None else argv
    # Without arguments, behave like `sparqlgen --help`.
    if not arguments:
        parse_arguments(["-h"])
        return

    args = parse_arguments(arguments)
    configure_logging(args.log)

    if args.template:
        create_config(config_format=args.extension)

    if args.config:
        file_extension = Path(args.config).suffix
        if file_extension.lower() not in (".yml", ".yaml", ".json"):
            print(  # noqa: T201
                "Error: invalid config file extension. Expected .json, .yaml, or .yml.",
                file=sys.stderr,
            )
            sys.exit(1)

    if args.gen == "generate":
        if not args.config:
            print("Error: --gen generate requires --config.", file=sys.stderr)  # noqa: T201
            sys.exit(1)
        print_ascii_header()
        try:
            generate_queries(args.config, output_root=args.output)
        except SparqlGenError as error:
            logger.error("Query generation failed: %s", error)  # noqa: TRY400
            sys.exit(1)


if __name__ == "__main__":
    main()
