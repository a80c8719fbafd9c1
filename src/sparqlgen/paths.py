#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import logging
import re
import unicodedata

logger = logging.getLogger(__name__)

# Default root directory for all SPARQLGen output.
OUTPUT_ROOT: Path = Path("output_sparqlgen")


# ========================================================================== #
# PUBLIC API                                                                 #
# ========================================================================== #


def resolve_project_folder(project_name: str, *, output_root: Path | None = None) -> Path:
    """Resolve and create the output folder of a generation run.

    Args:
        project_name: Either "auto", which yields a fresh timestamped folder,
            or a user-defined name, slugified before use.
        output_root: Base directory for all runs. When None, OUTPUT_ROOT
            under the current working directory is used.

    Returns:
        The resolved project folder.

    Raises:
        ValueError: If `project_name` slugifies to an empty string.
    """
    base_root = output_root or OUTPUT_ROOT

    if project_name == "auto":
        run_name = _generate_timestamp_run_name()
    else:
        run_name = slugify_project_name(project_name)
        if not run_name:
            message = f"Project name {project_name!r} contains no usable characters."
            raise ValueError(message)

    return _initialize_folder(base_root, run_name)


def slugify_project_name(name: str) -> str:
    """Convert an arbitrary user string into a filesystem-safe project name.

    Accents are stripped, everything is lowercased, and each run of
    non-alphanumeric characters becomes a single underscore.
    """
    name = unicodedata.normalize("NFKD", name)
    name = "".join(ch for ch in name if not unicodedata.combining(ch))
    name = re.sub(r"[^a-z0-9]+", "_", name.lower())
    return name.strip("_")


# ========================================================================== #
# INTERNAL HELPERS (private)                                                 #
# ========================================================================== #


def _generate_timestamp_run_name() -> str:
    """Return a sortable timestamp run name, e.g., '2025-12-05_13-22-44'."""
    return datetime.now(tz=timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")


def _initialize_folder(output_root: Path, folder_name: str) -> Path:
    directory = (output_root / folder_name).resolve()
    existed_before = directory.exists()
    directory.mkdir(parents=True, exist_ok=True)

    if existed_before:
        logger.info("Reused output folder at: %s", directory)
    else:
        logger.info("Created output folder at: %s", directory)

    return directory
