#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Top-level package for SPARQLGen."""

from __future__ import annotations

import logging
import importlib.metadata as importlib_metadata

from sparqlgen.sparqlgen import (
    create_config,
    generate_queries,
)


__all__ = [
    "create_config",
    "generate_queries",
]

try:
    __version__ = importlib_metadata.version("sparqlgen")
except importlib_metadata.PackageNotFoundError:
    __version__ = "unknown"


logging.getLogger(__name__).addHandler(logging.NullHandler())
