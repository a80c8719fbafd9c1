#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Exception types raised by SPARQLGen.

Unsupported ontology constructs are not errors: generators log them and
skip the contribution. The types below abort the current call.
"""

from __future__ import annotations


class SparqlGenError(Exception):
    """Base class for all SPARQLGen errors."""


class InvalidArgumentError(SparqlGenError, ValueError):
    """A required input of a generation call is missing."""


class InvalidStateError(SparqlGenError, RuntimeError):
    """A resolved object-property target is neither a named individual nor a variable."""


class ConfigurationError(SparqlGenError, ValueError):
    """Probabilities or other settings are invalid; raised before generation starts."""


class OntologyLoadError(SparqlGenError):
    """The ontology or one of its imports could not be loaded."""
