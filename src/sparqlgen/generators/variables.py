#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Variable allocation.

Class variables are named after the class and numbered by the class's
own counter (`Person_0`, `Person_1`, ...). Variables for anonymous class
expressions (`Var0`, ...) and for data values (`DataValue0`, ...) use
the two counters held by the allocator, which the driver owns and resets
between queries.
"""

from __future__ import annotations

import re

from rdflib import Variable

from sparqlgen.model import ClassNode

_INVALID_VARIABLE_CHARS = re.compile(r"[^0-9A-Za-z_]")


def sanitize_variable_name(name: str) -> str:
    """Replace characters that are not allowed in a SPARQL variable name."""
    return _INVALID_VARIABLE_CHARS.sub("_", name)


class VariableAllocator:
    """Collision-free variable names for one generation run."""

    def __init__(self) -> None:
        self._next_anonymous_index = 0
        self._next_data_value_index = 0

    def __repr__(self) -> str:
        return (
            "VariableAllocator("
            f"next_anonymous_index={self._next_anonymous_index}, "
            f"next_data_value_index={self._next_data_value_index}"
            ")"
        )

    def fresh_class_variable(self, node: ClassNode) -> Variable:
        return Variable(f"{sanitize_variable_name(node.short_name)}_{node.next_variable_index()}")

    def fresh_anonymous_variable(self) -> Variable:
        variable = Variable(f"Var{self._next_anonymous_index}")
        self._next_anonymous_index += 1
        return variable

    def fresh_data_value_variable(self) -> Variable:
        variable = Variable(f"DataValue{self._next_data_value_index}")
        self._next_data_value_index += 1
        return variable

    def reset_counters(self) -> None:
        """Zero the anonymous and data-value counters; class counters are reset per class."""
        self._next_anonymous_index = 0
        self._next_data_value_index = 0
