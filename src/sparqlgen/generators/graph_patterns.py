#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Graph Pattern Generator Module.

================================
This module walks the knowledge graph from a named class and builds the
graph pattern tree of one query. Two mutually recursive entry points do
the work:

- `GraphPatternGenerator.from_named_class(variable, class_iri, is_root)`
  binds a variable to a named class, optionally asserts its type, expands
  one of its anonymous restrictions, and follows one data property and
  one object property of the class, recursing into the related class.

- `GraphPatternGenerator.from_class_expression(variable, expression)`
  turns one anonymous class expression (boolean combination, complement,
  has-value, has-self, quantified object or data restriction) into a
  fragment about `variable`.

Fragments are joined by `PatternCombinator`; data ranges become FILTERs
through `FilterGenerator`.

Randomness and Determinism
--------------------------
Every choice draws from the one NumPy `Generator` held by the
`GenerationContext`, in strict call order. Sets are sampled through
sorted tuples, so a fixed seed and a fixed knowledge graph always give
the same tree.

Termination
-----------
A class is expanded at most once per query: `from_named_class` marks it
visited before recursing, and every recursion site checks the flag
first. Later references to a visited class reuse one of its bound
variables or allocate a fresh, unexpanded one.

Failure Semantics
-----------------
Missing variables or classes raise `InvalidArgumentError`; an
object-property target that is neither a variable nor a named individual
raises `InvalidStateError`. Unsupported shapes are logged and contribute
an empty fragment.
"""

from __future__ import annotations

import logging

from rdflib import RDF, URIRef, Variable

from sparqlgen.errors import InvalidArgumentError, InvalidStateError
from sparqlgen.expressions import (
    ClassExpression,
    DataHasValue,
    DataRestriction,
    NamedClass,
    ObjectComplementOf,
    ObjectHasSelf,
    ObjectHasValue,
    ObjectIntersectionOf,
    ObjectRestriction,
    ObjectUnionOf,
    UnsupportedClassExpression,
    is_top_or_bottom,
    named_object_property,
    sort_key,
)
from sparqlgen.generators.combinator import PatternCombinator
from sparqlgen.generators.context import GenerationContext
from sparqlgen.generators.filters import FilterGenerator
from sparqlgen.generators.probabilities import GenerationProbabilities
from sparqlgen.model import ClassNode
from sparqlgen.patterns import (
    Comparison,
    ComparisonOp,
    GroupPattern,
    TriplePattern,
)
from sparqlgen.utils.sampling import bernoulli, random_element, random_nonempty_subset

logger = logging.getLogger(__name__)

ObjectTarget = Variable | URIRef


class GraphPatternGenerator:
    """Recursive generator of graph patterns over a knowledge graph.

    Notes:
        - The generator mutates the traversal state of the classes it
          visits; the driver must reset the context between queries.
        - This class is not intended for inheritance.
    """

    def __init__(self, context: GenerationContext, probabilities: GenerationProbabilities) -> None:
        self._context = context
        self._probabilities = probabilities
        self._filters = FilterGenerator(context.rng, context.prefixes)
        self._combinator = PatternCombinator(context.rng, probabilities)

    def __repr__(self) -> str:
        return (
            "GraphPatternGenerator("
            f"graph={self._context.graph!r}, "
            f"probabilities={self._probabilities!r}"
            ")"
        )

    # ------------------------------------------------------------------------------------------------ #
    # Named classes                                                                                    #
    # ------------------------------------------------------------------------------------------------ #

    def from_named_class(
        self,
        variable: Variable,
        class_iri: URIRef,
        is_root: bool = False,
    ) -> GroupPattern:
        """Build the fragment binding `variable` to the named class `class_iri`.

        Args:
            variable: Variable standing for instances of the class.
            class_iri: IRI of a class of the knowledge graph.
            is_root: True for the outermost call of a query. The type triple
                is then always emitted and the fragments are joined without
                UNION.

        Returns:
            The combined fragment; empty for owl:Thing and owl:Nothing.

        Raises:
            InvalidArgumentError: If `variable` or `class_iri` is missing.
            KeyError: If `class_iri` is not a class of the knowledge graph.
        """
        if variable is None or class_iri is None:
            message = "variable and class_iri are required."
            raise InvalidArgumentError(message)

        if is_top_or_bottom(NamedClass(class_iri)):
            return GroupPattern()

        context = self._context
        probabilities = self._probabilities
        rng = context.rng
        node = context.graph.get_class(class_iri)
        logger.debug("Selected class: %s", node.iri)

        node.visited = True
        node.variables.append(variable)

        direct = GroupPattern()
        fragments: list[GroupPattern] = []

        if bernoulli(rng, probabilities.class_assertion) or is_root:
            direct.add_triple(self._class_assertion_triple(variable, node))

        if bernoulli(rng, probabilities.class_constraint_selection):
            restriction = random_element(rng, node.anonymous_restrictions())
            if restriction is not None:
                logger.debug("Selected class constraint: %r", restriction)
                fragment = self.from_class_expression(variable, restriction)
                if not fragment.is_empty():
                    fragments.append(fragment)

        if bernoulli(rng, probabilities.data_property_assertion):
            entry = random_element(rng, sorted(node.data_property_ranges.items(), key=_by_key))
            if entry is not None:
                data_property, data_range = entry
                logger.debug("Selected data property %s with range %r", data_property, data_range)
                value_variable = context.variables.fresh_data_value_variable()
                direct.add_triple(self._data_property_triple(variable, data_property, value_variable))
                if bernoulli(rng, probabilities.filter):
                    expression = self._filters.generate(value_variable, data_range)
                    if expression is not None:
                        direct.add_filter(expression)

        if bernoulli(rng, probabilities.object_property_assertion):
            entry = random_element(rng, sorted(node.object_property_ranges.items(), key=_by_key))
            if entry is not None:
                object_property, range_expression = entry
                logger.debug(
                    "Selected object property %s with range %r",
                    object_property,
                    range_expression,
                )
                triple, fragment = self._link_object_property(variable, object_property, range_expression)
                if triple is not None:
                    direct.add_triple(triple)
                if not fragment.is_empty():
                    fragments.append(fragment)

        if not direct.is_empty():
            fragments.insert(0, direct)
        return self._combinator.combine(fragments, allow_union=not is_root)

    def _link_object_property(
        self,
        variable: Variable,
        object_property: URIRef,
        range_expression: ClassExpression,
    ) -> tuple[TriplePattern | None, GroupPattern]:
        """Connect `variable` through `object_property` to an instance of its range."""
        if isinstance(range_expression, NamedClass):
            if is_top_or_bottom(range_expression):
                return None, GroupPattern()
            range_node = self._context.graph.classes.get(range_expression.iri)
            if range_node is None:
                logger.warning("Range %s of %s is not a known class", range_expression.iri, object_property)
                return None, GroupPattern()
            target, fragment = self._resolve_class_target(range_node)
            return self._object_property_triple(variable, object_property, target), fragment

        target = self._context.variables.fresh_anonymous_variable()
        fragment = self.from_class_expression(target, range_expression)
        return self._object_property_triple(variable, object_property, target), fragment

    def _resolve_class_target(self, node: ClassNode) -> tuple[ObjectTarget | None, GroupPattern]:
        """Pick the object of a triple whose range is the named class `node`.

        The object is a named individual of the class (link-to-individual
        probability), or a variable of one of its relevant named classes:
        a fresh, expanded variable when that class is not visited yet,
        otherwise a fresh unexpanded variable (new-variable probability)
        or one of the variables already bound to it.
        """
        context = self._context
        rng = context.rng
        probabilities = self._probabilities

        if bernoulli(rng, probabilities.link_to_individual) and node.individuals:
            return random_element(rng, node.individuals), GroupPattern()

        member_iri = random_element(rng, node.relevant_named_classes(context.graph))
        member = context.graph.get_class(member_iri) if member_iri is not None else node
        if not member.visited:
            target = context.variables.fresh_class_variable(member)
            return target, self.from_named_class(target, member.iri, is_root=False)
        if bernoulli(rng, probabilities.new_variable):
            target = context.variables.fresh_class_variable(member)
            member.variables.append(target)
            return target, GroupPattern()
        return random_element(rng, member.variables), GroupPattern()

    # ------------------------------------------------------------------------------------------------ #
    # Class expressions                                                                                #
    # ------------------------------------------------------------------------------------------------ #

    def from_class_expression(self, variable: Variable, expression: ClassExpression) -> GroupPattern:
        """Build the fragment constraining `variable` by the class expression `expression`.

        Raises:
            InvalidArgumentError: If `variable` or `expression` is missing.
            TypeError: If `expression` is not a class expression variant.
        """
        if variable is None or expression is None:
            message = "variable and expression are required."
            raise InvalidArgumentError(message)

        if is_top_or_bottom(expression):
            return GroupPattern()

        if isinstance(expression, NamedClass):
            return self._from_operand(variable, expression)
        if isinstance(expression, (ObjectIntersectionOf, ObjectUnionOf)):
            return self._from_boolean(variable, expression)
        if isinstance(expression, ObjectComplementOf):
            # Structural passthrough: the operand is generated, not negated.
            return self._from_operand(variable, expression.operand)
        if isinstance(expression, ObjectHasValue):
            return self._from_object_has_value(variable, expression)
        if isinstance(expression, ObjectHasSelf):
            return self._from_object_has_self(variable, expression)
        if isinstance(expression, ObjectRestriction):
            return self._from_object_restriction(variable, expression)
        if isinstance(expression, DataHasValue):
            return self._from_data_has_value(variable, expression)
        if isinstance(expression, DataRestriction):
            return self._from_data_restriction(variable, expression)
        if isinstance(expression, UnsupportedClassExpression):
            logger.warning("Class expression %s is ignored during query generation", expression.description)
            return GroupPattern()

        message = f"Not a class expression: {expression!r}"
        raise TypeError(message)

    def _from_operand(self, variable: Variable, operand: ClassExpression) -> GroupPattern:
        """Generate an operand of a boolean expression or complement about the same variable."""
        if is_top_or_bottom(operand):
            return GroupPattern()
        if not isinstance(operand, NamedClass):
            return self.from_class_expression(variable, operand)

        graph = self._context.graph
        node = graph.classes.get(operand.iri)
        if node is None:
            logger.warning("Class %s is not a known class", operand.iri)
            return GroupPattern()
        member_iri = random_element(self._context.rng, node.relevant_named_classes(graph))
        if member_iri is None or graph.get_class(member_iri).visited:
            return GroupPattern()
        return self.from_named_class(variable, member_iri, is_root=False)

    def _from_boolean(
        self,
        variable: Variable,
        expression: ObjectIntersectionOf | ObjectUnionOf,
    ) -> GroupPattern:
        operands = sorted(set(expression.operands), key=sort_key)
        selected = random_nonempty_subset(self._context.rng, operands)
        fragments: list[GroupPattern] = []
        for operand in selected:
            if is_top_or_bottom(operand):
                continue
            fragment = self._from_operand(variable, operand)
            if not fragment.is_empty():
                fragments.append(fragment)
        return self._combinator.combine(fragments, allow_union=True)

    def _from_object_has_value(self, variable: Variable, expression: ObjectHasValue) -> GroupPattern:
        group = GroupPattern()
        rng = self._context.rng
        if not bernoulli(rng, self._probabilities.object_property_assertion):
            return group

        object_property = named_object_property(expression.property)
        if bernoulli(rng, self._probabilities.link_to_individual):
            if expression.individual is None:
                logger.warning("Anonymous individual of %r is ignored", expression)
                return group
            group.add_triple(self._object_property_triple(variable, object_property, expression.individual))
        else:
            target = self._context.variables.fresh_anonymous_variable()
            group.add_triple(self._object_property_triple(variable, object_property, target))
        return group

    def _from_object_has_self(self, variable: Variable, expression: ObjectHasSelf) -> GroupPattern:
        group = GroupPattern()
        if bernoulli(self._context.rng, self._probabilities.object_property_assertion):
            object_property = named_object_property(expression.property)
            group.add_triple(self._object_property_triple(variable, object_property, variable))
        return group

    def _from_object_restriction(self, variable: Variable, expression: ObjectRestriction) -> GroupPattern:
        group = GroupPattern()
        if not bernoulli(self._context.rng, self._probabilities.object_property_assertion):
            return group

        object_property = named_object_property(expression.property)
        filler = expression.filler
        if is_top_or_bottom(filler):
            return group

        triple, fragment = self._link_object_property(variable, object_property, filler)
        if triple is not None:
            group.add_triple(triple)
        if not fragment.is_empty():
            group.add(fragment)
        return group

    def _from_data_has_value(self, variable: Variable, expression: DataHasValue) -> GroupPattern:
        group = GroupPattern()
        rng = self._context.rng
        if not bernoulli(rng, self._probabilities.data_property_assertion):
            return group

        value_variable = self._context.variables.fresh_data_value_variable()
        group.add_triple(self._data_property_triple(variable, expression.property, value_variable))
        if bernoulli(rng, self._probabilities.filter):
            if expression.value.datatype is not None:
                self._context.prefixes.register_xsd()
            group.add_filter(Comparison(value_variable, ComparisonOp.EQ, expression.value))
        return group

    def _from_data_restriction(self, variable: Variable, expression: DataRestriction) -> GroupPattern:
        group = GroupPattern()
        rng = self._context.rng
        if not bernoulli(rng, self._probabilities.data_property_assertion):
            return group

        value_variable = self._context.variables.fresh_data_value_variable()
        group.add_triple(self._data_property_triple(variable, expression.property, value_variable))
        if bernoulli(rng, self._probabilities.filter):
            filter_expression = self._filters.generate(value_variable, expression.filler)
            if filter_expression is not None:
                group.add_filter(filter_expression)
        return group

    # ------------------------------------------------------------------------------------------------ #
    # Triple patterns                                                                                  #
    # ------------------------------------------------------------------------------------------------ #

    def _class_assertion_triple(self, variable: Variable, node: ClassNode) -> TriplePattern:
        prefixes = self._context.prefixes
        prefixes.register_rdf()
        prefixes.register(node.iri)
        return TriplePattern(variable, RDF.type, node.iri)

    def _data_property_triple(
        self,
        subject: Variable,
        data_property: URIRef,
        value: Variable,
    ) -> TriplePattern:
        if subject is None or data_property is None or value is None:
            message = "subject, data_property and value are required."
            raise InvalidArgumentError(message)

        context = self._context
        node = context.graph.data_properties.get(data_property)
        candidates = node.relevant_properties if node is not None else (data_property,)
        predicate = random_element(context.rng, candidates)
        context.prefixes.register(predicate)
        return TriplePattern(subject, predicate, value)

    def _object_property_triple(
        self,
        subject: Variable,
        object_property: URIRef,
        target: ObjectTarget | None,
    ) -> TriplePattern:
        """Emit `subject p target` or, with the inverse-selection probability, `target p subject`.

        `p` is sampled from the relevant properties of `object_property`.
        """
        if subject is None or object_property is None:
            message = "subject and object_property are required."
            raise InvalidArgumentError(message)

        context = self._context
        node = context.graph.object_properties.get(object_property)
        candidates = node.relevant_properties if node is not None else (object_property,)
        predicate = random_element(context.rng, candidates)
        context.prefixes.register(predicate)
        inverse = bernoulli(context.rng, self._probabilities.inverse_object_property_selection)

        if isinstance(target, Variable):
            pass
        elif isinstance(target, URIRef):
            context.prefixes.register(target)
        else:
            message = f"Object {target!r} of {object_property} is neither a named individual nor a variable."
            raise InvalidStateError(message)

        if inverse:
            return TriplePattern(target, predicate, subject)
        return TriplePattern(subject, predicate, target)


def _by_key(item: tuple[URIRef, object]) -> str:
    return str(item[0])
