from __future__ import annotations

from rdflib import Namespace

from sparqlgen.closure import compute_closures
from sparqlgen.expressions import NamedClass, ObjectHasSelf, ObjectRestriction, RestrictionKind
from sparqlgen.model import KnowledgeGraph

EX = Namespace("http://example.org/onto#")


def _subclass(graph: KnowledgeGraph, child, parent) -> None:
    graph.get_class(child).direct_superclasses.add(parent)
    graph.get_class(parent).direct_subclasses.add(child)


def test_anonymous_restrictions_are_inherited_through_a_diamond():
    graph = KnowledgeGraph()
    for name in ("A", "B", "C", "D"):
        graph.add_class(EX[name])
    _subclass(graph, EX.B, EX.A)
    _subclass(graph, EX.C, EX.A)
    _subclass(graph, EX.D, EX.B)
    _subclass(graph, EX.D, EX.C)
    on_a = ObjectHasSelf(EX.p)
    on_b = ObjectRestriction(RestrictionKind.SOME, EX.q, NamedClass(EX.A))
    graph.get_class(EX.A).direct_anonymous_superclasses.add(on_a)
    graph.get_class(EX.B).direct_anonymous_superclasses.add(on_b)

    compute_closures(graph)

    assert graph.get_class(EX.D).anonymous_superclasses == {on_a, on_b}
    assert graph.get_class(EX.C).anonymous_superclasses == {on_a}
    assert graph.get_class(EX.A).anonymous_superclasses == {on_a}


def test_cyclic_hierarchy_terminates():
    graph = KnowledgeGraph()
    graph.add_class(EX.A)
    graph.add_class(EX.B)
    _subclass(graph, EX.A, EX.B)
    _subclass(graph, EX.B, EX.A)
    restriction = ObjectHasSelf(EX.p)
    graph.get_class(EX.B).direct_anonymous_superclasses.add(restriction)

    compute_closures(graph)

    assert restriction in graph.get_class(EX.B).anonymous_superclasses


def test_disjoint_properties_follow_superproperties_and_subproperties():
    graph = KnowledgeGraph()
    p, q, r, s = (graph.add_object_property(EX[name]) for name in ("p", "q", "r", "s"))
    p.direct_superproperties.add(EX.q)
    p.superproperties.add(EX.q)
    q.direct_subproperties.add(EX.p)
    q.subproperties.add(EX.p)
    q.direct_disjoint_properties.add(EX.r)
    r.direct_subproperties.add(EX.s)
    r.subproperties.add(EX.s)
    s.superproperties.add(EX.r)

    compute_closures(graph)

    assert q.disjoint_properties == {EX.r, EX.s}
    assert p.disjoint_properties == {EX.r, EX.s}


def test_equivalent_properties_share_disjoint_and_inverse_sets():
    graph = KnowledgeGraph()
    p, q, r, i = (graph.add_object_property(EX[name]) for name in ("p", "q", "r", "i"))
    p.equivalent_properties.add(EX.q)
    q.equivalent_properties.add(EX.p)
    p.direct_disjoint_properties.add(EX.r)
    p.inverse_properties.add(EX.i)
    i.inverse_properties.add(EX.p)

    compute_closures(graph)

    assert q.disjoint_properties == {EX.r}
    assert q.inverse_properties == {EX.i}
    assert p.inverse_properties == {EX.i}


def test_relevant_properties_do_not_depend_on_processing_order():
    graph = KnowledgeGraph()
    a, b, c, d = (graph.add_data_property(EX[name]) for name in ("a", "b", "c", "d"))
    a.subproperties.add(EX.b)
    a.direct_subproperties.add(EX.b)
    b.superproperties.add(EX.a)
    b.direct_superproperties.add(EX.a)
    b.direct_disjoint_properties.add(EX.c)
    c.direct_disjoint_properties.add(EX.b)

    compute_closures(graph)

    assert a.relevant_properties == (EX.a, EX.b, EX.c)
    assert c.relevant_properties == (EX.a, EX.b, EX.c)
    assert d.relevant_properties == (EX.d,)
