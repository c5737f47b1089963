import pytest

from px_forge.errors import GraphError
from px_forge.graph import DependencyGraph


def test_topological_order_puts_dependencies_first() -> None:
    graph = DependencyGraph.from_edges({"map": ["prefab", "shape"], "prefab": ["shape"], "shape": []})
    order = graph.topological_order()
    assert order == ("shape", "prefab", "map")


def test_nodes_only_referenced_are_added() -> None:
    graph = DependencyGraph.from_edges({"a": ["b"]})
    assert graph.nodes == ["a", "b"]
    assert graph.dependencies("b") == []


def test_find_cycle_repeats_start() -> None:
    graph = DependencyGraph.from_edges({"a": ["b"], "b": ["c"], "c": ["a"], "d": []})
    assert graph.find_cycle() == ["a", "b", "c", "a"]
    with pytest.raises(GraphError) as excinfo:
        graph.topological_order()
    assert excinfo.value.path == ("a", "b", "c", "a")


def test_self_reference_is_a_cycle() -> None:
    assert DependencyGraph.from_edges({"a": ["a"]}).find_cycle() == ["a", "a"]


def test_acyclic_graph_has_no_cycle() -> None:
    graph = DependencyGraph.from_edges({"a": ["b", "c"], "b": ["c"], "c": []})
    assert graph.find_cycle() is None


def test_levels() -> None:
    graph = DependencyGraph.from_edges(
        {"map": ["prefab", "grass"], "prefab": ["wall", "door"], "wall": [], "door": [], "grass": []}
    )
    assert graph.levels() == (("door", "grass", "wall"), ("prefab",), ("map",))


def test_dependents_and_downstream() -> None:
    graph = DependencyGraph.from_edges({"map": ["prefab"], "prefab": ["shape"], "other": ["shape"]})
    assert graph.dependents("shape") == ["other", "prefab"]
    assert graph.downstream(["shape"]) == ["map", "other", "prefab"]
    assert graph.downstream(["map"]) == []
