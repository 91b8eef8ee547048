import pytest
from unitconvert.graph import Graph, NodeMissingError

def _chain():
    # a -> b -> c -> d, plus a shortcut a -> c
    g = Graph("test")
    a, b, c, d = (g.add_node(v) for v in "abcd")
    g.add_edge(a, b, 1)
    g.add_edge(b, c, 2)
    g.add_edge(c, d, 3)
    g.add_edge(a, c, 9)
    return g

def test_add_node_is_idempotent():
    g = Graph()
    assert g.add_node("m") == 0
    assert g.add_node("km") == 1
    assert g.add_node("m") == 0
    assert len(g) == 2
    assert g.get_node_index("km") == 1
    assert g.get_node_index("mi") is None

def test_add_edge_requires_existing_nodes():
    g = Graph()
    g.add_node("m")
    with pytest.raises(NodeMissingError):
        g.add_edge(0, 5, 1.0)
    with pytest.raises(IndexError):
        g.add_edge(-1, 0, 1.0)

def test_get_edge_weight():
    g = _chain()
    assert g.get_edge_weight(0, 1) == 1
    assert g.get_edge_weight(1, 0) is None
    assert g.get_edge_weight(0, 42) is None

def test_shortest_path_prefers_fewest_hops():
    g = _chain()
    assert g.shortest_path(0, 3) == [("c", 9), ("d", 3)]
    assert g.shortest_path(1, 3) == [("c", 2), ("d", 3)]

def test_shortest_path_same_node_is_empty():
    assert _chain().shortest_path(2, 2) == []

def test_shortest_path_unreachable_is_empty():
    g = _chain()
    assert g.shortest_path(3, 0) == []
    g.add_node("island")
    assert g.shortest_path(0, 4) == []
