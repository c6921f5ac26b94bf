"""
Tests de GraphStore: integridad referencial y mutaciones atómicas.
"""

import pytest

from process_diagram_core.domain_models import Edge, Node, NodeData, Position
from process_diagram_core.exceptions import DanglingReferenceError, DuplicateIdError, NotFoundError
from process_diagram_core.graph_store import DUPLICATE_OFFSET, GraphStore


def _node(node_id, node_type="task", name=None, x=0, y=0):
    return Node(id=node_id, type=node_type, position=Position(x, y), data=NodeData(name=name or node_id))


@pytest.fixture
def store():
    return GraphStore(
        nodes=[_node("s", "start"), _node("d", "condition"), _node("t", "task"), _node("e", "end")],
        edges=[
            Edge(id="e1", source="s", target="d"),
            Edge(id="e2", source="d", target="t"),
            Edge(id="e3", source="t", target="e"),
        ],
    )


def test_add_node_rejects_duplicate_id(store):
    with pytest.raises(DuplicateIdError):
        store.add_node(_node("t"))
    assert len(store.nodes) == 4


def test_add_edge_with_missing_target_raises_and_leaves_graph_unchanged():
    store = GraphStore(nodes=[_node("d", "condition", "Decide")])

    with pytest.raises(DanglingReferenceError) as exc_info:
        store.add_edge(Edge(id="e1", source="d", target="x"))

    assert exc_info.value.missing == ["x"]
    assert store.edges == []


def test_add_edge_rejects_duplicate_edge_id(store):
    with pytest.raises(DuplicateIdError):
        store.add_edge(Edge(id="e1", source="t", target="e"))


def test_self_loop_and_parallel_edges_are_allowed(store):
    store.add_edge(Edge(id="loop", source="t", target="t"))
    store.add_edge(Edge(id="again", source="t", target="e"))
    assert len(store.outgoing("t")) == 3


def test_remove_node_cascades_to_every_touching_edge(store):
    removed = store.remove_node("d")

    assert sorted(removed) == ["e1", "e2"]
    assert not store.has_node("d")
    assert all(e.source != "d" and e.target != "d" for e in store.edges)
    assert [e.id for e in store.edges] == ["e3"]


def test_remove_missing_node_raises(store):
    with pytest.raises(NotFoundError):
        store.remove_node("nope")


def test_remove_nodes_checks_all_ids_before_deleting(store):
    with pytest.raises(NotFoundError):
        store.remove_nodes(["t", "nope"])
    assert store.has_node("t")
    assert len(store.edges) == 3


def test_update_node_data_merges_partial(store):
    store.update_node_data("t", {"description": "Revisar factura", "durationMinutes": 15})
    store.update_node_data("t", {"responsible": "Contador"})

    node = store.get_node("t")
    assert node.data.name == "t"
    assert node.data.description == "Revisar factura"
    assert node.data.duration_minutes == 15
    assert node.data.responsible == "Contador"


def test_update_node_data_missing_node_raises(store):
    with pytest.raises(NotFoundError):
        store.update_node_data("nope", {"name": "x"})


def test_returned_nodes_are_copies(store):
    node = store.get_node("t")
    node.data.name = "cambiado"
    assert store.get_node("t").data.name == "t"


def test_duplicate_single_node_offsets_position_and_renames(store):
    store.move_node("t", 100, 200)

    nodes, edges = store.duplicate_nodes(["t"])

    assert len(nodes) == 1
    clone = nodes[0]
    assert clone.id != "t"
    assert clone.id.startswith("task_")
    assert clone.data.name == "t (copy)"
    assert (clone.position.x, clone.position.y) == (100 + DUPLICATE_OFFSET, 200 + DUPLICATE_OFFSET)
    # Las conexiones hacia fuera de la selección no se copian
    assert edges == []
    assert store.outgoing(clone.id) == []
    assert store.incoming(clone.id) == []
    assert store.get_node("t").data.name == "t"


def test_duplicate_selection_copies_internal_edges(store):
    nodes, edges = store.duplicate_nodes(["d", "t"])

    new_ids = {n.id for n in nodes}
    d_copy = next(n.id for n in nodes if n.type == "condition")
    t_copy = next(n.id for n in nodes if n.type == "task")
    assert len(edges) == 1
    assert edges[0].id != "e2"
    assert (edges[0].source, edges[0].target) == (d_copy, t_copy)
    assert store.get_edge(edges[0].id).source == d_copy
    # e1 (s -> d) y e3 (t -> e) salen de la selección
    assert all(e.source in new_ids and e.target in new_ids for e in edges)
    assert len(store.edges) == 4


def test_update_edge_merges_data_and_normalizes_type(store):
    store.update_edge("e2", label="Sí", edge_type="conditional_flow", data={"condition": "monto > 100"})
    store.update_edge("e2", data={"priority": 1})

    edge = store.get_edge("e2")
    assert edge.label == "Sí"
    assert edge.type == "conditional"
    assert edge.data == {"condition": "monto > 100", "priority": 1}


def test_replace_all_with_dangling_edge_keeps_previous_graph(store):
    before = store.snapshot()

    with pytest.raises(DanglingReferenceError):
        store.replace_all([_node("a")], [Edge(id="x1", source="a", target="ghost")])

    assert store.snapshot() == before


def test_replace_all_rejects_repeated_node_ids(store):
    with pytest.raises(DuplicateIdError):
        store.replace_all([_node("a"), _node("a")], [])
    assert len(store.nodes) == 4


def test_snapshot_is_isolated_from_later_mutations(store):
    snapshot = store.snapshot()
    store.remove_node("t")
    assert any(n.id == "t" for n in snapshot.nodes)
