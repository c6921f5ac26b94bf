import pytest

from process_diagram_core.domain_models import GraphSnapshot, Node, NodeData
from process_diagram_core.history import HistoryStack


def _snap(*node_ids):
    return GraphSnapshot(nodes=tuple(Node(id=i, type="task") for i in node_ids))


def test_undo_at_index_zero_is_noop():
    history = HistoryStack()
    first = _snap("a")
    history.push(first)

    assert history.undo() == first
    assert history.index == 0
    assert not history.can_undo()


def test_redo_at_tip_is_noop():
    history = HistoryStack()
    history.push(_snap("a"))
    history.push(_snap("a", "b"))

    assert history.redo() == _snap("a", "b")
    assert history.index == 1
    assert not history.can_redo()


def test_undo_redo_walk():
    history = HistoryStack()
    for snap in (_snap(), _snap("a"), _snap("a", "b")):
        history.push(snap)

    assert history.undo() == _snap("a")
    assert history.undo() == _snap()
    assert history.redo() == _snap("a")
    assert history.can_undo() and history.can_redo()


def test_push_after_undo_discards_redo_branch():
    history = HistoryStack()
    history.push(_snap())
    history.push(_snap("a"))
    history.push(_snap("a", "b"))
    history.undo()

    history.push(_snap("a", "c"))

    assert len(history) == 3
    assert not history.can_redo()
    assert history.current == _snap("a", "c")
    assert history.undo() == _snap("a")


def test_capacity_drops_oldest():
    history = HistoryStack(capacity=3)
    for i in range(5):
        history.push(_snap(f"n{i}"))

    assert len(history) == 3
    assert history.index == 2
    history.undo()
    assert history.undo() == _snap("n2")
    assert not history.can_undo()


def test_default_capacity_is_fifty():
    history = HistoryStack()
    for i in range(60):
        history.push(_snap(f"n{i}"))
    assert len(history) == 50


def test_reset_keeps_only_initial_state():
    history = HistoryStack()
    history.push(_snap("a"))
    history.push(_snap("b"))

    history.reset(_snap("z"))

    assert len(history) == 1
    assert history.current == _snap("z")
    assert not history.can_undo()


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        HistoryStack(capacity=0)


def test_changing_a_pushed_snapshot_does_not_rewrite_history():
    history = HistoryStack()
    snap = GraphSnapshot(nodes=(Node(id="a", type="task", data=NodeData(name="Original")),))
    history.push(snap)

    snap.nodes[0].data.name = "Cambiado"
    assert history.current.nodes[0].data.name == "Original"

    history.current.nodes[0].data.name = "Cambiado"
    assert history.current.nodes[0].data.name == "Original"
