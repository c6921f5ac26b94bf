"""
Tests de validate_process.

La validación nunca lanza: devuelve errores y advertencias.
"""

import copy

from process_diagram_core.domain_models import Condition, Edge, Node, NodeData, Position
from process_diagram_core.validation import validate_process


def _node(node_id, node_type, name=""):
    return Node(id=node_id, type=node_type, data=NodeData(name=name))


def test_single_unnamed_task():
    report = validate_process([_node("n1", "task", "")], [])

    assert [(i.code, i.node_id) for i in report.errors] == [
        ("MISSING_START", None),
        ("MISSING_END", None),
        ("MISSING_NAME", "n1"),
    ]
    assert [(i.code, i.node_id) for i in report.warnings] == [("ISOLATED_NODE", "n1")]
    assert report.is_valid is False


def test_minimal_start_to_end_is_clean():
    nodes = [_node("s", "start", "Start"), _node("e", "end", "End")]
    edges = [Edge(id="e1", source="s", target="e", type="sequence")]

    report = validate_process(nodes, edges)

    assert report.errors == []
    assert report.warnings == []
    assert report.is_valid is True


def test_decision_with_single_branch_warns():
    nodes = [_node("d", "condition", "Decide"), _node("t", "task", "Aprobar")]
    edges = [Edge(id="e1", source="d", target="t")]

    report = validate_process(nodes, edges)

    assert ("INCOMPLETE_DECISION", "d") in report.codes()


def test_decision_with_two_branches_does_not_warn():
    nodes = [
        _node("s", "start", "Start"),
        _node("d", "condition", "Decide"),
        _node("a", "end", "Aprobado"),
        _node("r", "end", "Rechazado"),
    ]
    edges = [
        Edge(id="e0", source="s", target="d"),
        Edge(id="e1", source="d", target="a"),
        Edge(id="e2", source="d", target="r"),
    ]

    report = validate_process(nodes, edges)

    assert report.is_valid
    assert report.warnings == []


def test_missing_start_iff_no_start_category_node():
    with_entry = validate_process([_node("x", "entry_point", "Entrada"), _node("e", "end", "Fin")], [])
    without = validate_process([_node("e", "end", "Fin")], [])

    assert "MISSING_START" not in [code for code, _ in with_entry.codes()]
    assert "MISSING_START" in [code for code, _ in without.codes()]


def test_missing_end_iff_no_end_category_node():
    with_exit = validate_process([_node("s", "start", "Inicio"), _node("x", "exit_point", "Salida")], [])
    without = validate_process([_node("s", "start", "Inicio")], [])

    assert "MISSING_END" not in [code for code, _ in with_exit.codes()]
    assert "MISSING_END" in [code for code, _ in without.codes()]


def test_multiple_starts_is_only_a_warning():
    nodes = [_node("s1", "start", "A"), _node("s2", "start", "B"), _node("e", "end", "Fin")]
    edges = [Edge(id="e1", source="s1", target="e"), Edge(id="e2", source="s2", target="e")]

    report = validate_process(nodes, edges)

    assert report.is_valid
    assert [code for code, _ in report.codes()] == ["MULTIPLE_START"]


def test_connected_task_without_outgoing_edge():
    nodes = [_node("s", "start", "Inicio"), _node("t", "task", "Cargar"), _node("e", "end", "Fin")]
    edges = [Edge(id="e1", source="s", target="t")]

    report = validate_process(nodes, edges)

    assert ("NO_OUTPUTS", "t") in report.codes()
    assert ("NO_INPUTS", "e") in report.codes()


def test_duplicate_names_reported_once_per_name():
    nodes = [
        _node("s", "start", "Inicio"),
        _node("a", "task", "Revisar"),
        _node("b", "task", "Revisar"),
        _node("e", "end", "Fin"),
    ]
    edges = [
        Edge(id="e1", source="s", target="a"),
        Edge(id="e2", source="a", target="b"),
        Edge(id="e3", source="b", target="e"),
    ]

    report = validate_process(nodes, edges)

    assert report.codes() == [("DUPLICATE_NAME", None)]
    assert "Revisar" in report.warnings[0].message


def test_report_to_dict_uses_wire_keys():
    report = validate_process([_node("n1", "task", "")], [])
    data = report.to_dict()

    assert data["isValid"] is False
    assert {"severity": "error", "code": "MISSING_NAME"}.items() <= data["errors"][2].items()
    assert data["errors"][2]["nodeId"] == "n1"


def test_validation_does_not_modify_its_input():
    nodes = [
        _node("s", "start", "Inicio"),
        Node(
            id="d",
            type="condition",
            position=Position(120, 40),
            data=NodeData(
                name="¿Aprobado?",
                tags=["control"],
                conditions=[Condition(label="Sí"), Condition(label="No")],
                extra={"icon": "scale"},
            ),
        ),
        _node("t", "task", "  "),
        _node("x", "task", "Aislado"),
        _node("y", "task", "Aislado"),
    ]
    edges = [
        Edge(id="e1", source="s", target="d"),
        Edge(id="e2", source="d", target="t", type="conditional", label="Sí", data={"rank": 1}),
    ]
    nodes_before = copy.deepcopy(nodes)
    edges_before = copy.deepcopy(edges)

    report = validate_process(nodes, edges)

    assert not report.is_valid
    assert nodes == nodes_before
    assert edges == edges_before
