"""
Sesión de edición de un proceso.

Une las piezas del editor para un único usuario y un único documento abierto:

    evento de UI -> CollaborationGate -> GraphStore -> HistoryStack (al asentarse)

y, al guardar explícitamente, entrega el snapshot a una función de
persistencia (típicamente `VersionManager.save_content` o una llamada HTTP).

La validación no está en este flujo: se pide con `validate()` cuando se quiere.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional

from .config import get_settings
from .domain_models import Edge, GraphSnapshot, Node, Viewport
from .exceptions import PersistenceFailure
from .graph_store import GraphStore
from .history import HistoryStack
from .permissions import AccessContext, CollaborationGate, Operation
from .validation import ValidationReport, validate_process

logger = logging.getLogger(__name__)


class EditorSession:
    """
    Estado de edición de un documento abierto.

    Las mutaciones que terminan un gesto (alta/baja, fin de arrastre, fin de
    edición de propiedades) guardan un snapshot en el historial. Las
    intermedias (cada tecla, cada cuadro del arrastre) se hacen con
    `settle=False` y se cierran con `settle()`.
    """

    def __init__(
        self,
        access: AccessContext,
        process_id: Optional[str] = None,
        gate: Optional[CollaborationGate] = None,
        history_capacity: Optional[int] = None,
    ):
        self.access = access
        self.process_id = process_id
        self.gate = gate or CollaborationGate()
        self.store = GraphStore()
        self.history = HistoryStack(history_capacity or get_settings().history_capacity)
        self.viewport = Viewport()
        self.is_dirty = False
        self.history.push(self.store.snapshot())

    # ------------------------------------------------------------------
    # Carga / guardado
    # ------------------------------------------------------------------

    def load(self, snapshot: GraphSnapshot, process_id: Optional[str] = None) -> None:
        """Abre un documento: el snapshot pasa a ser el único estado del historial."""
        self.gate.authorize(self.access, Operation.VIEW)
        self.store.load_snapshot(snapshot)
        self.viewport = snapshot.viewport
        if process_id is not None:
            self.process_id = process_id
        self.history.reset(self.store.snapshot())
        self.is_dirty = False

    def snapshot(self) -> GraphSnapshot:
        return self.store.snapshot(self.viewport)

    def save(self, persist: Callable[[GraphSnapshot], Any]) -> Any:
        """
        Guarda el estado actual con `persist(snapshot)`.

        No bloquea si el grafo es inválido. Si `persist` falla, se lanza
        `PersistenceFailure` y el grafo, el historial y la marca de cambios
        quedan intactos para poder reintentar.
        """
        self.gate.authorize(self.access, Operation.EDIT_GRAPH)
        snapshot = self.snapshot()
        try:
            result = persist(snapshot)
        except Exception as e:
            logger.error(f"Error guardando proceso {self.process_id}: {e}")
            raise PersistenceFailure(f"No se pudo guardar el proceso: {e}") from e
        self.is_dirty = False
        return result

    # ------------------------------------------------------------------
    # Mutaciones
    # ------------------------------------------------------------------

    def _authorize_edit(self) -> None:
        self.gate.authorize(self.access, Operation.EDIT_GRAPH)

    def _after(self, settle: bool) -> None:
        self.is_dirty = True
        if settle:
            self.settle()

    def settle(self) -> None:
        """Cierra un gesto: guarda el estado actual en el historial."""
        self.history.push(self.store.snapshot())

    def add_node(self, node: Node) -> None:
        self._authorize_edit()
        self.store.add_node(node)
        self._after(True)

    def update_node_data(self, node_id: str, partial: dict[str, Any], settle: bool = True) -> Node:
        self._authorize_edit()
        node = self.store.update_node_data(node_id, partial)
        self._after(settle)
        return node

    def move_node(self, node_id: str, x: float, y: float, settle: bool = True) -> None:
        self._authorize_edit()
        self.store.move_node(node_id, x, y)
        self._after(settle)

    def remove_nodes(self, node_ids: Iterable[str]) -> list[str]:
        self._authorize_edit()
        removed_edges = self.store.remove_nodes(node_ids)
        self._after(True)
        return removed_edges

    def duplicate_nodes(self, node_ids: Iterable[str]) -> tuple[list[Node], list[Edge]]:
        self._authorize_edit()
        created = self.store.duplicate_nodes(node_ids)
        self._after(True)
        return created

    def add_edge(self, edge: Edge) -> None:
        self._authorize_edit()
        self.store.add_edge(edge)
        self._after(True)

    def update_edge(self, edge_id: str, **changes: Any) -> Edge:
        self._authorize_edit()
        edge = self.store.update_edge(edge_id, **changes)
        self._after(True)
        return edge

    def remove_edges(self, edge_ids: Iterable[str]) -> None:
        self._authorize_edit()
        self.store.remove_edges(edge_ids)
        self._after(True)

    def replace_all(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        self._authorize_edit()
        self.store.replace_all(nodes, edges)
        self._after(True)

    def set_viewport(self, viewport: Viewport) -> None:
        """El viewport no es parte del historial; solo marca cambios."""
        self.viewport = viewport
        self.is_dirty = True

    # ------------------------------------------------------------------
    # Historial
    # ------------------------------------------------------------------

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def undo(self) -> GraphSnapshot:
        self._authorize_edit()
        if self.history.can_undo():
            self.store.load_snapshot(self.history.undo())
            self.is_dirty = True
        return self.snapshot()

    def redo(self) -> GraphSnapshot:
        self._authorize_edit()
        if self.history.can_redo():
            self.store.load_snapshot(self.history.redo())
            self.is_dirty = True
        return self.snapshot()

    # ------------------------------------------------------------------

    def validate(self) -> ValidationReport:
        return validate_process(self.store.nodes, self.store.edges)
