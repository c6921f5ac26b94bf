"""
GraphStore: colección autoritativa de nodos y conexiones de un documento abierto.

Responsabilidades
-----------------
- Guardar los nodos en un mapa indexado por id (orden de inserción preservado).
- Guardar las conexiones con referencias por id a los nodos.
- Garantizar integridad referencial en cada mutación: nunca puede quedar una
  conexión apuntando a un nodo inexistente.

Los llamadores nunca reciben los objetos internos: todo lo que entra se copia
y todo lo que sale es una copia. La única forma de cambiar el grafo es a través
de los métodos de mutación de esta clase.

Las operaciones son sincrónicas y corren hasta terminar; no hay locking
(una sesión de edición es de un solo usuario).
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Iterable, Optional

from .domain_models import Edge, GraphSnapshot, Node, Position, Viewport, normalize_edge_type
from .exceptions import DanglingReferenceError, DuplicateIdError, NotFoundError

logger = logging.getLogger(__name__)

# Desplazamiento aplicado a los nodos duplicados (igual que en el editor)
DUPLICATE_OFFSET = 50
COPY_SUFFIX = " (copy)"


class GraphStore:
    """
    Grafo en memoria de un documento de proceso.

    Ejemplo
    -------
    >>> store = GraphStore()
    >>> store.add_node(Node(id="s", type="start"))
    >>> store.add_node(Node(id="e", type="end"))
    >>> store.add_edge(Edge(id="e1", source="s", target="e"))
    >>> store.remove_node("s")   # elimina también e1
    """

    def __init__(self, nodes: Iterable[Node] = (), edges: Iterable[Edge] = ()):
        self._nodes: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        nodes = list(nodes)
        edges = list(edges)
        if nodes or edges:
            self.replace_all(nodes, edges)

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> list[Node]:
        return copy.deepcopy(list(self._nodes.values()))

    @property
    def edges(self) -> list[Edge]:
        return copy.deepcopy(list(self._edges.values()))

    def __len__(self) -> int:
        return len(self._nodes)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError("Nodo", node_id)
        return copy.deepcopy(node)

    def get_edge(self, edge_id: str) -> Edge:
        edge = self._edges.get(edge_id)
        if edge is None:
            raise NotFoundError("Conexión", edge_id)
        return copy.deepcopy(edge)

    def outgoing(self, node_id: str) -> list[Edge]:
        return [copy.deepcopy(e) for e in self._edges.values() if e.source == node_id]

    def incoming(self, node_id: str) -> list[Edge]:
        return [copy.deepcopy(e) for e in self._edges.values() if e.target == node_id]

    def snapshot(self, viewport: Optional[Viewport] = None) -> GraphSnapshot:
        """Copia inmutable del estado actual."""
        return GraphSnapshot.capture(self._nodes.values(), self._edges.values(), viewport)

    # ------------------------------------------------------------------
    # Nodos
    # ------------------------------------------------------------------

    def add_node(self, node: Node) -> None:
        """
        Agrega un nodo.

        Raises:
            DuplicateIdError: Si ya existe un nodo con ese id.
        """
        if node.id in self._nodes:
            raise DuplicateIdError("un nodo", node.id)
        self._nodes[node.id] = copy.deepcopy(node)

    def update_node_data(self, node_id: str, partial: dict[str, Any]) -> Node:
        """
        Mezcla `partial` en `data` del nodo; el resto de los campos no cambia.

        Returns:
            Copia del nodo actualizado.

        Raises:
            NotFoundError: Si el nodo no existe.
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError("Nodo", node_id)
        node.data = node.data.merged(partial)
        return copy.deepcopy(node)

    def move_node(self, node_id: str, x: float, y: float) -> None:
        """Actualiza la posición de un nodo (fin de un arrastre)."""
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError("Nodo", node_id)
        node.position = Position(x=x, y=y)

    def remove_node(self, node_id: str) -> list[str]:
        """
        Elimina el nodo y TODAS las conexiones que lo tocan (origen o destino).

        Returns:
            Ids de las conexiones eliminadas en cascada.

        Raises:
            NotFoundError: Si el nodo no existe.
        """
        if node_id not in self._nodes:
            raise NotFoundError("Nodo", node_id)
        removed_edges = [
            edge_id for edge_id, edge in self._edges.items()
            if edge.source == node_id or edge.target == node_id
        ]
        for edge_id in removed_edges:
            del self._edges[edge_id]
        del self._nodes[node_id]
        if removed_edges:
            logger.debug(f"Nodo {node_id} eliminado junto con {len(removed_edges)} conexiones")
        return removed_edges

    def remove_nodes(self, node_ids: Iterable[str]) -> list[str]:
        """
        Elimina varios nodos (selección múltiple).

        Se valida que existan todos antes de borrar nada.
        """
        node_ids = list(dict.fromkeys(node_ids))
        for node_id in node_ids:
            if node_id not in self._nodes:
                raise NotFoundError("Nodo", node_id)
        removed_edges: list[str] = []
        for node_id in node_ids:
            removed_edges.extend(self.remove_node(node_id))
        return removed_edges

    def duplicate_nodes(self, node_ids: Iterable[str]) -> tuple[list[Node], list[Edge]]:
        """
        Duplica una selección de nodos con ids nuevos, desplazados en diagonal.

        Cada copia se llama "<nombre> (copy)". Las conexiones con ambos extremos
        dentro de la selección se copian apuntando a las copias; las que salen
        de la selección no.

        Returns:
            (nodos creados, conexiones creadas), como copias.
        """
        node_ids = list(dict.fromkeys(node_ids))
        for node_id in node_ids:
            if node_id not in self._nodes:
                raise NotFoundError("Nodo", node_id)

        id_map: dict[str, str] = {}
        created_nodes: list[Node] = []
        for node_id in node_ids:
            original = self._nodes[node_id]
            clone = copy.deepcopy(original)
            clone.id = self._new_id(original.type)
            clone.position = Position(
                x=original.position.x + DUPLICATE_OFFSET,
                y=original.position.y + DUPLICATE_OFFSET,
            )
            clone.data.name = f"{original.data.name}{COPY_SUFFIX}"
            self._nodes[clone.id] = clone
            id_map[node_id] = clone.id
            created_nodes.append(copy.deepcopy(clone))

        created_edges: list[Edge] = []
        for edge in list(self._edges.values()):
            if edge.source in id_map and edge.target in id_map:
                clone = copy.deepcopy(edge)
                clone.id = self._new_edge_id()
                clone.source = id_map[edge.source]
                clone.target = id_map[edge.target]
                self._edges[clone.id] = clone
                created_edges.append(copy.deepcopy(clone))

        logger.debug(f"Duplicados {len(created_nodes)} nodos y {len(created_edges)} conexiones")
        return created_nodes, created_edges

    # ------------------------------------------------------------------
    # Conexiones
    # ------------------------------------------------------------------

    def add_edge(self, edge: Edge) -> None:
        """
        Agrega una conexión.

        Se permiten auto-conexiones y conexiones repetidas entre los mismos nodos.

        Raises:
            DanglingReferenceError: Si el origen o el destino no existen.
            DuplicateIdError: Si ya existe una conexión con ese id.
        """
        missing = [end for end in (edge.source, edge.target) if end not in self._nodes]
        if missing:
            raise DanglingReferenceError(edge.id, list(dict.fromkeys(missing)))
        if edge.id in self._edges:
            raise DuplicateIdError("una conexión", edge.id)
        self._edges[edge.id] = copy.deepcopy(edge)

    def update_edge(
        self,
        edge_id: str,
        label: Optional[str] = None,
        edge_type: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> Edge:
        """
        Actualiza etiqueta, tipo y/o datos de una conexión.

        `data` se mezcla con los datos existentes. Origen y destino no se pueden
        cambiar: para reconectar hay que eliminar y volver a crear la conexión.
        """
        edge = self._edges.get(edge_id)
        if edge is None:
            raise NotFoundError("Conexión", edge_id)
        if label is not None:
            edge.label = label
        if edge_type is not None:
            edge.type = normalize_edge_type(edge_type)
        if data is not None:
            merged = dict(edge.data or {})
            merged.update(copy.deepcopy(data))
            edge.data = merged
        return copy.deepcopy(edge)

    def remove_edge(self, edge_id: str) -> None:
        """
        Elimina una conexión (sin efectos en cascada).

        Raises:
            NotFoundError: Si la conexión no existe.
        """
        if edge_id not in self._edges:
            raise NotFoundError("Conexión", edge_id)
        del self._edges[edge_id]

    def remove_edges(self, edge_ids: Iterable[str]) -> None:
        edge_ids = list(dict.fromkeys(edge_ids))
        for edge_id in edge_ids:
            if edge_id not in self._edges:
                raise NotFoundError("Conexión", edge_id)
        for edge_id in edge_ids:
            del self._edges[edge_id]

    # ------------------------------------------------------------------
    # Reemplazo completo (importar / restaurar)
    # ------------------------------------------------------------------

    def replace_all(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> None:
        """
        Reemplaza el grafo completo.

        El conjunto entrante se valida ANTES de tocar el estado: si hay ids de
        nodo o de conexión repetidos, o alguna conexión apunta a un nodo que no
        está en el conjunto, se lanza la excepción y el grafo queda como estaba.

        Raises:
            DuplicateIdError: Ids repetidos en el conjunto entrante.
            DanglingReferenceError: Conexión con extremo inexistente.
        """
        new_nodes: dict[str, Node] = {}
        for node in nodes:
            if node.id in new_nodes:
                raise DuplicateIdError("un nodo", node.id)
            new_nodes[node.id] = copy.deepcopy(node)

        new_edges: dict[str, Edge] = {}
        for edge in edges:
            missing = [end for end in (edge.source, edge.target) if end not in new_nodes]
            if missing:
                raise DanglingReferenceError(edge.id, list(dict.fromkeys(missing)))
            if edge.id in new_edges:
                raise DuplicateIdError("una conexión", edge.id)
            new_edges[edge.id] = copy.deepcopy(edge)

        self._nodes = new_nodes
        self._edges = new_edges

    def load_snapshot(self, snapshot: GraphSnapshot) -> None:
        """Carga un snapshot (deshacer/rehacer, restaurar versión)."""
        self.replace_all(snapshot.nodes, snapshot.edges)

    def clear(self) -> None:
        self._nodes = {}
        self._edges = {}

    # ------------------------------------------------------------------

    def _new_id(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}_{uuid.uuid4().hex[:8]}"
            if candidate not in self._nodes:
                return candidate

    def _new_edge_id(self) -> str:
        while True:
            candidate = f"edge_{uuid.uuid4().hex[:8]}"
            if candidate not in self._edges:
                return candidate
