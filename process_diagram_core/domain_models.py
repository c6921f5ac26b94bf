from __future__ import annotations

"""
process_diagram_core.domain_models
==================================

Modelos de dominio (dataclasses) del diagrama de procesos.

Este módulo define las estructuras de datos "neutras" del editor:

- Nodos (`Node`) con su posición (`Position`) y propiedades (`NodeData`)
- Conexiones (`Edge`) entre nodos, referenciados SOLO por id
- Viewport del lienzo (`Viewport`)
- Snapshot inmutable de un grafo completo (`GraphSnapshot`)

Principios de diseño
--------------------
- Dataclasses sin lógica pesada: este módulo NO habla con DB ni IO.
- Las conexiones guardan ids (strings), nunca referencias a objetos `Node`.
  El grafo no tiene ciclos de referencias y la pertenencia queda explícita
  en `GraphStore`.
- `to_dict()` / `from_dict()` usan las claves del formato persistido (camelCase,
  ver `serialization.py`). Las claves desconocidas de `data` se conservan en
  `NodeData.extra` para no perder información al importar/exportar.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import InvalidDocumentError


class EdgeType(str, Enum):
    """Tipo de conexión entre bloques."""

    SEQUENCE = "sequence"
    DATA = "data"
    CONDITIONAL = "conditional"


# Alias que aparecen en diagramas viejos / generados por IA
_EDGE_TYPE_ALIASES = {
    "sequence_flow": EdgeType.SEQUENCE.value,
    "data_flow": EdgeType.DATA.value,
    "conditional_flow": EdgeType.CONDITIONAL.value,
}


def _require_mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidDocumentError(f"{what} debe ser un objeto JSON")
    return value


def _optional_list(value: Any, what: str) -> Optional[List[Any]]:
    if value is None:
        return None
    if not isinstance(value, list):
        raise InvalidDocumentError(f"{what} debe ser una lista")
    return value


def _optional_str(value: Any, what: str) -> Optional[str]:
    if value is not None and not isinstance(value, str):
        raise InvalidDocumentError(f"{what} debe ser un texto")
    return value


def _number(value: Any, what: str) -> float:
    # bool es subclase de int, pero no es una coordenada
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidDocumentError(f"{what} debe ser un número")
    return value


# ============================================================
# Propiedades de nodo
# ============================================================

@dataclass
class Condition:
    """
    Rama de un bloque de decisión.

    Attributes:
        label: Texto visible de la rama (p.ej. "Sí", "Monto > 1000").
        expression: Expresión libre que describe la condición.
        target_node_id: Nodo destino sugerido (informativo, no se valida).
    """
    label: str
    expression: Optional[str] = None
    target_node_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"label": self.label}
        if self.expression is not None:
            out["expression"] = self.expression
        if self.target_node_id is not None:
            out["targetNodeId"] = self.target_node_id
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Condition":
        data = _require_mapping(data, "condition")
        return cls(
            label=data.get("label", ""),
            expression=data.get("expression"),
            target_node_id=data.get("targetNodeId"),
        )


@dataclass
class Param:
    """
    Parámetro de entrada o salida de un bloque.

    Attributes:
        name: Nombre del parámetro.
        type: "string" | "number" | "boolean" | "date" | "object" | "array".
        required: Si el parámetro es obligatorio.
        description: Descripción libre.
    """
    name: str
    type: str = "string"
    required: bool = False
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "type": self.type, "required": self.required}
        if self.description is not None:
            out["description"] = self.description
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Param":
        data = _require_mapping(data, "param")
        return cls(
            name=data.get("name", ""),
            type=data.get("type", "string"),
            required=bool(data.get("required", False)),
            description=data.get("description"),
        )


# Nombre python -> clave persistida
_NODE_DATA_KEYS = {
    "name": "name",
    "description": "description",
    "responsible": "responsible",
    "duration_minutes": "durationMinutes",
    "color": "color",
    "tags": "tags",
    "conditions": "conditions",
    "inputs": "inputs",
    "outputs": "outputs",
}
_NODE_DATA_WIRE_KEYS = set(_NODE_DATA_KEYS.values())


@dataclass
class NodeData:
    """
    Propiedades editables de un nodo (panel de propiedades).

    Attributes:
        name: Nombre del bloque. Obligatorio para que el proceso sea válido.
        description: Descripción libre.
        responsible: Rol o persona responsable.
        duration_minutes: Duración estimada en minutos.
        color: Color personalizado (hex).
        tags: Etiquetas.
        conditions: Ramas (bloques de decisión).
        inputs / outputs: Parámetros de entrada/salida.
        extra: Claves adicionales desconocidas, se conservan tal cual.
    """
    name: str = ""
    description: Optional[str] = None
    responsible: Optional[str] = None
    duration_minutes: Optional[float] = None
    color: Optional[str] = None
    tags: Optional[List[str]] = None
    conditions: Optional[List[Condition]] = None
    inputs: Optional[List[Param]] = None
    outputs: Optional[List[Param]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = copy.deepcopy(self.extra)
        out["name"] = self.name
        for attr in ("description", "responsible", "color"):
            value = getattr(self, attr)
            if value is not None:
                out[attr] = value
        if self.duration_minutes is not None:
            out["durationMinutes"] = self.duration_minutes
        if self.tags is not None:
            out["tags"] = list(self.tags)
        if self.conditions is not None:
            out["conditions"] = [c.to_dict() for c in self.conditions]
        if self.inputs is not None:
            out["inputs"] = [p.to_dict() for p in self.inputs]
        if self.outputs is not None:
            out["outputs"] = [p.to_dict() for p in self.outputs]
        return out

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "NodeData":
        data = _require_mapping(data or {}, "node.data")
        conditions = _optional_list(data.get("conditions"), "data.conditions")
        inputs = _optional_list(data.get("inputs"), "data.inputs")
        outputs = _optional_list(data.get("outputs"), "data.outputs")
        tags = _optional_list(data.get("tags"), "data.tags")
        if tags is not None and not all(isinstance(t, str) for t in tags):
            raise InvalidDocumentError("data.tags debe ser una lista de textos")
        duration = data.get("durationMinutes")
        return cls(
            name=_optional_str(data.get("name"), "data.name") or "",
            description=_optional_str(data.get("description"), "data.description"),
            responsible=_optional_str(data.get("responsible"), "data.responsible"),
            duration_minutes=_number(duration, "data.durationMinutes") if duration is not None else None,
            color=_optional_str(data.get("color"), "data.color"),
            tags=list(tags) if tags is not None else None,
            conditions=[Condition.from_dict(c) for c in conditions] if conditions is not None else None,
            inputs=[Param.from_dict(p) for p in inputs] if inputs is not None else None,
            outputs=[Param.from_dict(p) for p in outputs] if outputs is not None else None,
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in _NODE_DATA_WIRE_KEYS},
        )

    def merged(self, partial: Dict[str, Any]) -> "NodeData":
        """
        Devuelve una copia con `partial` mezclado encima.

        Acepta tanto las claves persistidas (`durationMinutes`) como los nombres
        python (`duration_minutes`). Las claves no mencionadas no cambian.
        """
        current = self.to_dict()
        for key, value in partial.items():
            current[_NODE_DATA_KEYS.get(key, key)] = value
        return NodeData.from_dict(current)


# ============================================================
# Nodos y conexiones
# ============================================================

@dataclass
class Position:
    """Posición de un nodo en el lienzo."""
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y}


@dataclass
class Node:
    """
    Bloque del diagrama.

    Attributes:
        id: Identificador único dentro del documento.
        type: Tipo de bloque (ver `blocks.BlockType`). Se guarda como string
            para conservar tipos que el catálogo no conoce.
        position: Posición en el lienzo.
        data: Propiedades editables.
    """
    id: str
    type: str
    position: Position = field(default_factory=Position)
    data: NodeData = field(default_factory=NodeData)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "position": self.position.to_dict(),
            "data": self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        data = _require_mapping(data, "node")
        if not data.get("id") or not data.get("type"):
            raise InvalidDocumentError("Cada nodo necesita 'id' y 'type'")
        position = _require_mapping(data.get("position") or {}, "node.position")
        return cls(
            id=str(data["id"]),
            type=str(data["type"]),
            position=Position(
                x=_number(position.get("x", 0), "position.x"),
                y=_number(position.get("y", 0), "position.y"),
            ),
            data=NodeData.from_dict(data.get("data")),
        )


@dataclass
class Edge:
    """
    Conexión dirigida entre dos nodos.

    `source` y `target` son ids de nodos del mismo documento; `GraphStore`
    garantiza que existan.
    """
    id: str
    source: str
    target: str
    type: str = EdgeType.SEQUENCE.value
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    label: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type,
        }
        if self.source_handle is not None:
            out["sourceHandle"] = self.source_handle
        if self.target_handle is not None:
            out["targetHandle"] = self.target_handle
        if self.label is not None:
            out["label"] = self.label
        if self.data is not None:
            out["data"] = copy.deepcopy(self.data)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Edge":
        data = _require_mapping(data, "edge")
        for key in ("id", "source", "target"):
            if not data.get(key):
                raise InvalidDocumentError(f"Cada conexión necesita '{key}'")
        return cls(
            id=str(data["id"]),
            source=str(data["source"]),
            target=str(data["target"]),
            type=normalize_edge_type(data.get("type")),
            source_handle=data.get("sourceHandle"),
            target_handle=data.get("targetHandle"),
            label=data.get("label"),
            data=copy.deepcopy(data["data"]) if data.get("data") is not None else None,
        )


def normalize_edge_type(value: Optional[str]) -> str:
    """Normaliza el tipo de conexión; None equivale a "sequence"."""
    if value is None:
        return EdgeType.SEQUENCE.value
    value = _EDGE_TYPE_ALIASES.get(value, value)
    try:
        return EdgeType(value).value
    except ValueError as e:
        raise InvalidDocumentError(f"Tipo de conexión desconocido: {value}") from e


@dataclass
class Viewport:
    """Desplazamiento y zoom del lienzo."""
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "zoom": self.zoom}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Viewport":
        if not data:
            return cls()
        data = _require_mapping(data, "viewport")
        return cls(x=data.get("x", 0), y=data.get("y", 0), zoom=data.get("zoom", 1))


# ============================================================
# Snapshot
# ============================================================

@dataclass(frozen=True)
class GraphSnapshot:
    """
    Copia completa y autocontenida de un grafo en un instante.

    Es la unidad del historial de deshacer/rehacer y el contenido de cada
    versión persistida. Los nodos/conexiones se copian al crear el snapshot,
    así que modificaciones posteriores del `GraphStore` no lo alteran.
    """
    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    viewport: Viewport = field(default_factory=Viewport)

    @classmethod
    def capture(cls, nodes, edges, viewport: Optional[Viewport] = None) -> "GraphSnapshot":
        return cls(
            nodes=tuple(copy.deepcopy(list(nodes))),
            edges=tuple(copy.deepcopy(list(edges))),
            viewport=copy.deepcopy(viewport) if viewport is not None else Viewport(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "viewport": self.viewport.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphSnapshot":
        data = _require_mapping(data, "snapshot")
        nodes = data.get("nodes", [])
        edges = data.get("edges", [])
        if not isinstance(nodes, list):
            raise InvalidDocumentError("'nodes' debe ser una lista")
        if not isinstance(edges, list):
            raise InvalidDocumentError("'edges' debe ser una lista")
        return cls(
            nodes=tuple(Node.from_dict(n) for n in nodes),
            edges=tuple(Edge.from_dict(e) for e in edges),
            viewport=Viewport.from_dict(data.get("viewport")),
        )
