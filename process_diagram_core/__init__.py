"""
Motor de diagramas de procesos.

Este paquete contiene el núcleo del editor visual de procesos:
- Modelo en memoria de nodos/conexiones (`GraphStore`)
- Reglas de validación estructural (`validate_process`)
- Historial de deshacer/rehacer (`HistoryStack`)
- Versionado persistente (`VersionManager`)
- Autorización por rol de acceso (`CollaborationGate`)
"""

from .domain_models import Edge, GraphSnapshot, Node, NodeData, Position, Viewport
from .exceptions import (
    AccessDeniedError,
    DanglingReferenceError,
    DuplicateIdError,
    InvalidDocumentError,
    NotFoundError,
    PersistenceFailure,
    ProcessDiagramError,
)
from .graph_store import GraphStore
from .history import HistoryStack
from .permissions import CollaborationGate, Operation, Role
from .validation import ValidationIssue, ValidationReport, validate_process

__all__ = [
    "AccessDeniedError",
    "CollaborationGate",
    "DanglingReferenceError",
    "DuplicateIdError",
    "Edge",
    "GraphSnapshot",
    "GraphStore",
    "HistoryStack",
    "InvalidDocumentError",
    "Node",
    "NodeData",
    "NotFoundError",
    "Operation",
    "PersistenceFailure",
    "Position",
    "ProcessDiagramError",
    "Role",
    "ValidationIssue",
    "ValidationReport",
    "Viewport",
    "validate_process",
]
