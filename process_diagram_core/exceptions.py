"""
Taxonomía de errores del motor de diagramas.

Todas las excepciones heredan de `ProcessDiagramError`, de modo que la capa
HTTP puede mapearlas a códigos de estado en un único lugar (`api/main.py`).

El resultado de validar un proceso NO es una excepción: es un
`ValidationReport` que se devuelve al llamador (ver `validation.py`).
"""

from __future__ import annotations


class ProcessDiagramError(Exception):
    """Error base del motor de diagramas."""

    status_code: int = 400


class AccessDeniedError(ProcessDiagramError):
    """
    El rol del usuario no alcanza para la operación pedida.

    Equivale a un 403. Nunca se reintenta.
    """

    status_code = 403

    def __init__(self, operation: str, role: str | None = None, message: str | None = None):
        self.operation = operation
        self.role = role
        super().__init__(message or f"Acceso denegado para '{operation}' (rol: {role or 'ninguno'})")


class NotFoundError(ProcessDiagramError):
    """Proceso, versión, nodo o conexión inexistente."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str | int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} no encontrado")


class DanglingReferenceError(ProcessDiagramError):
    """
    Una conexión referencia un nodo que no existe en el grafo.

    Se lanza de forma sincrónica y el grafo queda sin cambios.
    """

    status_code = 422

    def __init__(self, edge_id: str, missing: list[str]):
        self.edge_id = edge_id
        self.missing = missing
        super().__init__(
            f"La conexión {edge_id} referencia nodos inexistentes: {', '.join(missing)}"
        )


class DuplicateIdError(ProcessDiagramError):
    """Colisión de id al agregar un nodo (o una conexión)."""

    status_code = 409

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"Ya existe {entity} con id {entity_id}")


class InvalidDocumentError(ProcessDiagramError):
    """JSON de importación o snapshot con estructura inválida."""

    status_code = 400


class PersistenceFailure(ProcessDiagramError):
    """
    Falla de almacenamiento al guardar.

    El estado en memoria de la sesión de edición (grafo + historial) no se toca,
    así que reintentar el guardado no pierde cambios.
    """

    status_code = 503
