"""
Versionado de procesos (VersionManager).

Cada versión es un snapshot completo (nodos + conexiones + viewport) con número
correlativo por proceso. Las versiones son append-only: nunca se modifican ni se
borran individualmente. Restaurar una versión vieja NO reescribe la historia:
crea una versión nueva (última + 1) con el mismo contenido.

Ciclo típico
------------
    create_process(...)                  -> v1 "Initial version" (si hay contenido)
    save_content(..., create_version)    -> sobrescribe el contenido vigente (+ vN)
    restore(process_id, v1.id, ...)      -> vN+1 "Restored from version 1"
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db.helpers import apply_snapshot, get_process
from .db.models import ProcessVersion
from .domain_models import GraphSnapshot
from .exceptions import NotFoundError, PersistenceFailure
from .serialization import dump_snapshot, load_snapshot

logger = logging.getLogger(__name__)


@dataclass
class VersionDiff:
    """Resultado de comparar dos versiones (solo lectura)."""
    left: ProcessVersion
    right: ProcessVersion
    added_nodes: list[str] = field(default_factory=list)
    removed_nodes: list[str] = field(default_factory=list)
    changed_nodes: list[str] = field(default_factory=list)
    added_edges: list[str] = field(default_factory=list)
    removed_edges: list[str] = field(default_factory=list)
    changed_edges: list[str] = field(default_factory=list)


def _diff_ids(left: dict[str, Any], right: dict[str, Any]) -> tuple[list[str], list[str], list[str]]:
    added = [i for i in right if i not in left]
    removed = [i for i in left if i not in right]
    changed = [i for i in left if i in right and left[i] != right[i]]
    return added, removed, changed


class VersionManager:
    """
    Escribe y lee versiones de procesos dentro de una sesión SQLAlchemy.

    No autoriza: el llamador pasa antes por `CollaborationGate`
    (`CREATE_VERSION`, `RESTORE_VERSION`, `VIEW_VERSIONS`).

    Cualquier `SQLAlchemyError` al escribir se relanza como
    `PersistenceFailure`; el commit/rollback lo decide quien abrió la sesión.
    """

    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Lectura
    # ------------------------------------------------------------------

    def latest_version_number(self, process_id: str) -> int:
        """Último número de versión del proceso (0 si todavía no tiene)."""
        latest = self.session.query(func.max(ProcessVersion.version_number)).filter(
            ProcessVersion.process_id == process_id
        ).scalar()
        return latest or 0

    def list_versions(self, process_id: str) -> list[ProcessVersion]:
        """Versiones del proceso, más nueva primero."""
        return self.session.query(ProcessVersion).filter_by(
            process_id=process_id,
        ).order_by(ProcessVersion.version_number.desc()).all()

    def get_version(self, version_id: str) -> ProcessVersion:
        """
        Raises:
            NotFoundError: Si la versión no existe.
        """
        version = self.session.query(ProcessVersion).filter_by(id=version_id).first()
        if not version:
            raise NotFoundError("Versión", version_id)
        return version

    def get_version_by_number(self, process_id: str, version_number: int) -> ProcessVersion:
        version = self.session.query(ProcessVersion).filter_by(
            process_id=process_id,
            version_number=version_number,
        ).first()
        if not version:
            raise NotFoundError("Versión", f"{process_id}#{version_number}")
        return version

    @staticmethod
    def snapshot_of(version: ProcessVersion) -> GraphSnapshot:
        return load_snapshot(version.snapshot_json)

    def compare(self, left_id: str, right_id: str) -> VersionDiff:
        """
        Compara dos versiones por id de nodo y de conexión.

        Un id está en `changed_*` si existe en ambas versiones con contenido
        distinto (posición, datos, extremos, etc.).
        """
        left = self.get_version(left_id)
        right = self.get_version(right_id)
        left_data = json.loads(left.snapshot_json)
        right_data = json.loads(right.snapshot_json)

        added_nodes, removed_nodes, changed_nodes = _diff_ids(
            {n["id"]: n for n in left_data.get("nodes", [])},
            {n["id"]: n for n in right_data.get("nodes", [])},
        )
        added_edges, removed_edges, changed_edges = _diff_ids(
            {e["id"]: e for e in left_data.get("edges", [])},
            {e["id"]: e for e in right_data.get("edges", [])},
        )
        return VersionDiff(
            left=left,
            right=right,
            added_nodes=added_nodes,
            removed_nodes=removed_nodes,
            changed_nodes=changed_nodes,
            added_edges=added_edges,
            removed_edges=removed_edges,
            changed_edges=changed_edges,
        )

    # ------------------------------------------------------------------
    # Escritura
    # ------------------------------------------------------------------

    def create_version(
        self,
        process_id: str,
        snapshot: GraphSnapshot,
        author_id: str,
        comment: Optional[str] = None,
    ) -> ProcessVersion:
        """
        Agrega una versión nueva (última + 1) y mueve el puntero del proceso.

        Args:
            process_id: ID del proceso
            snapshot: Contenido a congelar
            author_id: Usuario que crea la versión
            comment: Comentario libre

        Returns:
            ProcessVersion creada

        Raises:
            NotFoundError: Si el proceso no existe.
            PersistenceFailure: Si falla la escritura (incluye colisión de número).
        """
        process = get_process(self.session, process_id)
        next_number = self.latest_version_number(process_id) + 1

        version = ProcessVersion(
            process_id=process_id,
            version_number=next_number,
            snapshot_json=dump_snapshot(snapshot),
            comment=comment,
            created_by=author_id,
        )
        try:
            self.session.add(version)
            process.current_version = next_number
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error creando versión {next_number} del proceso {process_id}: {e}")
            raise PersistenceFailure(f"No se pudo crear la versión {next_number}: {e}") from e

        logger.info(f"✅ Versión {next_number} creada para proceso {process_id}")
        return version

    def save_content(
        self,
        process_id: str,
        snapshot: GraphSnapshot,
        author_id: str,
        create_version: bool = False,
        comment: Optional[str] = None,
    ) -> Optional[ProcessVersion]:
        """
        Guarda el contenido vigente del proceso (sobrescritura directa).

        Si `create_version` es True, además congela ese contenido como versión
        nueva. Nunca valida el grafo: guardar un grafo inválido está permitido.
        """
        process = get_process(self.session, process_id)
        try:
            apply_snapshot(process, snapshot)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error guardando contenido del proceso {process_id}: {e}")
            raise PersistenceFailure(f"No se pudo guardar el proceso: {e}") from e

        if create_version:
            return self.create_version(process_id, snapshot, author_id, comment)
        return None

    def restore(self, process_id: str, version_id: str, author_id: str) -> ProcessVersion:
        """
        Restaura una versión como versión nueva.

        El contenido de la versión elegida pasa a ser el contenido vigente del
        proceso y se congela como `última + 1` con comentario
        "Restored from version N". La versión de origen no se toca.

        Raises:
            NotFoundError: Si la versión no existe o es de otro proceso.
        """
        source = self.get_version(version_id)
        if source.process_id != process_id:
            raise NotFoundError("Versión", version_id)

        snapshot = self.snapshot_of(source)
        logger.info(f"Restaurando versión {source.version_number} del proceso {process_id}")
        self.save_content(process_id, snapshot, author_id)
        return self.create_version(
            process_id,
            snapshot,
            author_id,
            comment=f"Restored from version {source.version_number}",
        )
