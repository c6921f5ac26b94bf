"""
Funciones helper para trabajar con procesos, usuarios y comentarios.

Estas funciones facilitan:
- Crear / leer / actualizar / borrar documentos de proceso
- Convertir entre las columnas `*_json` y `GraphSnapshot`
- Duplicar procesos y llevar el contador de vistas
- Crear, listar y resolver comentarios

No verifican permisos: eso lo hace el llamador con `CollaborationGate`
(ver `db/permissions.py`).
"""

from __future__ import annotations

import json
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..domain_models import GraphSnapshot
from ..exceptions import NotFoundError
from ..serialization import load_snapshot
from .models import Process, ProcessCollaborator, ProcessComment, User

INITIAL_VERSION_COMMENT = "Initial version"

STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"
STATUS_ARCHIVED = "archived"
PROCESS_STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED, STATUS_ARCHIVED)
VISIBILITIES = ("private", "public")


# ============================================================
# Usuarios
# ============================================================

def create_user(
    session: Session,
    email: str,
    name: str = "",
    role: str = "user",
    user_id: str | None = None,
) -> User:
    """
    Crea un usuario local.

    Args:
        session: Sesión de base de datos
        email: Email (único)
        name: Nombre visible
        role: Rol global ("user" | "admin")
        user_id: ID explícito (el `sub` del proveedor de identidad)

    Returns:
        User creado
    """
    user = User(email=email, name=name, role=role)
    if user_id:
        user.id = user_id
    session.add(user)
    session.flush()
    return user


def get_user_by_id(session: Session, user_id: str) -> User | None:
    return session.query(User).filter_by(id=user_id).first()


def get_user_by_email(session: Session, email: str) -> User | None:
    return session.query(User).filter_by(email=email).first()


# ============================================================
# Snapshot <-> columnas JSON
# ============================================================

def process_snapshot(process: Process) -> GraphSnapshot:
    """Arma el `GraphSnapshot` del contenido vigente de un proceso."""
    return load_snapshot({
        "nodes": json.loads(process.nodes_json or "[]"),
        "edges": json.loads(process.edges_json or "[]"),
        "viewport": json.loads(process.viewport_json) if process.viewport_json else None,
    })


def apply_snapshot(process: Process, snapshot: GraphSnapshot) -> None:
    """
    Sobrescribe el contenido vigente de un proceso.

    Es un reemplazo directo: no hay chequeo de concurrencia, el último que
    guarda gana.
    """
    data = snapshot.to_dict()
    process.nodes_json = json.dumps(data["nodes"], ensure_ascii=False)
    process.edges_json = json.dumps(data["edges"], ensure_ascii=False)
    process.viewport_json = json.dumps(data["viewport"])
    process.updated_at = datetime.utcnow()


# ============================================================
# Procesos
# ============================================================

def create_process(
    session: Session,
    owner_id: str,
    title: str,
    description: str = "",
    snapshot: GraphSnapshot | None = None,
    version_comment: str | None = None,
) -> Process:
    """
    Crea un documento de proceso.

    Si se pasa contenido, además se crea la versión 1.

    Args:
        session: Sesión de base de datos
        owner_id: ID del usuario creador (queda como owner)
        title: Título
        description: Descripción
        snapshot: Contenido inicial (opcional)
        version_comment: Comentario de la versión 1 (default "Initial version")

    Returns:
        Process creado
    """
    from ..versioning import VersionManager

    process = Process(
        owner_id=owner_id,
        title=title,
        description=description or "",
        current_version=0,
        status=STATUS_DRAFT,
        visibility="private",
    )
    if snapshot is not None:
        apply_snapshot(process, snapshot)
    session.add(process)
    session.flush()

    if snapshot is not None:
        VersionManager(session).create_version(
            process.id,
            snapshot,
            author_id=owner_id,
            comment=version_comment or INITIAL_VERSION_COMMENT,
        )

    return process


def get_process(session: Session, process_id: str) -> Process:
    """
    Obtiene un proceso por ID (incluye archivados).

    Raises:
        NotFoundError: Si no existe.
    """
    process = session.query(Process).filter_by(id=process_id).first()
    if not process:
        raise NotFoundError("Proceso", process_id)
    return process


def list_user_processes(session: Session, user_id: str, include_archived: bool = False) -> list[Process]:
    """
    Lista los procesos propios y compartidos con el usuario, más recientes primero.
    """
    shared_ids = session.query(ProcessCollaborator.process_id).filter_by(user_id=user_id)
    query = session.query(Process).filter(
        or_(Process.owner_id == user_id, Process.id.in_(shared_ids))
    )
    if not include_archived:
        query = query.filter(Process.deleted_at.is_(None))
    return query.order_by(Process.updated_at.desc()).all()


def update_process_metadata(
    process: Process,
    title: str | None = None,
    description: str | None = None,
    status: str | None = None,
    visibility: str | None = None,
) -> Process:
    """
    Actualiza título, descripción, estado y/o visibilidad.

    Raises:
        ValueError: Si `status` o `visibility` no son valores conocidos.
    """
    if status is not None and status not in PROCESS_STATUSES:
        raise ValueError(f"Estado inválido: {status}")
    if visibility is not None and visibility not in VISIBILITIES:
        raise ValueError(f"Visibilidad inválida: {visibility}")

    if title is not None:
        process.title = title
    if description is not None:
        process.description = description
    if status is not None:
        process.status = status
    if visibility is not None:
        process.visibility = visibility
    process.updated_at = datetime.utcnow()
    return process


def soft_delete_process(process: Process) -> Process:
    """Archiva el proceso (se puede revertir con `unarchive_process`)."""
    process.status = STATUS_ARCHIVED
    process.deleted_at = datetime.utcnow()
    return process


def unarchive_process(process: Process) -> Process:
    """Revierte un borrado lógico: el proceso vuelve a borrador."""
    process.status = STATUS_DRAFT
    process.deleted_at = None
    return process


def hard_delete_process(session: Session, process: Process) -> None:
    """Borra el proceso con sus versiones, colaboradores y comentarios."""
    session.delete(process)
    session.flush()


def duplicate_process(session: Session, process: Process, new_owner_id: str) -> Process:
    """
    Copia el contenido vigente en un proceso nuevo.

    La copia es privada, en borrador, del usuario que la pide y arranca su
    propio historial en la versión 1. No copia colaboradores ni comentarios.
    """
    return create_process(
        session,
        owner_id=new_owner_id,
        title=f"{process.title} (Copy)",
        description=process.description or "",
        snapshot=process_snapshot(process),
    )


def increment_view_count(process: Process) -> int:
    process.view_count = (process.view_count or 0) + 1
    return process.view_count


# ============================================================
# Comentarios
# ============================================================

def create_comment(
    session: Session,
    process_id: str,
    user_id: str,
    content: str,
    node_id: str | None = None,
    parent_id: str | None = None,
) -> ProcessComment:
    """
    Crea un comentario sobre el proceso o sobre un nodo.

    Raises:
        NotFoundError: Si `parent_id` no es un comentario del mismo proceso.
    """
    if parent_id is not None:
        parent = session.query(ProcessComment).filter_by(id=parent_id, process_id=process_id).first()
        if not parent:
            raise NotFoundError("Comentario", parent_id)

    comment = ProcessComment(
        process_id=process_id,
        user_id=user_id,
        content=content,
        node_id=node_id,
        parent_id=parent_id,
    )
    session.add(comment)
    session.flush()
    return comment


def list_comments(session: Session, process_id: str, node_id: str | None = None) -> list[ProcessComment]:
    query = session.query(ProcessComment).filter_by(process_id=process_id)
    if node_id is not None:
        query = query.filter_by(node_id=node_id)
    return query.order_by(ProcessComment.created_at.asc()).all()


def get_comment(session: Session, comment_id: str) -> ProcessComment:
    comment = session.query(ProcessComment).filter_by(id=comment_id).first()
    if not comment:
        raise NotFoundError("Comentario", comment_id)
    return comment


def resolve_comment(comment: ProcessComment, resolved: bool = True) -> ProcessComment:
    comment.resolved = resolved
    comment.updated_at = datetime.utcnow()
    return comment
