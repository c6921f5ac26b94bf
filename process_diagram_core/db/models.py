"""
Modelos ORM del editor de procesos.

- User: usuario del sistema (rol global "user" | "admin").
- Process: documento de proceso con el grafo vigente (nodos/conexiones/viewport).
- ProcessVersion: snapshot numerado e inmutable (log de auditoría).
- ProcessCollaborator: rol de acceso de un usuario sobre un proceso.
- ProcessComment: comentario sobre el proceso o sobre un nodo.

Los campos JSON se guardan como Text (`*_json`) y se (de)serializan con
`serialization.py`.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    Usuario del sistema.

    La autenticación es externa: `id` es el `sub` del token Bearer.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), default="")

    # Rol global: "user" | "admin" (admin puede borrar cualquier proceso)
    role: Mapped[str] = mapped_column(String(20), default="user")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class Process(Base):
    """
    Documento de proceso.

    `nodes_json` / `edges_json` / `viewport_json` guardan el grafo vigente.
    Guardar es un reemplazo directo de esos campos (último que escribe gana).
    """
    __tablename__ = "processes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)

    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str] = mapped_column(Text, default="")

    # Grafo vigente
    nodes_json: Mapped[str] = mapped_column(Text, default="[]")
    edges_json: Mapped[str] = mapped_column(Text, default="[]")
    viewport_json: Mapped[str] = mapped_column(Text, default='{"x": 0, "y": 0, "zoom": 1}')

    # Puntero a la última versión guardada (0 = sin versiones)
    current_version: Mapped[int] = mapped_column(Integer, default=0)

    status: Mapped[str] = mapped_column(String(20), default="draft")  # draft|published|archived
    visibility: Mapped[str] = mapped_column(String(20), default="private")  # private|public
    view_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Relaciones
    owner: Mapped["User"] = relationship()
    versions: Mapped[list["ProcessVersion"]] = relationship(
        back_populates="process",
        cascade="all, delete-orphan",
        order_by="ProcessVersion.version_number",
    )
    collaborators: Mapped[list["ProcessCollaborator"]] = relationship(
        back_populates="process",
        cascade="all, delete-orphan",
    )
    comments: Mapped[list["ProcessComment"]] = relationship(
        back_populates="process",
        cascade="all, delete-orphan",
    )


class ProcessVersion(Base):
    """
    Versión numerada de un proceso.

    Se agrega al guardar explícitamente una versión o al restaurar. Una vez
    escrita no se modifica (ver listener `_reject_version_update`).
    `version_number` es correlativo por proceso, empezando en 1.
    """
    __tablename__ = "process_versions"
    __table_args__ = (
        UniqueConstraint("process_id", "version_number", name="uq_process_version_number"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    process_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("processes.id", ondelete="CASCADE"), index=True
    )
    version_number: Mapped[int] = mapped_column(Integer)

    # Snapshot completo: {"nodes": [...], "edges": [...], "viewport": {...}}
    snapshot_json: Mapped[str] = mapped_column(Text)

    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    process: Mapped["Process"] = relationship(back_populates="versions")


@event.listens_for(ProcessVersion, "before_update")
def _reject_version_update(mapper, connection, target):
    raise ValueError(f"La versión {target.version_number} del proceso {target.process_id} es inmutable")


class ProcessCollaborator(Base):
    """
    Rol de acceso de un usuario (distinto del owner) sobre un proceso.

    role: "editor" | "viewer" | "commenter". El owner no tiene fila acá: se
    deduce de `Process.owner_id`.
    """
    __tablename__ = "process_collaborators"
    __table_args__ = (
        UniqueConstraint("process_id", "user_id", name="uq_process_collaborator"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    process_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("processes.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    role: Mapped[str] = mapped_column(String(20))
    invited_by: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    process: Mapped["Process"] = relationship(back_populates="collaborators")
    user: Mapped["User"] = relationship(foreign_keys=[user_id])


class ProcessComment(Base):
    """
    Comentario sobre un proceso (node_id NULL) o sobre un bloque.

    `parent_id` permite hilos de respuestas.
    """
    __tablename__ = "process_comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    process_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("processes.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"))
    node_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    parent_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("process_comments.id"), nullable=True)

    content: Mapped[str] = mapped_column(Text)
    resolved: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    process: Mapped["Process"] = relationship(back_populates="comments")
    parent: Mapped["ProcessComment"] = relationship(remote_side="ProcessComment.id")
