"""
Helpers para roles de acceso a procesos y gestión de colaboradores.

Este módulo proporciona funciones para:
- Resolver el rol de un usuario sobre un proceso (owner implícito + colaboradores)
- Armar el `AccessContext` que consume `CollaborationGate`
- Invitar, cambiar de rol y quitar colaboradores
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..exceptions import AccessDeniedError, NotFoundError
from ..permissions import GRANTABLE_ROLES, AccessContext, Role, parse_role
from .helpers import STATUS_PUBLISHED, get_user_by_email, get_user_by_id
from .models import Process, ProcessCollaborator, User

logger = logging.getLogger(__name__)


def get_user_access_role(session: Session, process: Process, user_id: str) -> Role | None:
    """
    Obtiene el rol de un usuario sobre un proceso.

    Args:
        session: Sesión de base de datos
        process: Proceso
        user_id: ID del usuario

    Returns:
        Role.OWNER si es el creador, el rol de colaborador si lo tiene,
        o None si no tiene acceso.
    """
    if process.owner_id == user_id:
        return Role.OWNER

    collaborator = session.query(ProcessCollaborator).filter_by(
        process_id=process.id,
        user_id=user_id,
    ).first()

    if not collaborator:
        return None
    return parse_role(collaborator.role)


def get_access_context(session: Session, process: Process, user: User) -> AccessContext:
    """Arma el contexto de autorización de `user` sobre `process`."""
    return AccessContext(
        user_id=user.id,
        role=get_user_access_role(session, process, user.id),
        is_admin=user.role == "admin",
        is_public=process.visibility == "public" and process.status == STATUS_PUBLISHED,
    )


def list_collaborators(session: Session, process_id: str) -> list[ProcessCollaborator]:
    return session.query(ProcessCollaborator).filter_by(
        process_id=process_id,
    ).order_by(ProcessCollaborator.created_at.asc()).all()


def _grantable(role: str | Role) -> Role:
    parsed = parse_role(role)
    if parsed not in GRANTABLE_ROLES:
        raise ValueError(f"Rol no asignable a colaboradores: {role}")
    return parsed


def add_collaborator(
    session: Session,
    process: Process,
    role: str | Role,
    invited_by: str,
    user_id: str | None = None,
    email: str | None = None,
) -> ProcessCollaborator:
    """
    Da acceso a un usuario sobre un proceso.

    Si el usuario ya es colaborador, se actualiza su rol (upsert).

    Args:
        session: Sesión de base de datos
        process: Proceso
        role: "editor" | "viewer" | "commenter"
        invited_by: ID del usuario que invita
        user_id: ID del invitado (o `email`)
        email: Email del invitado (o `user_id`)

    Returns:
        ProcessCollaborator creado o actualizado

    Raises:
        NotFoundError: Si el usuario invitado no existe.
        ValueError: Rol inválido, o si se invita al owner o a uno mismo.
    """
    granted = _grantable(role)

    user = get_user_by_id(session, user_id) if user_id else None
    if user is None and email:
        user = get_user_by_email(session, email)
    if user is None:
        raise NotFoundError("Usuario", user_id or email or "")

    if user.id == invited_by:
        raise ValueError("No podés invitarte a vos mismo")
    if user.id == process.owner_id:
        raise ValueError("El owner ya tiene acceso total al proceso")

    collaborator = session.query(ProcessCollaborator).filter_by(
        process_id=process.id,
        user_id=user.id,
    ).first()

    if collaborator:
        collaborator.role = granted.value
        logger.info(f"Colaborador {user.id} actualizado a {granted.value} en proceso {process.id}")
    else:
        collaborator = ProcessCollaborator(
            process_id=process.id,
            user_id=user.id,
            role=granted.value,
            invited_by=invited_by,
        )
        session.add(collaborator)
        logger.info(f"Colaborador {user.id} agregado como {granted.value} en proceso {process.id}")

    session.flush()
    return collaborator


def update_collaborator_role(
    session: Session,
    process_id: str,
    user_id: str,
    role: str | Role,
) -> ProcessCollaborator:
    """
    Cambia el rol de un colaborador existente.

    Raises:
        NotFoundError: Si el usuario no es colaborador del proceso.
    """
    granted = _grantable(role)
    collaborator = session.query(ProcessCollaborator).filter_by(
        process_id=process_id,
        user_id=user_id,
    ).first()
    if not collaborator:
        raise NotFoundError("Colaborador", user_id)
    collaborator.role = granted.value
    session.flush()
    return collaborator


def remove_collaborator(session: Session, process: Process, user_id: str) -> None:
    """
    Quita el acceso de un colaborador.

    Raises:
        AccessDeniedError: Si se intenta quitar al owner.
        NotFoundError: Si el usuario no es colaborador del proceso.
    """
    if user_id == process.owner_id:
        raise AccessDeniedError("remove_collaborator", Role.OWNER.value, "No se puede quitar al owner del proceso")

    collaborator = session.query(ProcessCollaborator).filter_by(
        process_id=process.id,
        user_id=user_id,
    ).first()
    if not collaborator:
        raise NotFoundError("Colaborador", user_id)

    session.delete(collaborator)
    session.flush()
    logger.info(f"Colaborador {user_id} quitado del proceso {process.id}")
