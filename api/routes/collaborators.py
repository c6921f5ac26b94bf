"""
Endpoints para gestionar colaboradores de un proceso.

Endpoints:
- GET /api/v1/processes/{process_id}/collaborators: Listar colaboradores
- POST /api/v1/processes/{process_id}/collaborators: Invitar (o cambiar rol si ya existe)
- PUT /api/v1/processes/{process_id}/collaborators/{user_id}: Cambiar rol
- DELETE /api/v1/processes/{process_id}/collaborators/{user_id}: Quitar acceso
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from process_diagram_core.db.models import ProcessCollaborator, User
from process_diagram_core.db.permissions import (
    add_collaborator,
    get_access_context,
    list_collaborators,
    remove_collaborator,
    update_collaborator_role,
)
from process_diagram_core.db.helpers import get_process
from process_diagram_core.permissions import Operation

from ..dependencies import authorize_process, gate, get_current_user, get_db
from ..models.requests import (
    CollaboratorAddRequest,
    CollaboratorResponse,
    CollaboratorRoleUpdateRequest,
    SuccessResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/processes/{process_id}/collaborators", tags=["collaborators"])


def _collaborator_response(collaborator: ProcessCollaborator) -> CollaboratorResponse:
    return CollaboratorResponse(
        id=collaborator.id,
        process_id=collaborator.process_id,
        user_id=collaborator.user_id,
        email=collaborator.user.email if collaborator.user else None,
        name=collaborator.user.name if collaborator.user else None,
        role=collaborator.role,
        invited_by=collaborator.invited_by,
        created_at=collaborator.created_at.isoformat(),
    )


@router.get("", response_model=list[CollaboratorResponse])
async def list_process_collaborators(
    process_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Lista los colaboradores (cualquiera con acceso al proceso puede verlos)."""
    authorize_process(session, process_id, user, Operation.VIEW)
    return [_collaborator_response(c) for c in list_collaborators(session, process_id)]


@router.post("", response_model=CollaboratorResponse)
async def add_process_collaborator(
    process_id: str,
    request: CollaboratorAddRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Invita a un usuario (por ID o email) con rol editor, viewer o commenter.

    Si ya es colaborador, se actualiza su rol. Solo el owner puede invitar.
    """
    if not request.user_id and not request.email:
        raise HTTPException(status_code=400, detail="Se requiere userId o email")

    process, _ = authorize_process(session, process_id, user, Operation.MANAGE_COLLABORATORS)
    try:
        collaborator = add_collaborator(
            session,
            process,
            role=request.role,
            invited_by=user.id,
            user_id=request.user_id,
            email=request.email,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _collaborator_response(collaborator)


@router.put("/{user_id}", response_model=CollaboratorResponse)
async def update_process_collaborator(
    process_id: str,
    user_id: str,
    request: CollaboratorRoleUpdateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    authorize_process(session, process_id, user, Operation.MANAGE_COLLABORATORS)
    try:
        collaborator = update_collaborator_role(session, process_id, user_id, request.role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _collaborator_response(collaborator)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def remove_process_collaborator(
    process_id: str,
    user_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Quita un colaborador. El owner puede quitar a cualquiera; cada uno puede irse solo."""
    process = get_process(session, process_id)
    ctx = get_access_context(session, process, user)
    gate.authorize_grant_removal(ctx, user_id)
    remove_collaborator(session, process, user_id)
    return SuccessResponse(success=True)
