"""
Endpoints de comentarios sobre procesos y bloques.

Endpoints:
- GET /api/v1/processes/{process_id}/comments: Listar comentarios (?node_id= opcional)
- POST /api/v1/processes/{process_id}/comments: Comentar
- POST /api/v1/comments/{comment_id}/resolve: Marcar como resuelto
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from process_diagram_core.db.helpers import create_comment, get_comment, list_comments, resolve_comment
from process_diagram_core.db.models import ProcessComment, User
from process_diagram_core.permissions import Operation

from ..dependencies import authorize_process, get_current_user, get_db
from ..models.requests import CommentCreateRequest, CommentResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["comments"])


def _comment_response(comment: ProcessComment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        process_id=comment.process_id,
        user_id=comment.user_id,
        node_id=comment.node_id,
        parent_id=comment.parent_id,
        content=comment.content,
        resolved=comment.resolved,
        created_at=comment.created_at.isoformat(),
    )


@router.get("/processes/{process_id}/comments", response_model=list[CommentResponse])
async def list_process_comments(
    process_id: str,
    node_id: Optional[str] = Query(None, description="Filtrar por nodo"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    authorize_process(session, process_id, user, Operation.VIEW)
    return [_comment_response(c) for c in list_comments(session, process_id, node_id=node_id)]


@router.post("/processes/{process_id}/comments", response_model=CommentResponse)
async def create_process_comment(
    process_id: str,
    request: CommentCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Crea un comentario. Los viewers no pueden comentar."""
    authorize_process(session, process_id, user, Operation.COMMENT)
    comment = create_comment(
        session,
        process_id=process_id,
        user_id=user.id,
        content=request.content,
        node_id=request.node_id,
        parent_id=request.parent_id,
    )
    logger.info(f"💬 Comentario {comment.id} en proceso {process_id} (nodo: {comment.node_id or '-'})")
    return _comment_response(comment)


@router.post("/comments/{comment_id}/resolve", response_model=CommentResponse)
async def resolve_process_comment(
    comment_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    comment = get_comment(session, comment_id)
    authorize_process(session, comment.process_id, user, Operation.COMMENT)
    resolve_comment(comment)
    return _comment_response(comment)
