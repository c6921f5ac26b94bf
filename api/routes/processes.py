"""
Endpoints para gestionar procesos (documentos de diagrama).

Este endpoint maneja:
- POST /api/v1/processes: Crear un proceso (versión 1 si trae contenido)
- GET /api/v1/processes: Listar procesos propios y compartidos
- GET /api/v1/processes/{process_id}: Obtener un proceso con su contenido
- PUT /api/v1/processes/{process_id}: Actualizar metadatos y/o contenido
- DELETE /api/v1/processes/{process_id}: Archivar (o borrar con ?hard=true)
- POST /api/v1/processes/{process_id}/unarchive: Revertir el archivado
- POST /api/v1/processes/{process_id}/duplicate: Duplicar
- POST /api/v1/processes/validate: Validar un grafo
- GET /api/v1/processes/{process_id}/export: Exportar a JSON
- POST /api/v1/processes/import: Importar desde JSON
"""

import json
import logging
import re
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from process_diagram_core.db.helpers import (
    create_process,
    duplicate_process,
    hard_delete_process,
    increment_view_count,
    list_user_processes,
    process_snapshot,
    soft_delete_process,
    unarchive_process,
    update_process_metadata,
)
from process_diagram_core.db.models import Process, User
from process_diagram_core.db.permissions import get_user_access_role
from process_diagram_core.domain_models import Edge, GraphSnapshot, Node
from process_diagram_core.graph_store import GraphStore
from process_diagram_core.permissions import Operation, Role
from process_diagram_core.serialization import export_json, import_json, load_snapshot
from process_diagram_core.validation import validate_process
from process_diagram_core.versioning import VersionManager

from ..dependencies import authorize_process, gate, get_current_user, get_current_user_id, get_db
from ..models.requests import (
    GraphContent,
    ProcessCreateRequest,
    ProcessCreatedResponse,
    ProcessResponse,
    ProcessSummaryResponse,
    ProcessUpdateRequest,
    SuccessResponse,
    ValidateRequest,
    ValidationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/processes", tags=["processes"])


def _content_to_snapshot(content: GraphContent) -> GraphSnapshot:
    """Parsea el contenido y verifica ids únicos y conexiones con extremos existentes."""
    snapshot = load_snapshot(content.model_dump())
    GraphStore(snapshot.nodes, snapshot.edges)
    return snapshot


def _process_response(process: Process, role: Optional[Role]) -> ProcessResponse:
    data = process_snapshot(process).to_dict()
    return ProcessResponse(
        id=process.id,
        title=process.title,
        description=process.description,
        owner_id=process.owner_id,
        status=process.status,
        visibility=process.visibility,
        current_version=process.current_version,
        view_count=process.view_count,
        nodes=data["nodes"],
        edges=data["edges"],
        viewport=data["viewport"],
        access_role=role.value if role else None,
        created_at=process.created_at.isoformat(),
        updated_at=process.updated_at.isoformat(),
        deleted_at=process.deleted_at.isoformat() if process.deleted_at else None,
    )


@router.post("", response_model=ProcessCreatedResponse)
async def create_process_endpoint(
    request: ProcessCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Crea un proceso. El usuario que lo crea queda como owner.

    Si el request trae `content`, además se crea la versión 1.
    """
    snapshot = _content_to_snapshot(request.content) if request.content is not None else None
    process = create_process(
        session,
        owner_id=user.id,
        title=request.title,
        description=request.description or "",
        snapshot=snapshot,
        version_comment=request.version_comment,
    )
    logger.info(f"✅ Proceso creado: {process.id} (owner: {user.id})")
    return ProcessCreatedResponse(id=process.id)


@router.get("", response_model=list[ProcessSummaryResponse])
async def list_processes(
    include_archived: bool = Query(False, description="Incluir procesos archivados"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Lista los procesos propios y compartidos con el usuario."""
    processes = list_user_processes(session, user.id, include_archived=include_archived)
    result = []
    for process in processes:
        role = get_user_access_role(session, process, user.id)
        result.append(ProcessSummaryResponse(
            id=process.id,
            title=process.title,
            description=process.description,
            owner_id=process.owner_id,
            status=process.status,
            visibility=process.visibility,
            current_version=process.current_version,
            access_role=role.value if role else None,
            updated_at=process.updated_at.isoformat(),
        ))
    return result


@router.post("/validate", response_model=ValidationResponse)
async def validate_endpoint(
    request: ValidateRequest,
    user_id: str = Depends(get_current_user_id),
):
    """
    Valida un grafo y devuelve errores y advertencias.

    No guarda nada: un grafo inválido se puede guardar igual.
    """
    nodes = [Node.from_dict(n) for n in request.nodes]
    edges = [Edge.from_dict(e) for e in request.edges]
    report = validate_process(nodes, edges)
    return ValidationResponse.model_validate(report.to_dict())


@router.post("/import", response_model=ProcessCreatedResponse)
async def import_process(
    document: dict[str, Any] = Body(..., description="Documento exportado con /export"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Crea un proceso nuevo a partir de un documento exportado."""
    imported = import_json(json.dumps(document))
    process = create_process(
        session,
        owner_id=user.id,
        title=imported.title,
        description=imported.description or "",
        snapshot=imported.snapshot,
        version_comment="Imported",
    )
    logger.info(f"Proceso importado: {process.id} (owner: {user.id})")
    return ProcessCreatedResponse(id=process.id)


@router.get("/{process_id}", response_model=ProcessResponse)
async def get_process_endpoint(
    process_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Obtiene un proceso con su contenido vigente.

    Requiere algún rol sobre el proceso, o que sea público y esté publicado.
    Cada lectura de alguien que no es el owner suma una vista.
    """
    process, ctx = authorize_process(session, process_id, user, Operation.VIEW)
    if ctx.role != Role.OWNER:
        increment_view_count(process)
    return _process_response(process, ctx.role)


@router.put("/{process_id}", response_model=SuccessResponse)
async def update_process_endpoint(
    process_id: str,
    request: ProcessUpdateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Actualiza metadatos y/o contenido de un proceso.

    El contenido se sobrescribe sin chequeo de concurrencia (el último que
    guarda gana) y sin exigir que el grafo pase la validación.
    """
    process, ctx = authorize_process(session, process_id, user, Operation.VIEW)

    metadata_changed = any(
        value is not None
        for value in (request.title, request.description, request.status, request.visibility)
    )
    if metadata_changed:
        gate.authorize(ctx, Operation.EDIT_METADATA)
    if request.content is not None:
        gate.authorize(ctx, Operation.EDIT_GRAPH)
        if request.create_version:
            gate.authorize(ctx, Operation.CREATE_VERSION)

    if metadata_changed:
        try:
            update_process_metadata(
                process,
                title=request.title,
                description=request.description,
                status=request.status,
                visibility=request.visibility,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    if request.content is not None:
        VersionManager(session).save_content(
            process.id,
            _content_to_snapshot(request.content),
            author_id=user.id,
            create_version=request.create_version,
            comment=request.version_comment,
        )

    return SuccessResponse(success=True)


@router.delete("/{process_id}", response_model=SuccessResponse)
async def delete_process_endpoint(
    process_id: str,
    hard: bool = Query(False, description="Borrado definitivo (owner o admin)"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Borra un proceso.

    Por defecto es un borrado lógico (queda archivado y se puede revertir).
    Con `hard=true` se borra junto con versiones, colaboradores y comentarios.
    """
    operation = Operation.HARD_DELETE if hard else Operation.DELETE
    process, _ = authorize_process(session, process_id, user, operation)

    if hard:
        hard_delete_process(session, process)
        logger.info(f"🗑️ Proceso {process_id} borrado definitivamente por {user.id}")
    else:
        soft_delete_process(process)
        logger.info(f"Proceso {process_id} archivado por {user.id}")
    return SuccessResponse(success=True)


@router.post("/{process_id}/unarchive", response_model=SuccessResponse)
async def unarchive_process_endpoint(
    process_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Revierte un borrado lógico."""
    process, _ = authorize_process(session, process_id, user, Operation.DELETE)
    unarchive_process(process)
    return SuccessResponse(success=True)


@router.post("/{process_id}/duplicate", response_model=ProcessCreatedResponse)
async def duplicate_process_endpoint(
    process_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Duplica un proceso visible para el usuario; la copia es suya."""
    process, _ = authorize_process(session, process_id, user, Operation.VIEW)
    copy = duplicate_process(session, process, new_owner_id=user.id)
    logger.info(f"Proceso {process_id} duplicado como {copy.id}")
    return ProcessCreatedResponse(id=copy.id)


@router.get("/{process_id}/export")
async def export_process(
    process_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Descarga el proceso como documento JSON."""
    process, _ = authorize_process(session, process_id, user, Operation.VIEW)
    payload = export_json(
        process.title,
        process_snapshot(process),
        description=process.description,
        metadata={"author": user.email, "currentVersion": process.current_version},
    )
    filename = re.sub(r"[^A-Za-z0-9_-]+", "_", process.title).strip("_") or "process"
    return Response(
        content=payload,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}.json"'},
    )
