"""
Endpoints de versiones de procesos.

Endpoints:
- GET /api/v1/processes/{process_id}/versions: Listar versiones (más nueva primero)
- GET /api/v1/processes/{process_id}/versions/{version_number}: Versión por número
- GET /api/v1/versions/compare?left=&right=: Comparar dos versiones
- GET /api/v1/versions/{version_id}: Versión por ID
- POST /api/v1/versions/{version_id}/restore: Restaurar como versión nueva
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from process_diagram_core.db.models import ProcessVersion, User
from process_diagram_core.permissions import Operation
from process_diagram_core.versioning import VersionManager

from ..dependencies import authorize_process, get_current_user, get_db
from ..models.requests import VersionCompareResponse, VersionDetailResponse, VersionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["versions"])


def _version_response(version: ProcessVersion) -> VersionResponse:
    return VersionResponse(
        id=version.id,
        process_id=version.process_id,
        version_number=version.version_number,
        comment=version.comment,
        created_by=version.created_by,
        created_at=version.created_at.isoformat(),
    )


def _version_detail(version: ProcessVersion) -> VersionDetailResponse:
    data = VersionManager.snapshot_of(version).to_dict()
    return VersionDetailResponse(
        **_version_response(version).model_dump(),
        nodes=data["nodes"],
        edges=data["edges"],
        viewport=data["viewport"],
    )


@router.get("/processes/{process_id}/versions", response_model=list[VersionResponse])
async def list_versions(
    process_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Lista las versiones de un proceso, más nueva primero."""
    authorize_process(session, process_id, user, Operation.VIEW_VERSIONS)
    versions = VersionManager(session).list_versions(process_id)
    return [_version_response(v) for v in versions]


@router.get("/processes/{process_id}/versions/{version_number}", response_model=VersionDetailResponse)
async def get_version_by_number(
    process_id: str,
    version_number: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    authorize_process(session, process_id, user, Operation.VIEW_VERSIONS)
    version = VersionManager(session).get_version_by_number(process_id, version_number)
    return _version_detail(version)


@router.get("/versions/compare", response_model=VersionCompareResponse)
async def compare_versions(
    left: str = Query(..., description="ID de la versión de la izquierda"),
    right: str = Query(..., description="ID de la versión de la derecha"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Compara dos versiones del mismo proceso.

    Devuelve ambos snapshots y los ids de nodos/conexiones agregados,
    quitados y modificados de izquierda a derecha.
    """
    manager = VersionManager(session)
    diff = manager.compare(left, right)
    if diff.left.process_id != diff.right.process_id:
        raise HTTPException(
            status_code=400,
            detail="Solo se pueden comparar versiones del mismo proceso"
        )
    authorize_process(session, diff.left.process_id, user, Operation.VIEW_VERSIONS)

    return VersionCompareResponse(
        left=_version_detail(diff.left),
        right=_version_detail(diff.right),
        added_nodes=diff.added_nodes,
        removed_nodes=diff.removed_nodes,
        changed_nodes=diff.changed_nodes,
        added_edges=diff.added_edges,
        removed_edges=diff.removed_edges,
        changed_edges=diff.changed_edges,
    )


@router.get("/versions/{version_id}", response_model=VersionDetailResponse)
async def get_version(
    version_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    version = VersionManager(session).get_version(version_id)
    authorize_process(session, version.process_id, user, Operation.VIEW_VERSIONS)
    return _version_detail(version)


@router.post("/versions/{version_id}/restore", response_model=VersionResponse)
async def restore_version(
    version_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Restaura una versión.

    No reescribe la historia: crea una versión nueva (última + 1) con el mismo
    contenido y la deja como contenido vigente del proceso.
    """
    manager = VersionManager(session)
    source = manager.get_version(version_id)
    authorize_process(session, source.process_id, user, Operation.RESTORE_VERSION)

    restored = manager.restore(source.process_id, version_id, author_id=user.id)
    logger.info(
        f"Versión {source.version_number} restaurada como {restored.version_number} "
        f"(proceso {source.process_id}, usuario {user.id})"
    )
    return _version_response(restored)
