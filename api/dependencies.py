"""
Dependencias de FastAPI para autenticación y acceso a datos.

Este módulo proporciona dependencias reutilizables para:
- Obtener una sesión de base de datos por request
- Obtener el usuario actual desde el token JWT (Bearer)
"""

from typing import Optional, Generator
from fastapi import HTTPException, Header, Depends
from sqlalchemy.orm import Session

from process_diagram_core.config import get_settings
from process_diagram_core.db import database
from process_diagram_core.db.helpers import get_process, get_user_by_id
from process_diagram_core.db.permissions import get_access_context
from process_diagram_core.db.models import Process, User
from process_diagram_core.permissions import AccessContext, CollaborationGate, Operation

import logging
import jwt  # pyjwt

logger = logging.getLogger(__name__)

gate = CollaborationGate()


def get_db() -> Generator[Session, None, None]:
    """
    Dependencia de FastAPI para obtener una sesión de base de datos.

    Commit si el endpoint termina bien, rollback ante cualquier excepción
    (incluidas las `ProcessDiagramError` que después mapea `api/main.py`).
    """
    database.get_db_engine(echo=False)
    db = database.SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def decode_token(token: str) -> dict:
    """
    Decodifica el JWT.

    Si `JWT_SECRET` está configurado se verifica la firma; si no, se decodifica
    sin verificar (la validación real la hace el proveedor de identidad).
    """
    settings = get_settings()
    if settings.jwt_secret:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    return jwt.decode(token, options={"verify_signature": False})


async def get_current_user_id(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> str:
    """
    Obtiene el ID del usuario actual (`sub`) desde el token JWT.

    Args:
        authorization: Header Authorization con formato "Bearer <token>"

    Returns:
        ID del usuario

    Raises:
        HTTPException: 401 si falta el token o es inválido
    """
    if not authorization:
        logger.warning("Authorization header no presente")
        raise HTTPException(
            status_code=401,
            detail="Missing Authorization header"
        )

    if not authorization.startswith("Bearer "):
        logger.warning(f"Authorization header no tiene formato Bearer: {authorization[:20]}...")
        raise HTTPException(
            status_code=401,
            detail="Invalid Authorization header format. Expected 'Bearer <token>'"
        )

    token = authorization.replace("Bearer ", "").strip()

    try:
        decoded = decode_token(token)
    except jwt.PyJWTError as e:
        logger.error(f"Error decodificando JWT: {e}")
        raise HTTPException(
            status_code=401,
            detail=f"Invalid token: {str(e)}"
        )

    user_id = decoded.get("sub")
    if not user_id:
        logger.warning(f"Token no contiene 'sub'. Campos disponibles: {list(decoded.keys())}")
        raise HTTPException(
            status_code=401,
            detail="Invalid token: no user ID found"
        )
    return user_id


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_db),
) -> User:
    """
    Obtiene el objeto User completo del usuario actual.

    Args:
        user_id: ID del usuario (de get_current_user_id)
        session: Sesión de base de datos

    Returns:
        Objeto User
    """
    user = get_user_by_id(session, user_id)
    if not user:
        logger.warning(f"Usuario {user_id} no encontrado en BD local")
        raise HTTPException(status_code=404, detail="User not found")
    return user


def authorize_process(
    session: Session,
    process_id: str,
    user: User,
    operation: Operation,
) -> tuple[Process, AccessContext]:
    """
    Busca el proceso y verifica que `user` pueda hacer `operation` sobre él.

    Raises:
        NotFoundError: Si el proceso no existe (404).
        AccessDeniedError: Si el rol no alcanza (403).
    """
    process = get_process(session, process_id)
    ctx = get_access_context(session, process, user)
    gate.authorize(ctx, operation)
    return process, ctx
