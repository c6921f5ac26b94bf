"""
Modelos de request/response para la API.

Estos modelos definen la estructura esperada de los requests HTTP,
validando tipos y valores antes de pasarlos al core.

Los nombres de campo viajan en camelCase (`versionComment`, `accessRole`, ...),
igual que el formato de nodos y conexiones que consume el editor. Del lado
Python se usan en snake_case.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base común: alias camelCase y construcción desde objetos ORM."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Contenido del diagrama
# ============================================================================

class GraphContent(ApiModel):
    """Snapshot de un diagrama: nodos, conexiones y viewport."""

    nodes: list[dict[str, Any]] = Field(default_factory=list, description="Nodos del diagrama")
    edges: list[dict[str, Any]] = Field(default_factory=list, description="Conexiones entre nodos")
    viewport: Optional[dict[str, Any]] = Field(
        default=None,
        description="Posición y zoom del lienzo ({x, y, zoom})",
    )


# ============================================================================
# Procesos
# ============================================================================

class ProcessCreateRequest(ApiModel):
    """Request para crear un proceso. Si trae contenido, se crea la versión 1."""

    title: str = Field(..., min_length=1, description="Título del proceso")
    description: Optional[str] = Field(default=None, description="Descripción")
    content: Optional[GraphContent] = Field(default=None, description="Contenido inicial")
    version_comment: Optional[str] = Field(default=None, description="Comentario de la versión 1")


class ProcessUpdateRequest(ApiModel):
    """
    Request para actualizar un proceso.

    `content` sobrescribe el grafo vigente (sin chequeo de concurrencia).
    Con `createVersion=true` además se congela como versión nueva.
    """

    title: Optional[str] = Field(default=None, min_length=1, description="Título")
    description: Optional[str] = Field(default=None, description="Descripción")
    status: Optional[str] = Field(default=None, description="draft | published | archived")
    visibility: Optional[str] = Field(default=None, description="private | public")
    content: Optional[GraphContent] = Field(default=None, description="Contenido nuevo")
    create_version: bool = Field(default=False, description="Crear versión con el contenido")
    version_comment: Optional[str] = Field(default=None, description="Comentario de la versión")


class ProcessCreatedResponse(ApiModel):
    id: str = Field(..., description="ID del proceso creado")


class SuccessResponse(ApiModel):
    success: bool = True


class ProcessSummaryResponse(ApiModel):
    """Proceso en listados (sin contenido)."""

    id: str
    title: str
    description: Optional[str] = None
    owner_id: str
    status: str
    visibility: str
    current_version: int
    access_role: Optional[str] = None
    updated_at: str


class ProcessResponse(ApiModel):
    """Proceso completo con contenido y rol del usuario que lo pide."""

    id: str
    title: str
    description: Optional[str] = None
    owner_id: str
    status: str
    visibility: str
    current_version: int
    view_count: int
    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]]
    viewport: dict[str, Any]
    access_role: Optional[str] = Field(default=None, description="Rol del usuario sobre el proceso")
    created_at: str
    updated_at: str
    deleted_at: Optional[str] = None


# ============================================================================
# Validación
# ============================================================================

class ValidateRequest(ApiModel):
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    edges: list[dict[str, Any]] = Field(default_factory=list)


class ValidationIssueResponse(ApiModel):
    severity: str
    code: str
    message: str
    node_id: Optional[str] = None


class ValidationResponse(ApiModel):
    is_valid: bool
    errors: list[ValidationIssueResponse]
    warnings: list[ValidationIssueResponse]


# ============================================================================
# Versiones
# ============================================================================

class VersionResponse(ApiModel):
    id: str
    process_id: str
    version_number: int
    comment: Optional[str] = None
    created_by: str
    created_at: str


class VersionDetailResponse(VersionResponse):
    nodes: list[dict[str, Any]]
    edges: list[dict[str, Any]]
    viewport: dict[str, Any]


class VersionCompareResponse(ApiModel):
    left: VersionDetailResponse
    right: VersionDetailResponse
    added_nodes: list[str]
    removed_nodes: list[str]
    changed_nodes: list[str]
    added_edges: list[str]
    removed_edges: list[str]
    changed_edges: list[str]


# ============================================================================
# Colaboradores
# ============================================================================

class CollaboratorAddRequest(ApiModel):
    """Invitar por ID de usuario o por email."""

    user_id: Optional[str] = Field(default=None, description="ID del usuario a invitar")
    email: Optional[EmailStr] = Field(default=None, description="Email del usuario a invitar")
    role: str = Field(..., description="editor | viewer | commenter")


class CollaboratorRoleUpdateRequest(ApiModel):
    role: str = Field(..., description="editor | viewer | commenter")


class CollaboratorResponse(ApiModel):
    id: str
    process_id: str
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
    invited_by: Optional[str] = None
    created_at: str


# ============================================================================
# Comentarios
# ============================================================================

class CommentCreateRequest(ApiModel):
    content: str = Field(..., min_length=1, description="Texto del comentario")
    node_id: Optional[str] = Field(default=None, description="Nodo comentado (None = todo el proceso)")
    parent_id: Optional[str] = Field(default=None, description="Comentario al que responde")


class CommentResponse(ApiModel):
    id: str
    process_id: str
    user_id: str
    node_id: Optional[str] = None
    parent_id: Optional[str] = None
    content: str
    resolved: bool
    created_at: str
