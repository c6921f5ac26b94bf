"""
Autorización por rol de acceso a un proceso (CollaborationGate).

Roles
-----
- owner: creador del proceso. Exactamente uno por proceso.
- editor: puede modificar el grafo, los metadatos y crear/restaurar versiones.
- commenter: puede ver y comentar.
- viewer: solo puede ver.

La autorización es un chequeo estático por llamada: una tabla
`rol -> operaciones permitidas` (`ROLE_PERMISSIONS`) más dos reglas fuera de la
tabla:
- Un proceso público y publicado se puede ver sin rol.
- Un administrador del sistema puede borrar (también en forma definitiva)
  cualquier proceso.

No hay estado ni transiciones: el rol se busca y se compara.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import AccessDeniedError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Rol de acceso de un usuario sobre un proceso."""

    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"
    COMMENTER = "commenter"


# Roles que se pueden asignar a colaboradores (owner es implícito)
GRANTABLE_ROLES = frozenset({Role.EDITOR, Role.VIEWER, Role.COMMENTER})


class Operation(str, Enum):
    """Operaciones autorizables."""

    VIEW = "view"
    VIEW_VERSIONS = "view_versions"
    COMMENT = "comment"
    EDIT_GRAPH = "edit_graph"
    EDIT_METADATA = "edit_metadata"
    CREATE_VERSION = "create_version"
    RESTORE_VERSION = "restore_version"
    MANAGE_COLLABORATORS = "manage_collaborators"
    DELETE = "delete"
    HARD_DELETE = "hard_delete"


_READ = frozenset({Operation.VIEW, Operation.VIEW_VERSIONS})
_WRITE = frozenset({
    Operation.EDIT_GRAPH,
    Operation.EDIT_METADATA,
    Operation.CREATE_VERSION,
    Operation.RESTORE_VERSION,
})

ROLE_PERMISSIONS: dict[Role, frozenset[Operation]] = {
    Role.OWNER: frozenset(Operation),
    Role.EDITOR: _READ | _WRITE | {Operation.COMMENT},
    Role.COMMENTER: _READ | {Operation.COMMENT},
    Role.VIEWER: _READ,
}

# Operaciones que un administrador puede hacer sin tener rol en el proceso
ADMIN_OVERRIDES = frozenset({Operation.DELETE, Operation.HARD_DELETE})


@dataclass(frozen=True)
class AccessContext:
    """
    Lo que hace falta para autorizar una llamada.

    Attributes:
        user_id: Usuario que llama.
        role: Rol sobre el proceso (None si no tiene ninguno).
        is_admin: Si el usuario es administrador del sistema.
        is_public: Si el proceso es público Y está publicado.
    """
    user_id: str
    role: Optional[Role]
    is_admin: bool = False
    is_public: bool = False


class CollaborationGate:
    """Chequeo de autorización previo a GraphStore / VersionManager."""

    def __init__(self, role_permissions: dict[Role, frozenset[Operation]] | None = None):
        self.role_permissions = role_permissions or ROLE_PERMISSIONS

    def can(self, ctx: AccessContext, operation: Operation) -> bool:
        if ctx.role is not None and operation in self.role_permissions.get(ctx.role, frozenset()):
            return True
        if operation == Operation.VIEW and ctx.is_public:
            return True
        if ctx.is_admin and operation in ADMIN_OVERRIDES:
            return True
        return False

    def authorize(self, ctx: AccessContext, operation: Operation) -> None:
        """
        Verifica que `ctx` permita `operation`.

        Raises:
            AccessDeniedError: Si el rol no alcanza.
        """
        if not self.can(ctx, operation):
            role = ctx.role.value if ctx.role else None
            logger.info(f"Acceso denegado: usuario={ctx.user_id} rol={role} operación={operation.value}")
            raise AccessDeniedError(operation.value, role)

    def authorize_grant_removal(self, ctx: AccessContext, target_user_id: str) -> None:
        """
        Quitar un colaborador: el owner puede quitar a cualquiera, y cada
        colaborador puede quitarse a sí mismo.
        """
        if ctx.user_id == target_user_id and ctx.role is not None:
            return
        self.authorize(ctx, Operation.MANAGE_COLLABORATORS)


def parse_role(value: str | Role | None) -> Optional[Role]:
    """Convierte el string guardado en DB a `Role` (None si no hay rol)."""
    if value is None or isinstance(value, Role):
        return value
    return Role(value)
