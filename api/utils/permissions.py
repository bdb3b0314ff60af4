"""
Role-based permissions.

Permissions are looked up in a static table keyed by role id. The lookup
functions are pure; ``require_permission`` wraps them as a FastAPI
dependency that reads the caller's role from the ``X-Role-Id`` header.
"""

import logging
from enum import Enum, IntEnum
from typing import Iterable, List, Optional

from fastapi import Header, HTTPException, status

from config import settings

logger = logging.getLogger(__name__)


class Role(IntEnum):
    ADMIN = 1
    CHOFER = 2
    ANALISTA = 3
    LOGISTICO = 4


ROLE_NAMES = {
    Role.ADMIN: "Administrador",
    Role.CHOFER: "Chofer",
    Role.ANALISTA: "Analista",
    Role.LOGISTICO: "Logístico",
}


class Permission(str, Enum):
    VIEW_ESTADISTICAS = "view_estadisticas"
    VIEW_CHOFERES = "view_choferes"
    VIEW_TRACTORES = "view_tractores"
    VIEW_SEMIRREMOLQUES = "view_semirremolques"
    VIEW_VIAJES = "view_viajes"
    VIEW_USUARIOS = "view_usuarios"
    EDIT_CHOFERES = "edit_choferes"
    EDIT_TRACTORES = "edit_tractores"
    EDIT_SEMIRREMOLQUES = "edit_semirremolques"
    EDIT_VIAJES = "edit_viajes"
    EDIT_USUARIOS = "edit_usuarios"
    CREATE_CHOFERES = "create_choferes"
    CREATE_TRACTORES = "create_tractores"
    CREATE_SEMIRREMOLQUES = "create_semirremolques"
    CREATE_VIAJES = "create_viajes"
    CREATE_USUARIOS = "create_usuarios"
    DELETE_CHOFERES = "delete_choferes"
    DELETE_TRACTORES = "delete_tractores"
    DELETE_SEMIRREMOLQUES = "delete_semirremolques"
    DELETE_VIAJES = "delete_viajes"
    DELETE_USUARIOS = "delete_usuarios"
    EDIT_VENCIMIENTOS = "edit_vencimientos"


ROLE_PERMISSIONS = {
    Role.ADMIN: frozenset(Permission),
    Role.CHOFER: frozenset({Permission.VIEW_VIAJES}),
    Role.ANALISTA: frozenset({Permission.VIEW_ESTADISTICAS}),
    Role.LOGISTICO: frozenset({
        Permission.VIEW_CHOFERES,
        Permission.VIEW_TRACTORES,
        Permission.VIEW_SEMIRREMOLQUES,
        Permission.EDIT_VENCIMIENTOS,
    }),
}


def get_role_permissions(role_id: int) -> List[Permission]:
    """Return every permission of a role, in declaration order; unknown roles get none"""
    granted = ROLE_PERMISSIONS.get(role_id, frozenset())
    return [p for p in Permission if p in granted]


def has_permission(role_id: int, permission: Permission) -> bool:
    """Check whether a role holds a permission"""
    return Permission(permission) in ROLE_PERMISSIONS.get(role_id, frozenset())


def has_any_permission(role_id: int, permissions: Iterable[Permission]) -> bool:
    return any(has_permission(role_id, p) for p in permissions)


def has_all_permissions(role_id: int, permissions: Iterable[Permission]) -> bool:
    return all(has_permission(role_id, p) for p in permissions)


def require_permission(permission: Permission):
    """Build a dependency that rejects callers whose role lacks ``permission``.

    Only enforced when ``settings.enforce_roles`` is on.

    Args:
        permission: The permission the endpoint needs

    Returns:
        An async dependency usable in ``Depends``
    """
    async def dependency(x_role_id: Optional[int] = Header(None)):
        if not settings.enforce_roles:
            return True
        if x_role_id is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Missing X-Role-Id header"
            )
        if not has_permission(x_role_id, permission):
            logger.warning(f"Role {x_role_id} denied {permission.value}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {x_role_id} lacks permission {permission.value}"
            )
        return True

    return dependency
