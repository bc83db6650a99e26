import logging
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api import deps
from app.models.usuario import Usuario as UsuarioModel
from app.schemas.enums import Action, Section
from app.schemas.rol import (
    PermissionToggle,
    PermissionToggleResult,
    Rol,
    RolCreate,
    RolDistribution,
    RolStats,
    RolUpdate,
    SectionAccess,
    SectionAccessUpdate,
)
from app.schemas.section import ActionInfo, SectionInfo
from app.services.authorization import AuthorizationContext

logger = logging.getLogger(__name__)
router = APIRouter()

# La gestión de roles y permisos se protege con la sección 'roles'
require_roles_section = deps.SectionChecker(Section.ROLES)

# ==============================================================================
# Catálogos
# ==============================================================================

@router.get("/sections",
            response_model=List[SectionInfo],
            dependencies=[Depends(deps.get_current_active_user)],
            summary="Catálogo de secciones")
def read_sections() -> Any:
    return [SectionInfo.from_section(section) for section in Section]


@router.get("/actions",
            response_model=List[ActionInfo],
            dependencies=[Depends(deps.get_current_active_user)],
            summary="Catálogo de acciones")
def read_actions() -> Any:
    return [ActionInfo.from_action(action) for action in Action]

# ==============================================================================
# Endpoints para ROLES
# ==============================================================================

@router.post("/roles/",
             response_model=Rol,
             status_code=status.HTTP_201_CREATED,
             summary="Crear un nuevo Rol",
             response_description="El rol creado, con la matriz de permisos vacía.")
def create_rol(
    *,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    rol_in: RolCreate,
    current_user: UsuarioModel = Depends(require_roles_section),
) -> Any:
    """
    Crea un nuevo rol. El identificador se deriva del nombre y un identificador
    repetido se rechaza con 409. El rol nuevo no ve ninguna sección hasta que
    se le conceda.
    """
    logger.info(f"Intento de creación de rol '{rol_in.name}' por usuario {current_user.username}")
    rol = authorization.create_role(rol_in)
    logger.info(f"Rol '{rol.name}' (ID: {rol.id}) creado exitosamente por {current_user.username}.")
    return rol


@router.get("/roles/",
            response_model=List[Rol],
            dependencies=[Depends(require_roles_section)],
            summary="Listar Roles",
            response_description="Una lista de todos los roles definidos.")
def read_roles(
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    skip: int = 0,
    limit: int = 100,
) -> Any:
    """Obtiene una lista de todos los roles del sistema."""
    return authorization.roles.get_multi(skip=skip, limit=limit)


@router.get("/roles/{rol_id}",
            response_model=Rol,
            dependencies=[Depends(require_roles_section)],
            summary="Obtener un Rol por ID",
            response_description="Información detallada del rol, incluyendo su matriz de permisos.")
def read_rol_by_id(
    rol_id: str,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
) -> Any:
    return authorization.roles.get_or_404(rol_id)


@router.patch("/roles/{rol_id}",
              response_model=Rol,
              summary="Actualizar un Rol",
              response_description="Información actualizada del rol.")
def update_rol(
    *,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    rol_id: str,
    rol_in: RolUpdate,
    current_user: UsuarioModel = Depends(require_roles_section),
) -> Any:
    """
    Actualiza nombre, descripción, presentación o rango de un rol.
    La matriz de permisos se modifica celda a celda con PUT .../permissions.
    """
    logger.info(f"Usuario {current_user.username} actualizando rol ID: {rol_id}")
    rol = authorization.roles.update(id=rol_id, obj_in=rol_in)
    if rol is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Rol con ID {rol_id} no encontrado.")
    return rol

# ==============================================================================
# Matriz de permisos y tabla de secciones
# ==============================================================================

@router.get("/roles/{rol_id}/permissions",
            response_model=dict[str, bool],
            dependencies=[Depends(require_roles_section)],
            summary="Matriz de permisos de un Rol")
def read_rol_permissions(
    rol_id: str,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
) -> Any:
    """Todas las celdas 'seccion.accion' del rol, concedidas o no."""
    rol = authorization.roles.get_or_404(rol_id)
    permissions = {}
    for section in Section:
        for action, granted in authorization.section_actions(rol.id, section).items():
            permissions[f"{section.value}.{action}"] = granted
    return permissions


@router.put("/roles/{rol_id}/permissions",
            response_model=PermissionToggleResult,
            summary="Cambiar una celda de la matriz de permisos")
def set_rol_permission(
    *,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    rol_id: str,
    toggle_in: PermissionToggle,
    current_user: UsuarioModel = Depends(require_roles_section),
) -> Any:
    """
    Concede o revoca exactamente una acción de una sección para el rol.
    No modifica la tabla de secciones ni otras acciones.
    """
    logger.info(f"Usuario {current_user.username} cambiando permiso {toggle_in.section.value}.{toggle_in.action.value} del rol '{rol_id}'.")
    return authorization.set_permission(rol_id, toggle_in.section, toggle_in.action, toggle_in.granted)


@router.put("/roles/{rol_id}/sections/{section}",
            response_model=SectionAccess,
            summary="Conceder o retirar la visibilidad de una sección")
def set_rol_section_access(
    *,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    rol_id: str,
    section: str,
    access_in: SectionAccessUpdate,
    current_user: UsuarioModel = Depends(require_roles_section),
) -> Any:
    logger.info(f"Usuario {current_user.username} {'concede' if access_in.allowed else 'retira'} la sección '{section}' al rol '{rol_id}'.")
    allowed_roles = authorization.set_section_access(rol_id, section, access_in.allowed)
    return {"section": section, "allowed_roles": allowed_roles}

# ==============================================================================
# Estadísticas
# ==============================================================================

@router.get("/roles/{rol_id}/stats",
            response_model=RolStats,
            dependencies=[Depends(require_roles_section)],
            summary="Cobertura de permisos de un Rol")
def read_rol_stats(
    rol_id: str,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
) -> Any:
    return authorization.role_stats(rol_id)


@router.get("/roles-distribution",
            response_model=List[RolDistribution],
            dependencies=[Depends(require_roles_section)],
            summary="Distribución de usuarios por Rol")
def read_roles_distribution(
    authorization: AuthorizationContext = Depends(deps.get_authorization),
) -> Any:
    return authorization.role_distribution()
