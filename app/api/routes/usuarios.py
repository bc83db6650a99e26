import logging
from typing import Any, List

from fastapi import APIRouter, Depends, HTTPException, status

from app.api import deps
from app.models.usuario import Usuario as UsuarioModel
from app.schemas.common import Msg
from app.schemas.enums import Section
from app.schemas.usuario import Usuario, UsuarioCreate, UsuarioRoleChange
from app.services.authorization import AuthorizationContext

logger = logging.getLogger(__name__)
router = APIRouter()

require_roles_section = deps.SectionChecker(Section.ROLES)

@router.post(
    "/",
    response_model=Usuario,
    status_code=status.HTTP_201_CREATED,
    summary="Crear un nuevo Usuario",
    response_description="El usuario creado."
)
def create_usuario(
    *,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    user_in: UsuarioCreate,
    current_user: UsuarioModel = Depends(require_roles_section)
) -> Any:
    """
    Crea un nuevo usuario activo. Las validaciones se informan de a una
    (422 con el campo afectado); un nombre de usuario repetido da 409.
    """
    logger.info(f"Intento de creación de usuario '{user_in.username}' por admin '{current_user.username}'")
    user = authorization.create_user(user_in)
    logger.info(f"Usuario '{user.username}' (ID: {user.id}) creado exitosamente por '{current_user.username}'.")
    return user


@router.get(
    "/me",
    response_model=Usuario,
    summary="Obtener perfil del usuario actual",
    response_description="Información del usuario autenticado."
)
def read_usuario_me(
    current_user: UsuarioModel = Depends(deps.get_current_active_user),
) -> Any:
    """Obtiene la información del usuario que realiza la petición (autenticado)."""
    return current_user


@router.get(
    "/",
    response_model=List[Usuario],
    dependencies=[Depends(require_roles_section)],
    summary="Listar Usuarios",
)
def read_usuarios(
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    skip: int = 0,
    limit: int = 100,
) -> Any:
    return authorization.users.get_multi(skip=skip, limit=limit)


@router.patch(
    "/{user_id}/role",
    response_model=Usuario,
    summary="Reasignar el rol de un Usuario",
)
def change_usuario_role(
    *,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    user_id: str,
    role_in: UsuarioRoleChange,
    current_user: UsuarioModel = Depends(require_roles_section),
) -> Any:
    """Cambia la etiqueta de rol del usuario. Un rol inexistente da 404."""
    logger.info(f"Admin '{current_user.username}' reasignando usuario ID {user_id} al rol '{role_in.role}'.")
    user = authorization.change_user_role(user_id, role_in.role)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Usuario con ID {user_id} no encontrado.")
    return user


@router.post(
    "/{user_id}/toggle-active",
    response_model=Usuario,
    summary="Activar o bloquear un Usuario",
)
def toggle_usuario_active(
    *,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    user_id: str,
    current_user: UsuarioModel = Depends(require_roles_section),
) -> Any:
    """
    Invierte el estado activo/bloqueado. Un usuario bloqueado pierde de
    inmediato el acceso con los tokens que ya tenía.
    """
    if user_id == current_user.id:
        logger.error(f"Admin '{current_user.username}' intentó bloquearse a sí mismo. Operación denegada.")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No puedes bloquear tu propia cuenta.")
    user = authorization.toggle_user_active(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Usuario con ID {user_id} no encontrado.")
    return user


@router.delete(
    "/{user_id}",
    response_model=Msg,
    status_code=status.HTTP_200_OK,
    summary="Eliminar un Usuario por ID (Admin)",
    response_description="Mensaje de confirmación."
)
def delete_usuario(
    *,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    user_id: str,
    current_user: UsuarioModel = Depends(require_roles_section),
) -> Any:
    """
    Elimina un usuario específico del sistema.
    Un administrador no puede eliminarse a sí mismo.
    """
    logger.warning(f"Admin '{current_user.username}' intentando eliminar usuario ID: {user_id}.")

    if user_id == current_user.id:
        logger.error(f"Admin '{current_user.username}' intentó eliminarse a sí mismo. Operación denegada.")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No puedes eliminar tu propia cuenta de administrador.")

    if not authorization.remove_user(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Usuario con ID {user_id} no encontrado.")
    return {"msg": f"Usuario (ID: {user_id}) eliminado correctamente."}
