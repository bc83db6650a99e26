import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.api import deps
from app.models.usuario import Usuario as UsuarioModel
from app.schemas.section import PermissionsCard
from app.services.authorization import AuthorizationContext
from app.services.dashboard import dashboard_service

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get(
    "/permisos",
    response_model=PermissionsCard,
    summary="Tarjeta de permisos del usuario actual",
    response_description="Secciones accesibles y restringidas para el rol del usuario.",
)
def get_permissions_card(
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    current_user: UsuarioModel = Depends(deps.get_current_active_user),
) -> Any:
    """
    Resume qué secciones puede ver el usuario autenticado y qué porcentaje
    del catálogo representan.
    """
    logger.info(f"Usuario '{current_user.username}' solicitando su tarjeta de permisos.")
    return dashboard_service.get_permissions_card(authorization, current_user)
