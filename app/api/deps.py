from typing import Optional
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
import logging

from app.core import security
from app.core.config import settings

from app.models.usuario import Usuario
from app.schemas.enums import Section
from app.schemas.usuario import UsuarioProfile
from app.services.auth import AuthContext
from app.services.authorization import AuthorizationContext

logger = logging.getLogger(__name__)


# --- Dependencia para el contexto de autorización ---
def get_authorization(request: Request) -> AuthorizationContext:
    """Contexto de autorización de esta instancia de la app."""
    return request.app.state.authorization

# --- Dependencia para Autenticación ---
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login"
)
optional_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False
)

def _resolve_user(authorization: AuthorizationContext, token: Optional[str]) -> Optional[Usuario]:
    """Usuario vivo del registro para un token válido, o None."""
    if not token:
        return None
    token_data = security.decode_access_token(token)
    if not token_data or not token_data.sub:
        return None
    if authorization.is_token_revoked(token_data.jti):
        logger.info(f"Token de sesión cerrada rechazado (usuario ID {token_data.sub}).")
        return None
    user = authorization.users.get(token_data.sub)
    if not user:
        logger.warning(f"Usuario no encontrado para ID {token_data.sub} en token válido.")
    return user

def get_current_user(
    authorization: AuthorizationContext = Depends(get_authorization),
    token: str = Depends(reusable_oauth2),
) -> Usuario:
    """Obtiene el usuario actual a partir del token JWT."""
    user = _resolve_user(authorization, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No se pudieron validar las credenciales",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

def get_current_active_user(
    current_user: Usuario = Depends(get_current_user),
) -> Usuario:
    """
    Obtiene el usuario actual y verifica que esté activo.
    Bloquear a un usuario invalida de inmediato sus sesiones abiertas.
    """
    if not current_user.is_active:
        logger.warning(f"Acceso denegado: Usuario inactivo/bloqueado {current_user.username} (ID: {current_user.id}).")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="El usuario está inactivo o bloqueado.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user

def get_auth_context(
    authorization: AuthorizationContext = Depends(get_authorization),
    token: Optional[str] = Depends(optional_oauth2),
) -> AuthContext:
    """
    Estado de autenticación del llamador, sin lanzar 401.
    Un token ausente, vencido o de un usuario bloqueado da un estado sin sesión.
    """
    auth = AuthContext(authorization)
    user = _resolve_user(authorization, token)
    if user is not None and not user.is_active:
        logger.info(f"Token de usuario bloqueado '{user.username}' tratado como sin sesión.")
        user = None
    auth.set_user(UsuarioProfile.model_validate(user) if user else None)
    return auth


class SectionChecker:
    """
    Dependencia de FastAPI que exige visibilidad sobre una sección
    (pertenencia a la tabla de la sección).
    """
    def __init__(self, section: Section):
        self.section = section

    def __call__(
        self,
        request: Request,
        authorization: AuthorizationContext = Depends(get_authorization),
        current_user: Usuario = Depends(get_current_active_user),
    ) -> Usuario:
        logger.debug(f"SectionChecker: Verificando sección '{self.section.value}' para '{current_user.username}' en '{request.url.path}'.")
        if not authorization.can_access(current_user, self.section):
            logger.warning(f"Acceso denegado a '{current_user.username}'. Rol: '{current_user.role}'. Sección requerida: '{self.section.value}'.")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"La sección '{self.section.display_name}' no está disponible para su rol.",
            )
        return current_user

