import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm

from app.api import deps
from app.core import security
from app.schemas.auth import AuthState, DemoAccount
from app.schemas.common import Msg
from app.schemas.token import Token
from app.schemas.usuario import UsuarioProfile
from app.services.auth import AuthContext
from app.services.authorization import AuthorizationContext

router = APIRouter()
logger = logging.getLogger(__name__)

# --- Rutas de Login ---
@router.post("/login", response_model=Token)
def login_access_token(
    request: Request,
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    form_data: OAuth2PasswordRequestForm = Depends()
) -> Any:
    """
    Endpoint de login. Devuelve un token cuyo contenido es el registro de sesión
    (perfil del usuario + expiración a las 24 horas del login).
    """
    ip_address = request.client.host if request.client else "N/A"
    logger.info(f"Intento de login para usuario '{form_data.username}' desde IP {ip_address}")

    expires_at = security.session_expiry()
    user = authorization.users.login(username=form_data.username, password=form_data.password)
    access_token = security.create_access_token(UsuarioProfile.model_validate(user), expires_at)

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_at": expires_at,
        "user": user,
    }


@router.post("/logout", response_model=Msg, summary="Cerrar sesión")
def logout(
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    auth: AuthContext = Depends(deps.get_auth_context),
    token: Optional[str] = Depends(deps.optional_oauth2),
) -> Any:
    """
    Cierra la sesión: el token queda revocado y deja de autenticar.
    Sin token válido la respuesta es la misma.
    """
    token_data = security.decode_access_token(token) if token else None
    if token_data and token_data.jti:
        authorization.revoke_token(token_data.jti, token_data.exp)
    if auth.user:
        logger.info(f"Usuario '{auth.user.username}' cerró sesión.")
    auth.logout()
    return {"msg": "Sesión cerrada correctamente."}


@router.get("/session", response_model=AuthState, summary="Estado de la sesión actual")
def read_session(auth: AuthContext = Depends(deps.get_auth_context)) -> Any:
    """
    Estado de autenticación del llamador. Nunca responde 401: sin token válido
    devuelve un estado sin sesión.
    """
    return auth.state


@router.get("/demo-accounts", response_model=List[DemoAccount], summary="Cuentas de demostración")
def read_demo_accounts(authorization: AuthorizationContext = Depends(deps.get_authorization)) -> Any:
    """Usuarios de demostración (sin contraseñas)."""
    return authorization.users.demo_accounts()
