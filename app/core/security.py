from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from jose import jwt, JWTError
from pydantic import ValidationError
import logging

from app.core.config import settings
from app.schemas.token import TokenPayload
from app.schemas.usuario import UsuarioProfile

logger = logging.getLogger(__name__)

ALGORITHM = settings.ALGORITHM

# Clave única bajo la que el cliente guarda su registro de sesión
SESSION_STORAGE_KEY = "auth_user"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def session_expiry(login_time: Optional[datetime] = None) -> datetime:
    """Instante absoluto de expiración: hora de login + duración de sesión."""
    start = login_time or utcnow()
    return start + timedelta(hours=settings.SESSION_DURATION_HOURS)


def build_session_record(profile: UsuarioProfile, expires_at: datetime) -> Dict[str, Any]:
    """
    Construye el registro de sesión persistible:
    el perfil completo del usuario y `expiresAt` en milisegundos epoch.
    """
    return {
        "user": profile.model_dump(mode="json", by_alias=True),
        "expiresAt": int(expires_at.timestamp() * 1000),
    }


def parse_session_record(record: Dict[str, Any], now: Optional[datetime] = None) -> Optional[UsuarioProfile]:
    """
    Restaura el perfil de un registro de sesión.
    Devuelve None si el registro expiró o no tiene el formato esperado.
    """
    current = now or utcnow()
    try:
        expires_at_ms = int(record["expiresAt"])
        if current.timestamp() * 1000 > expires_at_ms:
            logger.info("Registro de sesión expirado.")
            return None
        return UsuarioProfile.model_validate(record["user"])
    except (KeyError, TypeError, ValueError, ValidationError) as e:
        logger.warning(f"Registro de sesión inválido: {e}")
        return None


def create_access_token(profile: UsuarioProfile, expires_at: datetime) -> str:
    """
    Crea un token JWT que transporta el registro de sesión.
    `exp` coincide con la expiración de la sesión y `jti` identifica
    la sesión para poder revocarla en el logout.
    """
    to_encode = {
        "sub": profile.id,
        "exp": expires_at,
        "jti": uuid4().hex,
        "user": profile.model_dump(mode="json", by_alias=True),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenPayload]:
    """
    Decodifica un token de acceso, valida su estructura y expiración.
    """
    try:
        payload_dict = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        return TokenPayload(**payload_dict)
    except (JWTError, ValidationError, KeyError) as e:
        logger.warning(f"Error decodificando token de acceso: {e}")
        return None
