import json
import logging
from datetime import datetime
from typing import Callable, Optional, Sequence, Union

from app.core.security import (
    SESSION_STORAGE_KEY,
    build_session_record,
    parse_session_record,
    session_expiry,
    utcnow,
)
from app.core.storage import KeyValueStorage
from app.models.usuario import Usuario
from app.schemas.auth import AuthState
from app.schemas.enums import Section
from app.schemas.usuario import UsuarioProfile

from .authorization import AuthorizationContext
from .usuario import UsuarioService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Login, logout y restauración de la sesión persistida en un almacenamiento
    clave-valor bajo una única clave.
    """

    def __init__(
        self,
        users: UsuarioService,
        storage: KeyValueStorage,
        now: Callable[[], datetime] = utcnow,
    ):
        self.users = users
        self.storage = storage
        self.now = now

    def login(self, username: str, password: str) -> Usuario:
        """
        Verifica las credenciales y persiste el registro de sesión.
        Lanza AuthenticationError si el login falla.
        """
        login_time = self.now()
        user = self.users.login(username=username, password=password)
        profile = UsuarioProfile.model_validate(user)
        record = build_session_record(profile, session_expiry(login_time))
        self.storage.set_item(SESSION_STORAGE_KEY, json.dumps(record))
        logger.info(f"Sesión iniciada para '{user.username}'.")
        return user

    def logout(self) -> None:
        self.storage.remove_item(SESSION_STORAGE_KEY)
        logger.info("Sesión cerrada.")

    def get_current_user(self) -> Optional[UsuarioProfile]:
        """
        Lee el registro persistido. Si expiró o está corrupto se descarta
        y se devuelve None.
        """
        raw = self.storage.get_item(SESSION_STORAGE_KEY)
        if raw is None:
            return None
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Registro de sesión ilegible, se descarta: {e}")
            self.storage.remove_item(SESSION_STORAGE_KEY)
            return None
        profile = parse_session_record(record, now=self.now()) if isinstance(record, dict) else None
        if profile is None:
            self.storage.remove_item(SESSION_STORAGE_KEY)
        return profile

    def is_session_valid(self) -> bool:
        return self.get_current_user() is not None


class AuthContext:
    """
    Estado de autenticación de un cliente (equivalente al proveedor de la UI).
    Empieza en carga hasta que `initialize()` restaura la sesión.
    """

    def __init__(self, authorization: AuthorizationContext, auth_service: Optional[AuthService] = None):
        self.authorization = authorization
        self.auth_service = auth_service
        self.state = AuthState(is_loading=True)

    @property
    def user(self) -> Optional[UsuarioProfile]:
        return self.state.user

    def set_user(self, user: Optional[UsuarioProfile]) -> None:
        self.state = AuthState(user=user, is_authenticated=user is not None, is_loading=False)

    def initialize(self) -> AuthState:
        """Restaura la sesión persistida. Sin almacenamiento, queda sin sesión."""
        user = self.auth_service.get_current_user() if self.auth_service else None
        self.set_user(user)
        return self.state

    def login(self, username: str, password: str) -> AuthState:
        if self.auth_service is None:
            raise RuntimeError("AuthContext sin servicio de sesión.")
        user = self.auth_service.login(username, password)
        self.set_user(UsuarioProfile.model_validate(user))
        return self.state

    def logout(self) -> AuthState:
        if self.auth_service:
            self.auth_service.logout()
        self.set_user(None)
        return self.state

    def has_permission(self, required: Union[str, Sequence[str]]) -> bool:
        return self.authorization.has_permission(self.user, required)

    def can_access(self, section_id: Union[str, Section]) -> bool:
        return self.authorization.can_access(self.user, section_id)
