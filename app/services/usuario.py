import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from app.core.password import get_password_hash, verify_password
from app.core.permissions import (
    ADMIN_ROLE_NAME,
    MANAGER_ROLE_NAME,
    RECEPTIONIST_ROLE_NAME,
    TECHNICIAN_ROLE_NAME,
)
from app.models.usuario import Usuario
from app.schemas.auth import DemoAccount
from app.schemas.usuario import UsuarioCreate, UsuarioUpdate

from .base_service import BaseService

logger = logging.getLogger(__name__)

# Cuentas de demostración, una por rol: (usuario, contraseña, email, rol, nombre completo, alta)
DEMO_ACCOUNTS: List[Tuple[str, str, str, str, str, datetime]] = [
    ("admin", "admin123", "admin@repair.example", ADMIN_ROLE_NAME,
     "Administrador del Sistema", datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ("manager", "manager123", "manager@repair.example", MANAGER_ROLE_NAME,
     "Pedro Sergio Ivanov", datetime(2024, 2, 1, tzinfo=timezone.utc)),
    ("tech", "tech123", "tech@repair.example", TECHNICIAN_ROLE_NAME,
     "Alejo Sidorov", datetime(2024, 3, 1, tzinfo=timezone.utc)),
    ("reception", "reception123", "reception@repair.example", RECEPTIONIST_ROLE_NAME,
     "Ana Petrova", datetime(2024, 4, 1, tzinfo=timezone.utc)),
]


def make_avatar(full_name: str) -> str:
    """Iniciales: primera letra de cada palabra separada por espacios, en mayúsculas."""
    return "".join(token[0] for token in full_name.split(" ") if token).upper()


def seed_users() -> List[Usuario]:
    """Usuarios de arranque con credenciales ya hasheadas."""
    users = []
    for index, (username, password, email, role, full_name, created_at) in enumerate(DEMO_ACCOUNTS, start=1):
        users.append(
            Usuario(
                id=str(index),
                username=username,
                full_name=full_name,
                email=email,
                role=role,
                hashed_password=get_password_hash(password),
                avatar=make_avatar(full_name),
                is_active=True,
                created_at=created_at,
            )
        )
    return users


class UsuarioService(BaseService[Usuario, UsuarioCreate, UsuarioUpdate]):
    """
    Servicio para gestionar Usuarios. Incluye validación del formulario de
    alta, contraseñas y cambios de rol/estado.
    """

    def __init__(
        self,
        items: Optional[Iterable[Usuario]] = None,
        role_exists: Optional[Callable[[str], bool]] = None,
    ):
        super().__init__(Usuario, items if items is not None else seed_users())
        self._role_exists = role_exists or (lambda role_id: True)

    def get_by_username(self, *, username: str) -> Optional[Usuario]:
        """Obtiene un usuario por su nombre de usuario."""
        for user in self._items:
            if user.username == username:
                return user
        return None

    def validate_create(self, obj_in: UsuarioCreate) -> None:
        """
        Valida el formulario en orden y se detiene en el primer error.
        No modifica ningún estado.
        """
        if not obj_in.username.strip():
            raise ValidationError("Ingrese el nombre de usuario.", field="username")
        if not obj_in.full_name.strip():
            raise ValidationError("Ingrese el nombre completo del usuario.", field="full_name")
        if "@" not in obj_in.email:
            raise ValidationError("Ingrese un email válido.", field="email")
        if len(obj_in.password) < settings.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"La contraseña debe tener al menos {settings.MIN_PASSWORD_LENGTH} caracteres.",
                field="password",
            )
        if obj_in.password != obj_in.confirm_password:
            raise ValidationError("Las contraseñas no coinciden.", field="confirm_password")

    def create(self, *, obj_in: UsuarioCreate) -> Usuario:
        """
        Crea un nuevo usuario activo con la contraseña hasheada.
        """
        logger.debug(f"Intentando crear usuario: {obj_in.username}")
        try:
            self.validate_create(obj_in)
        except ValidationError as e:
            logger.warning(f"Alta de usuario rechazada ({e.field}): {e.message}")
            raise

        if not self._role_exists(obj_in.role):
            logger.error(f"Rol '{obj_in.role}' no encontrado al crear usuario.")
            raise NotFoundError(f"El rol '{obj_in.role}' no fue encontrado.")

        if self.get_by_username(username=obj_in.username):
            logger.warning(f"Intento de crear usuario con nombre de usuario duplicado: {obj_in.username}")
            raise ConflictError("Ya existe un usuario con ese nombre de usuario.")

        db_obj = Usuario(
            id=self.next_id(),
            username=obj_in.username,
            full_name=obj_in.full_name,
            email=obj_in.email,
            role=obj_in.role,
            hashed_password=get_password_hash(obj_in.password),
            avatar=make_avatar(obj_in.full_name),
            is_active=True,
        )
        self.add(db_obj)
        logger.info(f"Usuario '{db_obj.username}' creado con rol '{db_obj.role}'.")
        return db_obj

    def change_role(self, *, id: str, role_id: str) -> Optional[Usuario]:
        """Reasigna el rol del usuario. Devuelve None si el usuario no existe."""
        if not self._role_exists(role_id):
            logger.error(f"Rol '{role_id}' no encontrado al reasignar usuario {id}.")
            raise NotFoundError(f"El rol '{role_id}' no fue encontrado.")
        updated = self.update(id=id, obj_in={"role": role_id})
        if updated:
            logger.info(f"Rol del usuario '{updated.username}' cambiado a '{role_id}'.")
        return updated

    def toggle_active(self, *, id: str) -> Optional[Usuario]:
        """Invierte el indicador de activo/bloqueado. Devuelve None si el usuario no existe."""
        user = self.get(id)
        if user is None:
            return None
        updated = self.update(id=id, obj_in={"is_active": not user.is_active})
        if updated:
            logger.info(f"Usuario '{updated.username}' {'activado' if updated.is_active else 'bloqueado'}.")
        return updated

    def authenticate(self, *, username: str, password: str) -> Optional[Usuario]:
        """
        Verifica usuario y contraseña. Devuelve el usuario aunque esté bloqueado;
        el llamador decide con is_active.
        """
        user = self.get_by_username(username=username)
        if not user:
            logger.warning(f"Intento de login fallido: Usuario '{username}' no encontrado.")
            return None
        if not verify_password(password, user.hashed_password):
            logger.warning(f"Intento de login fallido: Contraseña incorrecta para usuario '{username}'.")
            return None
        return user

    def is_active(self, user: Usuario) -> bool:
        return user.is_active

    def handle_successful_login(self, *, user: Usuario) -> Usuario:
        """Registra la fecha de último login."""
        updated = self.update(id=user.id, obj_in={"last_login": datetime.now(timezone.utc)})
        logger.info(f"Login exitoso registrado para {user.username}.")
        return updated or user

    def login(self, *, username: str, password: str) -> Usuario:
        """
        Flujo completo de login: credenciales, cuenta activa y fecha de último login.
        Cualquier fallo (usuario, contraseña o cuenta bloqueada) da el mismo error.
        """
        user = self.authenticate(username=username, password=password)
        if not user or not self.is_active(user):
            if user:
                logger.warning(f"Intento de login de usuario bloqueado: '{username}'.")
            raise AuthenticationError()
        return self.handle_successful_login(user=user)

    def demo_accounts(self) -> List[DemoAccount]:
        """Cuentas de demostración sin contraseñas."""
        return [
            DemoAccount(username=username, role=role, full_name=full_name)
            for username, _password, _email, role, full_name, _created in DEMO_ACCOUNTS
        ]
