import logging
import time
from typing import Dict, List, Optional, Sequence, Union

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.core.permissions import ROLE_CAPABILITIES, SECTION_CAPABILITIES, PermissionKey
from app.models.rol import Rol
from app.models.usuario import Usuario
from app.schemas.enums import Action, Section
from app.schemas.rol import PermissionToggleResult, RolCreate, RolDistribution, RolStats
from app.schemas.usuario import UsuarioCreate, UsuarioProfile

from .rol import RolService, percentage
from .seccion import SectionPolicyService, parse_section
from .usuario import UsuarioService

logger = logging.getLogger(__name__)

# Cualquier objeto con `role`: el usuario del registro o el perfil de sesión
UserLike = Union[Usuario, UsuarioProfile]


class AuthorizationContext:
    """
    Estado de autorización de una instancia de la aplicación: registro de roles,
    matriz fina, tabla de secciones y lista de usuarios.

    Se construye una vez al crear la app y se pasa a quien lo necesite.
    Los tests construyen instancias aisladas.
    """

    def __init__(
        self,
        roles: Optional[RolService] = None,
        users: Optional[UsuarioService] = None,
        sections: Optional[SectionPolicyService] = None,
        access_source: Optional[str] = None,
    ):
        self.roles = roles if roles is not None else RolService()
        self.users = users if users is not None else UsuarioService(role_exists=self.role_exists)
        self.sections = sections if sections is not None else SectionPolicyService()
        self.access_source = access_source or settings.SECTION_ACCESS_SOURCE
        # jti de sesiones cerradas -> exp (epoch s) del token revocado
        self.revoked_tokens: Dict[str, int] = {}

    def role_exists(self, role_id: str) -> bool:
        return self.roles.get(role_id) is not None

    def revoke_token(self, jti: str, exp: int) -> None:
        """Cierra la sesión de un token. Los revocados ya vencidos se purgan."""
        now = int(time.time())
        self.revoked_tokens = {key: until for key, until in self.revoked_tokens.items() if until > now}
        self.revoked_tokens[jti] = exp

    def is_token_revoked(self, jti: Optional[str]) -> bool:
        return jti is not None and jti in self.revoked_tokens

    # =================================================================
    # Consultas
    # =================================================================

    def has_permission(self, user: Optional[UserLike], required: Union[str, Sequence[str]]) -> bool:
        """
        Comprobación jerárquica: el rango del usuario es >= al de AL MENOS UNO
        de los roles aceptables. Una lista vacía nunca se satisface y los roles
        desconocidos de la lista se ignoran.
        """
        if user is None:
            return False
        acceptable = [required] if isinstance(required, str) else list(required)
        user_rank = self.roles.hierarchy_of(user.role)
        if user_rank is None:
            logger.warning(f"Usuario '{user.username}' con rol desconocido '{user.role}'.")
            return False
        for role_id in acceptable:
            rank = self.roles.hierarchy_of(role_id)
            if rank is not None and user_rank >= rank:
                return True
        return False

    def can_access(self, user: Optional[UserLike], section_id: Union[str, Section]) -> bool:
        """
        Visibilidad de una sección. Las secciones fuera de la tabla son accesibles;
        las de la tabla exigen que el rol figure en su lista (pertenencia, no jerarquía).
        """
        if user is None:
            return False
        if self.access_source == "matrix":
            section = parse_section(section_id)
            if section is None:
                return True
            return self.section_visible(user.role, section)

        allowed = self.sections.allowed_roles(section_id)
        if allowed is None:
            return True
        return user.role in allowed

    def section_visible(self, role_id: str, section_id: Union[str, Section]) -> bool:
        """Proyección de la matriz fina: alguna acción concedida en la sección."""
        section = parse_section(section_id)
        if section is None:
            return False
        return any(self.roles.is_granted(role_id, PermissionKey(section, action)) for action in Action)

    def visible_sections(self, user: Optional[UserLike]) -> List[Section]:
        return [section for section in Section if self.can_access(user, section)]

    def can(self, user: Optional[UserLike], capability: str) -> bool:
        """Atajos de las vistas: por jerarquía o por visibilidad de sección."""
        if capability in ROLE_CAPABILITIES:
            return self.has_permission(user, ROLE_CAPABILITIES[capability])
        if capability in SECTION_CAPABILITIES:
            return self.can_access(user, SECTION_CAPABILITIES[capability])
        logger.warning(f"Capacidad desconocida consultada: '{capability}'")
        return False

    def capabilities(self, user: Optional[UserLike]) -> Dict[str, bool]:
        names = list(ROLE_CAPABILITIES) + list(SECTION_CAPABILITIES)
        return {name: self.can(user, name) for name in names}

    def section_actions(self, role_id: str, section: Section) -> Dict[str, bool]:
        """Fila de la matriz fina del rol para una sección: acción -> concedida."""
        return {action.value: self.roles.is_granted(role_id, PermissionKey(section, action)) for action in Action}

    # =================================================================
    # Mutaciones de roles y matriz
    # =================================================================

    def create_role(self, obj_in: RolCreate) -> Rol:
        return self.roles.create(obj_in=obj_in)

    def set_permission(self, role_id: str, section: Section, action: Action, granted: bool) -> PermissionToggleResult:
        """Cambia una celda de la matriz y devuelve la confirmación para el cliente."""
        key = PermissionKey(section, action)
        rol = self.roles.set_permission(role_id=role_id, key=key, granted=granted)
        verb = "concedido" if granted else "revocado"
        return PermissionToggleResult(
            role_id=role_id,
            permission=key.wire,
            granted=granted,
            msg=f"Permiso '{key.wire}' {verb} para el rol '{rol.name}'.",
        )

    def set_section_access(self, role_id: str, section_id: str, allowed: bool) -> List[str]:
        """Agrega o retira un rol de la tabla gruesa de una sección."""
        if not self.role_exists(role_id):
            raise NotFoundError(f"El rol '{role_id}' no fue encontrado.")
        section = parse_section(section_id)
        if section is None:
            raise NotFoundError(f"La sección '{section_id}' no existe.")
        return self.sections.set_access(role_id=role_id, section=section, allowed=allowed)

    # =================================================================
    # Mutaciones de usuarios
    # =================================================================

    def create_user(self, obj_in: UsuarioCreate) -> Usuario:
        return self.users.create(obj_in=obj_in)

    def toggle_user_active(self, user_id: str) -> Optional[Usuario]:
        return self.users.toggle_active(id=user_id)

    def change_user_role(self, user_id: str, role_id: str) -> Optional[Usuario]:
        return self.users.change_role(id=user_id, role_id=role_id)

    def remove_user(self, user_id: str) -> bool:
        return self.users.remove(id=user_id)

    # =================================================================
    # Estadísticas
    # =================================================================

    def role_stats(self, role_id: str) -> RolStats:
        return self.roles.get_stats(self.roles.get_or_404(role_id))

    def role_distribution(self) -> List[RolDistribution]:
        """Usuarios por rol y porcentaje sobre el total (0 si no hay usuarios)."""
        users = self.users.get_all()
        total = len(users)
        distribution = []
        for rol in self.roles.get_all():
            count = sum(1 for user in users if user.role == rol.id)
            distribution.append(
                RolDistribution(role_id=rol.id, name=rol.name, user_count=count, percentage=percentage(count, total))
            )
        return distribution
