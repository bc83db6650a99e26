import logging
import re
from typing import Dict, Iterable, List, Optional

from app.core.exceptions import ConflictError, ValidationError
from app.core.permissions import (
    ALL_PERMISSION_KEYS,
    ROLE_HIERARCHY,
    SEED_ROLE_DISPLAY,
    SEED_ROLE_GRANTS,
    PermissionKey,
)
from app.models.rol import Rol
from app.schemas.rol import RolCreate, RolStats, RolUpdate
from .base_service import BaseService

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def slugify_role_name(name: str) -> str:
    """Deriva el identificador del rol: minúsculas y espacios -> guion bajo."""
    return _WHITESPACE.sub("_", name.strip().lower())


def percentage(part: int, whole: int) -> int:
    """Porcentaje redondeado (mitad hacia arriba). Un total de 0 da 0, nunca un error."""
    if whole <= 0:
        return 0
    return int(part * 100 / whole + 0.5)


def seed_roles() -> List[Rol]:
    """Los cuatro roles de arranque con su matriz fina inicial."""
    roles = []
    for role_id, hierarchy in ROLE_HIERARCHY.items():
        name, description, color, icon = SEED_ROLE_DISPLAY[role_id]
        roles.append(
            Rol(
                id=role_id,
                name=name,
                description=description,
                color=color,
                icon=icon,
                hierarchy=hierarchy,
                permissions={key: True for key in SEED_ROLE_GRANTS[role_id]},
            )
        )
    return roles


class RolService(BaseService[Rol, RolCreate, RolUpdate]):
    """
    Registro de roles y matriz fina de permisos (rol x sección x acción).
    """

    def __init__(self, items: Optional[Iterable[Rol]] = None):
        super().__init__(Rol, items if items is not None else seed_roles())

    def hierarchy_of(self, role_id: str) -> Optional[int]:
        """Rango del rol, o None si el rol no está registrado."""
        rol = self.get(role_id)
        return rol.hierarchy if rol else None

    def create(self, *, obj_in: RolCreate) -> Rol:
        """
        Crea un rol con la matriz vacía (todo denegado).
        Lanza ValidationError si el nombre está vacío y ConflictError si el
        identificador derivado ya existe.
        """
        if not obj_in.name.strip():
            logger.warning("Intento de crear rol con nombre vacío.")
            raise ValidationError("Ingrese el nombre del rol.", field="name")

        role_id = slugify_role_name(obj_in.name)
        if self.get(role_id) is not None:
            logger.warning(f"Intento de crear rol con identificador duplicado: '{role_id}'")
            raise ConflictError(f"Ya existe un rol con el identificador '{role_id}'.")

        db_rol = Rol(
            id=role_id,
            name=obj_in.name.strip(),
            description=obj_in.description,
            color=obj_in.color,
            icon=obj_in.icon,
            hierarchy=obj_in.hierarchy,
            permissions={},
        )
        self.add(db_rol)
        logger.info(f"Rol '{db_rol.name}' (ID: {role_id}, jerarquía {db_rol.hierarchy}) creado.")
        return db_rol

    def update(self, *, id: str, obj_in: RolUpdate | Dict) -> Optional[Rol]:
        raw = dict(obj_in) if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        # null equivale a "sin cambios": ningún campo del rol admite None
        update_data = {field: value for field, value in raw.items() if value is not None}
        if "name" in update_data and not update_data["name"].strip():
            raise ValidationError("El nombre del rol no puede quedar vacío.", field="name")
        # La fila de la matriz sólo cambia celda a celda con set_permission
        update_data.pop("permissions", None)
        update_data.pop("id", None)
        return super().update(id=id, obj_in=update_data)

    def set_permission(self, *, role_id: str, key: PermissionKey, granted: bool) -> Rol:
        """
        Cambia exactamente una celda de la matriz fina del rol.
        No toca la tabla de secciones ni otras acciones.
        """
        rol = self.get_or_404(role_id)
        permissions = dict(rol.permissions)
        permissions[key] = granted
        updated = super().update(id=role_id, obj_in={"permissions": permissions})
        logger.info(f"Permisos actualizados: rol '{rol.name}' {key.wire} -> {'concedido' if granted else 'denegado'}.")
        return updated  # type: ignore[return-value]

    def is_granted(self, role_id: str, key: PermissionKey) -> bool:
        rol = self.get(role_id)
        return rol.is_granted(key) if rol else False

    def get_stats(self, rol: Rol) -> RolStats:
        """Cobertura de la matriz: celdas concedidas / total sección x acción."""
        total = len(ALL_PERMISSION_KEYS)
        active = sum(1 for key in ALL_PERMISSION_KEYS if rol.is_granted(key))
        return RolStats(total=total, active=active, percentage=percentage(active, total))
