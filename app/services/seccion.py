import logging
from typing import Dict, List, Mapping, Optional

from app.core.permissions import SEED_SECTION_PERMISSIONS
from app.schemas.enums import Section

logger = logging.getLogger(__name__)


def parse_section(section_id: str) -> Optional[Section]:
    """Devuelve la sección del catálogo o None si el identificador es desconocido."""
    try:
        return Section(section_id)
    except ValueError:
        return None


class SectionPolicyService:
    """
    Tabla gruesa de visibilidad: sección -> lista de roles permitidos.
    Es una lista de permitidos sólo para las secciones que contiene.
    """

    def __init__(self, table: Optional[Mapping[Section, List[str]]] = None):
        source = table if table is not None else SEED_SECTION_PERMISSIONS
        self._table: Dict[Section, List[str]] = {section: list(roles) for section, roles in source.items()}

    def allowed_roles(self, section_id: str) -> Optional[List[str]]:
        """Roles permitidos para la sección, o None si la sección no está en la tabla."""
        section = parse_section(section_id)
        if section is None or section not in self._table:
            return None
        return list(self._table[section])

    def set_access(self, *, role_id: str, section: Section, allowed: bool) -> List[str]:
        """Agrega o quita un rol de la lista de una sección. Devuelve la lista resultante."""
        roles = self._table.setdefault(section, [])
        if allowed and role_id not in roles:
            roles.append(role_id)
            logger.info(f"Rol '{role_id}' agregado a la sección '{section.value}'.")
        elif not allowed and role_id in roles:
            roles.remove(role_id)
            logger.info(f"Rol '{role_id}' retirado de la sección '{section.value}'.")
        else:
            logger.debug(f"Sin cambios en la sección '{section.value}' para el rol '{role_id}'.")
        return list(roles)

    def as_dict(self) -> Dict[Section, List[str]]:
        return {section: list(roles) for section, roles in self._table.items()}
