from typing import Dict, FrozenSet, List, NamedTuple, Tuple

from app.schemas.enums import Action, Section

# =================================================================
# Roles del Sistema
# =================================================================
# Roles semilla. Total: 4 roles, jerarquía numérica (mayor = más privilegios).
# =================================================================

ADMIN_ROLE_NAME = "admin"
MANAGER_ROLE_NAME = "manager"
TECHNICIAN_ROLE_NAME = "technician"
RECEPTIONIST_ROLE_NAME = "receptionist"

ROLE_HIERARCHY: Dict[str, int] = {
    ADMIN_ROLE_NAME: 4,
    MANAGER_ROLE_NAME: 3,
    TECHNICIAN_ROLE_NAME: 2,
    RECEPTIONIST_ROLE_NAME: 1,
}

# (nombre visible, descripción, color, icono)
SEED_ROLE_DISPLAY: Dict[str, Tuple[str, str, str, str]] = {
    ADMIN_ROLE_NAME: ("Administrador", "Acceso completo a todas las funciones del sistema", "bg-red-500", "Crown"),
    MANAGER_ROLE_NAME: ("Gerente", "Gestión de órdenes, clientes, almacén y finanzas", "bg-blue-500", "Briefcase"),
    TECHNICIAN_ROLE_NAME: ("Técnico", "Trabajo con órdenes y consulta de información", "bg-orange-500", "Wrench"),
    RECEPTIONIST_ROLE_NAME: ("Recepción", "Recepción de órdenes y atención a clientes", "bg-green-500", "ClipboardList"),
}


# =================================================================
# Claves de Permiso
# =================================================================

class PermissionKey(NamedTuple):
    """Par (sección, acción) que identifica una celda de la matriz fina."""
    section: Section
    action: Action

    @property
    def wire(self) -> str:
        return f"{self.section.value}.{self.action.value}"

    @classmethod
    def parse(cls, value: str) -> "PermissionKey":
        """Convierte 'seccion.accion' en una clave. Lanza ValueError si no es válida."""
        section_id, sep, action_id = value.partition(".")
        if not sep:
            raise ValueError(f"Clave de permiso inválida: '{value}'")
        return cls(Section(section_id), Action(action_id))


ALL_PERMISSION_KEYS: List[PermissionKey] = [
    PermissionKey(s, a) for s in Section for a in Action
]


def _keys(section: Section, *actions: Action) -> List[PermissionKey]:
    return [PermissionKey(section, a) for a in actions]


# =================================================================
# Tabla gruesa: sección -> roles permitidos
# =================================================================

_ALL_SEED_ROLES = [ADMIN_ROLE_NAME, MANAGER_ROLE_NAME, TECHNICIAN_ROLE_NAME, RECEPTIONIST_ROLE_NAME]
_ADMIN_MANAGER = [ADMIN_ROLE_NAME, MANAGER_ROLE_NAME]

SEED_SECTION_PERMISSIONS: Dict[Section, List[str]] = {
    Section.DASHBOARD: list(_ALL_SEED_ROLES),
    Section.REPAIRS: list(_ALL_SEED_ROLES),
    Section.CLIENTS: [ADMIN_ROLE_NAME, MANAGER_ROLE_NAME, RECEPTIONIST_ROLE_NAME],
    Section.INVENTORY: list(_ADMIN_MANAGER),
    Section.WAREHOUSE: list(_ADMIN_MANAGER),
    Section.TECHNICIANS: list(_ADMIN_MANAGER),
    Section.SCHEDULE: list(_ADMIN_MANAGER),
    Section.FINANCE: list(_ADMIN_MANAGER),
    Section.REPORTS: list(_ADMIN_MANAGER),
    Section.ROLES: [ADMIN_ROLE_NAME],
    Section.SETTINGS: [ADMIN_ROLE_NAME],
    Section.SUPPORT: list(_ALL_SEED_ROLES),
}


# =================================================================
# Matriz fina semilla: rol -> celdas concedidas
# =================================================================

_VIEW_CREATE_EDIT = (Action.VIEW, Action.CREATE, Action.EDIT)

SEED_ROLE_GRANTS: Dict[str, FrozenSet[PermissionKey]] = {
    ADMIN_ROLE_NAME: frozenset(ALL_PERMISSION_KEYS),
    MANAGER_ROLE_NAME: frozenset(
        _keys(Section.DASHBOARD, Action.VIEW)
        + _keys(Section.REPAIRS, Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE)
        + _keys(Section.CLIENTS, Action.VIEW, Action.CREATE, Action.EDIT, Action.DELETE)
        + _keys(Section.INVENTORY, *_VIEW_CREATE_EDIT)
        + _keys(Section.WAREHOUSE, *_VIEW_CREATE_EDIT)
        + _keys(Section.TECHNICIANS, *_VIEW_CREATE_EDIT)
        + _keys(Section.SCHEDULE, *_VIEW_CREATE_EDIT)
        + _keys(Section.FINANCE, *_VIEW_CREATE_EDIT)
        + _keys(Section.REPORTS, Action.VIEW, Action.CREATE, Action.EXPORT)
    ),
    TECHNICIAN_ROLE_NAME: frozenset(
        _keys(Section.DASHBOARD, Action.VIEW)
        + _keys(Section.REPAIRS, Action.VIEW, Action.EDIT)
        + _keys(Section.SCHEDULE, Action.VIEW)
    ),
    RECEPTIONIST_ROLE_NAME: frozenset(
        _keys(Section.DASHBOARD, Action.VIEW)
        + _keys(Section.REPAIRS, Action.VIEW, Action.CREATE)
        + _keys(Section.CLIENTS, Action.VIEW, Action.CREATE, Action.EDIT)
    ),
}


# =================================================================
# Capacidades derivadas (atajos usados por las vistas)
# =================================================================
# Cada capacidad se resuelve por jerarquía (lista de roles aceptables)
# o por visibilidad de sección.

ROLE_CAPABILITIES: Dict[str, List[str]] = {
    "create_repair": [ADMIN_ROLE_NAME, MANAGER_ROLE_NAME, RECEPTIONIST_ROLE_NAME],
    "edit_repair": [ADMIN_ROLE_NAME, MANAGER_ROLE_NAME, TECHNICIAN_ROLE_NAME],
    "delete_repair": list(_ADMIN_MANAGER),
    "create_client": [ADMIN_ROLE_NAME, MANAGER_ROLE_NAME, RECEPTIONIST_ROLE_NAME],
    "edit_client": [ADMIN_ROLE_NAME, MANAGER_ROLE_NAME, RECEPTIONIST_ROLE_NAME],
    "delete_client": list(_ADMIN_MANAGER),
    "manage_inventory": list(_ADMIN_MANAGER),
    "manage_warehouse": list(_ADMIN_MANAGER),
    "manage_technicians": list(_ADMIN_MANAGER),
    "manage_schedule": list(_ADMIN_MANAGER),
    "manage_finance": list(_ADMIN_MANAGER),
    "create_report": list(_ADMIN_MANAGER),
    "manage_settings": [ADMIN_ROLE_NAME],
    "export_data": list(_ADMIN_MANAGER),
    "import_data": list(_ADMIN_MANAGER),
}

SECTION_CAPABILITIES: Dict[str, Section] = {
    f"view_{section.value}": section for section in Section
}
