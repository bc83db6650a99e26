from enum import Enum

class Section(str, Enum):
    """Secciones de la aplicación sujetas a control de visibilidad. Identificadores estables."""
    DASHBOARD = 'dashboard'
    REPAIRS = 'repairs'
    CLIENTS = 'clients'
    INVENTORY = 'inventory'
    WAREHOUSE = 'warehouse'
    TECHNICIANS = 'technicians'
    SCHEDULE = 'schedule'
    FINANCE = 'finance'
    REPORTS = 'reports'
    ROLES = 'roles'
    SETTINGS = 'settings'
    SUPPORT = 'support'

    @property
    def display_name(self) -> str:
        return SECTION_DISPLAY[self][0]

    @property
    def icon(self) -> str:
        return SECTION_DISPLAY[self][1]

class Action(str, Enum):
    """Operaciones que se controlan dentro de cada sección."""
    VIEW = 'view'
    CREATE = 'create'
    EDIT = 'edit'
    DELETE = 'delete'
    EXPORT = 'export'
    IMPORT = 'import'

    @property
    def display_name(self) -> str:
        return ACTION_DISPLAY[self]

class GuardOutcome(str, Enum):
    """Resultado de evaluar la guarda de una ruta protegida."""
    LOADING = 'loading'
    REDIRECT_LOGIN = 'redirect_login'
    ACCESS_DENIED = 'access_denied'
    SECTION_UNAVAILABLE = 'section_unavailable'
    ALLOWED = 'allowed'


SECTION_DISPLAY = {
    Section.DASHBOARD: ("Panel", "LayoutDashboard"),
    Section.REPAIRS: ("Órdenes de reparación", "Wrench"),
    Section.CLIENTS: ("Clientes", "Users"),
    Section.INVENTORY: ("Inventario", "Package"),
    Section.WAREHOUSE: ("Almacén", "Warehouse"),
    Section.TECHNICIANS: ("Técnicos", "HardHat"),
    Section.SCHEDULE: ("Horarios", "Calendar"),
    Section.FINANCE: ("Finanzas", "DollarSign"),
    Section.REPORTS: ("Reportes", "FileText"),
    Section.ROLES: ("Roles y permisos", "Shield"),
    Section.SETTINGS: ("Configuración", "Settings"),
    Section.SUPPORT: ("Soporte", "HelpCircle"),
}

ACTION_DISPLAY = {
    Action.VIEW: "Ver",
    Action.CREATE: "Crear",
    Action.EDIT: "Editar",
    Action.DELETE: "Eliminar",
    Action.EXPORT: "Exportar",
    Action.IMPORT: "Importar",
}
