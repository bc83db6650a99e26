from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict

from app.core.permissions import PermissionKey


@dataclass
class Rol:
    """Rol registrado. `permissions` es la fila de la matriz fina; una celda ausente equivale a denegada."""
    id: str
    name: str
    description: str = ""
    color: str = "bg-blue-500"
    icon: str = "Shield"
    hierarchy: int = 1
    permissions: Dict[PermissionKey, bool] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_granted(self, key: PermissionKey) -> bool:
        return self.permissions.get(key, False)
