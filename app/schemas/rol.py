from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict, field_validator

from .enums import Action, Section

MIN_HIERARCHY = 1
MAX_HIERARCHY = 10

# --- Schema Base ---
class RolBase(BaseModel):
    """Campos base que definen un rol."""
    name: str = Field(..., max_length=100, description="Nombre visible del rol (ej: Supervisor)")
    description: str = Field("", description="Descripción del rol")
    color: str = Field("bg-blue-500", description="Color de presentación")
    icon: str = Field("Shield", description="Icono de presentación")
    hierarchy: int = Field(1, ge=MIN_HIERARCHY, le=MAX_HIERARCHY, description="Rango jerárquico; mayor = más privilegios")

# --- Schema para Creación ---
class RolCreate(RolBase):
    """
    Schema para crear un rol. El identificador se deriva del nombre y la
    matriz de permisos empieza vacía (todo denegado).
    """
    pass

# --- Schema para Actualización ---
class RolUpdate(BaseModel):
    """
    Actualización parcial de los datos de presentación y del rango.
    El identificador no cambia y un campo enviado como null no se modifica.
    """
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    hierarchy: Optional[int] = Field(None, ge=MIN_HIERARCHY, le=MAX_HIERARCHY)

# --- Schema para Respuestas API ---
class Rol(RolBase):
    """Rol con su fila de la matriz fina en formato 'seccion.accion' -> bool."""
    id: str
    created_at: datetime
    permissions: Dict[str, bool] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("permissions", mode="before")
    @classmethod
    def serialize_permission_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            # Las claves internas son PermissionKey; en el cable viajan como "seccion.accion"
            return {getattr(k, "wire", k): granted for k, granted in v.items()}
        return v

# --- Matriz de permisos ---
class PermissionToggle(BaseModel):
    """Cambio de una sola celda (rol, sección, acción) de la matriz fina."""
    section: Section
    action: Action
    granted: bool

class PermissionToggleResult(BaseModel):
    role_id: str
    permission: str
    granted: bool
    msg: str

class SectionAccessUpdate(BaseModel):
    """Alta o baja de un rol en la lista de roles permitidos de una sección."""
    allowed: bool

class SectionAccess(BaseModel):
    section: Section
    allowed_roles: list[str]

# --- Estadísticas ---
class RolStats(BaseModel):
    """Cobertura de la matriz fina: celdas concedidas sobre el total sección x acción."""
    total: int
    active: int
    percentage: int

class RolDistribution(BaseModel):
    role_id: str
    name: str
    user_count: int
    percentage: int
