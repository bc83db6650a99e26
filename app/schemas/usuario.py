from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

# ===============================================================
# Perfil de sesión
# ===============================================================
class UsuarioProfile(BaseModel):
    """
    Perfil que viaja dentro del registro de sesión. Los alias camelCase
    mantienen el formato de sesión persistido por los clientes existentes.
    """
    id: str
    username: str
    email: str
    role: str
    full_name: str = Field(..., alias="fullName")
    created_at: datetime = Field(..., alias="createdAt")
    last_login: Optional[datetime] = Field(None, alias="lastLogin")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# ===============================================================
# Schemas para Usuario
# ===============================================================
class UsuarioCreate(BaseModel):
    """
    Formulario de alta de usuario. Las validaciones se aplican en el servicio,
    en orden, y se informa un único error a la vez.
    """
    username: str = ""
    full_name: str = ""
    email: str = ""
    role: str = "receptionist"
    password: str = ""
    confirm_password: str = ""

class UsuarioUpdate(BaseModel):
    """Actualización parcial interna (cambio de rol, activación)."""
    role: Optional[str] = None
    is_active: Optional[bool] = None

class UsuarioRoleChange(BaseModel):
    role: str = Field(..., min_length=1, description="Identificador del nuevo rol")

class Usuario(BaseModel):
    """Schema para devolver al cliente. Nunca incluye el hash de la contraseña."""
    id: str
    username: str
    full_name: str
    email: str
    role: str
    avatar: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
