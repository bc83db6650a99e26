from typing import List, Optional

from pydantic import BaseModel

from .enums import GuardOutcome
from .usuario import UsuarioProfile


class AuthState(BaseModel):
    """Estado de autenticación de un cliente."""
    user: Optional[UsuarioProfile] = None
    is_authenticated: bool = False
    is_loading: bool = True


class DemoAccount(BaseModel):
    """Cuenta de demostración. La contraseña nunca se expone."""
    username: str
    role: str
    full_name: str


class GuardDecision(BaseModel):
    """Resultado de la guarda de una vista protegida."""
    outcome: GuardOutcome
    role: Optional[str] = None
    section: Optional[str] = None
    required_roles: List[str] = []
    redirect_to: Optional[str] = None
    replace: bool = False

    @property
    def allowed(self) -> bool:
        return self.outcome == GuardOutcome.ALLOWED
