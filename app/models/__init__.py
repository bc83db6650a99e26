from .rol import Rol
from .usuario import Usuario


__all__ = [
    "Rol",
    "Usuario",
]
