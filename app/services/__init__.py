"""
Módulo de Servicios

Este paquete contiene la lógica de negocio de la aplicación: registro de roles,
matriz de permisos, usuarios, sesión y la guarda de vistas protegidas.

El estado vive en memoria dentro de un AuthorizationContext, construido una
vez por aplicación.
"""

from .authorization import AuthorizationContext
from .auth import AuthContext, AuthService
from .dashboard import dashboard_service
from .guard import build_guard_screen, evaluate_guard, permission_gate
from .rol import RolService
from .seccion import SectionPolicyService
from .usuario import UsuarioService

__all__ = [
    "AuthorizationContext",
    "AuthContext",
    "AuthService",
    "dashboard_service",
    "build_guard_screen",
    "evaluate_guard",
    "permission_gate",
    "RolService",
    "SectionPolicyService",
    "UsuarioService",
]
