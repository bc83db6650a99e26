from .common import Msg

# Catálogos
from .enums import Section, Action, GuardOutcome
from .section import SectionInfo, ActionInfo, SectionView, GuardScreen, PermissionsCard

# Token & Auth
from .token import Token, TokenPayload
from .auth import AuthState, DemoAccount, GuardDecision

# Roles y Permisos
from .rol import (
    Rol,
    RolCreate,
    RolUpdate,
    PermissionToggle,
    PermissionToggleResult,
    SectionAccess,
    SectionAccessUpdate,
    RolStats,
    RolDistribution,
)

# Usuario
from .usuario import Usuario, UsuarioCreate, UsuarioUpdate, UsuarioProfile, UsuarioRoleChange

__all__ = [
    "Msg",
    "Section", "Action", "GuardOutcome",
    "SectionInfo", "ActionInfo", "SectionView", "GuardScreen", "PermissionsCard",
    "Token", "TokenPayload",
    "AuthState", "DemoAccount", "GuardDecision",
    "Rol", "RolCreate", "RolUpdate",
    "PermissionToggle", "PermissionToggleResult", "SectionAccess", "SectionAccessUpdate",
    "RolStats", "RolDistribution",
    "Usuario", "UsuarioCreate", "UsuarioUpdate", "UsuarioProfile", "UsuarioRoleChange",
]
