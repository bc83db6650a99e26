import sys
import argparse
from os.path import abspath, dirname
from getpass import getpass
from typing import List, Optional

root_dir = dirname(dirname(abspath(__file__)))
sys.path.append(root_dir)

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.logging_config import setup_logging
from app.core.storage import JsonFileStorage, KeyValueStorage
from app.services.auth import AuthContext, AuthService
from app.services.authorization import AuthorizationContext

# --- Sesión ---

def build_auth_context(storage: KeyValueStorage) -> AuthContext:
    """Contexto de autenticación sobre la sesión guardada en `storage`."""
    authorization = AuthorizationContext()
    auth = AuthContext(authorization, AuthService(authorization.users, storage))
    auth.initialize()
    return auth

def login(auth: AuthContext, username: str, password: Optional[str]) -> int:
    """Inicia sesión y guarda el registro de sesión."""
    if password is None:
        password = getpass("Contraseña: ")
    try:
        state = auth.login(username, password)
    except AuthenticationError as e:
        print(f"❌ Error: {e.message}")
        return 1
    print(f"✅ Sesión iniciada como '{state.user.username}' (rol: {state.user.role}).")
    return 0

def logout(auth: AuthContext) -> int:
    auth.logout()
    print("✅ Sesión cerrada.")
    return 0

def whoami(auth: AuthContext) -> int:
    """Muestra el usuario de la sesión guardada, si sigue vigente."""
    user = auth.user
    if user is None:
        print("-> Sin sesión activa.")
        return 1
    print(f"{user.username} | {user.full_name} | {user.email} | rol: {user.role}")
    return 0

def can_access(auth: AuthContext, section: str) -> int:
    allowed = auth.can_access(section)
    print(f"{section}: {'permitido' if allowed else 'denegado'}")
    return 0 if allowed else 1

def has_permission(auth: AuthContext, roles: List[str]) -> int:
    allowed = auth.has_permission(roles)
    print(f"{', '.join(roles)}: {'permitido' if allowed else 'denegado'}")
    return 0 if allowed else 1

def list_roles_only(auth: AuthContext) -> int:
    """Muestra una lista de todos los roles disponibles en el sistema."""
    print("\n--- LISTA DE ROLES DEL SISTEMA ---")
    print(f"{'ROL':<18} | {'JERARQUÍA':<9} | {'DESCRIPCIÓN'}")
    print("-" * 70)
    all_roles = auth.authorization.roles.get_all()
    for rol in all_roles:
        descripcion = rol.description if rol.description else "Sin descripción"
        print(f"{rol.id:<18} | {rol.hierarchy:<9} | {descripcion}")
    print("-" * 70)
    print(f"Total: {len(all_roles)} roles.")
    return 0

# --- Interfaz de Línea de Comandos Principal ---

def main(argv: Optional[List[str]] = None, storage: Optional[KeyValueStorage] = None) -> int:
    parser = argparse.ArgumentParser(description="Herramienta CLI para la sesión y los permisos del taller.")
    subparsers = parser.add_subparsers(dest="command", help="Comandos disponibles", required=True)

    parser_login = subparsers.add_parser("login", help="Iniciar sesión.")
    parser_login.add_argument("--username", type=str, required=True, help="Nombre de usuario.")
    parser_login.add_argument("--password", type=str, default=None, help="Contraseña (si se omite, se pide por consola).")

    subparsers.add_parser("logout", help="Cerrar la sesión guardada.")
    subparsers.add_parser("whoami", help="Mostrar el usuario de la sesión guardada.")

    parser_access = subparsers.add_parser("can-access", help="Comprobar la visibilidad de una sección.")
    parser_access.add_argument("section", type=str, help="Identificador de la sección (ej: inventory).")

    parser_perm = subparsers.add_parser("has-permission", help="Comprobar el rango frente a uno o más roles.")
    parser_perm.add_argument("roles", nargs="+", help="Roles aceptables (basta con igualar o superar uno).")

    subparsers.add_parser("list-roles", help="Mostrar una lista de todos los roles del sistema.")

    args = parser.parse_args(argv)
    auth = build_auth_context(storage if storage is not None else JsonFileStorage(settings.SESSION_STORAGE_PATH))

    if args.command == "login":
        return login(auth, args.username, args.password)
    if args.command == "logout":
        return logout(auth)
    if args.command == "whoami":
        return whoami(auth)
    if args.command == "can-access":
        return can_access(auth, args.section)
    if args.command == "has-permission":
        return has_permission(auth, args.roles)
    return list_roles_only(auth)

if __name__ == "__main__":
    setup_logging(level_name="WARNING", to_file=False)
    sys.exit(main())
