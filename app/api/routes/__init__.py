from fastapi import APIRouter

# Importar los routers individuales de cada módulo
from . import auth, usuarios, roles_permisos, secciones, dashboard

# Crear el router principal de la API
api_router = APIRouter()

# Incluir cada router individual con su prefijo y etiquetas
api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(usuarios.router, prefix="/usuarios", tags=["Usuarios"])
api_router.include_router(roles_permisos.router, prefix="/gestion", tags=["Roles y Permisos"])
api_router.include_router(secciones.router, prefix="/secciones", tags=["Secciones"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
