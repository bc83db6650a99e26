import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.api.routes import api_router
from app.core.logging_config import setup_logging
from app.core.error_handlers import register_error_handlers
from app.services.authorization import AuthorizationContext

setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Código de inicio
    logger.info("*"*50)
    logger.info(f"Iniciando Aplicación: {settings.PROJECT_NAME}")
    logger.info(f"Visibilidad de secciones calculada desde: {app.state.authorization.access_source}")
    logger.info("*"*50)

    PORT = os.getenv("PORT", "8086")
    BASE_URL = f"http://127.0.0.1:{PORT}"
    logger.info(f"API Docs (Swagger UI): {BASE_URL}{settings.API_V1_STR}/docs")
    logger.info(f"API Docs (ReDoc):      {BASE_URL}{settings.API_V1_STR}/redoc")
    logger.info("*"*50)

    yield # La aplicación se ejecuta

    # Código de apagado
    logger.info("*"*50)
    logger.info(f"Deteniendo Aplicación: {settings.PROJECT_NAME}")
    logger.info("*"*50)


def create_app(authorization: Optional[AuthorizationContext] = None) -> FastAPI:
    """
    Construye una instancia de la API con su propio contexto de autorización
    (roles, matriz, tabla de secciones y usuarios sembrados en memoria).
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="API de control de acceso por roles para el Taller de Reparaciones: roles, permisos por sección y acción, usuarios y sesión.",
        version="1.0.0",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        lifespan=lifespan
    )
    app.state.authorization = authorization if authorization is not None else AuthorizationContext()

    # --- Configurar CORS ---
    if settings.BACKEND_CORS_ORIGINS:
        logger.info(f"Configurando CORS para los orígenes: {settings.BACKEND_CORS_ORIGINS}")
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    else:
        logger.warning("CORS no configurado (BACKEND_CORS_ORIGINS no definido en .env)")

    # --- Registrar Manejadores de Errores ---
    register_error_handlers(app)

    # --- Incluir Routers de la API ---
    app.include_router(api_router, prefix=settings.API_V1_STR)
    logger.info(f"Routers de API incluidos bajo el prefijo: {settings.API_V1_STR}")

    # --- Endpoint Raíz Básico ---
    @app.get("/", tags=["Root"], include_in_schema=False)
    def read_root() -> dict:
        return {"status": "ok", "message": f"Bienvenido a {settings.PROJECT_NAME}"}

    return app


app = create_app()
