import os
import tempfile

# Antes de importar la app: hashes rápidos y logs fuera del árbol del proyecto
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGS_DIR", os.path.join(tempfile.gettempdir(), "taller_test_logs"))

import json
import logging
from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from app.core.config import settings
from app.main import create_app
from app.services.authorization import AuthorizationContext
from app.schemas.usuario import UsuarioProfile
from app.services.auth import AuthContext

# Configuración básica de logging para los tests
logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] [%(name)s] [%(funcName)s] %(message)s')
logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG)

# Contraseñas de las cuentas de demostración
TEST_ADMIN_PASSWORD = "admin123"
TEST_MANAGER_PASSWORD = "manager123"
TEST_TECH_PASSWORD = "tech123"
TEST_RECEPTION_PASSWORD = "reception123"


@pytest.fixture(scope="function")
def authorization() -> AuthorizationContext:
    """Contexto de autorización aislado, sembrado con los datos de arranque."""
    return AuthorizationContext()

@pytest.fixture(scope="function")
def app(authorization: AuthorizationContext) -> FastAPI:
    """
    Fixture que proporciona una instancia nueva de la aplicación FastAPI por test,
    de modo que las mutaciones no se filtren entre tests.
    """
    return create_app(authorization)

@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Fixture para obtener un cliente HTTP asíncrono para interactuar con la app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client
    logger.debug("AsyncClient fixtures limpiados.")

@pytest.fixture(scope="function")
def auth_for(authorization: AuthorizationContext) -> Callable[[str], AuthContext]:
    """Construye un AuthContext ya resuelto para el usuario sembrado indicado."""
    def _build(username: str) -> AuthContext:
        auth = AuthContext(authorization)
        user = authorization.users.get_by_username(username=username)
        auth.set_user(UsuarioProfile.model_validate(user) if user else None)
        return auth
    return _build


async def get_auth_token(client: AsyncClient, username: str, password: str) -> str | None:
    """Función helper para obtener un token de autenticación."""
    login_data = {"username": username, "password": password}
    url = f"{settings.API_V1_STR}/auth/login"
    logger.info(f"Solicitando token para usuario '{username}' en {url}")
    try:
        response = await client.post(url, data=login_data)
        response.raise_for_status()
        return response.json().get("access_token")
    except httpx.HTTPStatusError as e:
        try:
            error_detail = e.response.json()
        except json.JSONDecodeError:
            error_detail = e.response.text
        logger.error(f"FALLO al obtener token para '{username}': Status={e.response.status_code}. Detail: {error_detail}")
        return None

@pytest_asyncio.fixture(scope="function")
async def auth_token_admin(client: AsyncClient) -> str:
    token = await get_auth_token(client, "admin", TEST_ADMIN_PASSWORD)
    if not token:
        pytest.fail("No se pudo obtener token para 'admin'.")
    return token

@pytest_asyncio.fixture(scope="function")
async def auth_token_manager(client: AsyncClient) -> str:
    token = await get_auth_token(client, "manager", TEST_MANAGER_PASSWORD)
    if not token:
        pytest.fail("No se pudo obtener token para 'manager'.")
    return token

@pytest_asyncio.fixture(scope="function")
async def auth_token_tech(client: AsyncClient) -> str:
    token = await get_auth_token(client, "tech", TEST_TECH_PASSWORD)
    if not token:
        pytest.fail("No se pudo obtener token para 'tech'.")
    return token

@pytest_asyncio.fixture(scope="function")
async def auth_token_reception(client: AsyncClient) -> str:
    token = await get_auth_token(client, "reception", TEST_RECEPTION_PASSWORD)
    if not token:
        pytest.fail("No se pudo obtener token para 'reception'.")
    return token
