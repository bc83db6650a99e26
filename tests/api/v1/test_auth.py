import pytest
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient
from fastapi import status

from app.core import security
from app.core.config import settings
from app.schemas.usuario import UsuarioProfile
from app.services.authorization import AuthorizationContext

pytestmark = pytest.mark.asyncio

GENERIC_LOGIN_ERROR = "Nombre de usuario o contraseña incorrectos."


async def test_login_success(client: AsyncClient):
    login_data = {"username": "reception", "password": "reception123"}
    response = await client.post(f"{settings.API_V1_STR}/auth/login", data=login_data)

    assert response.status_code == status.HTTP_200_OK
    token = response.json()
    assert token["access_token"]
    assert token["token_type"] == "bearer"
    assert token["user"]["username"] == "reception"
    assert token["user"]["role"] == "receptionist"
    assert token["user"]["last_login"] is not None
    assert "hashed_password" not in token["user"]

async def test_login_session_lasts_24_hours(client: AsyncClient):
    before = datetime.now(timezone.utc)
    response = await client.post(f"{settings.API_V1_STR}/auth/login", data={"username": "tech", "password": "tech123"})
    after = datetime.now(timezone.utc)
    assert response.status_code == status.HTTP_200_OK

    expires_at = datetime.fromisoformat(response.json()["expires_at"].replace("Z", "+00:00"))
    assert before + timedelta(hours=24) - timedelta(seconds=1) <= expires_at <= after + timedelta(hours=24)

    payload = security.decode_access_token(response.json()["access_token"])
    assert payload is not None
    assert payload.user["username"] == "tech"
    assert "expiresAt" not in payload.user

async def test_login_wrong_password(client: AsyncClient):
    response = await client.post(f"{settings.API_V1_STR}/auth/login", data={"username": "admin", "password": "wrongpassword"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == GENERIC_LOGIN_ERROR

async def test_login_user_not_found(client: AsyncClient):
    response = await client.post(f"{settings.API_V1_STR}/auth/login", data={"username": "nonexistentuser", "password": "somepassword"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == GENERIC_LOGIN_ERROR

async def test_login_blocked_user_same_message(client: AsyncClient, authorization: AuthorizationContext):
    user = authorization.users.get_by_username(username="tech")
    authorization.toggle_user_active(user.id)

    response = await client.post(f"{settings.API_V1_STR}/auth/login", data={"username": "tech", "password": "tech123"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == GENERIC_LOGIN_ERROR


class TestSessionState:
    async def test_session_without_token_is_unauthenticated(self, client: AsyncClient):
        response = await client.get(f"{settings.API_V1_STR}/auth/session")
        assert response.status_code == status.HTTP_200_OK
        state = response.json()
        assert state["is_authenticated"] is False
        assert state["is_loading"] is False
        assert state["user"] is None

    async def test_session_with_token(self, client: AsyncClient, auth_token_manager: str):
        headers = {"Authorization": f"Bearer {auth_token_manager}"}
        response = await client.get(f"{settings.API_V1_STR}/auth/session", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        state = response.json()
        assert state["is_authenticated"] is True
        assert state["user"]["username"] == "manager"
        assert state["user"]["fullName"] == "Pedro Sergio Ivanov"

    async def test_expired_token_is_unauthenticated(self, client: AsyncClient, authorization: AuthorizationContext):
        user = authorization.users.get_by_username(username="admin")
        profile = UsuarioProfile.model_validate(user)
        token = security.create_access_token(profile, datetime.now(timezone.utc) - timedelta(minutes=1))

        response = await client.get(f"{settings.API_V1_STR}/auth/session", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_authenticated"] is False

        response = await client.get(f"{settings.API_V1_STR}/usuarios/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    async def test_blocking_user_revokes_open_session(self, client: AsyncClient, authorization: AuthorizationContext, auth_token_tech: str):
        headers = {"Authorization": f"Bearer {auth_token_tech}"}
        assert (await client.get(f"{settings.API_V1_STR}/usuarios/me", headers=headers)).status_code == status.HTTP_200_OK

        user = authorization.users.get_by_username(username="tech")
        authorization.toggle_user_active(user.id)

        response = await client.get(f"{settings.API_V1_STR}/usuarios/me", headers=headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        state = (await client.get(f"{settings.API_V1_STR}/auth/session", headers=headers)).json()
        assert state["is_authenticated"] is False

    async def test_logout(self, client: AsyncClient, auth_token_admin: str):
        headers = {"Authorization": f"Bearer {auth_token_admin}"}
        response = await client.post(f"{settings.API_V1_STR}/auth/logout", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert "msg" in response.json()

    async def test_logout_ends_session_for_that_token(self, client: AsyncClient, auth_token_admin: str):
        headers = {"Authorization": f"Bearer {auth_token_admin}"}
        login = await client.post(f"{settings.API_V1_STR}/auth/login", data={"username": "admin", "password": "admin123"})
        other = login.json()["access_token"]
        assert (await client.post(f"{settings.API_V1_STR}/auth/logout", headers=headers)).status_code == status.HTTP_200_OK

        state = (await client.get(f"{settings.API_V1_STR}/auth/session", headers=headers)).json()
        assert state["is_authenticated"] is False
        response = await client.get(f"{settings.API_V1_STR}/usuarios/me", headers=headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        # Otra sesión del mismo usuario sigue abierta
        state = (await client.get(f"{settings.API_V1_STR}/auth/session", headers={"Authorization": f"Bearer {other}"})).json()
        assert state["is_authenticated"] is True

    async def test_logout_without_token(self, client: AsyncClient):
        response = await client.post(f"{settings.API_V1_STR}/auth/logout")
        assert response.status_code == status.HTTP_200_OK


async def test_demo_accounts_hide_passwords(client: AsyncClient):
    response = await client.get(f"{settings.API_V1_STR}/auth/demo-accounts")
    assert response.status_code == status.HTTP_200_OK
    accounts = response.json()
    assert [a["username"] for a in accounts] == ["admin", "manager", "tech", "reception"]
    assert {a["role"] for a in accounts} == {"admin", "manager", "technician", "receptionist"}
    for account in accounts:
        assert "password" not in account
