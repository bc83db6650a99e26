import pytest
from httpx import AsyncClient
from fastapi import status

from app.core.config import settings
from app.services.authorization import AuthorizationContext

pytestmark = pytest.mark.asyncio

SECCIONES_URL = f"{settings.API_V1_STR}/secciones/"


async def test_unauthenticated_redirects_to_login(client: AsyncClient):
    response = await client.get(f"{SECCIONES_URL}inventory", follow_redirects=False)
    assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
    assert response.headers["location"] == settings.LOGIN_PATH

async def test_receptionist_inventory_is_section_unavailable(client: AsyncClient):
    # Escenario completo: login -> sección bloqueada -> pantalla, no redirección
    login = await client.post(f"{settings.API_V1_STR}/auth/login", data={"username": "reception", "password": "reception123"})
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    response = await client.get(f"{SECCIONES_URL}inventory", headers=headers, follow_redirects=False)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    screen = response.json()
    assert screen["screen"] == "section_unavailable"
    assert screen["section"] == "inventory"
    assert screen["role"] == "receptionist"
    assert "location" not in response.headers

async def test_required_roles_checked_before_section(client: AsyncClient, auth_token_reception: str):
    headers = {"Authorization": f"Bearer {auth_token_reception}"}
    response = await client.get(
        f"{SECCIONES_URL}inventory",
        headers=headers,
        params={"required_roles": ["manager"]},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    screen = response.json()
    assert screen["screen"] == "access_denied"
    assert screen["role"] == "receptionist"
    assert screen["options"] == ["go_back", "logout"]

async def test_higher_rank_satisfies_lower_requirement(client: AsyncClient, auth_token_admin: str):
    headers = {"Authorization": f"Bearer {auth_token_admin}"}
    response = await client.get(
        f"{SECCIONES_URL}repairs",
        headers=headers,
        params={"required_roles": ["technician"]},
    )
    assert response.status_code == status.HTTP_200_OK
    view = response.json()
    assert view["section"] == "repairs"
    assert view["actions"]["delete"] is True
    assert view["capabilities"]["manage_settings"] is True

async def test_allowed_section_view(client: AsyncClient, auth_token_tech: str):
    headers = {"Authorization": f"Bearer {auth_token_tech}"}
    response = await client.get(f"{SECCIONES_URL}repairs", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    view = response.json()
    assert view["actions"] == {
        "view": True, "create": False, "edit": True, "delete": False, "export": False, "import": False,
    }
    assert view["capabilities"]["edit_repair"] is True
    assert view["capabilities"]["delete_repair"] is False

async def test_unknown_section_is_open(client: AsyncClient, auth_token_reception: str):
    headers = {"Authorization": f"Bearer {auth_token_reception}"}
    response = await client.get(f"{SECCIONES_URL}changelog", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["actions"] == {}

async def test_visible_sections(client: AsyncClient, auth_token_tech: str):
    headers = {"Authorization": f"Bearer {auth_token_tech}"}
    response = await client.get(SECCIONES_URL, headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert [s["id"] for s in response.json()] == ["dashboard", "repairs", "support"]

async def test_new_role_sees_nothing_until_granted(client: AsyncClient, auth_token_admin: str, authorization: AuthorizationContext):
    admin_headers = {"Authorization": f"Bearer {auth_token_admin}"}
    await client.post(f"{settings.API_V1_STR}/gestion/roles/", headers=admin_headers, json={"name": "Auditor"})
    await client.post(
        f"{settings.API_V1_STR}/usuarios/",
        headers=admin_headers,
        json={
            "username": "auditor1", "full_name": "Ivan Auditor", "email": "a@repair.example",
            "role": "auditor", "password": "secret1", "confirm_password": "secret1",
        },
    )
    login = await client.post(f"{settings.API_V1_STR}/auth/login", data={"username": "auditor1", "password": "secret1"})
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    assert (await client.get(SECCIONES_URL, headers=headers)).json() == []

    await client.put(f"{settings.API_V1_STR}/gestion/roles/auditor/sections/reports", headers=admin_headers, json={"allowed": True})
    response = await client.get(f"{SECCIONES_URL}reports", headers=headers)
    assert response.status_code == status.HTTP_200_OK
