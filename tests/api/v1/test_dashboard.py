import pytest
from httpx import AsyncClient
from fastapi import status

from app.core.config import settings

pytestmark = pytest.mark.asyncio

PERMISOS_URL = f"{settings.API_V1_STR}/dashboard/permisos"


async def test_permissions_card_admin(client: AsyncClient, auth_token_admin: str):
    headers = {"Authorization": f"Bearer {auth_token_admin}"}
    response = await client.get(PERMISOS_URL, headers=headers)
    assert response.status_code == status.HTTP_200_OK
    card = response.json()
    assert card["role"] == "admin"
    assert card["accessible_count"] == 12
    assert card["restricted_sections"] == []
    assert card["access_percentage"] == 100

async def test_permissions_card_receptionist(client: AsyncClient, auth_token_reception: str):
    headers = {"Authorization": f"Bearer {auth_token_reception}"}
    card = (await client.get(PERMISOS_URL, headers=headers)).json()
    assert [s["id"] for s in card["accessible_sections"]] == ["dashboard", "repairs", "clients", "support"]
    assert card["total_sections"] == 12
    # 4 de 12 -> 33.3 -> 33
    assert card["access_percentage"] == 33

async def test_permissions_card_unauthenticated(client: AsyncClient):
    response = await client.get(PERMISOS_URL)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
