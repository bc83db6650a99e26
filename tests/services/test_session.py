import json
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import AuthenticationError
from app.core.security import SESSION_STORAGE_KEY, build_session_record, parse_session_record
from app.core.storage import InMemoryStorage, JsonFileStorage, KeyValueStorage
from app.schemas.usuario import UsuarioProfile
from app.services.auth import AuthContext, AuthService
from app.services.authorization import AuthorizationContext

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def profile_of(authorization: AuthorizationContext, username: str) -> UsuarioProfile:
    return UsuarioProfile.model_validate(authorization.users.get_by_username(username=username))

def stored_record(authorization: AuthorizationContext, username: str, expires_at: datetime) -> InMemoryStorage:
    record = build_session_record(profile_of(authorization, username), expires_at)
    return InMemoryStorage({SESSION_STORAGE_KEY: json.dumps(record)})


class TestRestore:
    def test_expired_record_is_discarded(self, authorization: AuthorizationContext):
        storage = stored_record(authorization, "manager", NOW - timedelta(seconds=1))
        auth = AuthContext(authorization, AuthService(authorization.users, storage, now=lambda: NOW))
        assert auth.state.is_loading is True

        state = auth.initialize()
        assert state.is_loading is False
        assert state.is_authenticated is False
        assert state.user is None
        assert storage.get_item(SESSION_STORAGE_KEY) is None

    def test_valid_record_restores_user(self, authorization: AuthorizationContext):
        storage = stored_record(authorization, "manager", NOW + timedelta(hours=1))
        auth = AuthContext(authorization, AuthService(authorization.users, storage, now=lambda: NOW))

        state = auth.initialize()
        assert state.is_authenticated is True
        assert state.user == profile_of(authorization, "manager")
        assert isinstance(state.user.created_at, datetime)
        assert storage.get_item(SESSION_STORAGE_KEY) is not None

    def test_corrupt_record_is_discarded(self, authorization: AuthorizationContext):
        storage = InMemoryStorage({SESSION_STORAGE_KEY: "{not json"})
        service = AuthService(authorization.users, storage, now=lambda: NOW)
        assert service.get_current_user() is None
        assert storage.get_item(SESSION_STORAGE_KEY) is None

    def test_record_without_user_is_discarded(self, authorization: AuthorizationContext):
        storage = InMemoryStorage({SESSION_STORAGE_KEY: json.dumps({"expiresAt": 9999999999999})})
        service = AuthService(authorization.users, storage, now=lambda: NOW)
        assert service.is_session_valid() is False
        assert storage.get_item(SESSION_STORAGE_KEY) is None

    def test_record_format(self, authorization: AuthorizationContext):
        expires_at = NOW + timedelta(hours=24)
        record = build_session_record(profile_of(authorization, "admin"), expires_at)
        assert record["expiresAt"] == int(expires_at.timestamp() * 1000)
        assert set(record["user"]) == {"id", "username", "email", "role", "fullName", "createdAt", "lastLogin"}
        assert parse_session_record(record, now=NOW) == profile_of(authorization, "admin")
        assert parse_session_record(record, now=expires_at + timedelta(milliseconds=1)) is None


class TestLoginLogout:
    def test_login_persists_record_for_24_hours(self, authorization: AuthorizationContext):
        storage = InMemoryStorage()
        auth = AuthContext(authorization, AuthService(authorization.users, storage, now=lambda: NOW))

        state = auth.login("admin", "admin123")
        assert state.is_authenticated is True
        assert state.user.role == "admin"
        assert state.user.last_login is not None

        record = json.loads(storage.get_item(SESSION_STORAGE_KEY))
        assert record["expiresAt"] == int((NOW + timedelta(hours=24)).timestamp() * 1000)
        assert record["user"]["username"] == "admin"

    def test_login_failure_keeps_state(self, authorization: AuthorizationContext):
        storage = InMemoryStorage()
        auth = AuthContext(authorization, AuthService(authorization.users, storage))
        auth.initialize()

        with pytest.raises(AuthenticationError) as exc:
            auth.login("admin", "nope")
        assert exc.value.message == "Nombre de usuario o contraseña incorrectos."
        assert auth.state.is_authenticated is False
        assert storage.get_item(SESSION_STORAGE_KEY) is None

    def test_blocked_user_cannot_login(self, authorization: AuthorizationContext):
        tech = authorization.users.get_by_username(username="tech")
        authorization.toggle_user_active(tech.id)
        service = AuthService(authorization.users, InMemoryStorage())
        with pytest.raises(AuthenticationError):
            service.login("tech", "tech123")

    def test_logout_clears_record(self, authorization: AuthorizationContext):
        storage = InMemoryStorage()
        auth = AuthContext(authorization, AuthService(authorization.users, storage))
        auth.login("tech", "tech123")

        state = auth.logout()
        assert state.is_authenticated is False
        assert storage.get_item(SESSION_STORAGE_KEY) is None

    def test_context_checks_follow_user(self, authorization: AuthorizationContext):
        auth = AuthContext(authorization, AuthService(authorization.users, InMemoryStorage()))
        auth.initialize()
        assert auth.can_access("dashboard") is False
        assert auth.has_permission("receptionist") is False

        auth.login("reception", "reception123")
        assert auth.can_access("dashboard") is True
        assert auth.can_access("inventory") is False
        assert auth.has_permission("receptionist") is True
        assert auth.has_permission(["technician"]) is False


def test_json_file_storage_round_trip(tmp_path):
    path = tmp_path / "session.json"
    storage = JsonFileStorage(path)
    assert storage.get_item("auth_user") is None

    storage.set_item("auth_user", "valor")
    assert JsonFileStorage(path).get_item("auth_user") == "valor"

    storage.remove_item("auth_user")
    assert storage.get_item("auth_user") is None

def test_json_file_storage_unreadable_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("no es json", encoding="utf-8")
    assert JsonFileStorage(path).get_item("auth_user") is None

def test_key_value_storage_is_abstract():
    with pytest.raises(TypeError):
        KeyValueStorage()

def test_user_login_flow_shared(authorization: AuthorizationContext):
    user = authorization.users.login(username="manager", password="manager123")
    assert user.last_login is not None
    with pytest.raises(AuthenticationError):
        authorization.users.login(username="manager", password="nope")
