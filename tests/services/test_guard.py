from app.core.config import settings
from app.schemas.enums import GuardOutcome
from app.services.auth import AuthContext
from app.services.authorization import AuthorizationContext
from app.services.guard import build_guard_screen, evaluate_guard, permission_gate


def test_loading_never_shows_denial(authorization: AuthorizationContext):
    auth = AuthContext(authorization)
    decision = evaluate_guard(auth, required_roles=["admin"], section="settings")
    assert decision.outcome == GuardOutcome.LOADING
    assert build_guard_screen(decision) is None

def test_unauthenticated_redirects_with_replace(authorization: AuthorizationContext):
    auth = AuthContext(authorization)
    auth.initialize()
    decision = evaluate_guard(auth, section="dashboard")
    assert decision.outcome == GuardOutcome.REDIRECT_LOGIN
    assert decision.redirect_to == settings.LOGIN_PATH
    assert decision.replace is True

def test_role_check_before_section_check(auth_for):
    decision = evaluate_guard(auth_for("reception"), required_roles=["manager"], section="inventory")
    assert decision.outcome == GuardOutcome.ACCESS_DENIED
    screen = build_guard_screen(decision)
    assert screen.role == "receptionist"
    assert screen.options == ["go_back", "logout"]

def test_section_unavailable_names_section(auth_for):
    decision = evaluate_guard(auth_for("reception"), section="inventory")
    assert decision.outcome == GuardOutcome.SECTION_UNAVAILABLE
    assert decision.redirect_to is None
    screen = build_guard_screen(decision)
    assert screen.section == "inventory"
    assert "Inventario" in screen.message

def test_both_checks_pass(auth_for):
    decision = evaluate_guard(auth_for("manager"), required_roles=["technician"], section="finance")
    assert decision.allowed
    assert build_guard_screen(decision) is None

def test_no_requirements_allows_authenticated(auth_for):
    assert evaluate_guard(auth_for("tech")).allowed

def test_permission_gate(auth_for):
    tech = auth_for("tech")
    assert permission_gate(tech, required_roles=["technician"]) is True
    assert permission_gate(tech, required_roles=["manager"]) is False
    assert permission_gate(tech, section="finance") is False
    assert permission_gate(tech, required_roles=[]) is False
    assert permission_gate(tech) is True

def test_empty_role_set_is_denied(auth_for):
    decision = evaluate_guard(auth_for("admin"), required_roles=[], section="dashboard")
    assert decision.outcome == GuardOutcome.ACCESS_DENIED
    assert build_guard_screen(decision).options == ["go_back", "logout"]
    assert permission_gate(auth_for("admin"), required_roles=[]) is False
