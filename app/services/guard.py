import logging
from typing import Optional, Sequence

from app.core.config import settings
from app.schemas.auth import GuardDecision
from app.schemas.enums import GuardOutcome
from app.schemas.section import GuardScreen

from .auth import AuthContext
from .seccion import parse_section

logger = logging.getLogger(__name__)


def evaluate_guard(
    auth: AuthContext,
    required_roles: Optional[Sequence[str]] = None,
    section: Optional[str] = None,
) -> GuardDecision:
    """
    Decide qué mostrar para una vista protegida. El orden importa:
    carga -> login -> rol -> sección -> contenido.
    Una denegación es un resultado normal, nunca una excepción.
    """
    state = auth.state
    roles = list(required_roles or [])

    if state.is_loading:
        return GuardDecision(outcome=GuardOutcome.LOADING, section=section, required_roles=roles)

    if not state.is_authenticated or state.user is None:
        logger.info(f"Guarda: sin sesión, redirigiendo a '{settings.LOGIN_PATH}'.")
        return GuardDecision(
            outcome=GuardOutcome.REDIRECT_LOGIN,
            section=section,
            required_roles=roles,
            redirect_to=settings.LOGIN_PATH,
            replace=True,
        )

    role = state.user.role
    if required_roles is not None and not auth.has_permission(roles):
        logger.warning(f"Guarda: rol '{role}' insuficiente (requiere alguno de {roles}).")
        return GuardDecision(outcome=GuardOutcome.ACCESS_DENIED, role=role, section=section, required_roles=roles)

    if section is not None and not auth.can_access(section):
        logger.warning(f"Guarda: sección '{section}' no disponible para el rol '{role}'.")
        return GuardDecision(outcome=GuardOutcome.SECTION_UNAVAILABLE, role=role, section=section, required_roles=roles)

    return GuardDecision(outcome=GuardOutcome.ALLOWED, role=role, section=section, required_roles=roles)


def permission_gate(
    auth: AuthContext,
    required_roles: Optional[Sequence[str]] = None,
    section: Optional[str] = None,
) -> bool:
    """Versión en línea de la guarda: muestra el contenido o nada, sin pantallas."""
    if required_roles is not None and not auth.has_permission(list(required_roles)):
        return False
    if section is not None and not auth.can_access(section):
        return False
    return True


def build_guard_screen(decision: GuardDecision) -> Optional[GuardScreen]:
    """Pantalla de denegación para la decisión, o None si no corresponde ninguna."""
    if decision.outcome == GuardOutcome.ACCESS_DENIED:
        return GuardScreen(
            screen=decision.outcome,
            title="Acceso denegado",
            message=f"Su rol actual ({decision.role}) no tiene permisos suficientes para ver esta página.",
            role=decision.role,
            section=decision.section,
            options=["go_back", "logout"],
        )
    if decision.outcome == GuardOutcome.SECTION_UNAVAILABLE:
        known = parse_section(decision.section or "")
        name = known.display_name if known else decision.section
        return GuardScreen(
            screen=decision.outcome,
            title="Sección no disponible",
            message=f"La sección '{name}' no está disponible para su rol ({decision.role}).",
            role=decision.role,
            section=decision.section,
            options=["go_back"],
        )
    return None
