import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse

from app.api import deps
from app.models.usuario import Usuario as UsuarioModel
from app.schemas.enums import GuardOutcome
from app.schemas.section import SectionInfo, SectionView
from app.services.auth import AuthContext
from app.services.authorization import AuthorizationContext
from app.services.guard import build_guard_screen, evaluate_guard
from app.services.seccion import parse_section

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/",
            response_model=List[SectionInfo],
            summary="Secciones visibles para el usuario actual")
def read_visible_sections(
    authorization: AuthorizationContext = Depends(deps.get_authorization),
    current_user: UsuarioModel = Depends(deps.get_current_active_user),
) -> Any:
    return [SectionInfo.from_section(section) for section in authorization.visible_sections(current_user)]


@router.get("/{section}",
            response_model=SectionView,
            responses={
                status.HTTP_307_TEMPORARY_REDIRECT: {"description": "Sin sesión: redirige al login"},
                status.HTTP_403_FORBIDDEN: {"description": "Pantalla de acceso denegado o sección no disponible"},
            },
            summary="Abrir una sección protegida")
def open_section(
    section: str,
    required_roles: Optional[List[str]] = Query(None),
    auth: AuthContext = Depends(deps.get_auth_context),
) -> Any:
    """
    Ejecuta la guarda de la vista: sin sesión redirige al login; con rol
    insuficiente o sección no disponible devuelve la pantalla correspondiente
    (403, sin redirección); en otro caso devuelve el contenido de la sección.
    """
    decision = evaluate_guard(auth, required_roles=required_roles, section=section)

    if decision.outcome == GuardOutcome.REDIRECT_LOGIN:
        return RedirectResponse(url=decision.redirect_to, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    screen = build_guard_screen(decision)
    if screen is not None:
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content=screen.model_dump(mode="json"))

    known = parse_section(section)
    user = auth.user
    return SectionView(
        section=section,
        name=known.display_name if known else section,
        actions=auth.authorization.section_actions(user.role, known) if known else {},
        capabilities=auth.authorization.capabilities(user),
    )
