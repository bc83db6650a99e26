import logging

from app.schemas.enums import Section
from app.schemas.section import PermissionsCard, SectionInfo

from .authorization import AuthorizationContext, UserLike
from .rol import percentage

logger = logging.getLogger(__name__)

class DashboardService:
    def get_permissions_card(self, authorization: AuthorizationContext, user: UserLike) -> PermissionsCard:
        logger.info(f"Obteniendo tarjeta de permisos para '{user.username}'.")

        accessible = []
        restricted = []
        for section in Section:
            info = SectionInfo.from_section(section)
            if authorization.can_access(user, section):
                accessible.append(info)
            else:
                restricted.append(info)
        logger.debug(f"Secciones accesibles: {[s.id.value for s in accessible]}")

        total = len(accessible) + len(restricted)
        return PermissionsCard(
            role=user.role,
            accessible_sections=accessible,
            restricted_sections=restricted,
            accessible_count=len(accessible),
            total_sections=total,
            access_percentage=percentage(len(accessible), total),
        )

dashboard_service = DashboardService()
