from typing import Dict, List, Optional

from pydantic import BaseModel

from .enums import Action, GuardOutcome, Section


class SectionInfo(BaseModel):
    id: Section
    name: str
    icon: str

    @classmethod
    def from_section(cls, section: Section) -> "SectionInfo":
        return cls(id=section, name=section.display_name, icon=section.icon)


class ActionInfo(BaseModel):
    id: Action
    name: str

    @classmethod
    def from_action(cls, action: Action) -> "ActionInfo":
        return cls(id=action, name=action.display_name)


class SectionView(BaseModel):
    """Contenido renderizado cuando la guarda deja pasar."""
    section: str
    name: str
    actions: Dict[str, bool]
    capabilities: Dict[str, bool]


class GuardScreen(BaseModel):
    """Pantalla de denegación. No es un error: es un resultado normal de la guarda."""
    screen: GuardOutcome
    title: str
    message: str
    role: Optional[str] = None
    section: Optional[str] = None
    options: List[str] = []


class PermissionsCard(BaseModel):
    """Resumen de secciones accesibles para el usuario actual."""
    role: str
    accessible_sections: List[SectionInfo]
    restricted_sections: List[SectionInfo]
    accessible_count: int
    total_sections: int
    access_percentage: int
