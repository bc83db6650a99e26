
from pydantic import BaseModel

class Msg(BaseModel):
    """Schema genérico para mensajes de respuesta."""
    msg: str
