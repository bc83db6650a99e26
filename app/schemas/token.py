from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .usuario import Usuario

# Schema para la respuesta del endpoint de login
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: Usuario

# Schema para los datos contenidos dentro del JWT (payload)
class TokenPayload(BaseModel):
    sub: str
    exp: int
    jti: Optional[str] = None
    user: Dict[str, Any]
