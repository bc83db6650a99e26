from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass
class Usuario:
    id: str
    username: str
    full_name: str
    email: str
    role: str
    hashed_password: str
    avatar: str = ""
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_login: Optional[datetime] = None
