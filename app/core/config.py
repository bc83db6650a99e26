import os
import json
from typing import List, Union
from pydantic import field_validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """
    Configuraciones de la aplicación, leídas desde variables de entorno.
    """
    # --- Configuración General del Proyecto ---
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Taller de Reparaciones API")
    API_V1_STR: str = os.getenv("API_V1_STR", "/api/v1")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "cambiar-esta-clave-en-produccion")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")

    # --- Sesión ---
    SESSION_DURATION_HOURS: int = int(os.getenv("SESSION_DURATION_HOURS", "24"))
    SESSION_STORAGE_PATH: str = os.getenv("SESSION_STORAGE_PATH", "./.session.json")
    LOGIN_PATH: str = os.getenv("LOGIN_PATH", "/login")

    # --- Políticas ---
    MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    # 'table': lista de roles por sección. 'matrix': proyección de la matriz fina.
    SECTION_ACCESS_SOURCE: str = os.getenv("SECTION_ACCESS_SOURCE", "table")

    # --- Configuración de CORS ---
    BACKEND_CORS_ORIGINS: List[str] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and v:
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        elif isinstance(v, list):
            return v
        return []

    @field_validator("SECTION_ACCESS_SOURCE", mode='after')
    @classmethod
    def check_section_access_source(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("table", "matrix"):
            raise ValueError("SECTION_ACCESS_SOURCE debe ser 'table' o 'matrix'.")
        return v

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOGS_DIR: str = os.getenv("LOGS_DIR", "logs")

    class Config:
        case_sensitive = True
        env_file = ".env"
        env_file_encoding = 'utf-8'

settings = Settings()
