"""Excepciones de dominio del sistema de autorización."""

from fastapi import status


class AppError(Exception):
    """Excepción base de la aplicación."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Ocurrió un error"):
        self.message = message
        super().__init__(self.message)


class ValidationError(AppError):
    """Campo obligatorio vacío, email mal formado o contraseña que no cumple la política."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class AuthenticationError(AppError):
    """Credenciales incorrectas. El mensaje nunca distingue la causa."""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Nombre de usuario o contraseña incorrectos."):
        super().__init__(message)


class NotFoundError(AppError):
    """El identificador referenciado no existe."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """El registro ya existe."""
    status_code = status.HTTP_409_CONFLICT
