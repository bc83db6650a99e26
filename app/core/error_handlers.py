import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from app.core.exceptions import AppError, ValidationError

logger = logging.getLogger(__name__)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _describe(request: Request) -> str:
    return f"{request.method} {request.url.path}"

def _error_response(status_code: int, detail: Any, headers: Optional[Dict[str, str]] = None, **extra: Any) -> JSONResponse:
    """Cuerpo de error común: siempre `detail`, más las claves extra indicadas."""
    content: Dict[str, Any] = {"detail": detail}
    content.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=content, headers=headers)

def _field_from_loc(loc) -> str:
    # ('body', 'email') -> 'email'; ('query', 'required_roles', 0) -> 'required_roles -> 0'
    if loc and loc[0] in ("body", "query", "path", "header") and len(loc) > 1:
        loc = loc[1:]
    return " -> ".join(map(str, loc)) or "body"


async def validation_exception_handler(request: Request, exc: Exception):
    """
    Errores de validación de FastAPI/Pydantic sobre la petición.
    El primer campo con error se expone en `field`, igual que los errores
    de validación de dominio.
    """
    if not isinstance(exc, RequestValidationError):
        return await generic_exception_handler(request, exc)

    errors = [
        {"field": _field_from_loc(error.get("loc", ())), "message": error.get("msg", "Error de validación")}
        for error in exc.errors()
    ]
    logger.warning(f"Petición inválida {_describe(request)}: {errors}")
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Error de validación en los datos de entrada.",
        field=errors[0]["field"] if errors else None,
        errors=errors,
    )

async def app_exception_handler(request: Request, exc: Exception):
    """
    Excepciones de dominio (validación, autenticación, no encontrado,
    conflicto). El código HTTP lo define la propia excepción.
    """
    if not isinstance(exc, AppError):
        return await generic_exception_handler(request, exc)

    logger.warning(f"{type(exc).__name__} ({exc.status_code}) en {_describe(request)}: {exc.message}")
    field = exc.field if isinstance(exc, ValidationError) else None
    headers = BEARER_CHALLENGE if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _error_response(exc.status_code, exc.message, headers=headers, field=field)

async def http_exception_handler(request: Request, exc: Exception):
    """Excepciones HTTP lanzadas por rutas y dependencias (401/403/404)."""
    if not isinstance(exc, HTTPException):
        return await generic_exception_handler(request, exc)

    log_message = f"HTTPException ({exc.status_code}) en {_describe(request)}: {exc.detail}"
    if exc.status_code >= 500:
        logger.error(log_message)
    elif exc.status_code >= 400:
        logger.warning(log_message)
    else:
        logger.info(log_message)
    return _error_response(exc.status_code, exc.detail, headers=getattr(exc, "headers", None))

async def generic_exception_handler(request: Request, exc: Exception):
    """Cualquier excepción no capturada: 500 sin filtrar detalles internos."""
    logger.critical(
        f"Excepción no controlada {type(exc).__name__} en {_describe(request)}: {exc}\n{traceback.format_exc()}"
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Ocurrió un error interno inesperado en la aplicación.",
    )


def register_error_handlers(app: FastAPI):
    """Registra los manejadores de excepciones en la app FastAPI."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
    logger.info("Manejadores de errores personalizados registrados.")
