import logging
import sys
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import List, Optional

from app.core.config import settings

LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)-8s] [%(name)s] [%(filename)s:%(lineno)d] - %(message)s"
CLI_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers de terceros con ruido en nivel INFO
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.ERROR,
    "multipart": logging.WARNING,
    "httpx": logging.WARNING,
}


def _resolve_level(level_name: Optional[str] = None) -> int:
    return getattr(logging, (level_name or settings.LOG_LEVEL).upper(), logging.INFO)

def _log_file_path(logs_dir: Path) -> Path:
    return logs_dir / f"taller_{datetime.now().strftime('%Y%m%d')}.log"

def _build_file_handler(level: int, formatter: logging.Formatter) -> TimedRotatingFileHandler:
    logs_dir = Path(settings.LOGS_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    # Rota a medianoche y conserva dos semanas
    handler = TimedRotatingFileHandler(
        filename=_log_file_path(logs_dir),
        when="midnight",
        interval=1,
        backupCount=14,
        encoding="utf-8",
        delay=True,
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logging(level_name: Optional[str] = None, to_file: bool = True) -> None:
    """
    Configura el logger raíz del servicio.

    La API escribe en consola y en un archivo diario rotativo bajo LOGS_DIR.
    La CLI llama con `to_file=False` y un formato corto hacia stderr, para no
    mezclar los logs con la salida de los comandos.
    """
    level = _resolve_level(level_name)
    formatter = logging.Formatter(LOG_FORMAT if to_file else CLI_LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout if to_file else sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    handlers: List[logging.Handler] = [console_handler]
    if to_file:
        handlers.append(_build_file_handler(level, formatter))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Evita handlers duplicados con --reload
    root_logger.handlers.clear()
    for handler in handlers:
        root_logger.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    if to_file:
        root_logger.info("=" * 50)
        root_logger.info("Configuración de Logging Iniciada")
        root_logger.info(f"Nivel de Log: {logging.getLevelName(level)}")
        root_logger.info(f"Directorio de Logs: {settings.LOGS_DIR}")
        root_logger.info("=" * 50)
