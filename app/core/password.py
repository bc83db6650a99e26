import bcrypt
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Compara una contraseña en texto plano con su hash bcrypt.

    Args:
        plain_password: La contraseña en texto plano.
        hashed_password: El hash almacenado (como string).

    Returns:
        True si coinciden, False en caso contrario o si el hash no es válido.
    """
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError as e:
        # bcrypt.checkpw lanza ValueError si el hash no tiene formato válido
        logger.error(f"Error verificando password (hash inválido): {e}")
        return False


def get_password_hash(password: str) -> str:
    """Genera el hash bcrypt (con salt propio) de una contraseña."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')
