from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import hashlib
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _sha256(value: str) -> str:
    # bcrypt trunca a 72 bytes; el digest hex siempre mide 64
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Emite un JWT cuyo `sub` es el email del usuario.

    Args:
        `subject`: Email del usuario autenticado
        `expires_delta`: Vigencia del token (por defecto ACCESS_TOKEN_EXPIRE_MINUTES)
        `extra_claims`: Claims adicionales, p. ej. `{"role": "admin"}`
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode: Dict[str, Any] = dict(extra_claims or {})
    to_encode.update({"sub": subject, "exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_sha256(plain_password), hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(_sha256(password))


def verify_token(token: str) -> Optional[str]:
    """Devuelve el email contenido en el token o None si es inválido o expiró."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")
