# security_tienda.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

import store_tienda as store
from errors_tienda import AuthError
from models_tienda import Rol, Usuario

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
# Algunos proxies no reenvían Authorization; se acepta esta cabecera como respaldo
FALLBACK_HEADER = "x-authorization"

def _token_from(header: Optional[str]) -> Optional[str]:
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    parts = header[len(BEARER_PREFIX):].split(None, 1)
    return parts[0] if parts else None

def resolve_bearer(header: Optional[str], fallback: Optional[str] = None) -> Optional[str]:
    return _token_from(header) or _token_from(fallback)

def authenticate(db: Session, token: Optional[str]) -> Optional[Usuario]:
    return store.find_by_token(db, token)

def require_admin(db: Session, token: Optional[str]) -> Usuario:
    user = authenticate(db, token)
    if not user or user.role != Rol.admin:
        logger.warning("Acceso denegado (usuario=%s)", user.id if user else None)
        raise AuthError("No autorizado", status_code=403)
    return user
