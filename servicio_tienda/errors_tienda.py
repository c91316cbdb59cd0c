"""Errores de la API.

Cada error termina la petición: el manejador registrado en ``main_tienda``
lo convierte en una respuesta JSON ``{"message": ...}`` con su código.
Nada se reintenta.
"""
from typing import Any, Dict, Optional


class ApiError(Exception):
    status_code = 500
    message = "Error interno del servidor"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, extra: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code:
            self.status_code = status_code
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, **self.extra}


class ValidationError(ApiError):
    status_code = 400
    message = "Datos inválidos"


class AuthError(ApiError):
    # 401 en login, 403 al autorizar
    status_code = 403
    message = "No autorizado"


class ConflictError(ApiError):
    status_code = 409
    message = "Conflicto"


class NotFoundError(ApiError):
    status_code = 404
    message = "No encontrado"


class StoreError(ApiError):
    """Fallo de persistencia o conectividad; el detalle solo va al log."""
    status_code = 500
    message = "Error interno del servidor"


class UnavailableError(ApiError):
    status_code = 501
    message = "Módulo no disponible"
