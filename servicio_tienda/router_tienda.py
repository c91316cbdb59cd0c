"""Enrutador de la API.

Tabla ordenada de rutas ``(método, patrón, handler)``; la primera que
coincide gana. Un patrón es una tupla de segmentos tipados: ``Literal``
(texto exacto) o ``Digits`` (uno o más dígitos ASCII, capturados como int).
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from sqlalchemy.orm import Session
from starlette.responses import Response

import handlers_tienda as handlers
import security_tienda as security
from context_tienda import RequestContext
from errors_tienda import NotFoundError, UnavailableError

logger = logging.getLogger(__name__)

ADMIN = "admin"
PRODUCTS = "products"

@dataclass(frozen=True)
class Literal:
    text: str

@dataclass(frozen=True)
class Digits:
    name: str

Segment = Union[Literal, Digits]
Pattern = Tuple[Segment, ...]

@dataclass(frozen=True)
class Route:
    method: str
    pattern: Pattern
    handler: Callable[..., Response]
    auth: Optional[str] = None
    module: Optional[str] = None

def pattern(template: str) -> Pattern:
    """``"/products/{product_id}"`` -> ``(Literal("products"), Digits("product_id"))``."""
    segments = []
    for part in template.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            segments.append(Digits(part[1:-1]))
        else:
            segments.append(Literal(part))
    return tuple(segments)

def normalize_path(path: str, base_path: str = "") -> str:
    if base_path and path.startswith(base_path):
        path = path[len(base_path):]
    return path.rstrip("/") or "/"

def match(pat: Pattern, path: str) -> Optional[Dict[str, int]]:
    stripped = path.strip("/")
    parts = stripped.split("/") if stripped else []
    if len(parts) != len(pat):
        return None
    params: Dict[str, int] = {}
    for segment, part in zip(pat, parts):
        if isinstance(segment, Literal):
            if part != segment.text:
                return None
        elif part.isascii() and part.isdigit():
            params[segment.name] = int(part)
        else:
            return None
    return params

ROUTES: Sequence[Route] = (
    Route("POST", pattern("/users/register"), handlers.register),
    Route("POST", pattern("/users/login"), handlers.login),
    Route("GET", pattern("/users"), handlers.list_users, auth=ADMIN),
    Route("GET", pattern("/products"), handlers.list_products, module=PRODUCTS),
    Route("POST", pattern("/products"), handlers.create_product, auth=ADMIN, module=PRODUCTS),
    Route("GET", pattern("/products/{product_id}"), handlers.get_product, module=PRODUCTS),
    Route("PUT", pattern("/products/{product_id}"), handlers.update_product, auth=ADMIN, module=PRODUCTS),
    Route("DELETE", pattern("/products/{product_id}"), handlers.delete_product, auth=ADMIN, module=PRODUCTS),
)

class Router:
    def __init__(self, routes: Sequence[Route] = ROUTES, base_path: str = "", products_enabled: bool = True):
        self.routes = tuple(routes)
        self.base_path = base_path.rstrip("/")
        self.products_enabled = products_enabled

    def resolve(self, method: str, path: str) -> Tuple[Optional[Route], Dict[str, int]]:
        for route in self.routes:
            if route.method != method:
                continue
            params = match(route.pattern, path)
            if params is not None:
                return route, params
        return None, {}

    def dispatch(self, ctx: RequestContext, db: Session) -> Response:
        path = normalize_path(ctx.path, self.base_path)
        route, params = self.resolve(ctx.method, path)
        if route is None:
            raise NotFoundError("Ruta no encontrada", extra={"path": path})
        if route.module == PRODUCTS and not self.products_enabled:
            raise UnavailableError("Módulo de productos no disponible")
        user = None
        if route.auth == ADMIN:
            token = security.resolve_bearer(ctx.header("authorization"), ctx.header(security.FALLBACK_HEADER))
            user = security.require_admin(db, token)
        logger.debug("%s %s -> %s", ctx.method, path, route.handler.__name__)
        return route.handler(ctx, db, user=user, **params)
