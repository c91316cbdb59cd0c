"""Política CORS: se refleja el origen si está permitido, si no se emite el origen por defecto."""
from typing import Dict, Iterable, Optional

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Content-Type", "Authorization")

class CorsPolicy:
    def __init__(self, allowed_origins: Iterable[str], default_origin: str, allow_credentials: bool = True):
        self.allowed_origins = frozenset(allowed_origins)
        self.default_origin = default_origin
        self.allow_credentials = allow_credentials

    def origin_for(self, origin: Optional[str]) -> str:
        if origin and origin in self.allowed_origins:
            return origin
        return self.default_origin

    def headers(self, origin: Optional[str]) -> Dict[str, str]:
        headers = {
            "Access-Control-Allow-Origin": self.origin_for(origin),
            "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
            "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
            "Vary": "Origin",
        }
        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers
