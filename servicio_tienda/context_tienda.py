import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content: bytes
    content_type: Optional[str] = None

@dataclass(frozen=True)
class RequestContext:
    """Datos de una petición, construidos una sola vez y de solo lectura."""
    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: bytes = b""
    fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    files: Mapping[str, UploadedFile] = field(default_factory=lambda: MappingProxyType({}))

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()

def decode_json(body: bytes) -> dict:
    if not body:
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}

def make_context(method: str, path: str, headers: Optional[Mapping[str, str]] = None, body: bytes = b"",
                 fields: Optional[Mapping[str, Any]] = None, files: Optional[Mapping[str, UploadedFile]] = None) -> RequestContext:
    return RequestContext(
        method=method.upper(),
        path=path,
        headers=MappingProxyType({k.lower(): v for k, v in (headers or {}).items()}),
        body=body,
        fields=MappingProxyType(dict(fields or {})),
        files=MappingProxyType(dict(files or {})),
    )

async def build_context(request: Request) -> RequestContext:
    body = await request.body()
    media_type = _media_type(request.headers.get("content-type", ""))
    fields: dict = {}
    files: dict = {}
    if media_type == "application/json":
        fields = decode_json(body)
    elif media_type in FORM_TYPES:
        try:
            async with request.form() as form:
                for key, value in form.multi_items():
                    if isinstance(value, UploadFile):
                        if value.filename:
                            files[key] = UploadedFile(value.filename, await value.read(), value.content_type)
                    else:
                        fields[key] = value
        except (HTTPException, MultiPartException):
            # Cuerpo de formulario ilegible: se trata como sin campos
            fields, files = {}, {}
    return make_context(request.method, request.url.path, request.headers, body, fields, files)
