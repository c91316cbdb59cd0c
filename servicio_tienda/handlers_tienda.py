"""Handlers de usuarios y productos.

Cada handler recibe el ``RequestContext`` ya construido, la sesión de BD y,
en rutas protegidas, el usuario autenticado por el router. Validan la
presencia de campos antes de tocar el store y devuelven ``JSONResponse`` con
un código fijo por resultado; los fallos se lanzan como ``ApiError``.
"""
import logging
import os
import secrets
import time
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, Mapping, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

import config_tienda
import schemas_tienda as schemas
import store_tienda as store
from context_tienda import RequestContext, UploadedFile
from errors_tienda import AuthError, ConflictError, NotFoundError, StoreError, ValidationError
from models_tienda import Rol, Usuario

logger = logging.getLogger(__name__)

MISSING_DATA = "Faltan datos obligatorios"
MISSING_CREDENTIALS = "Faltan credenciales"
PRODUCT_REQUIRED = ("name", "description", "price", "stock")

def _require(fields: Mapping[str, Any], names: Iterable[str], message: str) -> None:
    for name in names:
        if fields.get(name) is None or fields.get(name) == "":
            raise ValidationError(message)

def _product_input(fields: Mapping[str, Any], with_image: bool = False) -> Dict[str, Any]:
    _require(fields, PRODUCT_REQUIRED, MISSING_DATA)
    data = {k: fields[k] for k in PRODUCT_REQUIRED}
    if with_image:
        data["image"] = fields.get("image") or None
    try:
        return schemas.ProductoCreate(**data).model_dump()
    except SchemaError:
        raise ValidationError("Datos inválidos")

# ---------------------------------------------------------------------------
# Imágenes
# ---------------------------------------------------------------------------

def save_upload(upload: UploadedFile, directory: Optional[str] = None) -> str:
    """Guarda la imagen con un prefijo tiempo/aleatorio y devuelve el nombre final."""
    directory = directory or config_tienda.UPLOADS_DIR
    os.makedirs(directory, exist_ok=True)
    base = PurePosixPath(upload.filename.replace("\\", "/")).name[-150:] or "imagen"
    filename = f"{time.time_ns() // 1000:x}_{secrets.token_hex(4)}_{base}"
    with open(os.path.join(directory, filename), "wb") as fh:
        fh.write(upload.content)
    return filename

def discard_upload(filename: str, directory: Optional[str] = None) -> None:
    path = os.path.join(directory or config_tienda.UPLOADS_DIR, filename)
    try:
        os.remove(path)
    except FileNotFoundError:
        pass

# ---------------------------------------------------------------------------
# Usuarios
# ---------------------------------------------------------------------------

def register(ctx: RequestContext, db: Session, user: Optional[Usuario] = None) -> JSONResponse:
    data = ctx.fields
    _require(data, ("name", "email", "password"), MISSING_DATA)
    try:
        new_user = schemas.UsuarioCreate(
            name=data["name"],
            email=data["email"],
            password=data["password"],
            role=data.get("role") or Rol.cliente,
        )
    except SchemaError:
        raise ValidationError("Datos inválidos")
    ok, result = store.register(db, new_user.name, new_user.email, new_user.password, new_user.role)
    if not ok:
        logger.info("Registro rechazado, email ya existe: %s", new_user.email)
        raise ConflictError("Email ya registrado")
    return JSONResponse({"success": True, "id": result["id"]}, status_code=status.HTTP_201_CREATED)

def login(ctx: RequestContext, db: Session, user: Optional[Usuario] = None) -> JSONResponse:
    data = ctx.fields
    _require(data, ("email", "password"), MISSING_CREDENTIALS)
    logged = store.login(db, str(data["email"]), str(data["password"]))
    if not logged:
        logger.info("Login fallido: %s", data["email"])
        raise AuthError("Credenciales incorrectas", status_code=status.HTTP_401_UNAUTHORIZED)
    logger.info("Login exitoso: %s", logged["email"])
    return JSONResponse(schemas.UsuarioConToken(**logged).model_dump(mode="json"))

def list_users(ctx: RequestContext, db: Session, user: Optional[Usuario] = None) -> JSONResponse:
    users = store.list_users(db)
    return JSONResponse([schemas.Usuario.model_validate(u).model_dump(mode="json") for u in users])

# ---------------------------------------------------------------------------
# Productos
# ---------------------------------------------------------------------------

def list_products(ctx: RequestContext, db: Session, user: Optional[Usuario] = None) -> JSONResponse:
    products = store.list_products(db)
    return JSONResponse([schemas.Producto.model_validate(p).model_dump() for p in products])

def get_product(ctx: RequestContext, db: Session, user: Optional[Usuario] = None, product_id: int = 0) -> JSONResponse:
    p = store.get_product(db, product_id)
    if not p:
        raise NotFoundError("Producto no encontrado")
    return JSONResponse(schemas.Producto.model_validate(p).model_dump())

def create_product(ctx: RequestContext, db: Session, user: Optional[Usuario] = None) -> JSONResponse:
    data = _product_input(ctx.fields)
    filename = None
    image = ctx.files.get("image")
    if image:
        try:
            filename = save_upload(image)
        except OSError:
            logger.exception("Error al guardar la imagen %s", image.filename)
            raise StoreError("Error al guardar la imagen")
    data["image"] = filename
    new_id = store.create_product(db, data)
    if not new_id:
        if filename:
            discard_upload(filename)
        raise StoreError("Error al crear el producto")
    return JSONResponse({"message": "Producto creado correctamente", "id": new_id}, status_code=status.HTTP_201_CREATED)

def update_product(ctx: RequestContext, db: Session, user: Optional[Usuario] = None, product_id: int = 0) -> JSONResponse:
    data = _product_input(ctx.fields, with_image=True)
    if not store.get_product(db, product_id):
        raise NotFoundError("Producto no encontrado")
    if not store.update_product(db, product_id, data):
        raise StoreError("Error al actualizar el producto")
    return JSONResponse({"message": "Producto actualizado correctamente"})

def delete_product(ctx: RequestContext, db: Session, user: Optional[Usuario] = None, product_id: int = 0) -> JSONResponse:
    if not store.get_product(db, product_id):
        raise NotFoundError("Producto no encontrado")
    if not store.delete_product(db, product_id):
        raise StoreError("Error al eliminar el producto")
    return JSONResponse({"message": "Producto eliminado correctamente"})
