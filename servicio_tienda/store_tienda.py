import logging
import secrets
from typing import Any, Dict, List, Optional, Tuple

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config_tienda import BCRYPT_ROUNDS, ADMIN_NAME, ADMIN_EMAIL, ADMIN_PASSWORD
from db import Base, engine, SessionLocal
from errors_tienda import StoreError
from models_tienda import Rol, Usuario, Producto

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

EMAIL_EXISTS = "email_exists"
TOKEN_BYTES = 16

PRODUCT_FIELDS = ("name", "description", "price", "image", "stock")
# Mayor entero que cabe en una columna INTEGER de 64 bits
MAX_ID = 2**63 - 1

def init_db(create_dev_admin: bool = False):
    Base.metadata.create_all(bind=engine)
    if create_dev_admin:
        with SessionLocal() as db:
            if not db.query(Usuario).filter(Usuario.role == Rol.admin).first():
                ok, _ = register(db, ADMIN_NAME, ADMIN_EMAIL, ADMIN_PASSWORD, Rol.admin)
                if ok:
                    logger.info("Administrador inicial creado: %s", ADMIN_EMAIL)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

# ---------------------------------------------------------------------------
# Usuarios
# ---------------------------------------------------------------------------

def find_by_email(db: Session, email: str) -> Optional[Usuario]:
    try:
        return db.query(Usuario).filter(Usuario.email == email).first()
    except SQLAlchemyError:
        logger.exception("Error consultando usuario por email")
        raise StoreError()

def register(db: Session, name: str, email: str, password: str, role: Rol = Rol.cliente) -> Tuple[bool, Any]:
    """Crea un usuario si el email está libre.

    Devuelve ``(True, {"id": ...})`` o ``(False, EMAIL_EXISTS)``; el conflicto
    no se lanza como excepción para que el llamador lo mapee a 409.
    """
    if find_by_email(db, email):
        return False, EMAIL_EXISTS
    u = Usuario(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(u)
    try:
        db.commit()
        db.refresh(u)
    except IntegrityError:
        # Otro registro concurrente ganó la restricción UNIQUE
        db.rollback()
        return False, EMAIL_EXISTS
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error registrando usuario %s", email)
        raise StoreError()
    return True, {"id": u.id}

def login(db: Session, email: str, password: str) -> Optional[Dict[str, Any]]:
    u = find_by_email(db, email)
    if not u:
        return None
    if not verify_password(password, u.password_hash):
        return None
    # Último login gana: el token anterior queda invalidado sin aviso
    token = secrets.token_hex(TOKEN_BYTES)
    u.token = token
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("No se pudo guardar el token del usuario %s", u.id)
        return None
    return {"id": u.id, "name": u.name, "email": u.email, "role": u.role.value, "token": token}

def find_by_token(db: Session, token: Optional[str]) -> Optional[Usuario]:
    if not token:
        return None
    try:
        return db.query(Usuario).filter(Usuario.token == token).first()
    except SQLAlchemyError:
        logger.exception("Error consultando usuario por token")
        raise StoreError()

def list_users(db: Session) -> List[Usuario]:
    try:
        return db.query(Usuario).order_by(Usuario.id.asc()).all()
    except SQLAlchemyError:
        logger.exception("Error listando usuarios")
        raise StoreError()

# ---------------------------------------------------------------------------
# Productos
# ---------------------------------------------------------------------------

def list_products(db: Session) -> List[Producto]:
    try:
        return db.query(Producto).order_by(Producto.id.asc()).all()
    except SQLAlchemyError:
        logger.exception("Error listando productos")
        raise StoreError()

def get_product(db: Session, product_id: int) -> Optional[Producto]:
    if not 0 < product_id <= MAX_ID:
        return None
    try:
        return db.get(Producto, product_id)
    except SQLAlchemyError:
        logger.exception("Error obteniendo producto %s", product_id)
        raise StoreError()

def create_product(db: Session, fields: Dict[str, Any]) -> Optional[int]:
    p = Producto(**{k: fields.get(k) for k in PRODUCT_FIELDS})
    db.add(p)
    try:
        db.commit()
        db.refresh(p)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error al crear el producto")
        return None
    return p.id

def update_product(db: Session, product_id: int, fields: Dict[str, Any]) -> bool:
    if not 0 < product_id <= MAX_ID:
        return False
    try:
        p = db.get(Producto, product_id)
        if not p:
            return False
        for k in PRODUCT_FIELDS:
            setattr(p, k, fields.get(k))
        db.commit()
        return True
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error al actualizar el producto %s", product_id)
        return False

def delete_product(db: Session, product_id: int) -> bool:
    if not 0 < product_id <= MAX_ID:
        return False
    try:
        p = db.get(Producto, product_id)
        if not p:
            return False
        db.delete(p)
        db.commit()
        return True
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error al eliminar el producto %s", product_id)
        return False
