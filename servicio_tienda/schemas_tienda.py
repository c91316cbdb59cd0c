from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from models_tienda import Rol

class Usuario(BaseModel):
    id: int
    name: str
    email: str
    role: Rol
    model_config = ConfigDict(from_attributes=True)

class UsuarioConToken(Usuario):
    token: str

class UsuarioCreate(BaseModel):
    name: str
    email: str
    password: str
    role: Rol = Rol.cliente

class ProductoBase(BaseModel):
    name: str
    description: str
    price: float = Field(ge=0, allow_inf_nan=False)
    stock: int = Field(ge=0)
    image: Optional[str] = None

class ProductoCreate(ProductoBase): pass

class Producto(ProductoBase):
    id: int
    model_config = ConfigDict(from_attributes=True)
