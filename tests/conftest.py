import os
import tempfile

_tmp = tempfile.mkdtemp(prefix="tienda-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp, 'tienda.db')}"
os.environ["UPLOADS_DIR"] = os.path.join(_tmp, "uploads")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["BASE_PATH"] = ""
os.environ["PRODUCTS_ENABLED"] = "true"
os.environ["CREATE_DEV_ADMIN"] = "false"

import pytest
from fastapi.testclient import TestClient

import store_tienda as store
from db import Base, engine, SessionLocal
from main_tienda import app
from models_tienda import Rol

ADMIN_EMAIL = "admin@tienda.com"
CLIENTE_EMAIL = "cliente@tienda.com"
PASSWORD = "secreto"


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_token(db):
    store.register(db, "Admin", ADMIN_EMAIL, PASSWORD, Rol.admin)
    return store.login(db, ADMIN_EMAIL, PASSWORD)["token"]


@pytest.fixture
def cliente_token(db):
    store.register(db, "Cliente", CLIENTE_EMAIL, PASSWORD)
    return store.login(db, CLIENTE_EMAIL, PASSWORD)["token"]


def auth(token):
    return {"Authorization": f"Bearer {token}"}
