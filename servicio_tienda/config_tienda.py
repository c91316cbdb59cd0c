# config_tienda.py
from starlette.config import Config
from starlette.datastructures import CommaSeparatedStrings

# Variables de entorno tienen prioridad sobre el .env
config = Config(".env")

DATABASE_URL = config("DATABASE_URL", default="sqlite:///./tienda.db")
DB_POOL_SIZE = config("DB_POOL_SIZE", cast=int, default=5)
DB_MAX_OVERFLOW = config("DB_MAX_OVERFLOW", cast=int, default=10)

# Prefijo de la carpeta pública (ej. "/api_proyecto/public")
BASE_PATH = config("BASE_PATH", default="").rstrip("/")
UPLOADS_DIR = config("UPLOADS_DIR", default="./uploads")
PRODUCTS_ENABLED = config("PRODUCTS_ENABLED", cast=bool, default=True)

CORS_ALLOWED_ORIGINS = list(
    config("CORS_ALLOWED_ORIGINS", cast=CommaSeparatedStrings, default="http://localhost:4200,http://127.0.0.1:4200")
)
CORS_DEFAULT_ORIGIN = config("CORS_DEFAULT_ORIGIN", default="http://localhost:4200")

BCRYPT_ROUNDS = config("BCRYPT_ROUNDS", cast=int, default=12)

CREATE_DEV_ADMIN = config("CREATE_DEV_ADMIN", cast=bool, default=False)
ADMIN_NAME = config("ADMIN_NAME", default="Administrador")
ADMIN_EMAIL = config("ADMIN_EMAIL", default="admin@example.com")
ADMIN_PASSWORD = config("ADMIN_PASSWORD", default="admin")

LOG_LEVEL = config("LOG_LEVEL", default="INFO").upper()
