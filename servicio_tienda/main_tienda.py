import logging
import os
from typing import Annotated

from fastapi import FastAPI, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

import config_tienda as settings
import store_tienda as store
from context_tienda import build_context
from cors_tienda import CorsPolicy
from db import get_db
from errors_tienda import ApiError, StoreError
from router_tienda import Router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger("tienda")

app = FastAPI(title="API de Tienda", description="Registro/login de usuarios y CRUD de productos.", version="1.0.0")

DbSession = Annotated[Session, Depends(get_db)]

router = Router(base_path=settings.BASE_PATH, products_enabled=settings.PRODUCTS_ENABLED)
cors_policy = CorsPolicy(settings.CORS_ALLOWED_ORIGINS, settings.CORS_DEFAULT_ORIGIN)

@app.on_event("startup")
def _startup():
    store.init_db(create_dev_admin=settings.CREATE_DEV_ADMIN)

@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    headers = cors_policy.headers(request.headers.get("origin"))
    # Preflight: 200 sin cuerpo
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK, headers=headers)
    response = await call_next(request)
    response.headers.update(headers)
    return response

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)

@app.exception_handler(SQLAlchemyError)
async def db_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Error de base de datos no controlado", exc_info=exc)
    err = StoreError()
    return JSONResponse(err.to_dict(), status_code=err.status_code)

@app.get("/__health", include_in_schema=False)
async def health():
    return {"status": "ok"}

os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
app.mount(f"{settings.BASE_PATH}/uploads", StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")

@app.api_route(
    "/{full_path:path}",
    methods=["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD"],
    include_in_schema=False,
)
async def dispatch(full_path: str, request: Request, db: DbSession):
    ctx = await build_context(request)
    return await run_in_threadpool(router.dispatch, ctx, db)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main_tienda:app", host="0.0.0.0", port=int(os.environ.get("PORT", 8000)))
