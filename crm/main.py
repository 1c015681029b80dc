import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crm.api.http import (
    admin_router, auth_router, clients_router, documents_router, health_router,
    import_history_router, products_router, users_router
)
from crm.core.config import settings
from crm.core.db import store
from crm.core.exceptions import StorageError
from crm.domains.identity.services import IdentityService

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await store.initialize()
    try:
        await IdentityService(store).ensure_admin()
    except StorageError as e:
        # Сервис запускается и с поврежденным файлом, /api/health покажет состояние
        logger.error(f"Admin bootstrap skipped: {e}")
    yield


app = FastAPI(
    title="Tenant CRM",
    description="CRM с разделением товаров, клиентов и документов по владельцам",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f} ms)")
    return response


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Failed to save data"}
    )


# Подключаем роутеры
for router in (
    health_router,
    auth_router,
    users_router,
    admin_router,
    products_router,
    clients_router,
    documents_router,
    import_history_router,
):
    app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "Tenant CRM API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health"
    }
