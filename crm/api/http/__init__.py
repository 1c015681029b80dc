from crm.api.http.health import router as health_router
from crm.api.http.auth import router as auth_router
from crm.api.http.users import router as users_router
from crm.api.http.admin import router as admin_router
from crm.api.http.products import router as products_router
from crm.api.http.clients import router as clients_router
from crm.api.http.documents import router as documents_router
from crm.api.http.import_history import router as import_history_router

__all__ = [
    "health_router",
    "auth_router",
    "users_router",
    "admin_router",
    "products_router",
    "clients_router",
    "documents_router",
    "import_history_router"
]
