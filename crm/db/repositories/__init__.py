from crm.db.repositories.base_repository import BaseRepository
from crm.db.repositories.user_repository import UserRepository, PasswordResetTokenRepository
from crm.db.repositories.product_repository import ProductRepository
from crm.db.repositories.client_repository import ClientRepository
from crm.db.repositories.document_repository import DocumentRepository
from crm.db.repositories.import_log_repository import ImportLogRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PasswordResetTokenRepository",
    "ProductRepository",
    "ClientRepository",
    "DocumentRepository",
    "ImportLogRepository"
]
