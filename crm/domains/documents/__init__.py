from crm.domains.documents.entities import Document
from crm.domains.documents.schemas import DocumentResponse

__all__ = ["Document", "DocumentResponse"]
