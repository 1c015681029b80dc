from crm.domains.imports.entities import ImportLog, ImportStatus, ImportType
from crm.domains.imports.schemas import ImportLogResponse, ImportHistoryClearResponse

__all__ = ["ImportLog", "ImportStatus", "ImportType", "ImportLogResponse", "ImportHistoryClearResponse"]
