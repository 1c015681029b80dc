from fastapi import APIRouter, Depends

from crm.core.db import get_db
from crm.db.datastore import JsonDocumentStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: JsonDocumentStore = Depends(get_db)):
    """Проверка состояния сервиса и файла данных"""
    result = await db.read_result()
    return {
        "status": "degraded" if result.is_corrupt else "ok",
        "datastore": result.status.value
    }
