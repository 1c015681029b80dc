from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from crm.core.auth import require_admin
from crm.core.db import get_db
from crm.db.datastore import JsonDocumentStore
from crm.domains.identity.entities import User
from crm.domains.imports.schemas import ImportHistoryClearResponse, ImportLogResponse
from crm.domains.imports.services import ImportService

router = APIRouter(prefix="/import-history", tags=["import history"])


@router.get("/", response_model=List[ImportLogResponse])
async def get_import_history(
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """История импорта, новые сначала"""
    logs = await ImportService(db).list_logs()
    return [ImportLogResponse.from_entity(log) for log in logs]


@router.get("/{log_id}", response_model=ImportLogResponse)
async def get_import_log(
    log_id: str,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Журнал одного импорта"""
    log = await ImportService(db).get_log(log_id)
    if not log:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import log not found")
    return ImportLogResponse.from_entity(log)


@router.delete("/{log_id}", response_model=ImportHistoryClearResponse)
async def delete_import_log(
    log_id: str,
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    if not await ImportService(db).delete_log(log_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import log not found")
    return {"success": True, "deleted": 1}


@router.delete("/", response_model=ImportHistoryClearResponse)
async def clear_import_history(
    admin: User = Depends(require_admin),
    db: JsonDocumentStore = Depends(get_db)
):
    """Очистка всей истории импорта"""
    deleted = await ImportService(db).clear_logs()
    return {"success": True, "deleted": deleted}
