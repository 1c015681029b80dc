from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from crm.core.auth import get_current_user, get_scope
from crm.core.db import get_db
from crm.core.schemas import (
    BulkDeleteRequest, BulkDeleteResponse, BulkImportResponse, MessageResponse
)
from crm.db.datastore import JsonDocumentStore
from crm.domains.identity.entities import User
from crm.domains.imports.entities import ImportType
from crm.domains.imports.services import ImportService
from crm.domains.ownership.entities import OwnershipScope
from crm.domains.products.schemas import (
    ProductBulkImportRequest, ProductCreate, ProductResponse, ProductUpdate
)
from crm.domains.products.services import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[ProductResponse])
async def get_products(
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Получение списка товаров пользователя"""
    products = await ProductService(db).list(scope)
    return [ProductResponse.from_entity(product) for product in products]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Получение товара по id"""
    try:
        product = await ProductService(db).get(product_id, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.from_entity(product)


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db)
):
    """Создание нового товара"""
    try:
        product = await ProductService(db).create_product(
            product_data.model_dump(by_alias=True, exclude_none=True), current_user.id
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ProductResponse.from_entity(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    update_data: ProductUpdate,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Обновление товара"""
    try:
        product = await ProductService(db).update(
            product_id, update_data.model_dump(by_alias=True, exclude_unset=True), scope
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return ProductResponse.from_entity(product)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Удаление товара"""
    try:
        deleted = await ProductService(db).delete(product_id, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return {"message": "Product deleted successfully"}


@router.post("/bulk", response_model=BulkImportResponse, status_code=status.HTTP_201_CREATED)
async def bulk_import_products(
    import_data: ProductBulkImportRequest,
    current_user: User = Depends(get_current_user),
    db: JsonDocumentStore = Depends(get_db)
):
    """Пакетный импорт товаров"""
    try:
        log = await ImportService(db).bulk_import(
            ImportType.PRODUCTS,
            import_data.products,
            current_user,
            assign_to_user_id=import_data.assign_to_user_id,
            file_name=import_data.file_name,
            file_size=import_data.file_size,
            file_type=import_data.file_type
        )
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return BulkImportResponse(
        success=True,
        count=log.successful_count,
        failed_count=log.failed_count,
        status=log.status,
        import_log_id=log.id,
        errors=log.errors
    )


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_products(
    delete_data: BulkDeleteRequest,
    scope: OwnershipScope = Depends(get_scope),
    db: JsonDocumentStore = Depends(get_db)
):
    """Удаление нескольких товаров"""
    try:
        return await ProductService(db).bulk_delete(delete_data.ids, scope)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
