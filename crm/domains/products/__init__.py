from crm.domains.products.entities import Product, calculate_final_price, DISCOUNT_TYPES
from crm.domains.products.schemas import (
    ProductCreate, ProductUpdate, ProductResponse, ProductBulkImportRequest
)

__all__ = [
    "Product", "calculate_final_price", "DISCOUNT_TYPES",
    "ProductCreate", "ProductUpdate", "ProductResponse", "ProductBulkImportRequest"
]
