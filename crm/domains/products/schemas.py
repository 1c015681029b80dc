from typing import Any, List, Optional

from crm.core.schemas import BulkImportRequest, CamelModel
from crm.domains.products.entities import Product


class ProductBase(CamelModel):
    """Поля товара; проверка значений выполняется в Product.build"""
    name_en: Optional[Any] = None
    name: Optional[Any] = None
    name_he: Optional[Any] = None
    code: Optional[Any] = None
    price: Optional[Any] = None
    discount: Optional[Any] = None
    discount_type: Optional[str] = None


class ProductCreate(ProductBase):
    """Схема для создания товара"""


class ProductUpdate(ProductBase):
    """Схема для частичного обновления товара"""


class ProductResponse(CamelModel):
    """Схема для ответа с данными товара"""
    id: str
    user_id: Optional[str] = None
    name_en: str
    name_he: str = ""
    code: str
    price: float
    discount: float = 0
    discount_type: str = "percent"
    final_price: float

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            user_id=product.user_id,
            name_en=product.name_en,
            name_he=product.name_he,
            code=product.code,
            price=product.price,
            discount=product.discount,
            discount_type=product.discount_type,
            final_price=product.final_price
        )


class ProductBulkImportRequest(BulkImportRequest):
    products: List[Any]
