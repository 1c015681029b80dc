from crm.core.utils import parse_number
from crm.db.repositories.base_repository import BaseRepository
from crm.domains.products.entities import Product


class ProductRepository(BaseRepository[Product]):
    """Репозиторий для работы с товарами"""

    collection = "products"

    def _to_domain(self, record: dict) -> Product:
        """Преобразование записи хранилища в доменную сущность"""
        return Product(
            id=record.get("id"),
            user_id=record.get("userId"),
            name_en=record.get("nameEn") or record.get("name") or "",
            name_he=record.get("nameHe") or "",
            code=record.get("code") or "",
            price=parse_number(record.get("price")) or 0,
            discount=parse_number(record.get("discount")) or 0,
            discount_type=record.get("discountType") or "percent"
        )

    def to_record(self, product: Product) -> dict:
        """Преобразование доменной сущности в запись хранилища"""
        return {
            "id": product.id,
            "userId": product.user_id,
            "nameEn": product.name_en,
            "nameHe": product.name_he,
            "code": product.code,
            "price": product.price,
            "discount": product.discount,
            "discountType": product.discount_type
        }
