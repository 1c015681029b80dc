import logging
from typing import Any, Dict

from crm.db.repositories.product_repository import ProductRepository
from crm.domains.ownership.services import OwnedResourceService
from crm.domains.products.entities import Product

logger = logging.getLogger(__name__)


class ProductService(OwnedResourceService[Product]):
    """Сервис для работы с товарами"""

    repository_class = ProductRepository
    resource_name = "Product"

    async def create_product(self, product_data: Dict[str, Any], owner_id: str) -> Product:
        """Создание нового товара"""
        product = Product.build(product_data, owner_id)
        await self.repository.create(product)
        logger.info(f"Product {product.id} ({product.code}) created for user {owner_id}")
        return product
