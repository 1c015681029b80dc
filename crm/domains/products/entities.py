from typing import Any, Dict, Optional

from crm.core.utils import clean_str, new_id, parse_number

DISCOUNT_TYPES = ("percent", "fixed")


def calculate_final_price(price: Optional[float], discount: Optional[float], discount_type: str) -> float:
    """Итоговая цена с учетом скидки (процент или фиксированная сумма)"""
    if not price or price <= 0:
        return 0
    if not discount or discount <= 0:
        return price

    if discount_type == "percent":
        return max(0, price * (1 - discount / 100))
    elif discount_type == "fixed":
        return max(0, price - discount)

    return price


class Product:
    """Сущность товара"""

    def __init__(
        self,
        id: str,
        user_id: Optional[str],
        name_en: str,
        code: str,
        price: float,
        name_he: str = "",
        discount: float = 0,
        discount_type: str = "percent"
    ):
        self.id = id
        self.user_id = user_id
        self.name_en = name_en
        self.name_he = name_he
        self.code = code
        self.price = price
        self.discount = discount
        self.discount_type = discount_type

    @property
    def final_price(self) -> float:
        return calculate_final_price(self.price, self.discount, self.discount_type)

    @property
    def display_name(self) -> str:
        return self.name_en or self.name_he or self.code

    @staticmethod
    def _parse_discount(data: Dict[str, Any]) -> float:
        discount = parse_number(data.get("discount"))
        if discount is None or discount < 0:
            return 0
        return discount

    @staticmethod
    def _parse_discount_type(value: Any) -> str:
        discount_type = clean_str(value).lower() or "percent"
        if discount_type not in DISCOUNT_TYPES:
            raise ValueError("Discount type must be 'percent' or 'fixed'")
        return discount_type

    @classmethod
    def build(cls, data: Dict[str, Any], user_id: str) -> "Product":
        """Создание товара из входных данных с проверкой обязательных полей"""
        if not isinstance(data, dict):
            raise ValueError("Product row must be an object")

        name_en = clean_str(data.get("nameEn") or data.get("name"))
        code = clean_str(data.get("code"))
        if not name_en or not code:
            raise ValueError("Name and code are required fields")

        price = parse_number(data.get("price"))
        if price is None:
            raise ValueError("Price must be a valid number")

        return cls(
            id=new_id(),
            user_id=user_id,
            name_en=name_en,
            name_he=clean_str(data.get("nameHe")),
            code=code,
            price=price,
            discount=cls._parse_discount(data),
            discount_type=cls._parse_discount_type(data.get("discountType"))
        )

    def apply_changes(self, changes: Dict[str, Any]) -> None:
        """Частичное обновление; владелец меняется только назначением"""
        if "nameEn" in changes or "name" in changes:
            name_en = clean_str(changes.get("nameEn") or changes.get("name"))
            if not name_en:
                raise ValueError("Name and code are required fields")
            self.name_en = name_en
        if "nameHe" in changes:
            self.name_he = clean_str(changes["nameHe"])
        if "code" in changes:
            code = clean_str(changes["code"])
            if not code:
                raise ValueError("Name and code are required fields")
            self.code = code
        if "price" in changes:
            price = parse_number(changes["price"])
            if price is None:
                raise ValueError("Price must be a valid number")
            self.price = price
        if "discount" in changes:
            self.discount = self._parse_discount(changes)
        if "discountType" in changes:
            self.discount_type = self._parse_discount_type(changes["discountType"])

    def __eq__(self, other) -> bool:
        if not isinstance(other, Product):
            return False
        return self.id == other.id

    def __repr__(self) -> str:
        return f"Product(id={self.id}, code={self.code}, user_id={self.user_id})"
