# tea_admin/services/catalog.py

from typing import List, Optional, Tuple

from tea_admin.config import settings
from tea_admin.schemas.product import Product, ProductVariant
from tea_admin.services.backend import BackendClient
from tea_admin.utils.errors import ValidationFailure


class CatalogLookup:
    """
    Снимок каталога для выбора товара при добавлении в заказ.
    Загружается при первом открытии выбора и живёт, пока открыт экран заказа.
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit or settings.CATALOG_LIMIT
        self.products: List[Product] = []
        self.loaded = False

    async def load(self, client: BackendClient) -> List[Product]:
        if self.loaded:
            return self.products
        result = await client.list_products(is_active=True, limit=self.limit)
        self.products = result.items
        self.loaded = True
        return self.products

    def picker(self) -> List[Product]:
        """Товары для выбора: только активные варианты, по sort_order."""
        return [
            product.model_copy(update={
                "variants": sorted((v for v in product.variants if v.is_active), key=lambda v: v.sort_order)
            })
            for product in self.products
        ]

    def resolve(self, product_id: str, variant_id: str) -> Tuple[Product, ProductVariant]:
        if not product_id or not variant_id:
            raise ValidationFailure("Выберите товар и вариант")

        product = next((p for p in self.products if p.id == product_id), None)
        if product is None:
            raise ValidationFailure("Товар не найден в каталоге")

        variant = next((v for v in product.variants if v.id == variant_id), None)
        if variant is None:
            raise ValidationFailure("Вариант товара не найден")
        if not variant.is_active:
            raise ValidationFailure("Вариант товара недоступен для заказа")

        return product, variant
