# tea_admin/schemas/product.py

from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal


class ProductVariant(BaseModel):
    id: str
    weight: str = ""
    price: Decimal
    is_active: bool = True
    sort_order: int = 0


class Product(BaseModel):
    id: str
    name: str
    image: Optional[str] = ""
    is_active: bool = True
    sort_order: int = 0
    variants: List[ProductVariant] = []


class ProductList(BaseModel):
    total: int = 0
    items: List[Product] = []
