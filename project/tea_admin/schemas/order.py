# tea_admin/schemas/order.py

from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from enum import Enum


class OrderStatus(str, Enum):
    created = "created"
    processing = "processing"
    paid = "paid"
    fulfilled = "fulfilled"
    cancelled = "cancelled"


class DeliveryMethod(str, Enum):
    pickup = "pickup"
    courier = "courier"
    cdek = "cdek"


STATUS_LABELS = {
    OrderStatus.created: "Создан",
    OrderStatus.processing: "В обработке",
    OrderStatus.paid: "Оплачен",
    OrderStatus.fulfilled: "Выполнен",
    OrderStatus.cancelled: "Отменён",
}

DELIVERY_LABELS = {
    DeliveryMethod.pickup: "Самовывоз",
    DeliveryMethod.courier: "Курьер",
    DeliveryMethod.cdek: "СДЭК",
}


# ────────────── Позиция заказа ──────────────
class OrderItem(BaseModel):
    product_id: str
    variant_id: str
    quantity: int = Field(..., ge=1)
    price: Decimal                  # цена за единицу на момент заказа
    total: Decimal                  # price * quantity
    product_name: str = ""          # поля для отображения
    variant_weight: str = ""
    image: Optional[str] = ""


# ────────────── Заказ ──────────────
class Order(BaseModel):
    id: str
    customer_name: str
    phone: str
    user_id: Optional[int] = None
    delivery: DeliveryMethod
    address: Optional[str] = None
    comment: Optional[str] = None
    total: Decimal
    status: OrderStatus
    created_at: Optional[datetime] = None
    items: List[OrderItem] = []


# ────────────── Частичное обновление (PATCH) ──────────────
class OrderUpdate(BaseModel):
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    delivery: Optional[DeliveryMethod] = None
    address: Optional[str] = None
    comment: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# ────────────── Замена состава заказа (PUT) ──────────────
class OrderItemPayload(BaseModel):
    product_id: str
    variant_id: str
    quantity: int
    price: Decimal


class OrderItemsReplace(BaseModel):
    items: List[OrderItemPayload]
