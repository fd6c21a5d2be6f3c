# tea_admin/schemas/screen.py

from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal

from tea_admin.schemas.editing import EditableItem, SessionMode
from tea_admin.schemas.order import Order, OrderStatus


# ────────────── Запросы консоли ──────────────
class StatusChangeRequest(BaseModel):
    status: OrderStatus


class QuantityRequest(BaseModel):
    quantity: int = Field(..., description="Новое количество, значения меньше 1 приводятся к 1")


class AddItemRequest(BaseModel):
    product_id: str = ""
    variant_id: str = ""
    quantity: int = Field(1, description="Количество, по умолчанию 1")


# ────────────── Состояние экрана заказа ──────────────
class ScreenControls(BaseModel):
    status_disabled: bool
    edit_disabled: bool
    save_disabled: bool


class ScreenView(BaseModel):
    order_id: str
    order: Order
    status: OrderStatus
    status_label: str
    delivery_label: str
    mode: SessionMode
    items: List[EditableItem]
    order_total: Decimal                    # подтверждённая сервером сумма
    working_total: Optional[Decimal] = None # сумма рабочей копии, только при редактировании
    display_total: Decimal
    pending: Optional[str] = None
    controls: ScreenControls
    error: str = ""
    success: str = ""
