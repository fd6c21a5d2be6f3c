# tea_admin/services/submission.py

from typing import List, Optional

from tea_admin.schemas.order import Order, OrderItemPayload, OrderStatus, OrderUpdate
from tea_admin.services.backend import BackendClient
from tea_admin.utils.log import Log


class OrderSubmission:
    """
    Отправка изменений заказа на сервер.
    Состав заказа всегда заменяется целиком, без построения разницы по позициям.
    """

    def __init__(self, order_id: str, log: Optional[Log] = None):
        self.order_id = order_id
        self.log = log

    async def save_items(self, client: BackendClient, items: List[OrderItemPayload]) -> Order:
        if self.log:
            await self.log.log_info("order_items", "Отправка состава заказа", {
                "id": self.order_id,
                "items": items,
            })
        order = await client.replace_items(self.order_id, items)
        if self.log:
            await self.log.log_info("order_items", "Состав заказа принят сервером", {
                "id": self.order_id,
                "count": len(order.items),
                "total": order.total,
            })
        return order

    async def change_status(self, client: BackendClient, status: OrderStatus) -> Order:
        if self.log:
            await self.log.log_info("order_status", "Запрос смены статуса", {"id": self.order_id, "status": status})
        return await client.update_status(self.order_id, status)

    async def update_details(self, client: BackendClient, data: OrderUpdate) -> Order:
        if self.log:
            await self.log.log_info("order", "Обновление данных заказа", {
                "id": self.order_id,
                "fields": sorted(data.model_fields_set),
            })
        return await client.update_order(self.order_id, data)
