# tea_admin/services/status.py

from typing import TYPE_CHECKING

from tea_admin.schemas.order import Order, OrderStatus
from tea_admin.utils.errors import BackendError

if TYPE_CHECKING:
    from tea_admin.services.screen import OrderScreen


class StatusMachine:
    """
    Статус заказа на экране.

    Допустимость перехода проверяет сервер: клиент разрешает запросить любой статус.
    Отображается только статус, подтверждённый сервером.
    """

    def __init__(self, screen: "OrderScreen"):
        self.screen = screen

    def get_status(self) -> OrderStatus:
        return self.screen.order.status

    @property
    def updating(self) -> bool:
        return self.screen.pending == "status"

    async def request_transition(self, next_status: OrderStatus) -> Order:
        """
        Отправляет новый статус и ждёт ответа сервера.
        Успех: заказ заменяется ответом целиком; ошибка: статус остаётся прежним, ошибка видна оператору.
        """
        screen = self.screen
        with screen.in_flight("status"):
            screen.error = ""
            previous = screen.order.status
            try:
                order = await screen.submission.change_status(screen.client, next_status)
            except BackendError as e:
                screen.fail(e.display("Ошибка обновления статуса"))
                await screen.log_error("order_status", "Ошибка обновления статуса", {
                    "id": screen.order_id,
                    "from": previous,
                    "to": next_status,
                    "status_code": e.status_code,
                })
                return screen.order

            if screen.replace_order(order):
                screen.success = "Статус обновлён"
                await screen.log_info("order_status", "Статус обновлён", {
                    "id": screen.order_id,
                    "from": previous,
                    "to": order.status,
                })
            return screen.order
