# tea_admin/services/screen.py

from contextlib import contextmanager
from typing import Dict, List, Optional

from tea_admin.schemas.order import DELIVERY_LABELS, STATUS_LABELS, Order, OrderUpdate
from tea_admin.schemas.product import Product
from tea_admin.schemas.screen import ScreenControls, ScreenView
from tea_admin.services.backend import BackendClient
from tea_admin.services.catalog import CatalogLookup
from tea_admin.services.editing import ItemsSession
from tea_admin.services.status import StatusMachine
from tea_admin.services.submission import OrderSubmission
from tea_admin.utils.errors import BackendError, ControlDisabled, ValidationFailure
from tea_admin.utils.log import Log


class OrderScreen:
    """
    Открытый экран одного заказа.

    Держит копию заказа, сеанс редактирования позиций, статус и снимок каталога.
    Ошибки сервера и ввода не выбрасываются наружу, а попадают в error.
    Одновременно по заказу выполняется не больше одного изменяющего запроса.
    """

    def __init__(self, order_id: str, log: Optional[Log] = None, catalog: Optional[CatalogLookup] = None):
        self.order_id = order_id
        self.log = log
        self.client: Optional[BackendClient] = None
        self.order: Optional[Order] = None
        self.session = ItemsSession()
        self.catalog = catalog or CatalogLookup()
        self.submission = OrderSubmission(order_id, log)
        self.status = StatusMachine(self)
        self.pending: Optional[str] = None
        self.closed = False
        self.error = ""
        self.success = ""

    def attach(self, client: BackendClient) -> "OrderScreen":
        """Клиент с токеном оператора, выполняющего текущее действие."""
        self.client = client
        return self

    # ==========================================================
    # СЛУЖЕБНОЕ
    # ==========================================================
    @contextmanager
    def in_flight(self, kind: str):
        if self.pending is not None:
            raise ControlDisabled(self.pending)
        self.pending = kind
        try:
            yield
        finally:
            self.pending = None

    def replace_order(self, order: Order) -> bool:
        """Заменяет заказ ответом сервера целиком. Для закрытого экрана ответ не применяется."""
        if self.closed:
            return False
        self.order = order
        self.session.rebase(order.items)
        return True

    def fail(self, message: str):
        self.error = message
        self.success = ""

    def clear_error(self):
        self.error = ""

    def clear_success(self):
        self.success = ""

    async def log_info(self, target: str, message: str, data: dict | None = None):
        if self.log:
            await self.log.log_info(target, message, data)

    async def log_error(self, target: str, message: str, data: dict | None = None):
        if self.log:
            await self.log.log_error(target, message, data)

    def _guard_local_edit(self):
        if self.pending == "items":
            raise ControlDisabled(self.pending)

    # ==========================================================
    # ЗАКАЗ
    # ==========================================================
    async def load(self) -> Order:
        """Загрузка заказа при открытии экрана; ошибка пробрасывается, экрана без заказа нет."""
        try:
            order = await self.client.get_order(self.order_id)
        except BackendError as e:
            await self.log_error("order", "Ошибка загрузки заказа", {"id": self.order_id, "status_code": e.status_code})
            raise

        self.order = order
        self.session = ItemsSession(order.items)
        await self.log_info("order", "Заказ загружен", {"id": self.order_id, "status": order.status})
        return order

    async def update_details(self, data: OrderUpdate) -> Order:
        with self.in_flight("details"):
            self.error = ""
            try:
                order = await self.submission.update_details(self.client, data)
            except BackendError as e:
                self.fail(e.display("Ошибка сохранения"))
                await self.log_error("order", "Ошибка сохранения заказа", {"id": self.order_id, "status_code": e.status_code})
                return self.order

            if self.replace_order(order):
                self.success = "Заказ сохранён"
                await self.log_info("order", "Заказ сохранён", {"id": self.order_id})
            return self.order

    # ==========================================================
    # СОСТАВ ЗАКАЗА
    # ==========================================================
    def begin_editing(self):
        self._guard_local_edit()
        try:
            self.session.begin()
        except ValidationFailure as e:
            self.fail(e.message)

    def cancel_editing(self):
        self._guard_local_edit()
        try:
            self.session.cancel()
        except ValidationFailure as e:
            self.fail(e.message)

    def change_quantity(self, index: int, quantity: int):
        self._guard_local_edit()
        try:
            self.session.change_quantity(index, quantity)
        except ValidationFailure as e:
            self.fail(e.message)

    def remove_item(self, index: int):
        self._guard_local_edit()
        try:
            self.session.remove_item(index)
        except ValidationFailure as e:
            self.fail(e.message)

    def add_item(self, product_id: str, variant_id: str, quantity: int = 1):
        self._guard_local_edit()
        try:
            self.session.add_item(self.catalog, product_id, variant_id, quantity)
        except ValidationFailure as e:
            self.fail(e.message)

    async def open_picker(self) -> List[Product]:
        """Каталог для добавления товара; грузится один раз за время жизни экрана."""
        try:
            await self.catalog.load(self.client)
        except BackendError as e:
            self.fail("Ошибка загрузки каталога")
            await self.log_error("catalog", "Ошибка загрузки каталога", {"id": self.order_id, "status_code": e.status_code})
            return []
        return self.catalog.picker()

    async def save_items(self) -> Order:
        """
        Отправляет рабочую копию целиком.
        Успех: ответ сервера становится базовой линией, режим просмотра.
        Ошибка: рабочая копия и режим редактирования сохраняются.
        """
        with self.in_flight("items"):
            if not self.session.editing:
                self.fail("Состав заказа не в режиме редактирования")
                return self.order

            self.error = ""
            try:
                order = await self.submission.save_items(self.client, self.session.payload())
            except BackendError as e:
                self.fail(e.display("Ошибка сохранения состава заказа"))
                await self.log_error("order_items", "Ошибка сохранения состава заказа", {
                    "id": self.order_id,
                    "status_code": e.status_code,
                    "message": e.message,
                })
                return self.order

            if self.replace_order(order):
                self.session.commit(order.items)
                self.success = "Состав заказа обновлён"
            return self.order

    # ==========================================================
    # ОТОБРАЖЕНИЕ
    # ==========================================================
    def view(self) -> ScreenView:
        order = self.order
        editing = self.session.editing
        working_total = self.session.working_total() if editing else None
        busy = self.pending is not None

        return ScreenView(
            order_id=self.order_id,
            order=order,
            status=order.status,
            status_label=STATUS_LABELS.get(order.status, order.status.value),
            delivery_label=DELIVERY_LABELS.get(order.delivery, order.delivery.value),
            mode=self.session.mode,
            items=self.session.items,
            order_total=order.total,
            working_total=working_total,
            display_total=working_total if editing else order.total,
            pending=self.pending,
            controls=ScreenControls(
                status_disabled=busy,
                edit_disabled=busy or editing,
                save_disabled=busy or not editing,
            ),
            error=self.error,
            success=self.success,
        )


class ScreenRegistry:
    """Открытые экраны заказов, по одному на заказ."""

    def __init__(self):
        self.screens: Dict[str, OrderScreen] = {}

    async def open(self, order_id: str, client: BackendClient, log: Optional[Log] = None) -> OrderScreen:
        screen = OrderScreen(order_id, log).attach(client)
        await screen.load()

        previous = self.screens.get(order_id)
        if previous is not None:
            previous.closed = True
        self.screens[order_id] = screen
        return screen

    def get(self, order_id: str) -> Optional[OrderScreen]:
        return self.screens.get(order_id)

    def close(self, order_id: str) -> bool:
        screen = self.screens.pop(order_id, None)
        if screen is None:
            return False
        screen.closed = True
        return True
