# tea_admin/services/backend.py

import httpx
from typing import Any, List, Optional
from urllib.parse import quote
from pydantic import ValidationError

from tea_admin.config import settings
from tea_admin.schemas.order import Order, OrderItemPayload, OrderItemsReplace, OrderStatus, OrderStatusUpdate, OrderUpdate
from tea_admin.schemas.product import ProductList
from tea_admin.utils.errors import BackendError, extract_error_message
from tea_admin.utils.log import Log


def create_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """HTTP-клиент к REST API магазина, один на приложение."""
    return httpx.AsyncClient(
        base_url=settings.BACKEND_URL,
        timeout=settings.BACKEND_TIMEOUT,
        headers={"Content-Type": "application/json"},
        transport=transport,
    )


def order_path(order_id: str, *parts: str) -> str:
    """Путь к заказу; идентификатор экранируется как один сегмент."""
    return "/".join(["/orders", quote(order_id, safe=""), *parts])


class BackendClient:
    """
    Обращения консоли к серверу магазина.
    Сервер всегда возвращает полный снимок заказа, клиент ничего не сливает частями.
    """

    def __init__(self, http: httpx.AsyncClient, token: Optional[str] = None, log: Optional[Log] = None):
        self.http = http
        self.token = token or settings.BACKEND_TOKEN or None
        self.log = log

    async def _log_failure(self, method: str, path: str, message: str, status_code: Optional[int] = None):
        if self.log:
            await self.log.log_error("backend", message, {
                "method": method,
                "path": path,
                "status_code": status_code,
            })

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self.http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            await self._log_failure(method, path, f"Сервер магазина недоступен: {type(e).__name__}")
            raise BackendError(None) from e

        if response.is_error:
            message = None
            if response.is_client_error:
                # тело не в JSON (например, страница прокси) считается неизвестным форматом
                try:
                    body = response.json()
                except ValueError:
                    body = None
                message = extract_error_message(body, default="") or None
            await self._log_failure(method, path, "Сервер магазина вернул ошибку", response.status_code)
            raise BackendError(response.status_code, message)

        try:
            return response.json()
        except ValueError as e:
            await self._log_failure(method, path, "Ответ сервера не в формате JSON", response.status_code)
            raise BackendError(None, "Некорректный ответ сервера") from e

    async def _fetch(self, model, method: str, path: str, **kwargs):
        data = await self._request(method, path, **kwargs)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            await self._log_failure(method, path, f"Ответ сервера не соответствует {model.__name__}")
            raise BackendError(None, "Некорректный ответ сервера") from e

    # ────────────── Заказы ──────────────
    async def get_order(self, order_id: str) -> Order:
        return await self._fetch(Order, "GET", order_path(order_id))

    async def update_order(self, order_id: str, data: OrderUpdate) -> Order:
        body = data.model_dump(mode="json", exclude_unset=True)
        return await self._fetch(Order, "PATCH", order_path(order_id), json=body)

    async def update_status(self, order_id: str, status: OrderStatus) -> Order:
        body = OrderStatusUpdate(status=status).model_dump(mode="json")
        return await self._fetch(Order, "POST", order_path(order_id, "status"), json=body)

    async def replace_items(self, order_id: str, items: List[OrderItemPayload]) -> Order:
        body = OrderItemsReplace(items=items).model_dump(mode="json")
        return await self._fetch(Order, "PUT", order_path(order_id, "items"), json=body)

    # ────────────── Каталог ──────────────
    async def list_products(self, is_active: bool = True, limit: int = 100) -> ProductList:
        params = {"is_active": "true" if is_active else "false", "limit": limit}
        return await self._fetch(ProductList, "GET", "/products", params=params)
