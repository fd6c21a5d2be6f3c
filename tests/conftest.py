# tests/conftest.py

import os
import json
import tempfile

os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="tea_admin_log_")
os.environ["LOG_PRINT"] = "0"
os.environ["BACKEND_URL"] = "http://shop.test/v1/admin"
os.environ["BACKEND_TOKEN"] = ""

from copy import deepcopy
from urllib.parse import unquote
from decimal import Decimal

import httpx
import pytest

from tea_admin.schemas.product import Product
from tea_admin.services.backend import BackendClient, create_http_client
from tea_admin.services.catalog import CatalogLookup

PREFIX = "/v1/admin"

PRODUCTS = [
    {
        "id": "p-a",
        "name": "Да Хун Пао",
        "image": "da-hong-pao.jpg",
        "is_active": True,
        "sort_order": 0,
        "variants": [
            {"id": "v-a1", "weight": "50 г", "price": "100.00", "is_active": True, "sort_order": 0},
        ],
    },
    {
        "id": "p-b",
        "name": "Те Гуань Инь",
        "image": None,
        "is_active": True,
        "sort_order": 1,
        "variants": [
            {"id": "v-b2", "weight": "100 г", "price": "180.00", "is_active": False, "sort_order": 0},
            {"id": "v-b3", "weight": "250 г", "price": "420.00", "is_active": True, "sort_order": 2},
            {"id": "v-b1", "weight": "25 г", "price": "50.00", "is_active": True, "sort_order": 1},
        ],
    },
]


def money(value) -> str:
    return str(Decimal(value).quantize(Decimal("0.01")))


def order_item(product_id, variant_id, quantity, price, name="", weight="", image=""):
    return {
        "product_id": product_id,
        "variant_id": variant_id,
        "quantity": quantity,
        "price": money(price),
        "total": money(Decimal(price) * quantity),
        "product_name": name,
        "variant_weight": weight,
        "image": image,
    }


def make_order(order_id="o1", status="paid", items=None):
    items = items if items is not None else [order_item("p-a", "v-a1", 1, "100.00", "Да Хун Пао", "50 г", "da-hong-pao.jpg")]
    return {
        "id": order_id,
        "customer_name": "Анна",
        "phone": "+79990000000",
        "user_id": 7,
        "delivery": "courier",
        "address": "Москва, Чистопрудный б-р, 1",
        "comment": None,
        "total": money(sum((Decimal(i["total"]) for i in items), Decimal("0"))),
        "status": status,
        "created_at": "2025-10-04T12:00:00",
        "items": items,
    }


class FakeShop:
    """REST API магазина в памяти: отвечает полными снимками заказа."""

    def __init__(self):
        self.orders = {"o1": make_order()}
        self.products = deepcopy(PRODUCTS)
        self.requests = []
        self.failures = {}
        self.gate = None

    def fail(self, method, path, status=None, body=None, error=None, text=None):
        self.failures[(method, path)] = error if error is not None else (status, body, text)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == PREFIX + path]

    def payload(self, request):
        return json.loads(request.content) if request.content else {}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()

        path = request.url.path[len(PREFIX):]
        failure = self.failures.pop((request.method, path), None)
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            status, body, text = failure
            if text is not None:
                return httpx.Response(status, text=text, headers={"Content-Type": "text/html"})
            return httpx.Response(status, json=body)

        # Маршрут по сегментам сырого пути: экранированный "/" остаётся внутри идентификатора
        raw_path = request.url.raw_path.decode().split("?")[0][len(PREFIX):]
        parts = [unquote(p) for p in raw_path.strip("/").split("/")]
        if parts[0] == "products":
            return httpx.Response(200, json={"total": len(self.products), "items": self.products})

        order = self.orders.get(parts[1])
        if order is None:
            return httpx.Response(404, json={"detail": "Order not found"})

        if len(parts) == 2 and request.method == "PATCH":
            order.update(self.payload(request))
        elif len(parts) == 3 and parts[2] == "status":
            order["status"] = self.payload(request)["status"]
        elif len(parts) == 3 and parts[2] == "items":
            order["items"] = [self.build_item(i) for i in self.payload(request)["items"]]
            order["total"] = money(sum((Decimal(i["total"]) for i in order["items"]), Decimal("0")))

        return httpx.Response(200, json=order)

    def build_item(self, data):
        product = next(p for p in self.products if p["id"] == data["product_id"])
        variant = next(v for v in product["variants"] if v["id"] == data["variant_id"])
        return order_item(
            data["product_id"], data["variant_id"], data["quantity"], data["price"],
            product["name"], variant["weight"], product["image"] or "",
        )


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def shop():
    return FakeShop()


@pytest.fixture
def backend(shop):
    http = create_http_client(httpx.MockTransport(shop.handler))
    return BackendClient(http, "operator-token")


@pytest.fixture
def catalog():
    lookup = CatalogLookup()
    lookup.products = [Product.model_validate(p) for p in PRODUCTS]
    lookup.loaded = True
    return lookup
