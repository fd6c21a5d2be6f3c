from decimal import Decimal

import pytest

from tea_admin.schemas.order import OrderStatus, OrderItemPayload
from tea_admin.utils.log import Log


@pytest.mark.anyio
async def test_log_info_appends_to_daily_file(tmp_path):
    log = Log(log_dir=str(tmp_path), log_print="0")

    await log.log_info("order", "Заказ загружен", {"id": "o1", "status": OrderStatus.paid})
    await log.log_error("order_items", "Ошибка сохранения состава заказа")
    await log.shutdown()

    files = list(tmp_path.rglob("*.log"))
    assert len(files) == 1
    text = files[0].read_text(encoding="utf-8")
    assert "order: Заказ загружен: {'id': 'o1', 'status': 'paid'}" in text
    assert "order_items: ERROR: Ошибка сохранения состава заказа" in text


def test_log_info_sync_writes_line(tmp_path):
    log = Log(log_dir=str(tmp_path), log_print="0")

    log.log_info_sync("startup", "Импорты выполнены")

    text = next(tmp_path.rglob("*.log")).read_text(encoding="utf-8")
    assert "startup: Импорты выполнены" in text


def test_safe_serialize_handles_models_and_money(tmp_path):
    log = Log(log_dir=str(tmp_path), log_print="0")
    payload = OrderItemPayload(product_id="p-a", variant_id="v-a1", quantity=2, price=Decimal("100.00"))

    assert log.safe_serialize({"items": [payload], "total": Decimal("200.00"), "obj": object()}) == {
        "items": [{"product_id": "p-a", "variant_id": "v-a1", "quantity": 2, "price": "100.00"}],
        "total": "200.00",
        "obj": "<object>",
    }
