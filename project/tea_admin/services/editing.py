# tea_admin/services/editing.py

from decimal import Decimal
from typing import List, Optional

from tea_admin.schemas.editing import CommittedItem, DraftItem, EditableItem, SessionMode
from tea_admin.schemas.order import OrderItem, OrderItemPayload
from tea_admin.services.catalog import CatalogLookup
from tea_admin.utils.errors import ValidationFailure
from tea_admin.utils.money import line_total, sum_totals


def to_committed(item: OrderItem) -> CommittedItem:
    return CommittedItem(**{name: getattr(item, name) for name in OrderItem.model_fields})


class ItemsSession:
    """
    Сеанс редактирования состава заказа.

    viewing: отображаются сохранённые позиции (committed).
    editing: изменения вносятся в рабочую копию (working) и на сервер не уходят до сохранения.
    Отмена возвращает committed, сохранение выполняет OrderScreen.
    """

    def __init__(self, items: Optional[List[OrderItem]] = None):
        self.mode = SessionMode.viewing
        self.committed: List[CommittedItem] = [to_committed(i) for i in items or []]
        self.working: List[EditableItem] = []

    @property
    def editing(self) -> bool:
        return self.mode == SessionMode.editing

    @property
    def items(self) -> List[EditableItem]:
        return self.working if self.editing else self.committed

    # ==========================================================
    # ПЕРЕХОДЫ
    # ==========================================================
    def rebase(self, items: List[OrderItem]):
        """Новая базовая линия от сервера; рабочая копия не трогается."""
        self.committed = [to_committed(i) for i in items]

    def begin(self):
        if self.editing:
            raise ValidationFailure("Состав заказа уже редактируется")
        self.working = [item.model_copy(deep=True) for item in self.committed]
        self.mode = SessionMode.editing

    def cancel(self):
        self._require_editing()
        self.working = []
        self.mode = SessionMode.viewing

    def commit(self, items: List[OrderItem]):
        """Сервер принял состав: его ответ становится базовой линией."""
        self.rebase(items)
        self.working = []
        self.mode = SessionMode.viewing

    # ==========================================================
    # ИЗМЕНЕНИЯ РАБОЧЕЙ КОПИИ
    # ==========================================================
    def change_quantity(self, index: int, quantity: int) -> EditableItem:
        """Количество меньше 1 приводится к 1; пересчитывается сумма только этой позиции."""
        self._require_editing()
        self._check_index(index)

        quantity = max(1, int(quantity))
        item = self.working[index]
        update = {"quantity": quantity, "total": line_total(item.price, quantity)}

        if isinstance(item, CommittedItem):
            changed = DraftItem(base=item, **{name: getattr(item, name) for name in OrderItem.model_fields})
            changed = changed.model_copy(update=update)
        else:
            changed = item.model_copy(update=update)

        self.working = self.working[:index] + [changed] + self.working[index + 1:]
        return changed

    def remove_item(self, index: int) -> EditableItem:
        self._require_editing()
        self._check_index(index)
        removed = self.working[index]
        self.working = self.working[:index] + self.working[index + 1:]
        return removed

    def add_item(self, catalog: CatalogLookup, product_id: str, variant_id: str, quantity: int = 1) -> DraftItem:
        """Цена берётся из снимка каталога в момент добавления."""
        self._require_editing()
        product, variant = catalog.resolve(product_id, variant_id)

        quantity = max(1, int(quantity or 1))
        item = DraftItem(
            product_id=product.id,
            variant_id=variant.id,
            quantity=quantity,
            price=variant.price,
            total=line_total(variant.price, quantity),
            product_name=product.name,
            variant_weight=variant.weight,
            image=product.image or "",
        )
        self.working = self.working + [item]
        return item

    def working_total(self) -> Decimal:
        """Сумма по рабочей копии, только для отображения."""
        return sum_totals(item.total for item in self.working)

    def payload(self) -> List[OrderItemPayload]:
        """Полный желаемый состав без служебных и отображаемых полей."""
        return [
            OrderItemPayload(
                product_id=item.product_id,
                variant_id=item.variant_id,
                quantity=item.quantity,
                price=item.price,
            )
            for item in self.working
        ]

    # ==========================================================
    # ПРОВЕРКИ
    # ==========================================================
    def _require_editing(self):
        if not self.editing:
            raise ValidationFailure("Состав заказа не в режиме редактирования")

    def _check_index(self, index: int):
        if index < 0 or index >= len(self.working):
            raise ValidationFailure("Позиция не найдена")
