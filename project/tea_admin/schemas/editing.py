# tea_admin/schemas/editing.py
# Позиции рабочей копии заказа: сохранённые на сервере и черновые

from pydantic import Field, computed_field
from typing import Annotated, Literal, Optional, Union
from enum import Enum

from tea_admin.schemas.order import OrderItem


class SessionMode(str, Enum):
    viewing = "viewing"
    editing = "editing"


class CommittedItem(OrderItem):
    """Позиция в том виде, в котором её последним подтвердил сервер."""
    kind: Literal["committed"] = "committed"

    @computed_field
    @property
    def is_new(self) -> bool:
        return False


class DraftItem(OrderItem):
    """
    Позиция, изменённая в текущем сеансе редактирования.
    base: исходная сохранённая позиция; None, если позиция добавлена в этом сеансе.
    """
    kind: Literal["draft"] = "draft"
    base: Optional[CommittedItem] = None

    @computed_field
    @property
    def is_new(self) -> bool:
        return self.base is None


EditableItem = Annotated[Union[CommittedItem, DraftItem], Field(discriminator="kind")]
