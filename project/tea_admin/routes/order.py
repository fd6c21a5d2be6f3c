# tea_admin/routes/order.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from typing import List, Optional

from tea_admin.config import settings
from tea_admin.schemas.order import OrderUpdate
from tea_admin.schemas.product import Product
from tea_admin.schemas.screen import AddItemRequest, QuantityRequest, ScreenView, StatusChangeRequest
from tea_admin.services.backend import BackendClient
from tea_admin.services.screen import OrderScreen
from tea_admin.utils.errors import BackendError, ControlDisabled

router = APIRouter()

# Токен оператора передаётся серверу магазина как есть
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=settings.AUTH_TOKEN_URL, auto_error=False)


def get_backend(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> BackendClient:
    return BackendClient(request.app.state.http, token, request.app.state.log)


def get_screen(id: str, request: Request, backend: BackendClient = Depends(get_backend)) -> OrderScreen:
    screen = request.app.state.screens.get(id)
    if screen is None:
        raise HTTPException(status_code=404, detail="Экран заказа не открыт")
    return screen.attach(backend)


def control_disabled(e: ControlDisabled) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Операция уже выполняется: {e.pending}")


COMMON_RESPONSES = {
    404: {"description": "Экран заказа не открыт"},
    500: {"description": "Внутренняя ошибка сервера"},
}


# ────────────── ОТКРЫТЬ ЭКРАН ──────────────
@router.post(
    "/{id}/screen",
    response_model=ScreenView,
    summary="Открыть заказ",
    response_description="Загружает заказ с сервера магазина и возвращает состояние экрана",
    responses={
        200: {"description": "Заказ загружен"},
        404: {"description": "Заказ не найден"},
        502: {"description": "Сервер магазина недоступен или вернул ошибку"},
    },
)
async def open_screen(id: str, request: Request, backend: BackendClient = Depends(get_backend)):
    log = request.app.state.log
    try:
        screen = await request.app.state.screens.open(id, backend, log)
        return screen.view()
    except BackendError as e:
        if e.status_code == 404:
            raise HTTPException(status_code=404, detail="Заказ не найден")
        raise HTTPException(status_code=502, detail="Ошибка загрузки заказа")
    except Exception as e:
        await log.log_error("order", f"Ошибка при открытии заказа: {str(e)}", {"id": id})
        raise


# ────────────── СОСТОЯНИЕ ЭКРАНА ──────────────
@router.get(
    "/{id}/screen",
    response_model=ScreenView,
    summary="Состояние экрана заказа",
    responses={200: {"description": "Текущее состояние"}, **COMMON_RESPONSES},
)
async def read_screen(screen: OrderScreen = Depends(get_screen)):
    return screen.view()


# ────────────── ЗАКРЫТЬ ЭКРАН ──────────────
@router.delete(
    "/{id}/screen",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Закрыть заказ",
    response_description="Экран закрыт, незавершённые ответы сервера к нему не применяются",
    responses={204: {"description": "Экран закрыт"}, 404: {"description": "Экран заказа не открыт"}},
)
async def close_screen(id: str, request: Request):
    if not request.app.state.screens.close(id):
        raise HTTPException(status_code=404, detail="Экран заказа не открыт")
    await request.app.state.log.log_info("order", "Экран заказа закрыт", {"id": id})


@router.delete(
    "/{id}/screen/messages",
    response_model=ScreenView,
    summary="Скрыть сообщения об ошибке и успехе",
    responses=COMMON_RESPONSES,
)
async def clear_messages(screen: OrderScreen = Depends(get_screen)):
    screen.clear_error()
    screen.clear_success()
    return screen.view()


# ────────────── СТАТУС ──────────────
@router.post(
    "/{id}/screen/status",
    response_model=ScreenView,
    summary="Изменить статус заказа",
    response_description="Статус на экране меняется только после ответа сервера",
    responses={
        200: {"description": "Запрос выполнен, результат или ошибка в состоянии экрана"},
        409: {"description": "По заказу уже выполняется запрос"},
        **COMMON_RESPONSES,
    },
)
async def change_status(body: StatusChangeRequest, request: Request, screen: OrderScreen = Depends(get_screen)):
    try:
        await screen.status.request_transition(body.status)
        return screen.view()
    except ControlDisabled as e:
        raise control_disabled(e)
    except Exception as e:
        await request.app.state.log.log_error("order_status", f"Ошибка при смене статуса: {str(e)}", {"id": screen.order_id})
        raise


# ────────────── ДАННЫЕ ПОКУПАТЕЛЯ И ДОСТАВКИ ──────────────
@router.patch(
    "/{id}/screen/details",
    response_model=ScreenView,
    summary="Обновить данные покупателя и доставки",
    responses={
        200: {"description": "Запрос выполнен, результат или ошибка в состоянии экрана"},
        409: {"description": "По заказу уже выполняется запрос"},
        422: {"description": "Неверные данные запроса"},
        **COMMON_RESPONSES,
    },
)
async def update_details(body: OrderUpdate, request: Request, screen: OrderScreen = Depends(get_screen)):
    try:
        await screen.update_details(body)
        return screen.view()
    except ControlDisabled as e:
        raise control_disabled(e)
    except Exception as e:
        await request.app.state.log.log_error("order", f"Ошибка при обновлении заказа: {str(e)}", {"id": screen.order_id})
        raise


# ────────────── РЕДАКТИРОВАНИЕ СОСТАВА ──────────────
@router.post(
    "/{id}/screen/items/edit",
    response_model=ScreenView,
    summary="Начать редактирование состава",
    responses={409: {"description": "Идёт сохранение состава"}, **COMMON_RESPONSES},
)
async def begin_editing(screen: OrderScreen = Depends(get_screen)):
    try:
        screen.begin_editing()
    except ControlDisabled as e:
        raise control_disabled(e)
    return screen.view()


@router.post(
    "/{id}/screen/items/cancel",
    response_model=ScreenView,
    summary="Отменить изменения состава",
    response_description="Возвращает последний сохранённый состав, сервер не вызывается",
    responses={409: {"description": "Идёт сохранение состава"}, **COMMON_RESPONSES},
)
async def cancel_editing(screen: OrderScreen = Depends(get_screen)):
    try:
        screen.cancel_editing()
    except ControlDisabled as e:
        raise control_disabled(e)
    return screen.view()


@router.put(
    "/{id}/screen/items/{index}/quantity",
    response_model=ScreenView,
    summary="Изменить количество позиции",
    responses={409: {"description": "Идёт сохранение состава"}, **COMMON_RESPONSES},
)
async def change_quantity(index: int, body: QuantityRequest, screen: OrderScreen = Depends(get_screen)):
    try:
        screen.change_quantity(index, body.quantity)
    except ControlDisabled as e:
        raise control_disabled(e)
    return screen.view()


@router.delete(
    "/{id}/screen/items/{index}",
    response_model=ScreenView,
    summary="Удалить позицию из рабочей копии",
    responses={409: {"description": "Идёт сохранение состава"}, **COMMON_RESPONSES},
)
async def remove_item(index: int, screen: OrderScreen = Depends(get_screen)):
    try:
        screen.remove_item(index)
    except ControlDisabled as e:
        raise control_disabled(e)
    return screen.view()


@router.get(
    "/{id}/screen/catalog",
    response_model=List[Product],
    summary="Товары для добавления в заказ",
    response_description="Активные товары с активными вариантами; каталог кэшируется на время жизни экрана",
    responses=COMMON_RESPONSES,
)
async def open_picker(screen: OrderScreen = Depends(get_screen)):
    return await screen.open_picker()


@router.post(
    "/{id}/screen/items",
    response_model=ScreenView,
    summary="Добавить товар в рабочую копию",
    responses={409: {"description": "Идёт сохранение состава"}, **COMMON_RESPONSES},
)
async def add_item(body: AddItemRequest, screen: OrderScreen = Depends(get_screen)):
    try:
        screen.add_item(body.product_id, body.variant_id, body.quantity)
    except ControlDisabled as e:
        raise control_disabled(e)
    return screen.view()


@router.post(
    "/{id}/screen/items/save",
    response_model=ScreenView,
    summary="Сохранить состав заказа",
    response_description="Отправляет полный состав одним запросом; при ошибке рабочая копия сохраняется",
    responses={
        200: {"description": "Запрос выполнен, результат или ошибка в состоянии экрана"},
        409: {"description": "По заказу уже выполняется запрос"},
        **COMMON_RESPONSES,
    },
)
async def save_items(request: Request, screen: OrderScreen = Depends(get_screen)):
    try:
        await screen.save_items()
        return screen.view()
    except ControlDisabled as e:
        raise control_disabled(e)
    except Exception as e:
        await request.app.state.log.log_error("order_items", f"Ошибка при сохранении состава: {str(e)}", {"id": screen.order_id})
        raise
