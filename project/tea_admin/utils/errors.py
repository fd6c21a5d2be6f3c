# tea_admin/utils/errors.py
# Ошибки консоли и извлечение текста ошибки из ответа сервера

from typing import Any, Optional

DEFAULT_ERROR = "Произошла ошибка"


def extract_error_message(payload: Any, default: str = DEFAULT_ERROR) -> str:
    """
    Достаёт текст ошибки из тела ответа сервера.

    Поддерживаемые форматы:
    - {"detail": [{"msg": "..."}, ...]}: ошибки валидации FastAPI
    - {"detail": "..."}
    - {"message": "..."}
    - строка
    Всё остальное считается неизвестным форматом и даёт default.
    """
    if not payload:
        return default

    if isinstance(payload, str):
        return payload

    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, list):
            messages = [d["msg"] for d in detail if isinstance(d, dict) and isinstance(d.get("msg"), str)]
            if messages:
                return ", ".join(messages)
        if isinstance(detail, str) and detail:
            return detail
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message

    return default


class ValidationFailure(Exception):
    """Локальная ошибка ввода, запрос на сервер не отправляется."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ControlDisabled(Exception):
    """По заказу уже выполняется изменяющий запрос."""

    def __init__(self, pending: str):
        super().__init__(f"Операция уже выполняется: {pending}")
        self.pending = pending


class BackendError(Exception):
    """
    Ошибка обращения к серверу магазина.

    status_code 4xx: сервер отклонил запрос, message содержит его текст (если удалось извлечь).
    status_code 5xx или None: сбой сети/сервера, message не передаётся оператору.
    """

    def __init__(self, status_code: Optional[int] = None, message: Optional[str] = None):
        super().__init__(message or f"backend error {status_code}")
        self.status_code = status_code
        self.message = message

    @property
    def is_rejection(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500

    def display(self, default: str) -> str:
        if self.is_rejection and self.message:
            return self.message
        return default
