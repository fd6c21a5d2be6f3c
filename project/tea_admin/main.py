# tea_admin/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import httpx
import uvicorn
from dotenv import load_dotenv
from contextlib import asynccontextmanager
from typing import Optional

from tea_admin.utils.log import Log
from tea_admin.services.backend import create_http_client
from tea_admin.services.screen import ScreenRegistry

import os
import multiprocessing

# --- загрузка переменных окружения ---
load_dotenv()

# --- sync логгер для раннего старта ---
boot_log = Log()
if os.environ.get("RUN_MAIN") == "true" or multiprocessing.current_process().name == "MainProcess":
    boot_log.log_info_sync(target="startup", message="Импорты main.py выполнены")


def create_app(transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """transport подменяет сетевой слой клиента к серверу магазина (используется в тестах)."""

    # ────────────── Lifespan ──────────────
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        boot_log.log_info_sync(target="startup", message="lifespan: startup начат")

        app.state.http = create_http_client(transport)
        app.state.screens = ScreenRegistry()
        boot_log.log_info_sync(target="startup", message="Клиент сервера магазина создан")

        app.state.log = Log()
        await app.state.log.log_info(target="startup", message="Async Log инициализирован")

        yield

        # shutdown
        await app.state.log.log_info(target="shutdown", message="Остановка приложения")
        await app.state.http.aclose()
        await app.state.log.shutdown()
        boot_log.log_info_sync(target="shutdown", message="Log корректно завершён")

    app = FastAPI(title="Tea Admin Order Console", lifespan=lifespan)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def read_root():
        return {"message": "Tea admin order console"}

    # ────────────── Подключение роутов ──────────────
    from tea_admin.routes import order

    app.include_router(order.router, prefix="/orders", tags=["orders"])
    return app


app = create_app()

# ────────────── Запуск uvicorn ──────────────
if __name__ == "__main__":
    boot_log.log_info_sync(target="startup", message="Запуск uvicorn.run")
    uvicorn.run(
        "tea_admin.main:app",
        host="127.0.0.1",
        port=8001,
        log_level="info",
        reload=True
    )
