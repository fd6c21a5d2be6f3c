# tea_admin/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    BACKEND_URL: str = "http://localhost:8000/v1/admin"   # REST API магазина
    BACKEND_TOKEN: str = ""                               # токен по умолчанию, если оператор не передал свой
    BACKEND_TIMEOUT: float = 15.0                         # секунды

    CATALOG_LIMIT: int = 100                              # размер выборки для выбора товара
    AUTH_TOKEN_URL: str = "/v1/auth/login"

    LOG_DIR: str = "tea_admin/log"
    LOG_PRINT: str = "1"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
