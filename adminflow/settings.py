"""adminflow - 统一配置读取与校验.

目标:
- 将环境变量读取、默认值、校验集中到单一入口,避免散落在各模块中重复解析.
- `create_app(settings=...)` 只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- 生产环境更严格: 缺失密钥/连接串会直接抛出 ValueError.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_ENVIRONMENT = "development"
APP_VERSION = "0.3.0"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_DATABASE_URL = "sqlite:///:memory:"
DEFAULT_ADMIN_URL_PREFIX = "/admin"
DEFAULT_TRANSLATION_LOCALE = "zh_CN"
DEFAULT_CSRF_TIME_LIMIT_SECONDS = 3600
DEFAULT_SESSION_LIFETIME_SECONDS = 3600

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """应用运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    environment: str = Field(default=DEFAULT_ENVIRONMENT, validation_alias="FLASK_ENV")
    debug: bool = Field(default=False, validation_alias="FLASK_DEBUG")

    app_name: str = Field(default="adminflow", validation_alias="APP_NAME")
    app_version: str = APP_VERSION

    secret_key: str = Field(default="", validation_alias="SECRET_KEY")
    database_url: str = Field(default="", validation_alias="DATABASE_URL")

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")

    admin_url_prefix: str = Field(default=DEFAULT_ADMIN_URL_PREFIX, validation_alias="ADMIN_URL_PREFIX")
    translation_locale: str = Field(default=DEFAULT_TRANSLATION_LOCALE, validation_alias="ADMIN_TRANSLATION_LOCALE")

    csrf_time_limit_seconds: int = Field(
        default=DEFAULT_CSRF_TIME_LIMIT_SECONDS,
        validation_alias="WTF_CSRF_TIME_LIMIT",
    )
    session_lifetime_seconds: int = Field(
        default=DEFAULT_SESSION_LIFETIME_SECONDS,
        validation_alias="PERMANENT_SESSION_LIFETIME",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("admin_url_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        cleaned = "/" + value.strip("/")
        return "" if cleaned == "/" else cleaned

    @property
    def is_production(self) -> bool:
        """当前是否为生产环境."""
        return self.environment.strip().lower() == "production"

    def to_flask_config(self) -> dict[str, object]:
        """转换为 Flask app.config 可写入的配置字典."""
        return {
            "ENV": self.environment,
            "DEBUG": self.debug,
            "APP_NAME": self.app_name,
            "APP_VERSION": self.app_version,
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "LOG_LEVEL": self.log_level,
            "ADMIN_URL_PREFIX": self.admin_url_prefix,
            "ADMIN_TRANSLATION_LOCALE": self.translation_locale,
            "WTF_CSRF_TIME_LIMIT": self.csrf_time_limit_seconds,
            "PERMANENT_SESSION_LIFETIME": self.session_lifetime_seconds,
        }

    @classmethod
    def load(cls) -> Settings:
        """从环境变量加载 Settings 并执行必要校验."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @model_validator(mode="after")
    def _apply_defaults_and_validate(self) -> Settings:
        environment_normalized = self.environment.strip().lower()
        debug = self._resolve_debug(environment_normalized)
        self._ensure_secret_key(debug)
        self._ensure_database_url(environment_normalized)
        self._validate()
        return self

    def _resolve_debug(self, environment_normalized: str) -> bool:
        if "debug" in self.model_fields_set:
            return bool(self.debug)
        debug = environment_normalized == "development"
        object.__setattr__(self, "debug", debug)
        return debug

    def _ensure_secret_key(self, debug: bool) -> None:
        if self.secret_key:
            return
        if self.is_production:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        object.__setattr__(self, "secret_key", secrets.token_urlsafe(32))
        if debug:
            logger.warning("⚠️  开发环境使用随机生成的SECRET_KEY,生产环境请设置环境变量")

    def _ensure_database_url(self, environment_normalized: str) -> None:
        if self.database_url:
            return
        if environment_normalized == "production":
            raise ValueError("DATABASE_URL environment variable must be set in production")
        object.__setattr__(self, "database_url", DEFAULT_DATABASE_URL)

    def _validate(self) -> None:
        """执行跨字段校验,统一抛出可读的 ValueError."""
        errors: list[str] = []
        checks: list[tuple[str, bool]] = [
            ("LOG_LEVEL 仅支持 DEBUG/INFO/WARNING/ERROR/CRITICAL", self.log_level not in _LOG_LEVELS),
            ("WTF_CSRF_TIME_LIMIT 必须为正整数(秒)", self.csrf_time_limit_seconds <= 0),
            ("PERMANENT_SESSION_LIFETIME 必须为正整数(秒)", self.session_lifetime_seconds <= 0),
        ]
        for message, condition in checks:
            if condition:
                errors.append(message)

        if errors:
            joined = "; ".join(errors)
            raise ValueError(f"配置校验失败: {joined}")
