"""YAML 翻译目录.

目录文件按 `<domain>.<locale>.yaml` 命名,结构为::

    messages:
      flash_create_success: "对象 \"%name%\" 已创建."

占位符使用 `%name%` 形式.缺失的键按 locale → fallback_locale 依次查找,
都找不到时返回键本身.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import Field

from adminflow.errors import ConfigurationError
from adminflow.schemas import PayloadSchema, validate_or_raise
from adminflow.utils.structlog_config import get_system_logger

DEFAULT_CATALOG_DIR = Path(__file__).resolve().parent.parent / "translations"
DEFAULT_FALLBACK_LOCALE = "en"

logger = get_system_logger()


class TranslationCatalogFile(PayloadSchema):
    """单个翻译目录文件."""

    messages: dict[str, str] = Field(default_factory=dict)


class YamlCatalogTranslator:
    """从 YAML 文件读取文案的翻译器.

    Args:
        locale: 目标语言.
        catalog_dir: 目录文件所在路径.
        fallback_locale: 目标语言缺失时的回退语言.

    """

    def __init__(
        self,
        locale: str,
        catalog_dir: Path = DEFAULT_CATALOG_DIR,
        fallback_locale: str = DEFAULT_FALLBACK_LOCALE,
    ) -> None:
        self.locale = locale
        self.catalog_dir = catalog_dir
        self.fallback_locale = fallback_locale
        self._catalogs: dict[tuple[str, str], dict[str, str]] = {}

    def trans(
        self,
        key: str,
        params: Mapping[str, str] | None = None,
        domain: str | None = None,
    ) -> str:
        """翻译并替换占位符,params 的键带不带 `%` 均可."""
        message = self._lookup(key, domain or "admin")
        for name, value in (params or {}).items():
            placeholder = name if name.startswith("%") else f"%{name}%"
            message = message.replace(placeholder, str(value))
        return message

    def _lookup(self, key: str, domain: str) -> str:
        for locale in dict.fromkeys((self.locale, self.fallback_locale)):
            message = self._catalog(domain, locale).get(key)
            if message is not None:
                return message
        return key

    def _catalog(self, domain: str, locale: str) -> dict[str, str]:
        cache_key = (domain, locale)
        if cache_key not in self._catalogs:
            self._catalogs[cache_key] = self._load(domain, locale)
        return self._catalogs[cache_key]

    def _load(self, domain: str, locale: str) -> dict[str, str]:
        path = self.catalog_dir / f"{domain}.{locale}.yaml"
        if not path.exists():
            return {}
        try:
            with path.open(encoding="utf-8") as catalog_buffer:
                raw = yaml.safe_load(catalog_buffer) or {}
        except yaml.YAMLError as exc:
            logger.exception("翻译目录解析失败", path=str(path))
            raise ConfigurationError(f"翻译目录解析失败: {path.name}") from exc
        catalog = validate_or_raise(TranslationCatalogFile, raw, message_key="VALIDATION_ERROR")
        logger.info("已加载翻译目录", domain=domain, locale=locale, size=len(catalog.messages))
        return catalog.messages
