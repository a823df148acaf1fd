"""表单/JSON 数据类型转换工具.

提供稳定的转换函数,将 `PayloadValue` 映射为具体的 str/bool/list 类型,
使表单编码与 JSON 编码的同名字段得到一致的解释.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adminflow.types import PayloadValue

_STRING_LIKE_TYPES = (str, bytes, bytearray)


def _unwrap_sequence(value: PayloadValue | None) -> PayloadValue | None:
    if isinstance(value, Sequence) and not isinstance(value, _STRING_LIKE_TYPES):
        if not value:
            return None
        return value[-1]
    return value


def as_str(value: PayloadValue | None, *, default: str = "") -> str:
    """转换为字符串.

    Args:
        value: 待转换的原始值,序列取最后一个元素.
        default: 当值为空或 None 时的默认字符串.

    Returns:
        转换后的字符串.

    """
    base = _unwrap_sequence(value)
    if base is None:
        return default
    if isinstance(base, str):
        return base
    if isinstance(base, (bytes, bytearray)):
        return base.decode()
    return str(base)


def as_optional_str(value: PayloadValue | None) -> str | None:
    """转换为可选字符串,空白返回 None."""
    cleaned = as_str(value, default="").strip()
    return cleaned or None


def as_bool(value: PayloadValue | None, *, default: bool = False) -> bool:
    """转换为布尔值.

    "true"/"1"/"yes"/"on" 为真,"false"/"0"/"no"/"off" 为假,
    其他字符串(包括空串)返回 ``default``.
    """
    base = _unwrap_sequence(value)
    if base is None:
        return default

    result = default
    if isinstance(base, bool):
        result = base
    elif isinstance(base, (int, float)):
        result = bool(base)
    elif isinstance(base, str):
        normalized = base.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            result = True
        elif normalized in {"false", "0", "no", "off"}:
            result = False
    return result


def as_str_list(value: PayloadValue | None) -> list[str]:
    """转换为字符串列表,保持原有顺序并丢弃空白项.

    标量值视为单元素列表.
    """
    if value is None:
        return []
    if isinstance(value, Sequence) and not isinstance(value, _STRING_LIKE_TYPES):
        items = list(value)
    else:
        items = [value]
    result: list[str] = []
    for item in items:
        normalized = as_optional_str(item)
        if normalized is not None:
            result.append(normalized)
    return result
