"""持久化协作方的返回结果.

写操作不通过异常类型区分失败原因,而是返回下列判别结果之一.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class Persisted:
    """写入成功.

    Attributes:
        subject: 写入后的对象,批量操作时为 None.
        affected: 受影响的对象数量.

    """

    subject: object = None
    affected: int = 1


@dataclass(frozen=True, slots=True)
class ValidationConflict:
    """存储层拒绝了数据(唯一约束等),等同于表单无效."""

    detail: str
    field: str | None = None


@dataclass(frozen=True, slots=True)
class LockConflict:
    """乐观锁冲突,对象已被其他请求修改."""

    detail: str


@dataclass(frozen=True, slots=True)
class PersistenceFailure:
    """其他可恢复的持久化失败,携带原始异常."""

    detail: str
    error: BaseException


PersistResult: TypeAlias = Persisted | ValidationConflict | LockConflict | PersistenceFailure
