"""后台视图的异常兜底.

视图把控制器调用包在 `safe_route_call` 里: 业务异常与 HTTP 异常记 warning 后
原样抛出,交给应用级错误处理器;其余异常记 error 后转换为 `SystemError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, TypeVar

from flask_login import current_user
from werkzeug.exceptions import HTTPException

from adminflow.errors import AppError, SystemError
from adminflow.utils.structlog_config import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from adminflow.types import ContextDict

R = TypeVar("R")
LogLevel = Literal["debug", "info", "warning", "error", "critical"]
KNOWN_EXCEPTIONS: tuple[type[BaseException], ...] = (AppError, HTTPException)


def _actor_id() -> object | None:
    try:
        return getattr(current_user, "id", None)
    except (RuntimeError, AttributeError):
        return None


def log_with_context(
    level: LogLevel,
    event: str,
    *,
    module: str,
    action: str,
    context: ContextDict | None = None,
) -> None:
    """按统一字段记录日志,已登录时附带 actor_id."""
    payload: ContextDict = {"module": module, "action": action}
    actor_id = _actor_id()
    if actor_id is not None:
        payload["actor_id"] = str(actor_id)
    payload.update(context or {})
    getattr(get_logger("adminflow"), level)(event, **payload)


def safe_route_call(
    func: Callable[[], R],
    *,
    module: str,
    action: str,
    public_error: str,
    context: ContextDict | None = None,
    debug: bool = False,
) -> R:
    """执行视图逻辑并统一记录失败.

    Args:
        func: 无参闭包,通常捕获了请求与路由参数.
        module: 日志模块名.
        action: 动作名,例如 "article_edit".
        public_error: 未知异常转换为 `SystemError` 时的对外文案.
        context: 附加到日志的上下文.
        debug: 为 True 时未知异常原样抛出,交给框架调试页.

    Raises:
        AppError: 业务异常原样抛出,未知异常包装为 `SystemError`.

    """
    fields: ContextDict = dict(context or {})
    try:
        return func()
    except KNOWN_EXCEPTIONS as exc:
        fields.update(error_type=exc.__class__.__name__, error_message=str(exc))
        log_with_context("warning", f"{action}执行失败", module=module, action=action, context=fields)
        raise
    except Exception as exc:
        fields.update(error_type=exc.__class__.__name__, unexpected=True)
        log_with_context("error", f"{action}执行失败", module=module, action=action, context=fields)
        if debug:
            raise
        raise SystemError(public_error, extra=fields) from exc
