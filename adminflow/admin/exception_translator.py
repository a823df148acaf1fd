"""持久化异常的分类与记录."""

from __future__ import annotations

from typing import TYPE_CHECKING

from adminflow.utils.structlog_config import log_error

if TYPE_CHECKING:
    from adminflow.types import JsonValue


class ExceptionTranslator:
    """处理可恢复的持久化异常.

    调试模式下原样重新抛出,交给框架的调试页;否则记录错误日志(附带被包装的
    底层异常文案)后吞掉,由调用方决定给用户的反馈.

    Args:
        debug: 是否处于调试/开发模式.
        module: 日志 module 字段.

    """

    def __init__(self, *, debug: bool, module: str = "admin") -> None:
        self.debug = debug
        self.module = module

    def translate(self, exc: BaseException, **context: JsonValue) -> None:
        """记录或重新抛出异常.

        Args:
            exc: 持久化层抛出的异常.
            **context: 附加到日志的上下文,例如资源名与动作名.

        Raises:
            BaseException: 调试模式下原样抛出 ``exc``.

        """
        if self.debug:
            raise exc

        previous = exc.__cause__ or exc.__context__
        log_error(
            "持久化操作失败",
            module=self.module,
            exception=exc,
            error_type=exc.__class__.__name__,
            previous_exception_message=str(previous) if previous is not None else None,
            **context,
        )
