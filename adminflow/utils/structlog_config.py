"""adminflow 的结构化日志配置与辅助函数."""

from __future__ import annotations

import sys
import uuid
from contextlib import suppress
from typing import TYPE_CHECKING, cast

import structlog
from flask import Flask, current_app, g, has_request_context, request
from flask_login import current_user

from adminflow.constants import HttpHeaders
from adminflow.settings import APP_VERSION
from adminflow.types import ContextDict, JsonValue, LoggerExtra, StructlogEventDict

if TYPE_CHECKING:
    from structlog.typing import BindableLogger, Processor

LogField = JsonValue | ContextDict | LoggerExtra


class StructlogConfig:
    """structlog 配置核心类.

    负责配置 structlog 的处理器链,并在请求上下文中补充 request_id、
    当前用户与应用版本等字段.

    Example:
        >>> config = StructlogConfig()
        >>> config.configure(app)
        >>> logger = get_logger('admin')

    """

    def __init__(self) -> None:
        self.configured = False

    def configure(self, app: Flask | None = None) -> None:
        """初始化 structlog 处理器(幂等).

        Args:
            app: Flask 应用实例,可选.提供时注册请求级钩子.

        """
        if not self.configured:
            processors = [
                structlog.stdlib.filter_by_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                self._add_request_context,
                self._add_user_context,
                self._add_global_context,
                self._get_renderer(),
            ]
            structlog.configure(
                processors=cast("list[structlog.types.Processor]", processors),
                context_class=dict,
                logger_factory=structlog.stdlib.LoggerFactory(),
                wrapper_class=structlog.stdlib.BoundLogger,
                cache_logger_on_first_use=True,
            )
            self.configured = True

        if app is not None:
            self._attach_app(app)

    @staticmethod
    def _attach_app(app: Flask) -> None:
        @app.before_request
        def assign_request_id() -> None:
            g.request_id = request.headers.get(HttpHeaders.X_REQUEST_ID) or uuid.uuid4().hex

    @staticmethod
    def _add_request_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        """向事件字典写入请求上下文."""
        if has_request_context():
            event_dict["request_id"] = getattr(g, "request_id", None)
            event_dict["request_path"] = request.path
        return event_dict

    @staticmethod
    def _add_user_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        """附加当前用户上下文."""
        with suppress(RuntimeError, AttributeError):
            if current_user and getattr(current_user, "is_authenticated", False):
                event_dict["current_user_id"] = getattr(current_user, "id", None)
        return event_dict

    @staticmethod
    def _add_global_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        """附加环境、版本等全局上下文."""
        try:
            event_dict["app_name"] = current_app.config["APP_NAME"]
            event_dict["app_version"] = current_app.config["APP_VERSION"]
            event_dict["environment"] = current_app.config.get("ENV", "development")
        except (RuntimeError, KeyError):
            event_dict["app_name"] = "adminflow"
            event_dict["app_version"] = APP_VERSION
        return event_dict

    @staticmethod
    def _get_renderer() -> Processor:
        """根据终端能力返回渲染器."""
        if sys.stdout.isatty():
            return structlog.dev.ConsoleRenderer(colors=True)
        return structlog.processors.JSONRenderer(ensure_ascii=False)


structlog_config = StructlogConfig()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器.

    Args:
        name: 日志记录器名称,通常使用模块名.

    Returns:
        绑定的 structlog 日志记录器实例.

    """
    structlog_config.configure()
    return structlog.get_logger(name)


def configure_structlog(app: Flask) -> None:
    """配置 structlog 并注册 Flask 钩子."""
    structlog_config.configure(app)

    @app.teardown_appcontext
    def log_teardown_error(exception: BaseException | None) -> None:
        if exception:
            get_logger("app").error("应用请求处理异常", module="system", exception=str(exception))


def log_info(message: str, module: str = "app", **kwargs: LogField) -> None:
    """记录信息级别日志.

    Example:
        >>> log_info('批量操作完成', module='admin', action='delete')

    """
    get_logger("app").info(message, module=module, **kwargs)


def log_warning(
    message: str,
    module: str = "app",
    exception: BaseException | None = None,
    **kwargs: LogField,
) -> None:
    """记录警告级别日志."""
    logger = get_logger("app")
    if exception:
        logger.warning(message, module=module, exception=str(exception), **kwargs)
    else:
        logger.warning(message, module=module, **kwargs)


def log_error(
    message: str,
    module: str = "app",
    exception: BaseException | None = None,
    **kwargs: LogField,
) -> None:
    """记录错误级别日志.

    Args:
        message: 日志消息.
        module: 模块名称,默认为 'app'.
        exception: 可选的异常对象,附带其文案.
        **kwargs: 额外的上下文信息.

    """
    logger = get_logger("app")
    if exception:
        logger.error(message, module=module, error=str(exception), **kwargs)
    else:
        logger.error(message, module=module, **kwargs)


def get_system_logger() -> structlog.stdlib.BoundLogger:
    """返回系统级 logger."""
    return get_logger("system")
