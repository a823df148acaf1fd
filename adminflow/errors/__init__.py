"""adminflow - 统一异常定义.

集中维护后台流程的异常类型、严重度与 HTTP 状态码映射.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from werkzeug.exceptions import HTTPException

from adminflow.constants import HttpStatus
from adminflow.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity

if TYPE_CHECKING:
    from adminflow.types import LoggerExtra


@dataclass(slots=True)
class ExceptionMetadata:
    """异常的元信息."""

    status_code: int
    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str

    @property
    def default_message(self) -> str:
        """根据 message key 获取默认文案.

        Returns:
            str: 对应 `ErrorMessages` 中的默认消息.

        """
        return getattr(ErrorMessages, self.default_message_key, ErrorMessages.INTERNAL_ERROR)


class AppError(Exception):
    """统一的基础业务异常.

    Args:
        message: 自定义错误文案,若为空则根据 ``message_key`` 推导.
        message_key: 对外暴露的错误码,缺省取元数据中的默认值.
        extra: 附加到结构化日志的上下文.
        status_code: 覆盖默认 HTTP 状态码.

    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        message_key: str | None = None,
        extra: LoggerExtra | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message_key = message_key or self.metadata.default_message_key
        self.message = message or getattr(ErrorMessages, self.message_key, self.metadata.default_message)
        self.extra = dict(extra or {})
        self._status_code = status_code or self.metadata.status_code
        super().__init__(self.message)

    @property
    def severity(self) -> ErrorSeverity:
        """返回异常实例对应的严重度."""
        return self.metadata.severity

    @property
    def category(self) -> ErrorCategory:
        """返回异常所属的业务分类."""
        return self.metadata.category

    @property
    def status_code(self) -> int:
        """返回异常对应的 HTTP 状态码."""
        return self._status_code

    @property
    def recoverable(self) -> bool:
        """表示该异常是否可恢复.

        Returns:
            bool: 严重度为 LOW 或 MEDIUM 时为 True.

        """
        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)


class ValidationError(AppError):
    """表示输入参数或表单验证失败,默认返回 400."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        default_message_key="VALIDATION_ERROR",
    )


class AuthorizationError(AppError):
    """表示当前主体缺少访问目标资源的权限.

    由资源访问检查抛出,交由传输层的标准处理,默认返回 403.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.FORBIDDEN,
        category=ErrorCategory.AUTHORIZATION,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="PERMISSION_DENIED",
    )


class NotFoundError(AppError):
    """表示对象、历史版本、审计读取器或路由不存在,默认返回 404."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.NOT_FOUND,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.LOW,
        default_message_key="RESOURCE_NOT_FOUND",
    )


class CsrfInvalidError(AppError):
    """表示 CSRF 令牌缺失或校验失败,请求不会被继续处理."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.SECURITY,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="CSRF_INVALID",
    )


class ConfigurationError(AppError):
    """表示开发期配置错误,不可由终端用户恢复."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        default_message_key="INTERNAL_ERROR",
    )


class UndefinedBatchActionError(ConfigurationError):
    """请求的批量操作没有注册."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        default_message_key="BATCH_ACTION_UNDEFINED",
    )


class MissingBatchHandlerError(ConfigurationError):
    """批量操作缺少可调用的处理函数."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        default_message_key="BATCH_HANDLER_MISSING",
    )


class InvalidExportFormatError(ConfigurationError):
    """导出格式不在资源允许列表内."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        default_message_key="EXPORT_FORMAT_NOT_ALLOWED",
    )


class SystemError(AppError):
    """表示系统级未知错误或底层故障,默认返回 500."""


def map_exception_to_status(error: Exception, default: int = HttpStatus.INTERNAL_SERVER_ERROR) -> int:
    """根据异常类型推导 HTTP 状态码.

    Args:
        error: 捕获到的异常对象.
        default: 无法匹配时的默认状态码.

    Returns:
        int: 与异常对应的 HTTP 状态码.

    """
    if isinstance(error, AppError):
        return error.status_code

    if isinstance(error, HTTPException):
        code = getattr(error, "code", None)
        if code is not None:
            return int(code)

    return default


__all__ = [
    "AppError",
    "AuthorizationError",
    "ConfigurationError",
    "CsrfInvalidError",
    "ExceptionMetadata",
    "InvalidExportFormatError",
    "MissingBatchHandlerError",
    "NotFoundError",
    "SystemError",
    "UndefinedBatchActionError",
    "ValidationError",
    "map_exception_to_status",
]
