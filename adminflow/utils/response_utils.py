"""adminflow - 统一响应工具.

提供统一的错误响应结构,避免在视图层散落 JSON 拼装逻辑.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flask import Response, jsonify

from adminflow.constants import HttpStatus
from adminflow.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity
from adminflow.errors import AppError, map_exception_to_status

if TYPE_CHECKING:
    from adminflow.types import JsonDict


def unified_error_response(
    error: BaseException,
    *,
    status_code: int | None = None,
) -> tuple[JsonDict, int]:
    """生成统一的错误响应载荷.

    终端用户只会看到 message_key 对应的文案,不会看到原始异常文本.

    Args:
        error: 异常对象.
        status_code: HTTP 状态码,可选,默认根据异常类型自动映射.

    Returns:
        (响应载荷字典, HTTP 状态码).

    """
    safe_error = error if isinstance(error, Exception) else Exception(str(error))
    final_status = status_code or map_exception_to_status(safe_error, default=HttpStatus.INTERNAL_SERVER_ERROR)
    category = ErrorCategory.SYSTEM
    severity = ErrorSeverity.HIGH
    recoverable = False
    if isinstance(safe_error, AppError):
        message = safe_error.message
        message_code = safe_error.message_key
        category = safe_error.category
        severity = safe_error.severity
        recoverable = safe_error.recoverable
    else:
        message = getattr(safe_error, "description", None) or ErrorMessages.INTERNAL_ERROR
        message_code = "INTERNAL_ERROR" if final_status >= HttpStatus.INTERNAL_SERVER_ERROR else "HTTP_ERROR"
        if final_status < HttpStatus.INTERNAL_SERVER_ERROR:
            severity = ErrorSeverity.MEDIUM
            recoverable = True
    payload: JsonDict = {
        "success": False,
        "error": True,
        "message": str(message),
        "message_code": message_code,
        "category": category.value,
        "severity": severity.value,
        "recoverable": recoverable,
    }
    return payload, final_status


def jsonify_unified_error(error: BaseException, *, status_code: int | None = None) -> tuple[Response, int]:
    """返回 Flask Response 对象的错误响应便捷函数."""
    payload, status = unified_error_response(error, status_code=status_code)
    return jsonify(payload), status
