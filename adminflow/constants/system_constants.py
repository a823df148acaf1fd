"""adminflow - 常量定义模块

统一管理错误分类、严重度与默认错误文案.
"""

from enum import Enum


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    BUSINESS = "business"
    AUTHORIZATION = "authorization"
    SECURITY = "security"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# 错误消息常量
class ErrorMessages:
    """错误消息常量."""

    # 通用错误
    INTERNAL_ERROR = "服务器内部错误"
    VALIDATION_ERROR = "数据验证失败"
    PERMISSION_DENIED = "权限不足"
    RESOURCE_NOT_FOUND = "资源不存在"
    INVALID_REQUEST = "无效的请求"

    # 安全
    CSRF_INVALID = "CSRF 令牌无效,请刷新后重试"

    # 配置错误(开发期即应暴露)
    BATCH_ACTION_UNDEFINED = "批量操作未定义"
    BATCH_HANDLER_MISSING = "批量操作缺少处理函数"
    EXPORT_FORMAT_NOT_ALLOWED = "不支持的导出格式"
