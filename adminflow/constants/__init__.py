"""常量模块.

集中管理错误分类、Flash 类别、HTTP 方法与请求标记等常量.
"""

from http import HTTPStatus as HttpStatus

from .admin_roles import AdminRole
from .flash_categories import FlashCategory
from .http_headers import HttpHeaders
from .http_methods import HttpMethod
from .request_markers import AdminMessageKeys, CsrfIntention, RequestMarkers
from .system_constants import ErrorCategory, ErrorMessages, ErrorSeverity

__all__ = [
    "AdminRole",
    "AdminMessageKeys",
    "CsrfIntention",
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "FlashCategory",
    "HttpHeaders",
    "HttpMethod",
    "HttpStatus",
    "RequestMarkers",
]
