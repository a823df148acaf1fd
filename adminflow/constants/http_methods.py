"""HTTP方法常量.

定义后台路由用到的HTTP请求方法,避免魔法字符串.
"""

from typing import ClassVar


class HttpMethod:
    """HTTP方法常量."""

    GET: ClassVar[str] = "GET"
    POST: ClassVar[str] = "POST"
    PUT: ClassVar[str] = "PUT"
    PATCH: ClassVar[str] = "PATCH"
    DELETE: ClassVar[str] = "DELETE"
