"""HTTP头常量.

定义常用的HTTP头名称,避免魔法字符串.
"""


class HttpHeaders:
    """HTTP头常量."""

    CONTENT_TYPE = "Content-Type"
    CONTENT_DISPOSITION = "Content-Disposition"
    USER_AGENT = "User-Agent"
    LOCATION = "Location"

    # XHR 标识(浏览器 ajax 约定)
    X_REQUESTED_WITH = "X-Requested-With"
    XML_HTTP_REQUEST = "XMLHttpRequest"

    X_REQUEST_ID = "X-Request-ID"
