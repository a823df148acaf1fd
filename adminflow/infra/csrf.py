"""基于 Flask-WTF 的按用途 CSRF 令牌."""

from __future__ import annotations

from flask_wtf.csrf import generate_csrf, validate_csrf
from wtforms.validators import ValidationError as WtfValidationError

from adminflow.utils.structlog_config import log_warning

DEFAULT_TOKEN_PREFIX = "adminflow_csrf"


class FlaskWtfCsrfTokenManager:
    """每个用途(delete、batch、acl 等)在会话中占用独立的令牌槽,互不通用.

    Args:
        prefix: 会话键前缀.

    """

    def __init__(self, prefix: str = DEFAULT_TOKEN_PREFIX) -> None:
        self.prefix = prefix

    def token_key(self, intention: str) -> str:
        return f"{self.prefix}_{intention}"

    def get_token(self, intention: str) -> str:
        return generate_csrf(token_key=self.token_key(intention))

    def is_token_valid(self, intention: str, token: str | None) -> bool:
        """校验令牌,失败原因记录为 warning 日志."""
        if not token:
            return False
        try:
            validate_csrf(token, token_key=self.token_key(intention))
        except WtfValidationError as exc:
            log_warning("CSRF 令牌无效", module="admin", intention=intention, reason=str(exc))
            return False
        return True
