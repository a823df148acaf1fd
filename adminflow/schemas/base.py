"""Schema 基础设施."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PayloadSchema(BaseModel):
    """后台表单与配置文件 schema 的基类.

    约定:
    - 默认忽略未知字段,表单里的按钮、CSRF 等标记字段不会导致校验失败.
    - schema 负责业务校验与错误文案(中文).
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)
