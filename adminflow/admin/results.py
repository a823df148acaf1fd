"""后台动作的返回指令.

编排层只产出指令,由视图层转换为具体的 Flask 响应.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias

from adminflow.constants import HttpStatus
from adminflow.types import JsonDict, TemplateContext


@dataclass(frozen=True, slots=True)
class Rendered:
    """渲染模板."""

    template: str
    context: TemplateContext = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Redirected:
    """重定向到给定地址."""

    url: str


@dataclass(frozen=True, slots=True)
class JsonReply:
    """XHR 风格的结构化应答,成功与失败均为 200."""

    payload: JsonDict
    status: int = HttpStatus.OK


@dataclass(frozen=True, slots=True)
class Exported:
    """导出文件."""

    filename: str
    content: str
    mimetype: str


ActionResult: TypeAlias = Rendered | Redirected | JsonReply | Exported


def json_ok(object_id: str | None = None, object_name: str | None = None) -> JsonReply:
    """构造成功应答 `{result: "ok", objectId, objectName?}`."""
    payload: JsonDict = {"result": "ok"}
    if object_id is not None:
        payload["objectId"] = object_id
    if object_name is not None:
        payload["objectName"] = object_name
    return JsonReply(payload)


def json_error() -> JsonReply:
    """构造失败应答 `{result: "error"}`."""
    return JsonReply({"result": "error"})
