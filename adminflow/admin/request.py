"""入站请求的不可变快照.

编排层不直接依赖 Flask 的请求对象,视图层在入口处构造一次 `ActionRequest`
并贯穿整个处理过程.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from werkzeug.datastructures import Headers, ImmutableMultiDict

from adminflow.constants import HttpHeaders, HttpMethod, RequestMarkers

if TYPE_CHECKING:
    from flask import Request

    from adminflow.types import MutablePayloadDict

_FALSY_MARKERS = {"", "0", "false"}


@dataclass(frozen=True, slots=True)
class ActionRequest:
    """一次后台动作请求.

    Attributes:
        method: 传输层的 HTTP 方法(大写).
        args: 查询参数.
        form: 表单参数.
        headers: 请求头(大小写不敏感).

    """

    method: str
    args: ImmutableMultiDict[str, str] = field(default_factory=ImmutableMultiDict)
    form: ImmutableMultiDict[str, str] = field(default_factory=ImmutableMultiDict)
    headers: Headers = field(default_factory=Headers)

    @classmethod
    def from_flask(cls, req: Request) -> ActionRequest:
        """从 Flask 请求构造快照."""
        return cls(
            method=req.method.upper(),
            args=ImmutableMultiDict(req.args),
            form=ImmutableMultiDict(req.form),
            headers=Headers(req.headers),
        )

    @classmethod
    def build(
        cls,
        method: str = HttpMethod.GET,
        *,
        args: Mapping[str, object] | None = None,
        form: Mapping[str, object] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ActionRequest:
        """用普通字典构造快照,列表值视为多值参数."""
        return cls(
            method=method.upper(),
            args=ImmutableMultiDict(args or {}),
            form=ImmutableMultiDict(form or {}),
            headers=Headers(dict(headers or {})),
        )

    def get(self, key: str, default: str | None = None) -> str | None:
        """读取参数,查询参数优先于表单参数."""
        if key in self.args:
            return self.args.get(key)
        if key in self.form:
            return self.form.get(key)
        return default

    def has(self, key: str) -> bool:
        """参数是否出现(值可以为空串)."""
        return key in self.args or key in self.form

    def get_list(self, key: str) -> list[str]:
        """读取多值参数,同时兼容 `key` 与 `key[]` 两种写法."""
        values: list[str] = []
        for name in (key, f"{key}[]"):
            values.extend(self.args.getlist(name))
            values.extend(self.form.getlist(name))
        return values

    def body_params(self) -> MutablePayloadDict:
        """表单参数字典.

        `name[]` 形式的字段去掉后缀并保留为列表,其余多值字段同样保留为列表.
        """
        params: MutablePayloadDict = {}
        for key, values in self.form.lists():
            if key.endswith("[]"):
                params[key[:-2]] = list(values)
            elif len(values) == 1:
                params[key] = values[0]
            else:
                params[key] = list(values)
        return params

    @property
    def rest_method(self) -> str:
        """实际语义上的 HTTP 方法,支持 `_method` 表单字段覆盖."""
        override = self.form.get(RequestMarkers.METHOD_OVERRIDE)
        if override:
            return override.strip().upper()
        return self.method

    @property
    def is_xhr(self) -> bool:
        """是否为 XHR 风格请求(请求头或 `_xml_http_request` 参数)."""
        if self.headers.get(HttpHeaders.X_REQUESTED_WITH) == HttpHeaders.XML_HTTP_REQUEST:
            return True
        marker = self.get(RequestMarkers.XML_HTTP_REQUEST)
        return marker is not None and marker.strip().lower() not in _FALSY_MARKERS
