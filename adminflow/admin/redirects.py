"""保存或删除成功后的跳转策略."""

from __future__ import annotations

from typing import TYPE_CHECKING

from adminflow.constants import HttpMethod, RequestMarkers

if TYPE_CHECKING:
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.resource import ResourceContext


def resolve_redirect(
    context: ResourceContext,
    request: ActionRequest,
    subject: object | None,
    object_id: str | None,
    *,
    deleted: bool = False,
) -> str:
    """按优先级计算跳转地址.

    1. "保存并返回列表"按钮 → 列表页.
    2. "保存并继续新建"按钮 → 新建页,保留当前子类型.
    3. 删除完成(或 DELETE 方法) → 列表页.
    4. 当前用户可访问的 edit、show 路由中的第一个 → 对象页.
    5. 其余情况 → 列表页.

    Args:
        context: 资源上下文.
        request: 当前请求.
        subject: 刚持久化的对象,删除时可为 None.
        object_id: 对象标识.
        deleted: 是否为删除动作.

    Returns:
        str: 跳转地址.

    """
    if request.has(RequestMarkers.BTN_UPDATE_AND_LIST) or request.has(RequestMarkers.BTN_CREATE_AND_LIST):
        return context.generate_url("list")

    if request.has(RequestMarkers.BTN_CREATE_AND_CREATE):
        return context.generate_url("create", subclass=context.active_subclass)

    if deleted or request.rest_method == HttpMethod.DELETE:
        return context.generate_url("list")

    if subject is not None and object_id is not None:
        for route in ("edit", "show"):
            if context.has_route(route) and context.can_access(route, subject):
                return context.generate_object_url(route, object_id)

    return context.generate_url("list")
