"""adminflow - 后台资源路由.

每个 `AdminResource` 注册一个蓝图,动作与路由一一对应.视图只负责把 Flask
请求转换为 `ActionRequest`,再把编排层返回的指令转换为 Flask 响应.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from flask import Blueprint, Response, jsonify, redirect, render_template, request, url_for
from flask.views import MethodView

from adminflow.admin.controller import CrudController
from adminflow.admin.request import ActionRequest
from adminflow.admin.results import Exported, JsonReply, Redirected, Rendered
from adminflow.constants import HttpHeaders, HttpMethod
from adminflow.errors import SystemError
from adminflow.utils.route_safety import safe_route_call

if TYPE_CHECKING:
    from flask.typing import ResponseReturnValue

    from adminflow.admin.collaborators import AdminCollaborators
    from adminflow.admin.resource import AdminResource
    from adminflow.admin.results import ActionResult

# 路由中的对象标识统一以 object_id 传给控制器
OBJECT_ID = "object_id"


@dataclass(frozen=True, slots=True)
class RouteSpec:
    """一个后台动作的路由定义,`{id}` 会被替换为资源的标识参数名."""

    action: str
    rule: str
    methods: tuple[str, ...] = (HttpMethod.GET,)


ADMIN_ROUTES: tuple[RouteSpec, ...] = (
    RouteSpec("list", "/"),
    RouteSpec("create", "/create", (HttpMethod.GET, HttpMethod.POST)),
    RouteSpec("edit", "/<{id}>/edit", (HttpMethod.GET, HttpMethod.POST)),
    RouteSpec("delete", "/<{id}>/delete", (HttpMethod.GET, HttpMethod.POST, HttpMethod.DELETE)),
    RouteSpec("show", "/<{id}>/show"),
    # GET 也路由到批量动作,由分发器给出 404
    RouteSpec("batch", "/batch", (HttpMethod.GET, HttpMethod.POST)),
    RouteSpec("history", "/<{id}>/history"),
    RouteSpec("history_view_revision", "/<{id}>/history/<revision>/view"),
    RouteSpec(
        "history_compare_revisions",
        "/<{id}>/history/<base_revision>/<compare_revision>/compare",
    ),
    RouteSpec("export", "/export"),
    RouteSpec("acl", "/<{id}>/acl", (HttpMethod.GET, HttpMethod.POST)),
)


def to_response(result: ActionResult) -> ResponseReturnValue:
    """把编排指令转换为 Flask 响应."""
    if isinstance(result, Rendered):
        return render_template(result.template, **result.context)
    if isinstance(result, Redirected):
        return redirect(result.url)
    if isinstance(result, JsonReply):
        return jsonify(result.payload), result.status
    if isinstance(result, Exported):
        return Response(
            result.content,
            content_type=result.mimetype,
            headers={HttpHeaders.CONTENT_DISPOSITION: f'attachment; filename="{result.filename}"'},
        )
    raise SystemError(f"未知的动作结果类型: {type(result).__name__}")


class AdminActionView(MethodView):
    """把一个后台动作暴露为视图,所有允许的方法都交给同一个控制器方法.

    Args:
        resource: 资源定义.
        action: 动作名.
        handler: 控制器上的动作方法.
        debug: 调试模式下未知异常原样抛出,交给框架的调试页.

    """

    init_every_request = False

    def __init__(
        self,
        resource: AdminResource,
        action: str,
        handler: Callable[..., ActionResult],
        *,
        debug: bool = False,
    ) -> None:
        self.resource = resource
        self.action = action
        self.handler = handler
        self.debug = debug

    def get(self, **route_params: str) -> ResponseReturnValue:
        return self._handle(route_params)

    def post(self, **route_params: str) -> ResponseReturnValue:
        return self._handle(route_params)

    def delete(self, **route_params: str) -> ResponseReturnValue:
        return self._handle(route_params)

    def _handle(self, route_params: Mapping[str, str]) -> ResponseReturnValue:
        params = dict(route_params)
        if self.resource.id_parameter in params:
            params[OBJECT_ID] = params.pop(self.resource.id_parameter)
        action_request = ActionRequest.from_flask(request)

        def _execute() -> ActionResult:
            return self.handler(action_request, **params)

        result = safe_route_call(
            _execute,
            module="admin",
            action=f"{self.resource.name}_{self.action}",
            public_error="后台操作失败",
            context={"resource": self.resource.name, "admin_action": self.action, **params},
            debug=self.debug,
        )
        return to_response(result)


def create_admin_blueprint(resource: AdminResource, collaborators: AdminCollaborators) -> Blueprint:
    """为资源创建蓝图,只注册 `resource.routes` 中启用的动作.

    Args:
        resource: 资源定义.
        collaborators: 注入给编排层的协作方.

    Returns:
        Blueprint: 以资源名命名的蓝图,端点名与动作名一致.

    """
    blueprint = Blueprint(resource.name, __name__)

    def generate_url(route: str, params: Mapping[str, object]) -> str:
        return url_for(f"{blueprint.name}.{route}", **params)

    controller = CrudController(resource, collaborators, generate_url)
    for spec in ADMIN_ROUTES:
        if spec.action not in resource.routes:
            continue
        view = AdminActionView.as_view(
            spec.action,
            resource,
            spec.action,
            getattr(controller, f"{spec.action}_action"),
            debug=collaborators.debug,
        )
        blueprint.add_url_rule(
            spec.rule.format(id=resource.id_parameter),
            view_func=view,
            methods=list(spec.methods),
            endpoint=spec.action,
        )
    return blueprint
