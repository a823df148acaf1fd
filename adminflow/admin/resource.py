"""后台资源定义与请求级上下文.

`AdminResource` 是启动期配置好的只读元数据,`ResourceContext` 则在每次请求入口
根据请求参数(subclass、uniqid、_list_mode)解析一次,之后不可变.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, TypeAlias

from adminflow.admin.batch_actions import BatchActionRegistry, default_batch_actions
from adminflow.constants import RequestMarkers
from adminflow.errors import AuthorizationError, ConfigurationError

if TYPE_CHECKING:
    from adminflow.admin.collaborators import Datagrid, FormBinder
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.results import ActionResult

AccessChecker: TypeAlias = Callable[[str, object | None], bool]
UrlGenerator: TypeAlias = Callable[[str, Mapping[str, object]], str]
DatagridFactory: TypeAlias = Callable[["ResourceContext", "ActionRequest"], "Datagrid"]

DEFAULT_TEMPLATES: Mapping[str, str] = MappingProxyType(
    {
        "layout": "admin/layout.html",
        "ajax": "admin/ajax_layout.html",
        "list": "admin/list.html",
        "edit": "admin/edit.html",
        "preview": "admin/preview.html",
        "show": "admin/show.html",
        "show_compare": "admin/show_compare.html",
        "delete": "admin/delete.html",
        "history": "admin/history.html",
        "batch_confirmation": "admin/batch_confirmation.html",
        "acl": "admin/acl.html",
        "select_subclass": "admin/select_subclass.html",
    },
)

DEFAULT_ROUTES: frozenset[str] = frozenset(
    {
        "list",
        "create",
        "edit",
        "delete",
        "show",
        "batch",
        "history",
        "history_view_revision",
        "history_compare_revisions",
        "export",
        "acl",
    },
)


def allow_all(_action: str, _subject: object | None = None) -> bool:
    """默认访问检查,放行所有动作."""
    return True


def is_abstract_class(model_class: type) -> bool:
    """判断模型类是否不可实例化(ABC 抽象类或声明了 `__abstract__`)."""
    return inspect.isabstract(model_class) or bool(model_class.__dict__.get("__abstract__", False))


class AdminHooks:
    """扩展钩子.

    `pre_*` 钩子返回非 None 的 ActionResult 时,当前动作直接返回该结果,
    不再执行后续任何变更.子类按需覆盖.
    """

    def pre_list(self, request: ActionRequest) -> ActionResult | None:
        return None

    def pre_create(self, request: ActionRequest, subject: object) -> ActionResult | None:
        return None

    def pre_edit(self, request: ActionRequest, subject: object) -> ActionResult | None:
        return None

    def pre_delete(self, request: ActionRequest, subject: object) -> ActionResult | None:
        return None

    def pre_show(self, request: ActionRequest, subject: object) -> ActionResult | None:
        return None

    def pre_validate(self, subject: object) -> None:
        """校验前对主体对象做最后调整."""

    def pre_batch_action(
        self,
        action: str,
        query: object,
        selected_ids: list[str],
        all_elements: bool,
    ) -> None:
        """批量操作执行前调整查询,可直接修改 query 或 selected_ids."""


@dataclass(frozen=True, slots=True)
class AdminResource:
    """一个被后台管理的资源类型.

    Attributes:
        name: 资源名,同时用作蓝图名与 URL 片段.
        model_class: 被管理的模型类,可以是抽象基类.
        form_binder: 表单工厂.
        datagrid_factory: 根据上下文与请求构造 datagrid.
        access_checker: `(action, subject) -> bool` 访问检查.
        id_parameter: 路由中对象标识的参数名.
        templates: 模板键到模板路径的映射,缺失的键回退到默认模板.
        translation_domain: 反馈文案所在的翻译域.
        label: 展示名称.
        routes: 已启用的路由名集合.
        supports_preview: 创建/编辑是否启用预览.
        subclasses: 可选子类型,键为请求中的 `subclass` 值.
        export_formats: 允许的导出格式.
        export_fields: 导出的字段,为空时由持久化协作方决定.
        show_fields: 展示页与预览页的只读字段.
        acl_enabled: 是否启用对象级 ACL.
        batch_actions: 批量操作注册表.
        hooks: 扩展钩子.
        to_string: 主体对象的展示文本.

    """

    name: str
    model_class: type
    form_binder: FormBinder
    datagrid_factory: DatagridFactory
    access_checker: AccessChecker = allow_all
    id_parameter: str = "id"
    templates: Mapping[str, str] = field(default_factory=lambda: DEFAULT_TEMPLATES)
    translation_domain: str = "admin"
    label: str | None = None
    routes: frozenset[str] = DEFAULT_ROUTES
    supports_preview: bool = False
    subclasses: Mapping[str, type] = field(default_factory=dict)
    export_formats: tuple[str, ...] = ("csv", "json")
    export_fields: tuple[str, ...] = ()
    show_fields: tuple[str, ...] = ()
    acl_enabled: bool = False
    batch_actions: BatchActionRegistry = field(default_factory=default_batch_actions)
    hooks: AdminHooks = field(default_factory=AdminHooks)
    to_string: Callable[[object], str] = str


@dataclass(frozen=True, slots=True)
class ResourceContext:
    """单次请求解析出的资源上下文."""

    resource: AdminResource
    url_generator: UrlGenerator
    active_subclass: str | None = None
    uniqid: str | None = None
    list_mode: str | None = None

    @classmethod
    def resolve(
        cls,
        resource: AdminResource,
        request: ActionRequest,
        url_generator: UrlGenerator,
    ) -> ResourceContext:
        """根据请求参数解析上下文,未登记的 subclass 会被忽略."""
        subclass = request.get(RequestMarkers.SUBCLASS)
        if subclass not in resource.subclasses:
            subclass = None
        return cls(
            resource=resource,
            url_generator=url_generator,
            active_subclass=subclass,
            uniqid=request.get(RequestMarkers.UNIQID) or None,
            list_mode=request.get(RequestMarkers.LIST_MODE) or None,
        )

    @property
    def name(self) -> str:
        return self.resource.name

    @property
    def label(self) -> str:
        return self.resource.label or self.resource.name

    @property
    def id_parameter(self) -> str:
        return self.resource.id_parameter

    @property
    def translation_domain(self) -> str:
        return self.resource.translation_domain

    @property
    def supports_preview(self) -> bool:
        return self.resource.supports_preview

    @property
    def hooks(self) -> AdminHooks:
        return self.resource.hooks

    @property
    def managed_class(self) -> type:
        """当前请求实际操作的类,优先取激活的子类型."""
        if self.active_subclass is not None:
            return self.resource.subclasses[self.active_subclass]
        return self.resource.model_class

    @property
    def class_name(self) -> str:
        return self.managed_class.__name__

    def is_managed_class_abstract(self) -> bool:
        return is_abstract_class(self.managed_class)

    def new_instance(self) -> object:
        """实例化当前管理的类."""
        return self.managed_class()

    def template(self, key: str) -> str:
        """按键取模板路径.

        Raises:
            ConfigurationError: 资源与默认模板都没有该键时抛出.

        """
        template = self.resource.templates.get(key) or DEFAULT_TEMPLATES.get(key)
        if template is None:
            raise ConfigurationError(
                f"资源 {self.name} 未配置模板 {key}",
                extra={"resource": self.name, "template": key},
            )
        return template

    def can_access(self, action: str, subject: object | None = None) -> bool:
        return bool(self.resource.access_checker(action, subject))

    def check_access(self, action: str, subject: object | None = None) -> None:
        """访问检查,失败时抛出 AuthorizationError."""
        if not self.can_access(action, subject):
            raise AuthorizationError(extra={"resource": self.name, "action": action})

    def has_route(self, route: str) -> bool:
        return route in self.resource.routes

    def generate_url(self, route: str, **params: object) -> str:
        """生成资源路由地址,值为 None 的参数会被丢弃."""
        cleaned = {key: value for key, value in params.items() if value is not None}
        return self.url_generator(route, cleaned)

    def generate_object_url(self, route: str, object_id: str, **params: object) -> str:
        return self.generate_url(route, **{self.id_parameter: object_id}, **params)

    def to_string(self, subject: object) -> str:
        return self.resource.to_string(subject)

    def create_datagrid(self, request: ActionRequest) -> Datagrid:
        return self.resource.datagrid_factory(self, request)

    @property
    def batch_actions(self) -> BatchActionRegistry:
        return self.resource.batch_actions
