"""批量操作的定义、注册表与请求归一化.

批量请求既可以通过 `data` 字段提交 JSON,也可以提交扁平表单字段,
两种写法在入口处统一归一化为不可变的 `BatchRequest`.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, TypeAlias

from adminflow.admin.base import escape_params
from adminflow.admin.exception_translator import ExceptionTranslator
from adminflow.admin.persistence import Persisted, PersistenceFailure
from adminflow.admin.results import Redirected
from adminflow.constants import AdminMessageKeys, FlashCategory, RequestMarkers
from adminflow.errors import MissingBatchHandlerError, UndefinedBatchActionError
from adminflow.utils.payload_converters import as_bool, as_str, as_str_list
from adminflow.utils.structlog_config import log_info, log_warning

if TYPE_CHECKING:
    from adminflow.admin.collaborators import AdminCollaborators, Datagrid, ProxyQuery
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.resource import ResourceContext
    from adminflow.admin.results import ActionResult
    from adminflow.types import JsonDict, MutablePayloadDict, PayloadValue

BatchHandler: TypeAlias = Callable[["BatchExecution"], "ActionResult"]
RelevancePredicate: TypeAlias = Callable[[list[str], bool, "ActionRequest"], "bool | str"]

_RESERVED_FIELDS = frozenset(
    {
        RequestMarkers.BATCH_ACTION,
        RequestMarkers.BATCH_IDX,
        RequestMarkers.BATCH_ALL_ELEMENTS,
        RequestMarkers.BATCH_DATA,
        RequestMarkers.CONFIRMATION,
        RequestMarkers.CSRF_FIELD,
        RequestMarkers.METHOD_OVERRIDE,
    },
)


def _decode_batch_blob(raw: str) -> MutablePayloadDict | None:
    """解码 `data` 字段,不是 JSON 对象时返回 None,由调用方回退到表单字段."""
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        decoded = None
    if not isinstance(decoded, dict) or not decoded:
        log_warning("批量操作 data 字段不是 JSON 对象,改用表单字段", module="admin", field=RequestMarkers.BATCH_DATA)
        return None
    return decoded


@dataclass(frozen=True, slots=True)
class BatchRequest:
    """归一化后的批量请求.

    Attributes:
        action: 批量操作名.
        selected_ids: 选中的对象标识,保持提交顺序.
        all_elements: 是否作用于当前过滤条件下的全部对象.
        confirmed: 是否携带 `confirmation=ok`.
        extra: 其余字段,原样传给处理函数.

    """

    action: str
    selected_ids: tuple[str, ...] = ()
    all_elements: bool = False
    confirmed: bool = False
    extra: Mapping[str, PayloadValue] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_request(cls, request: ActionRequest) -> BatchRequest:
        """从请求体构造批量请求.

        `data` 字段是非空 JSON 对象时,其内容覆盖同名的表单字段;否则直接读取
        `action`、`idx[]`、`all_elements` 表单字段.

        """
        params = request.body_params()
        raw_blob = request.form.get(RequestMarkers.BATCH_DATA)
        decoded = _decode_batch_blob(raw_blob) if raw_blob else None
        if decoded is not None:
            params.update(decoded)

        extra = {key: value for key, value in params.items() if key not in _RESERVED_FIELDS}
        return cls(
            action=as_str(params.get(RequestMarkers.BATCH_ACTION)).strip(),
            selected_ids=tuple(as_str_list(params.get(RequestMarkers.BATCH_IDX))),
            all_elements=as_bool(params.get(RequestMarkers.BATCH_ALL_ELEMENTS), default=False),
            confirmed=as_str(params.get(RequestMarkers.CONFIRMATION)) == RequestMarkers.CONFIRMATION_OK,
            extra=MappingProxyType(extra),
        )

    @property
    def payload(self) -> JsonDict:
        """原始载荷,确认页据此原样重新提交."""
        payload: JsonDict = {
            RequestMarkers.BATCH_ACTION: self.action,
            RequestMarkers.BATCH_IDX: list(self.selected_ids),
            RequestMarkers.BATCH_ALL_ELEMENTS: self.all_elements,
        }
        payload.update(self.extra)
        return payload

    def to_json(self) -> str:
        return json.dumps(self.payload, ensure_ascii=False, sort_keys=True)


def default_relevance(selected_ids: list[str], all_elements: bool, _request: ActionRequest) -> bool:
    """默认相关性: 有选中项或选择了全部."""
    return bool(selected_ids) or all_elements


@dataclass(frozen=True, slots=True)
class BatchActionSpec:
    """一个已注册的批量操作.

    Attributes:
        name: 操作名,对应请求中的 `action`.
        label: 展示名称(翻译键).
        handler: 执行函数.
        ask_confirmation: 是否需要确认页.
        translation_domain: label 所在翻译域,为 None 时使用资源的翻译域.
        relevance: 相关性判定,返回 True 表示继续,返回字符串表示用该翻译键提示.

    """

    name: str
    label: str
    handler: BatchHandler
    ask_confirmation: bool = True
    translation_domain: str | None = None
    relevance: RelevancePredicate = default_relevance


class BatchActionRegistry:
    """批量操作注册表,处理函数在注册时即校验."""

    def __init__(self, specs: tuple[BatchActionSpec, ...] = ()) -> None:
        self._specs: dict[str, BatchActionSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: BatchActionSpec) -> BatchActionSpec:
        """注册批量操作,同名操作会被覆盖.

        Raises:
            MissingBatchHandlerError: 处理函数不可调用时抛出.

        """
        if not callable(spec.handler):
            raise MissingBatchHandlerError(
                f"批量操作 {spec.name} 缺少可调用的处理函数",
                extra={"batch_action": spec.name},
            )
        self._specs[spec.name] = spec
        return spec

    def get(self, name: str) -> BatchActionSpec:
        """按名称取批量操作.

        Raises:
            UndefinedBatchActionError: 未注册时抛出.

        """
        spec = self._specs.get(name)
        if spec is None:
            raise UndefinedBatchActionError(
                f"批量操作 {name!r} 未定义",
                extra={"batch_action": name, "registered": sorted(self._specs)},
            )
        return spec

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __iter__(self) -> Iterator[BatchActionSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)


@dataclass(frozen=True, slots=True)
class BatchExecution:
    """交给批量处理函数的执行上下文.

    query 为 None 表示没有可操作的数据集.
    """

    context: ResourceContext
    collaborators: AdminCollaborators
    request: ActionRequest
    batch: BatchRequest
    datagrid: Datagrid
    query: ProxyQuery | None

    def list_redirect(self) -> Redirected:
        """重定向回列表页并保留当前过滤条件."""
        return Redirected(self.context.generate_url("list", **self.datagrid.filter_parameters()))

    def flash(self, category: str, key: str, params: Mapping[str, object] | None = None) -> None:
        """写入反馈,插值参数与单对象动作一样做 HTML 转义."""
        message = self.collaborators.translator.trans(key, escape_params(params), AdminMessageKeys.DOMAIN)
        self.collaborators.feedback.add(category, message)


def batch_delete_handler(execution: BatchExecution) -> ActionResult:
    """内置的批量删除.

    Raises:
        AuthorizationError: 无 batch_delete 权限时抛出.

    """
    context = execution.context
    context.check_access("batch_delete")

    if execution.query is None:
        execution.flash(FlashCategory.INFO, AdminMessageKeys.BATCH_EMPTY)
        return execution.list_redirect()

    result = execution.collaborators.model_manager.batch_delete(context.managed_class, execution.query)
    if isinstance(result, Persisted):
        log_info(
            "批量删除完成",
            module="admin",
            resource=context.name,
            action="batch_delete",
            affected=result.affected,
        )
        execution.flash(FlashCategory.SUCCESS, AdminMessageKeys.BATCH_DELETE_SUCCESS)
        return execution.list_redirect()

    if isinstance(result, PersistenceFailure):
        ExceptionTranslator(debug=execution.collaborators.debug).translate(
            result.error,
            resource=context.name,
            action="batch_delete",
        )
    execution.flash(FlashCategory.ERROR, AdminMessageKeys.BATCH_DELETE_ERROR)
    return execution.list_redirect()


def default_batch_actions() -> BatchActionRegistry:
    """资源默认启用的批量操作,目前只有删除."""
    return BatchActionRegistry(
        (
            BatchActionSpec(
                name="delete",
                label="action_delete",
                handler=batch_delete_handler,
                ask_confirmation=True,
            ),
        ),
    )
