"""后台流程依赖的外部协作方接口.

编排层只通过这里声明的最小协议访问存储、表单、翻译、CSRF、审计与导出能力,
协作方在构造时以 `AdminCollaborators` 一次性注入,不做全局查找.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from adminflow.admin.persistence import PersistResult
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.values import Revision
    from adminflow.types import FormErrorMapping, JsonValue, MutablePayloadDict


class ProxyQuery(Protocol):
    """datagrid 背后的查询对象."""

    def set_first_result(self, offset: int | None) -> None: ...

    def set_max_results(self, limit: int | None) -> None: ...


class Datagrid(Protocol):
    """过滤与分页的查询抽象."""

    def filter_parameters(self) -> MutablePayloadDict: ...

    def build_pager(self) -> None: ...

    def get_query(self) -> ProxyQuery: ...

    def get_form_view(self) -> object: ...

    def get_results(self) -> Sequence[object]: ...


class ModelManager(Protocol):
    """持久化协作方.写操作返回判别结果而不是抛出异常."""

    def find(self, model_class: type, object_id: str) -> object | None: ...

    def create(self, subject: object) -> PersistResult: ...

    def update(self, subject: object) -> PersistResult: ...

    def delete(self, subject: object) -> PersistResult: ...

    def batch_delete(self, model_class: type, query: ProxyQuery) -> PersistResult: ...

    def add_identifiers_to_query(self, model_class: type, query: ProxyQuery, ids: Sequence[str]) -> None: ...

    def get_identifier(self, subject: object) -> str | None: ...

    def iterate_rows(self, query: ProxyQuery, fields: Sequence[str]) -> Iterator[dict[str, JsonValue]]: ...


class BoundForm(Protocol):
    """已绑定请求数据的表单."""

    @property
    def submitted(self) -> bool: ...

    @property
    def data(self) -> object: ...

    @property
    def errors(self) -> FormErrorMapping: ...

    def validate(self) -> bool: ...

    def create_view(self) -> object: ...


class FormBinder(Protocol):
    """把请求绑定到主体对象上的表单工厂."""

    def bind(self, subject: object, request: ActionRequest) -> BoundForm: ...


class Translator(Protocol):
    def trans(
        self,
        key: str,
        params: Mapping[str, str] | None = None,
        domain: str | None = None,
    ) -> str: ...


class CsrfTokenManager(Protocol):
    """按用途签发与校验 CSRF 令牌."""

    def get_token(self, intention: str) -> str: ...

    def is_token_valid(self, intention: str, token: str | None) -> bool: ...


class FeedbackSink(Protocol):
    """会话级反馈消息(下一次页面加载时展示)."""

    def add(self, category: str, message: str) -> None: ...


class AuditReader(Protocol):
    """某一模型类型的历史版本读取器."""

    def find_revisions(self, model_class: type, object_id: str) -> list[Revision]: ...

    def find(self, model_class: type, object_id: str, revision_id: str) -> Revision | None: ...


class AuditManager(Protocol):
    def has_reader(self, model_class: type) -> bool: ...

    def get_reader(self, model_class: type) -> AuditReader: ...


class Exporter(Protocol):
    """把数据行写成指定格式的文件内容."""

    def export(self, fmt: str, rows: Iterable[Mapping[str, JsonValue]]) -> tuple[str, str]: ...


class AclManipulator(Protocol):
    """对象级访问控制列表的读写."""

    def permissions(self) -> Sequence[str]: ...

    def list_users(self) -> Sequence[str]: ...

    def list_roles(self) -> Sequence[str]: ...

    def get_grants(self, model_class: type, object_id: str) -> dict[str, list[str]]: ...

    def update_grants(self, model_class: type, object_id: str, grants: Mapping[str, Sequence[str]]) -> None: ...


@dataclass(frozen=True, slots=True)
class AdminCollaborators:
    """注入给编排层的协作方集合.

    Attributes:
        model_manager: 持久化协作方.
        translator: 翻译器.
        feedback: 会话级反馈.
        csrf: CSRF 令牌管理器,为 None 时跳过校验.
        audit_manager: 审计管理器,为 None 时历史相关动作一律 404.
        exporter: 导出器,为 None 时导出动作 404.
        acl: ACL 读写器.
        debug: 调试模式,持久化异常会被重新抛出.

    """

    model_manager: ModelManager
    translator: Translator
    feedback: FeedbackSink
    csrf: CsrfTokenManager | None = None
    audit_manager: AuditManager | None = None
    exporter: Exporter | None = None
    acl: AclManipulator | None = None
    debug: bool = False
