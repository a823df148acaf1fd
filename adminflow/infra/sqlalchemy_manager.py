"""SQLAlchemy 持久化适配器与 datagrid.

- 写操作统一提交事务,把异常转换为判别结果: 乐观锁冲突(StaleDataError) →
  LockConflict,约束冲突(IntegrityError) → ValidationConflict,其他 SQLAlchemyError →
  PersistenceFailure.失败时回滚会话.
- 乐观锁由模型的 `version_id_col` 提供.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from adminflow.admin.persistence import LockConflict, Persisted, PersistenceFailure, ValidationConflict
from adminflow.constants import RequestMarkers
from adminflow.utils.payload_converters import as_optional_str
from adminflow.utils.structlog_config import log_warning

if TYPE_CHECKING:
    from sqlalchemy.orm import Query, Session
    from sqlalchemy.sql.elements import ColumnElement

    from adminflow.admin.persistence import PersistResult
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.resource import ResourceContext
    from adminflow.types import JsonValue, MutablePayloadDict

DEFAULT_PER_PAGE = 25
MAX_PER_PAGE = 200


class SqlAlchemyProxyQuery:
    """包装 SQLAlchemy Query,分页参数延迟到执行时才应用."""

    def __init__(self, query: Query[Any]) -> None:
        self.query = query
        self.first_result: int | None = None
        self.max_results: int | None = None

    def set_first_result(self, offset: int | None) -> None:
        self.first_result = offset

    def set_max_results(self, limit: int | None) -> None:
        self.max_results = limit

    def filter_in(self, column: ColumnElement[Any], values: Sequence[object]) -> None:
        self.query = self.query.filter(column.in_(values))

    def count(self) -> int:
        return self.query.order_by(None).count()

    def execute(self) -> list[Any]:
        query = self.query
        if self.first_result:
            query = query.offset(self.first_result)
        if self.max_results is not None:
            query = query.limit(self.max_results)
        return query.all()


def _primary_key(model_class: type) -> ColumnElement[Any]:
    return sa_inspect(model_class).primary_key[0]


def _coerce_identifier(model_class: type, raw: str) -> object | None:
    """把路由里的字符串标识转换为主键列的 Python 类型,无法转换时返回 None."""
    column = _primary_key(model_class)
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw
    if python_type is str:
        return raw
    try:
        return python_type(raw)
    except (TypeError, ValueError):
        return None


def _json_safe(value: object) -> JsonValue:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


class SqlAlchemyModelManager:
    """基于会话的持久化协作方.

    Args:
        session: SQLAlchemy 会话,通常为 `db.session`.

    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find(self, model_class: type, object_id: str) -> object | None:
        identifier = _coerce_identifier(model_class, object_id)
        if identifier is None:
            return None
        return self.session.get(model_class, identifier)

    def create(self, subject: object) -> PersistResult:
        self.session.add(subject)
        return self._commit(subject)

    def update(self, subject: object) -> PersistResult:
        self.session.add(subject)
        return self._commit(subject)

    def delete(self, subject: object) -> PersistResult:
        self.session.delete(subject)
        return self._commit(None)

    def batch_delete(self, model_class: type, query: SqlAlchemyProxyQuery) -> PersistResult:
        """逐个删除查询命中的对象,保证 ORM 级联与事件生效."""
        objects = query.execute()
        for item in objects:
            self.session.delete(item)
        return self._commit(None, affected=len(objects))

    def add_identifiers_to_query(self, model_class: type, query: SqlAlchemyProxyQuery, ids: Sequence[str]) -> None:
        coerced = [value for value in (_coerce_identifier(model_class, raw) for raw in ids) if value is not None]
        query.filter_in(_primary_key(model_class), coerced)

    def get_identifier(self, subject: object) -> str | None:
        identity = sa_inspect(subject).identity
        if not identity:
            return None
        return "~".join(str(part) for part in identity)

    def iterate_rows(self, query: SqlAlchemyProxyQuery, fields: Sequence[str]) -> Iterator[dict[str, JsonValue]]:
        for item in query.execute():
            names = list(fields) or [attr.key for attr in sa_inspect(type(item)).column_attrs]
            yield {name: _json_safe(getattr(item, name, None)) for name in names}

    def _commit(self, subject: object | None, *, affected: int = 1) -> PersistResult:
        try:
            self.session.commit()
        except StaleDataError as exc:
            self.session.rollback()
            return LockConflict(detail=str(exc))
        except IntegrityError as exc:
            self.session.rollback()
            log_warning("数据库约束冲突", module="admin", exception=exc)
            return ValidationConflict(detail=str(exc.orig))
        except SQLAlchemyError as exc:
            self.session.rollback()
            return PersistenceFailure(detail=exc.__class__.__name__, error=exc)
        return Persisted(subject=subject, affected=affected)


@dataclass(slots=True)
class DatagridFormView:
    """列表过滤表单."""

    fields: list[str]
    values: dict[str, str]
    page: int
    per_page: int
    total: int = 0
    pages: int = 0


class SqlAlchemyDatagrid:
    """按 `filter[<字段>]`、`page`、`per_page` 过滤与分页的 datagrid.

    字符串列使用包含匹配,其余列使用等值匹配.
    """

    def __init__(
        self,
        session: Session,
        model_class: type,
        request: ActionRequest,
        *,
        filter_fields: Sequence[str] = (),
        per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        self.session = session
        self.model_class = model_class
        self.filter_fields = tuple(filter_fields)
        self.filters = self._read_filters(request)
        self.page = max(self._read_int(request, "page", 1), 1)
        self.per_page = min(max(self._read_int(request, "per_page", per_page), 1), MAX_PER_PAGE)
        self._default_per_page = per_page
        self._query: SqlAlchemyProxyQuery | None = None
        self._pager_built = False
        self.total = 0

    @classmethod
    def factory(
        cls,
        session: Session,
        *,
        filter_fields: Sequence[str] = (),
        per_page: int = DEFAULT_PER_PAGE,
    ) -> Callable[[ResourceContext, ActionRequest], SqlAlchemyDatagrid]:
        """生成 `AdminResource.datagrid_factory` 需要的工厂函数."""

        def build(context: ResourceContext, request: ActionRequest) -> SqlAlchemyDatagrid:
            return cls(session, context.managed_class, request, filter_fields=filter_fields, per_page=per_page)

        return build

    def _read_filters(self, request: ActionRequest) -> dict[str, str]:
        filters: dict[str, str] = {}
        for name in self.filter_fields:
            value = as_optional_str(request.get(f"{RequestMarkers.FILTER}[{name}]"))
            if value is not None:
                filters[name] = value
        return filters

    @staticmethod
    def _read_int(request: ActionRequest, key: str, default: int) -> int:
        raw = request.args.get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            return default

    def filter_parameters(self) -> MutablePayloadDict:
        params: MutablePayloadDict = {
            f"{RequestMarkers.FILTER}[{name}]": value for name, value in self.filters.items()
        }
        if self.page > 1:
            params["page"] = self.page
        if self.per_page != self._default_per_page:
            params["per_page"] = self.per_page
        return params

    def get_query(self) -> SqlAlchemyProxyQuery:
        if self._query is None:
            query = self.session.query(self.model_class)
            for name, value in self.filters.items():
                column = getattr(self.model_class, name)
                if column.type.python_type is str:
                    query = query.filter(column.contains(value))
                else:
                    query = query.filter(column == value)
            self._query = SqlAlchemyProxyQuery(query.order_by(_primary_key(self.model_class)))
        return self._query

    def build_pager(self) -> None:
        if self._pager_built:
            return
        query = self.get_query()
        self.total = query.count()
        query.set_first_result((self.page - 1) * self.per_page)
        query.set_max_results(self.per_page)
        self._pager_built = True

    def get_results(self) -> list[Any]:
        self.build_pager()
        return self.get_query().execute()

    def get_form_view(self) -> DatagridFormView:
        self.build_pager()
        return DatagridFormView(
            fields=list(self.filter_fields),
            values=dict(self.filters),
            page=self.page,
            per_page=self.per_page,
            total=self.total,
            pages=math.ceil(self.total / self.per_page) if self.total else 0,
        )
