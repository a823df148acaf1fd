# tests/unit/admin/conftest.py
"""后台编排层测试专用 fixtures.

所有协作方都是记录调用的桩对象,编排组件通过 `AdminHarness` 按需构造.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, cast

import pytest

from adminflow.admin.acl import AclEditor
from adminflow.admin.batch import BatchActionDispatcher
from adminflow.admin.collaborators import AdminCollaborators
from adminflow.admin.export import ExportAction
from adminflow.admin.history import HistoryComparator
from adminflow.admin.orchestrator import ActionOrchestrator
from adminflow.admin.persistence import Persisted
from adminflow.admin.request import ActionRequest
from adminflow.admin.resource import AdminResource, ResourceContext


class Article:
    def __init__(self, id: int | None = None, title: str = "") -> None:  # noqa: A002
        self.id = id
        self.title = title

    def __str__(self) -> str:
        return self.title


def build_url(route: str, params) -> str:  # type: ignore[no-untyped-def]
    if not params:
        return f"/{route}"
    query = "&".join(f"{key}={value}" for key, value in sorted(params.items()))
    return f"/{route}?{query}"


class _StubQuery:
    def __init__(self) -> None:
        self.first_result: int | None = None
        self.max_results: int | None = None
        self.ids: list[str] | None = None

    def set_first_result(self, offset: int | None) -> None:
        self.first_result = offset

    def set_max_results(self, limit: int | None) -> None:
        self.max_results = limit


class _StubDatagrid:
    def __init__(self) -> None:
        self.query = _StubQuery()
        self.pager_builds = 0
        self.filters = {"filter[title]": "news"}

    def filter_parameters(self):  # type: ignore[no-untyped-def]
        return dict(self.filters)

    def build_pager(self) -> None:
        self.pager_builds += 1
        self.query.set_first_result(0)
        self.query.set_max_results(25)

    def get_query(self) -> _StubQuery:
        return self.query

    def get_form_view(self) -> str:
        return "datagrid-form"

    def get_results(self) -> list[object]:
        return []


class _StubModelManager:
    def __init__(self) -> None:
        self.objects: dict[str, object] = {}
        self.created: list[object] = []
        self.updated: list[object] = []
        self.deleted: list[object] = []
        self.batch_deleted: list[_StubQuery] = []
        self.create_result: object | None = None
        self.update_result: object | None = None
        self.delete_result: object | None = None
        self.batch_delete_result: object | None = None
        self.rows: list[dict[str, object]] = []
        self.iterated_fields: list[tuple[str, ...]] = []
        self._next_id = 100

    def find(self, _model_class: type, object_id: str) -> object | None:
        return self.objects.get(object_id)

    def create(self, subject):  # type: ignore[no-untyped-def]
        self.created.append(subject)
        if self.create_result is not None:
            return self.create_result
        if subject.id is None:
            subject.id = self._next_id
        return Persisted(subject=subject)

    def update(self, subject):  # type: ignore[no-untyped-def]
        self.updated.append(subject)
        if self.update_result is not None:
            return self.update_result
        return Persisted(subject=subject)

    def delete(self, subject):  # type: ignore[no-untyped-def]
        self.deleted.append(subject)
        if self.delete_result is not None:
            return self.delete_result
        return Persisted()

    def batch_delete(self, _model_class: type, query: _StubQuery):  # type: ignore[no-untyped-def]
        self.batch_deleted.append(query)
        if self.batch_delete_result is not None:
            return self.batch_delete_result
        return Persisted(affected=len(query.ids or []))

    def add_identifiers_to_query(self, _model_class: type, query: _StubQuery, ids) -> None:  # type: ignore[no-untyped-def]
        query.ids = list(ids)

    def get_identifier(self, subject) -> str | None:  # type: ignore[no-untyped-def]
        identifier = getattr(subject, "id", None)
        return None if identifier is None else str(identifier)

    def iterate_rows(self, _query: _StubQuery, fields):  # type: ignore[no-untyped-def]
        self.iterated_fields.append(tuple(fields))
        return iter(self.rows)


class _StubTranslator:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, str], str | None]] = []

    def trans(self, key: str, params=None, domain: str | None = None) -> str:  # type: ignore[no-untyped-def]
        self.calls.append((key, dict(params or {}), domain))
        return key


class _StubFeedback:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def add(self, category: str, message: str) -> None:
        self.messages.append((category, message))


class _StubCsrf:
    def get_token(self, intention: str) -> str:
        return f"token-{intention}"

    def is_token_valid(self, intention: str, token: str | None) -> bool:
        return token == f"token-{intention}"


class _StubBoundForm:
    def __init__(self, subject: object, request: ActionRequest, valid: bool) -> None:
        self._subject = subject
        self._valid = valid
        self.submitted = request.rest_method == "POST"
        self.validated = False

    @property
    def data(self) -> object:
        return self._subject

    @property
    def errors(self) -> dict[str, list[str]]:
        return {} if self._valid else {"title": ["标题不能为空"]}

    def validate(self) -> bool:
        self.validated = True
        return self._valid

    def create_view(self) -> str:
        return "form-view"


class _StubFormBinder:
    def __init__(self) -> None:
        self.valid = True
        self.bound: list[_StubBoundForm] = []

    def bind(self, subject: object, request: ActionRequest) -> _StubBoundForm:
        form = _StubBoundForm(subject, request, self.valid)
        self.bound.append(form)
        return form


@dataclass
class AdminHarness:
    """一组桩协作方与可替换的资源定义."""

    resource: AdminResource
    manager: _StubModelManager
    translator: _StubTranslator
    feedback: _StubFeedback
    csrf: _StubCsrf | None
    datagrid: _StubDatagrid
    binder: _StubFormBinder
    debug: bool = False
    audit_manager: object | None = None
    exporter: object | None = None
    acl: object | None = None

    def configure(self, **changes: object) -> None:
        self.resource = replace(self.resource, **changes)

    @property
    def collaborators(self) -> AdminCollaborators:
        return AdminCollaborators(
            model_manager=cast(Any, self.manager),
            translator=cast(Any, self.translator),
            feedback=cast(Any, self.feedback),
            csrf=cast(Any, self.csrf),
            audit_manager=cast(Any, self.audit_manager),
            exporter=cast(Any, self.exporter),
            acl=cast(Any, self.acl),
            debug=self.debug,
        )

    def context(self, request: ActionRequest | None = None) -> ResourceContext:
        return ResourceContext.resolve(self.resource, request or ActionRequest.build(), build_url)

    def orchestrator(self, request: ActionRequest) -> ActionOrchestrator:
        return ActionOrchestrator(self.context(request), self.collaborators)

    def dispatcher(self, request: ActionRequest) -> BatchActionDispatcher:
        return BatchActionDispatcher(self.context(request), self.collaborators)

    def history(self, request: ActionRequest) -> HistoryComparator:
        return HistoryComparator(self.context(request), self.collaborators)

    def exporter_action(self, request: ActionRequest) -> ExportAction:
        return ExportAction(self.context(request), self.collaborators)

    def acl_editor(self, request: ActionRequest) -> AclEditor:
        return AclEditor(self.context(request), self.collaborators)


@pytest.fixture
def harness() -> AdminHarness:
    """默认资源: 文章,已存在 id=1 的对象,启用桩 CSRF."""
    manager = _StubModelManager()
    manager.objects["1"] = Article(1, "Hello <b>")
    datagrid = _StubDatagrid()
    binder = _StubFormBinder()
    resource = AdminResource(
        name="article",
        model_class=Article,
        form_binder=cast(Any, binder),
        datagrid_factory=lambda _context, _request: cast(Any, datagrid),
        label="文章",
        show_fields=("title",),
    )
    return AdminHarness(
        resource=resource,
        manager=manager,
        translator=_StubTranslator(),
        feedback=_StubFeedback(),
        csrf=_StubCsrf(),
        datagrid=datagrid,
        binder=binder,
    )
