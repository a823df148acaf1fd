from __future__ import annotations

import pytest

from adminflow.admin.persistence import LockConflict, PersistenceFailure, ValidationConflict
from adminflow.admin.request import ActionRequest
from adminflow.admin.results import JsonReply, Redirected, Rendered
from adminflow.constants import FlashCategory

XHR_HEADERS = {"X-Requested-With": "XMLHttpRequest"}


def _post(form=None, *, xhr: bool = False) -> ActionRequest:  # type: ignore[no-untyped-def]
    return ActionRequest.build("POST", form=form or {"title": "x"}, headers=XHR_HEADERS if xhr else None)


@pytest.mark.unit
def test_xhr_edit_success_returns_json_without_feedback(harness) -> None:  # type: ignore[no-untyped-def]
    result = harness.orchestrator(_post(xhr=True)).handle_edit(_post(xhr=True), "1")

    assert isinstance(result, JsonReply)
    assert result.payload == {"result": "ok", "objectId": "1", "objectName": "Hello &lt;b&gt;"}
    assert result.status == 200
    assert harness.feedback.messages == []
    assert len(harness.manager.updated) == 1


@pytest.mark.unit
def test_edit_success_flashes_and_redirects_to_edit(harness) -> None:  # type: ignore[no-untyped-def]
    request = _post()
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert result == Redirected("/edit?id=1")
    assert harness.feedback.messages == [(FlashCategory.SUCCESS, "flash_edit_success")]
    key, params, domain = harness.translator.calls[-1]
    assert key == "flash_edit_success"
    assert params == {"name": "Hello &lt;b&gt;"}
    assert domain == "admin"


@pytest.mark.unit
def test_get_edit_renders_form_without_persisting(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("GET")
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert isinstance(result, Rendered)
    assert result.template == "admin/edit.html"
    assert result.context["base_template"] == "admin/layout.html"
    assert result.context["form"] == "form-view"
    assert result.context["object_id"] == "1"
    assert harness.manager.updated == []
    assert harness.binder.bound[0].validated is False


@pytest.mark.unit
def test_invalid_form_rerenders_with_error_feedback(harness) -> None:  # type: ignore[no-untyped-def]
    harness.binder.valid = False
    request = _post()
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert isinstance(result, Rendered)
    assert result.template == "admin/edit.html"
    assert result.context["errors"] == {"title": ["标题不能为空"]}
    assert harness.manager.updated == []
    assert harness.feedback.messages == [(FlashCategory.ERROR, "flash_edit_error")]


@pytest.mark.unit
def test_invalid_xhr_submission_has_no_feedback(harness) -> None:  # type: ignore[no-untyped-def]
    harness.binder.valid = False
    request = _post(xhr=True)
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert isinstance(result, Rendered)
    assert result.context["base_template"] == "admin/ajax_layout.html"
    assert harness.feedback.messages == []


@pytest.mark.unit
def test_pre_validate_hook_runs_before_validation(harness) -> None:  # type: ignore[no-untyped-def]
    from adminflow.admin.resource import AdminHooks

    seen: list[bool] = []

    class _Hooks(AdminHooks):
        def pre_validate(self, subject: object) -> None:
            seen.append(harness.binder.bound[-1].validated)
            subject.title = "adjusted"  # type: ignore[attr-defined]

    harness.configure(hooks=_Hooks())
    request = _post()
    harness.orchestrator(request).handle_edit(request, "1")

    assert seen == [False]
    assert harness.manager.updated[0].title == "adjusted"


@pytest.mark.unit
def test_lock_conflict_flashes_reload_link_and_keeps_form_valid(harness) -> None:  # type: ignore[no-untyped-def]
    harness.manager.update_result = LockConflict(detail="stale version")
    request = _post()
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert isinstance(result, Rendered)
    assert result.template == "admin/edit.html"
    # 只有锁冲突提示,没有通用的编辑失败提示
    assert harness.feedback.messages == [(FlashCategory.ERROR, "flash_lock_error")]
    key, params, _domain = harness.translator.calls[-1]
    assert key == "flash_lock_error"
    assert params["link_start"] == '<a href="/edit?id=1">'
    assert params["link_end"] == "</a>"
    assert params["name"] == "Hello &lt;b&gt;"


@pytest.mark.unit
def test_lock_conflict_on_xhr_has_no_feedback(harness) -> None:  # type: ignore[no-untyped-def]
    harness.manager.update_result = LockConflict(detail="stale version")
    request = _post(xhr=True)
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert isinstance(result, Rendered)
    assert harness.feedback.messages == []


@pytest.mark.unit
def test_validation_conflict_marks_form_invalid(harness) -> None:  # type: ignore[no-untyped-def]
    harness.manager.update_result = ValidationConflict(detail="UNIQUE constraint failed", field="title")
    request = _post()
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert isinstance(result, Rendered)
    assert harness.feedback.messages == [(FlashCategory.ERROR, "flash_edit_error")]


@pytest.mark.unit
def test_persistence_failure_is_logged_outside_debug(harness, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    logged: list[dict[str, object]] = []

    def _record(message: str, module: str = "app", exception=None, **kwargs) -> None:  # type: ignore[no-untyped-def]
        logged.append({"message": message, "module": module, "exception": exception, **kwargs})

    monkeypatch.setattr("adminflow.admin.exception_translator.log_error", _record)
    error = RuntimeError("connection lost")
    harness.manager.update_result = PersistenceFailure(detail="OperationalError", error=error)
    request = _post()
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert isinstance(result, Rendered)
    assert harness.feedback.messages == [(FlashCategory.ERROR, "flash_edit_error")]
    assert logged[0]["exception"] is error
    assert logged[0]["resource"] == "article"
    assert logged[0]["action"] == "edit"


@pytest.mark.unit
def test_persistence_failure_is_reraised_in_debug(harness) -> None:  # type: ignore[no-untyped-def]
    harness.debug = True
    harness.manager.update_result = PersistenceFailure(detail="OperationalError", error=RuntimeError("boom"))
    request = _post()

    with pytest.raises(RuntimeError, match="boom"):
        harness.orchestrator(request).handle_edit(request, "1")


@pytest.mark.unit
def test_create_persists_new_instance_and_redirects(harness) -> None:  # type: ignore[no-untyped-def]
    request = _post({"title": "new", "btn_create_and_list": ""})
    result = harness.orchestrator(request).handle_create(request)

    assert result == Redirected("/list")
    assert len(harness.manager.created) == 1
    assert harness.feedback.messages == [(FlashCategory.SUCCESS, "flash_create_success")]


@pytest.mark.unit
def test_create_rechecks_access_with_submitted_subject(harness) -> None:  # type: ignore[no-untyped-def]
    from adminflow.errors import AuthorizationError

    checks: list[tuple[str, object | None]] = []

    def _checker(action: str, subject: object | None = None) -> bool:
        checks.append((action, subject))
        return subject is None

    harness.configure(access_checker=_checker)
    request = _post()

    with pytest.raises(AuthorizationError):
        harness.orchestrator(request).handle_create(request)

    assert [action for action, _subject in checks] == ["create", "create"]
    assert harness.manager.created == []


@pytest.mark.unit
def test_create_lock_conflict_is_reported_as_failure(harness) -> None:  # type: ignore[no-untyped-def]
    harness.manager.create_result = LockConflict(detail="stale")
    request = _post()
    result = harness.orchestrator(request).handle_create(request)

    assert isinstance(result, Rendered)
    assert harness.feedback.messages == [(FlashCategory.ERROR, "flash_create_error")]


@pytest.mark.unit
def test_abstract_managed_class_renders_subclass_selection(harness) -> None:  # type: ignore[no-untyped-def]
    class Content:
        __abstract__ = True

    class News(Content):
        def __init__(self) -> None:
            self.id = None
            self.title = ""

    harness.configure(model_class=Content, subclasses={"news": News})
    request = ActionRequest.build("GET")
    result = harness.orchestrator(request).handle_create(request)

    assert isinstance(result, Rendered)
    assert result.template == "admin/select_subclass.html"
    assert result.context["subclasses"] == ["news"]
    assert harness.binder.bound == []

    request = ActionRequest.build("GET", args={"subclass": "news"})
    result = harness.orchestrator(request).handle_create(request)

    assert isinstance(result, Rendered)
    assert result.template == "admin/edit.html"
    assert isinstance(harness.binder.bound[-1].data, News)


@pytest.mark.unit
def test_pre_edit_hook_short_circuits(harness) -> None:  # type: ignore[no-untyped-def]
    from adminflow.admin.resource import AdminHooks

    class _Hooks(AdminHooks):
        def pre_edit(self, request, subject):  # type: ignore[no-untyped-def]
            return Redirected("/elsewhere")

    harness.configure(hooks=_Hooks())
    request = _post()
    result = harness.orchestrator(request).handle_edit(request, "1")

    assert result == Redirected("/elsewhere")
    assert harness.binder.bound == []
    assert harness.manager.updated == []
