from __future__ import annotations

import pytest

from adminflow.admin.persistence import PersistenceFailure
from adminflow.admin.request import ActionRequest
from adminflow.admin.results import JsonReply, Redirected, Rendered
from adminflow.constants import FlashCategory
from adminflow.errors import AuthorizationError, CsrfInvalidError, NotFoundError


def _deny(action_name: str):  # type: ignore[no-untyped-def]
    def _checker(action: str, _subject: object | None = None) -> bool:
        return action != action_name

    return _checker


@pytest.mark.unit
def test_delete_without_access_never_touches_persistence(harness) -> None:  # type: ignore[no-untyped-def]
    harness.configure(access_checker=_deny("delete"))
    request = ActionRequest.build("POST", form={"_csrf_token": "token-delete"})

    with pytest.raises(AuthorizationError) as excinfo:
        harness.orchestrator(request).handle_delete(request, "1")

    assert excinfo.value.status_code == 403
    assert harness.manager.deleted == []


@pytest.mark.unit
def test_delete_missing_object_raises_not_found_with_identifier(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("GET")

    with pytest.raises(NotFoundError) as excinfo:
        harness.orchestrator(request).handle_delete(request, "42")

    assert "42" in excinfo.value.message


@pytest.mark.unit
def test_get_delete_renders_confirmation_with_token(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("GET")
    result = harness.orchestrator(request).handle_delete(request, "1")

    assert isinstance(result, Rendered)
    assert result.template == "admin/delete.html"
    assert result.context["csrf_token"] == "token-delete"
    assert harness.manager.deleted == []


@pytest.mark.unit
def test_delete_with_invalid_token_is_rejected(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("POST", form={"_csrf_token": "token-batch"})

    with pytest.raises(CsrfInvalidError):
        harness.orchestrator(request).handle_delete(request, "1")

    assert harness.manager.deleted == []


@pytest.mark.unit
def test_delete_success_flashes_and_redirects_to_list(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("POST", form={"_csrf_token": "token-delete"})
    result = harness.orchestrator(request).handle_delete(request, "1")

    assert result == Redirected("/list")
    assert len(harness.manager.deleted) == 1
    assert harness.feedback.messages == [(FlashCategory.SUCCESS, "flash_delete_success")]


@pytest.mark.unit
def test_delete_method_override_executes_delete(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("POST", form={"_method": "DELETE", "_csrf_token": "token-delete"})
    result = harness.orchestrator(request).handle_delete(request, "1")

    assert result == Redirected("/list")
    assert len(harness.manager.deleted) == 1


@pytest.mark.unit
def test_xhr_delete_answers_json(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("POST", form={"_csrf_token": "token-delete", "_xml_http_request": "1"})
    result = harness.orchestrator(request).handle_delete(request, "1")

    assert result == JsonReply({"result": "ok"})
    assert harness.feedback.messages == []

    harness.manager.delete_result = PersistenceFailure(detail="IntegrityError", error=RuntimeError("fk"))
    result = harness.orchestrator(request).handle_delete(request, "1")

    assert result == JsonReply({"result": "error"})
    assert harness.feedback.messages == []


@pytest.mark.unit
def test_delete_failure_flashes_error(harness) -> None:  # type: ignore[no-untyped-def]
    harness.manager.delete_result = PersistenceFailure(detail="IntegrityError", error=RuntimeError("fk"))
    request = ActionRequest.build("POST", form={"_csrf_token": "token-delete"})
    result = harness.orchestrator(request).handle_delete(request, "1")

    assert result == Redirected("/list")
    assert harness.feedback.messages == [(FlashCategory.ERROR, "flash_delete_error")]


@pytest.mark.unit
def test_delete_skips_token_check_without_csrf_manager(harness) -> None:  # type: ignore[no-untyped-def]
    harness.csrf = None
    request = ActionRequest.build("DELETE")
    result = harness.orchestrator(request).handle_delete(request, "1")

    assert result == Redirected("/list")


@pytest.mark.unit
def test_list_renders_datagrid_and_batch_token(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("GET", args={"_list_mode": "mosaic", "uniqid": "s1"})
    orchestrator = harness.orchestrator(request)
    result = orchestrator.handle_list(request)

    assert isinstance(result, Rendered)
    assert result.template == "admin/list.html"
    assert result.context["form"] == "datagrid-form"
    assert result.context["csrf_token"] == "token-batch"
    assert result.context["list_mode"] == "mosaic"
    assert result.context["export_formats"] == ("csv", "json")
    assert [spec.name for spec in result.context["batch_actions"]] == ["delete"]
    assert orchestrator.context.uniqid == "s1"


@pytest.mark.unit
def test_list_requires_access(harness) -> None:  # type: ignore[no-untyped-def]
    harness.configure(access_checker=_deny("list"))
    request = ActionRequest.build("GET")

    with pytest.raises(AuthorizationError):
        harness.orchestrator(request).handle_list(request)


@pytest.mark.unit
def test_show_renders_configured_elements(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("GET")
    result = harness.orchestrator(request).handle_show(request, "1")

    assert isinstance(result, Rendered)
    assert result.template == "admin/show.html"
    assert result.context["elements"] == [("title", "Hello <b>")]


@pytest.mark.unit
def test_custom_template_overrides_default(harness) -> None:  # type: ignore[no-untyped-def]
    harness.configure(templates={"show": "custom/article_show.html"})
    request = ActionRequest.build("GET")
    result = harness.orchestrator(request).handle_show(request, "1")

    assert isinstance(result, Rendered)
    assert result.template == "custom/article_show.html"
    assert result.context["base_template"] == "admin/layout.html"
