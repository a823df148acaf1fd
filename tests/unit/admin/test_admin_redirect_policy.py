from __future__ import annotations

import pytest

from adminflow.admin.redirects import resolve_redirect
from adminflow.admin.request import ActionRequest


class _News:
    pass


@pytest.mark.unit
@pytest.mark.parametrize("button", ["btn_update_and_list", "btn_create_and_list"])
def test_and_list_buttons_go_to_list(harness, button) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("POST", form={button: ""})
    subject = harness.manager.objects["1"]

    assert resolve_redirect(harness.context(request), request, subject, "1") == "/list"


@pytest.mark.unit
def test_create_and_create_keeps_active_subclass(harness) -> None:  # type: ignore[no-untyped-def]
    harness.configure(subclasses={"news": _News})
    request = ActionRequest.build("POST", args={"subclass": "news"}, form={"btn_create_and_create": ""})

    assert resolve_redirect(harness.context(request), request, _News(), "5") == "/create?subclass=news"

    plain = ActionRequest.build("POST", form={"btn_create_and_create": ""})
    assert resolve_redirect(harness.context(plain), plain, _News(), "5") == "/create"


@pytest.mark.unit
def test_deleted_goes_to_list(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("POST")

    assert resolve_redirect(harness.context(request), request, None, None, deleted=True) == "/list"

    override = ActionRequest.build("POST", form={"_method": "DELETE"})
    subject = harness.manager.objects["1"]
    assert resolve_redirect(harness.context(override), override, subject, "1") == "/list"


@pytest.mark.unit
def test_prefers_edit_then_show(harness) -> None:  # type: ignore[no-untyped-def]
    request = ActionRequest.build("POST")
    subject = harness.manager.objects["1"]

    assert resolve_redirect(harness.context(request), request, subject, "1") == "/edit?id=1"

    harness.configure(access_checker=lambda action, _subject=None: action != "edit")
    assert resolve_redirect(harness.context(request), request, subject, "1") == "/show?id=1"

    harness.configure(access_checker=lambda _action, _subject=None: False)
    assert resolve_redirect(harness.context(request), request, subject, "1") == "/list"


@pytest.mark.unit
def test_disabled_routes_are_skipped(harness) -> None:  # type: ignore[no-untyped-def]
    harness.configure(routes=frozenset({"list", "show"}), id_parameter="slug")
    request = ActionRequest.build("POST")
    subject = harness.manager.objects["1"]

    assert resolve_redirect(harness.context(request), request, subject, "1") == "/show?slug=1"
