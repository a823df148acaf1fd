"""单对象动作编排: 列表、新建、编辑、展示、删除.

新建与编辑共用一条提交流程:

    绑定 → 校验前钩子 → 校验 → (预览) → 持久化 → 跳转/JSON 应答/重新渲染

持久化只在表单有效且预览状态机给出 READY_TO_PERSIST 时发生.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from markupsafe import Markup, escape

from adminflow.admin.base import AdminActionBase
from adminflow.admin.exception_translator import ExceptionTranslator
from adminflow.admin.persistence import LockConflict, Persisted, PersistenceFailure, ValidationConflict
from adminflow.admin.preview import PreviewStage, read_preview_signal, resolve_preview_stage
from adminflow.admin.redirects import resolve_redirect
from adminflow.admin.results import Redirected, json_error, json_ok
from adminflow.admin.values import FormSubmission
from adminflow.constants import AdminMessageKeys, CsrfIntention, FlashCategory, HttpMethod
from adminflow.utils.structlog_config import log_info, log_warning

if TYPE_CHECKING:
    from adminflow.admin.collaborators import AdminCollaborators, BoundForm
    from adminflow.admin.persistence import PersistResult
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.resource import ResourceContext
    from adminflow.admin.results import ActionResult

_SUCCESS_KEYS = {"create": AdminMessageKeys.CREATE_SUCCESS, "edit": AdminMessageKeys.EDIT_SUCCESS}
_ERROR_KEYS = {"create": AdminMessageKeys.CREATE_ERROR, "edit": AdminMessageKeys.EDIT_ERROR}


class ActionOrchestrator(AdminActionBase):
    """驱动单对象动作,产出渲染、重定向或 JSON 指令."""

    def __init__(self, context: ResourceContext, collaborators: AdminCollaborators) -> None:
        super().__init__(context, collaborators)
        self.exception_translator = ExceptionTranslator(debug=collaborators.debug)

    # ------------------------------------------------------------------ #
    # 列表与展示
    # ------------------------------------------------------------------ #
    def handle_list(self, request: ActionRequest) -> ActionResult:
        """列表页."""
        self.context.check_access("list")
        intercepted = self.context.hooks.pre_list(request)
        if intercepted is not None:
            return intercepted

        datagrid = self.context.create_datagrid(request)
        return self.render(
            "list",
            request,
            action="list",
            datagrid=datagrid,
            form=datagrid.get_form_view(),
            csrf_token=self.csrf_token(CsrfIntention.BATCH),
            batch_actions=list(self.context.batch_actions),
            export_formats=self.context.resource.export_formats,
            list_mode=self.context.list_mode,
        )

    def handle_show(self, request: ActionRequest, object_id: str) -> ActionResult:
        subject = self.load_subject(object_id)
        self.context.check_access("show", subject)
        intercepted = self.context.hooks.pre_show(request, subject)
        if intercepted is not None:
            return intercepted

        return self.render(
            "show",
            request,
            action="show",
            object=subject,
            object_id=object_id,
            elements=self.show_elements(subject),
        )

    # ------------------------------------------------------------------ #
    # 新建与编辑
    # ------------------------------------------------------------------ #
    def handle_create(self, request: ActionRequest) -> ActionResult:
        """新建.

        被管理的类是抽象类时渲染子类型选择页,而不是表单.

        Raises:
            AuthorizationError: 无 create 权限.

        """
        self.context.check_access("create")
        if self.context.is_managed_class_abstract():
            return self.render(
                "select_subclass",
                request,
                action="create",
                base_class=self.context.class_name,
                subclasses=sorted(self.context.resource.subclasses),
            )

        subject = self.context.new_instance()
        intercepted = self.context.hooks.pre_create(request, subject)
        if intercepted is not None:
            return intercepted
        return self._handle_submission(request, subject, mode="create")

    def handle_edit(self, request: ActionRequest, object_id: str) -> ActionResult:
        """编辑.

        Raises:
            NotFoundError: 对象不存在.
            AuthorizationError: 无 edit 权限.

        """
        subject = self.load_subject(object_id)
        self.context.check_access("edit", subject)
        intercepted = self.context.hooks.pre_edit(request, subject)
        if intercepted is not None:
            return intercepted
        return self._handle_submission(request, subject, mode="edit", object_id=object_id)

    def _handle_submission(
        self,
        request: ActionRequest,
        subject: object,
        *,
        mode: str,
        object_id: str | None = None,
    ) -> ActionResult:
        form = self.context.resource.form_binder.bind(subject, request)
        template_key = "edit"

        if form.submitted:
            self.context.hooks.pre_validate(subject)
            submission = FormSubmission(
                data=form.data,
                submitted=True,
                valid=form.validate(),
                preview_signal=read_preview_signal(request),
            )
            stage = resolve_preview_stage(
                submission.preview_signal,
                supports_preview=self.context.supports_preview,
            )
            valid = submission.valid

            if valid and stage is PreviewStage.READY_TO_PERSIST:
                directive, valid = self._persist(request, form, mode=mode)
                if directive is not None:
                    return directive

            if not valid:
                if not request.is_xhr:
                    self.add_feedback(
                        FlashCategory.ERROR,
                        _ERROR_KEYS[mode],
                        {"name": self.context.to_string(subject)},
                    )
            elif stage is PreviewStage.RENDER_PREVIEW:
                template_key = "preview"

        return self.render(
            template_key,
            request,
            action=mode,
            form=form.create_view(),
            errors=form.errors,
            object=subject,
            object_id=object_id,
            elements=self.show_elements(subject) if template_key == "preview" else [],
        )

    def _persist(self, request: ActionRequest, form: BoundForm, *, mode: str) -> tuple[ActionResult | None, bool]:
        """写入并返回 (指令, 表单是否仍然有效)."""
        subject = form.data
        if mode == "create":
            # 提交的数据可能影响权限判断
            self.context.check_access("create", subject)
            result = self.collaborators.model_manager.create(subject)
        else:
            result = self.collaborators.model_manager.update(subject)

        if isinstance(result, Persisted):
            persisted = result.subject if result.subject is not None else subject
            return self._on_persisted(request, persisted, mode), True

        log_context = {"resource": self.context.name, "action": mode, "outcome": result.__class__.__name__}
        if isinstance(result, LockConflict) and mode == "edit":
            log_warning("乐观锁冲突", module="admin", detail=result.detail, **log_context)
            if not request.is_xhr:
                self._add_lock_feedback(subject)
            return None, True

        if isinstance(result, ValidationConflict):
            log_warning(
                "存储层拒绝了提交的数据",
                module="admin",
                detail=result.detail,
                field=result.field,
                **log_context,
            )
            return None, False

        self._report_failure(result, log_context)
        return None, False

    def _on_persisted(self, request: ActionRequest, subject: object, mode: str) -> ActionResult:
        object_id = self.identifier_of(subject)
        name = self.context.to_string(subject)
        log_info("对象已保存", module="admin", resource=self.context.name, action=mode, object_id=object_id)

        if request.is_xhr:
            return json_ok(object_id, str(escape(name)))

        self.add_feedback(FlashCategory.SUCCESS, _SUCCESS_KEYS[mode], {"name": name})
        return Redirected(resolve_redirect(self.context, request, subject, object_id))

    def _add_lock_feedback(self, subject: object) -> None:
        object_id = self.identifier_of(subject)
        if object_id is None:
            edit_url = self.context.generate_url("list")
        else:
            edit_url = self.context.generate_object_url("edit", object_id)
        self.add_feedback(
            FlashCategory.ERROR,
            AdminMessageKeys.LOCK_ERROR,
            {
                "name": self.context.to_string(subject),
                "link_start": Markup('<a href="{}">').format(edit_url),
                "link_end": Markup("</a>"),
            },
        )

    def _report_failure(self, result: PersistResult, log_context: dict[str, str]) -> None:
        if isinstance(result, PersistenceFailure):
            self.exception_translator.translate(result.error, detail=result.detail, **log_context)
        else:
            log_warning("持久化失败", module="admin", **log_context)

    # ------------------------------------------------------------------ #
    # 删除
    # ------------------------------------------------------------------ #
    def handle_delete(self, request: ActionRequest, object_id: str) -> ActionResult:
        """删除.

        GET 渲染确认页;POST 或 DELETE(含 `_method=DELETE`)校验令牌后执行删除.

        Raises:
            NotFoundError: 对象不存在.
            AuthorizationError: 无 delete 权限.
            CsrfInvalidError: 令牌无效.

        """
        subject = self.load_subject(object_id)
        self.context.check_access("delete", subject)
        intercepted = self.context.hooks.pre_delete(request, subject)
        if intercepted is not None:
            return intercepted

        if request.rest_method not in (HttpMethod.POST, HttpMethod.DELETE):
            return self.render(
                "delete",
                request,
                action="delete",
                object=subject,
                object_id=object_id,
                csrf_token=self.csrf_token(CsrfIntention.DELETE),
            )

        self.validate_csrf(request, CsrfIntention.DELETE)
        name = self.context.to_string(subject)
        result = self.collaborators.model_manager.delete(subject)

        if isinstance(result, Persisted):
            log_info(
                "对象已删除",
                module="admin",
                resource=self.context.name,
                action="delete",
                object_id=object_id,
            )
            if request.is_xhr:
                return json_ok()
            self.add_feedback(FlashCategory.SUCCESS, AdminMessageKeys.DELETE_SUCCESS, {"name": name})
        else:
            self._report_failure(
                result,
                {"resource": self.context.name, "action": "delete", "outcome": result.__class__.__name__},
            )
            if request.is_xhr:
                return json_error()
            self.add_feedback(FlashCategory.ERROR, AdminMessageKeys.DELETE_ERROR, {"name": name})

        return Redirected(resolve_redirect(self.context, request, None, None, deleted=True))
