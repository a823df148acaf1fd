"""批量操作分发.

流程: 校验方法与 CSRF → 归一化请求 → 查找操作 → 相关性判定 → (确认页) → 执行.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from adminflow.admin.base import AdminActionBase
from adminflow.admin.batch_actions import BatchExecution, BatchRequest
from adminflow.admin.results import Redirected
from adminflow.constants import AdminMessageKeys, CsrfIntention, FlashCategory, HttpMethod
from adminflow.errors import MissingBatchHandlerError, NotFoundError
from adminflow.utils.structlog_config import log_info

if TYPE_CHECKING:
    from adminflow.admin.batch_actions import BatchActionSpec
    from adminflow.admin.collaborators import Datagrid, ProxyQuery
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.results import ActionResult


class BatchActionDispatcher(AdminActionBase):
    """解析、校验并执行一次批量操作."""

    def handle(self, request: ActionRequest) -> ActionResult:
        """处理批量请求.

        Args:
            request: 当前请求,只接受 POST.

        Returns:
            ActionResult: 不相关时重定向回列表,需要确认时渲染确认页,否则为处理函数的结果.

        Raises:
            NotFoundError: 请求方法不是 POST.
            CsrfInvalidError: batch 令牌无效.
            UndefinedBatchActionError: 操作未注册.
            MissingBatchHandlerError: 操作没有可调用的处理函数.

        """
        if request.rest_method != HttpMethod.POST:
            raise NotFoundError(
                f"批量操作不接受 {request.rest_method} 请求",
                extra={"resource": self.context.name, "method": request.rest_method},
            )

        self.validate_csrf(request, CsrfIntention.BATCH)

        batch = BatchRequest.from_request(request)
        spec = self.context.batch_actions.get(batch.action)

        relevance = spec.relevance(list(batch.selected_ids), batch.all_elements, request)
        datagrid = self.context.create_datagrid(request)
        datagrid.build_pager()

        not_relevant_key = self._not_relevant_key(relevance)
        if not_relevant_key is not None:
            log_info(
                "批量操作没有可处理的对象",
                module="admin",
                resource=self.context.name,
                action=f"batch_{batch.action}",
                message_key=not_relevant_key,
            )
            self.add_feedback(FlashCategory.INFO, not_relevant_key)
            return self._list_redirect(datagrid)

        if spec.ask_confirmation and not batch.confirmed:
            return self._render_confirmation(request, spec, batch, datagrid)

        return self._execute(request, spec, batch, datagrid)

    @staticmethod
    def _not_relevant_key(relevance: bool | str) -> str | None:
        """返回不相关时的提示键,相关时返回 None."""
        if isinstance(relevance, str):
            return relevance or AdminMessageKeys.BATCH_EMPTY
        if relevance:
            return None
        return AdminMessageKeys.BATCH_EMPTY

    def _list_redirect(self, datagrid: Datagrid) -> Redirected:
        return Redirected(self.context.generate_url("list", **datagrid.filter_parameters()))

    def _render_confirmation(
        self,
        request: ActionRequest,
        spec: BatchActionSpec,
        batch: BatchRequest,
        datagrid: Datagrid,
    ) -> ActionResult:
        return self.render(
            "batch_confirmation",
            request,
            action="list",
            action_label=spec.label,
            batch_translation_domain=spec.translation_domain or self.context.translation_domain,
            datagrid=datagrid,
            form=datagrid.get_form_view(),
            data=batch.payload,
            data_json=batch.to_json(),
            csrf_token=self.csrf_token(CsrfIntention.BATCH),
        )

    def _execute(
        self,
        request: ActionRequest,
        spec: BatchActionSpec,
        batch: BatchRequest,
        datagrid: Datagrid,
    ) -> ActionResult:
        query = datagrid.get_query()
        query.set_first_result(None)
        query.set_max_results(None)

        selected_ids = list(batch.selected_ids)
        self.context.hooks.pre_batch_action(batch.action, query, selected_ids, batch.all_elements)

        execution_query: ProxyQuery | None = query
        if not batch.all_elements:
            if selected_ids:
                manager = self.collaborators.model_manager
                manager.add_identifiers_to_query(self.context.managed_class, query, selected_ids)
            else:
                execution_query = None

        if not callable(spec.handler):
            raise MissingBatchHandlerError(
                f"批量操作 {spec.name} 缺少可调用的处理函数",
                extra={"resource": self.context.name, "batch_action": spec.name},
            )

        log_info(
            "执行批量操作",
            module="admin",
            resource=self.context.name,
            action=f"batch_{batch.action}",
            selected=len(selected_ids),
            all_elements=batch.all_elements,
        )
        execution = BatchExecution(
            context=self.context,
            collaborators=self.collaborators,
            request=request,
            batch=batch,
            datagrid=datagrid,
            query=execution_query,
        )
        return spec.handler(execution)
