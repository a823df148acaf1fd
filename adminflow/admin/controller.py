"""单个资源的后台动作入口.

每个动作先解析 `ResourceContext`,再交给对应的编排组件.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from adminflow.admin.acl import AclEditor
from adminflow.admin.batch import BatchActionDispatcher
from adminflow.admin.export import ExportAction
from adminflow.admin.history import HistoryComparator
from adminflow.admin.orchestrator import ActionOrchestrator
from adminflow.admin.resource import ResourceContext

if TYPE_CHECKING:
    from adminflow.admin.collaborators import AdminCollaborators
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.resource import AdminResource, UrlGenerator
    from adminflow.admin.results import ActionResult


class CrudController:
    """资源级 CRUD 控制器.

    Args:
        resource: 资源定义.
        collaborators: 注入的协作方.
        url_generator: `(route, params) -> url`,由视图层提供.

    """

    def __init__(
        self,
        resource: AdminResource,
        collaborators: AdminCollaborators,
        url_generator: UrlGenerator,
    ) -> None:
        self.resource = resource
        self.collaborators = collaborators
        self.url_generator = url_generator

    def resolve_context(self, request: ActionRequest) -> ResourceContext:
        return ResourceContext.resolve(self.resource, request, self.url_generator)

    def _orchestrator(self, request: ActionRequest) -> ActionOrchestrator:
        return ActionOrchestrator(self.resolve_context(request), self.collaborators)

    def _history(self, request: ActionRequest) -> HistoryComparator:
        return HistoryComparator(self.resolve_context(request), self.collaborators)

    def list_action(self, request: ActionRequest) -> ActionResult:
        return self._orchestrator(request).handle_list(request)

    def create_action(self, request: ActionRequest) -> ActionResult:
        return self._orchestrator(request).handle_create(request)

    def edit_action(self, request: ActionRequest, object_id: str) -> ActionResult:
        return self._orchestrator(request).handle_edit(request, object_id)

    def show_action(self, request: ActionRequest, object_id: str) -> ActionResult:
        return self._orchestrator(request).handle_show(request, object_id)

    def delete_action(self, request: ActionRequest, object_id: str) -> ActionResult:
        return self._orchestrator(request).handle_delete(request, object_id)

    def batch_action(self, request: ActionRequest) -> ActionResult:
        return BatchActionDispatcher(self.resolve_context(request), self.collaborators).handle(request)

    def history_action(self, request: ActionRequest, object_id: str) -> ActionResult:
        return self._history(request).show_history(request, object_id)

    def history_view_revision_action(self, request: ActionRequest, object_id: str, revision: str) -> ActionResult:
        return self._history(request).show_revision(request, object_id, revision)

    def history_compare_revisions_action(
        self,
        request: ActionRequest,
        object_id: str,
        base_revision: str,
        compare_revision: str,
    ) -> ActionResult:
        return self._history(request).compare_revisions(request, object_id, base_revision, compare_revision)

    def export_action(self, request: ActionRequest) -> ActionResult:
        return ExportAction(self.resolve_context(request), self.collaborators).handle(request)

    def acl_action(self, request: ActionRequest, object_id: str) -> ActionResult:
        return AclEditor(self.resolve_context(request), self.collaborators).handle(request, object_id)
