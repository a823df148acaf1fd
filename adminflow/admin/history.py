"""对象历史版本的查看与对比."""

from __future__ import annotations

from typing import TYPE_CHECKING

from adminflow.admin.base import AdminActionBase
from adminflow.errors import NotFoundError

if TYPE_CHECKING:
    from adminflow.admin.collaborators import AuditReader
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.results import ActionResult
    from adminflow.admin.values import Revision


class HistoryComparator(AdminActionBase):
    """读取并渲染单个或成对的历史快照.

    三个动作都要求: 对象存在、资源的模型类注册了审计读取器、请求的版本存在,
    任一条件不满足都抛出 NotFoundError.
    """

    def show_history(self, request: ActionRequest, object_id: str) -> ActionResult:
        """历史版本列表,最新版本在前."""
        subject = self.load_subject(object_id)
        self.context.check_access("history", subject)

        reader = self._reader()
        revisions = reader.find_revisions(self.context.managed_class, object_id)
        return self.render(
            "history",
            request,
            action="history",
            object=subject,
            object_id=object_id,
            revisions=revisions,
            current_revision=revisions[0] if revisions else None,
        )

    def show_revision(self, request: ActionRequest, object_id: str, revision_id: str) -> ActionResult:
        """用展示页布局渲染某一历史快照."""
        subject = self.load_subject(object_id)
        self.context.check_access("history_view_revision", subject)

        revision = self._revision(self._reader(), object_id, revision_id)
        return self.render(
            "show",
            request,
            action="show",
            object=revision.snapshot,
            object_id=object_id,
            revision=revision,
            elements=self.show_elements(revision.snapshot),
        )

    def compare_revisions(
        self,
        request: ActionRequest,
        object_id: str,
        base_revision_id: str,
        compare_revision_id: str,
    ) -> ActionResult:
        """并排渲染两个历史快照."""
        self.context.check_access("history_compare_revisions")
        subject = self.load_subject(object_id)

        reader = self._reader()
        base_revision = self._revision(reader, object_id, base_revision_id)
        compare_revision = self._revision(reader, object_id, compare_revision_id)
        return self.render(
            "show_compare",
            request,
            action="show",
            object=base_revision.snapshot,
            object_compare=compare_revision.snapshot,
            object_id=object_id,
            current=subject,
            base_revision=base_revision,
            compare_revision=compare_revision,
            elements=self.show_elements(base_revision.snapshot),
            compare_elements=self.show_elements(compare_revision.snapshot),
        )

    def _reader(self) -> AuditReader:
        manager = self.collaborators.audit_manager
        model_class = self.context.managed_class
        if manager is None or not manager.has_reader(model_class):
            raise NotFoundError(
                f"类 {self.context.class_name} 没有注册审计读取器",
                extra={"resource": self.context.name, "class_name": self.context.class_name},
            )
        return manager.get_reader(model_class)

    def _revision(self, reader: AuditReader, object_id: str, revision_id: str) -> Revision:
        revision = reader.find(self.context.managed_class, object_id, revision_id)
        if revision is None:
            raise NotFoundError(
                f"找不到对象 {object_id} 的版本 {revision_id} (类 {self.context.class_name})",
                extra={
                    "resource": self.context.name,
                    "object_id": object_id,
                    "revision_id": revision_id,
                    "class_name": self.context.class_name,
                },
            )
        return revision
