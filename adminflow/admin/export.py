"""列表数据导出."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from adminflow.admin.base import AdminActionBase
from adminflow.admin.results import Exported
from adminflow.constants import RequestMarkers
from adminflow.errors import InvalidExportFormatError, NotFoundError
from adminflow.utils.structlog_config import log_info

if TYPE_CHECKING:
    from adminflow.admin.request import ActionRequest


def export_filename(class_name: str, fmt: str, now: datetime | None = None) -> str:
    """生成导出文件名,例如 `export_article_2024_01_31_08_00_00.csv`."""
    moment = now or datetime.now()
    return f"export_{class_name.lower()}_{moment.strftime('%Y_%m_%d_%H_%M_%S')}.{fmt}"


class ExportAction(AdminActionBase):
    """按当前过滤条件导出全部数据(不分页)."""

    def handle(self, request: ActionRequest) -> Exported:
        """导出.

        Raises:
            AuthorizationError: 无 export 权限.
            InvalidExportFormatError: 格式不在允许列表内.
            NotFoundError: 未配置导出器.

        """
        self.context.check_access("export")

        fmt = (request.get(RequestMarkers.EXPORT_FORMAT) or "").strip().lower()
        allowed = self.context.resource.export_formats
        if fmt not in allowed:
            raise InvalidExportFormatError(
                f"导出格式 {fmt!r} 不被允许,可选: {', '.join(allowed)}",
                extra={"resource": self.context.name, "format": fmt},
            )

        exporter = self.collaborators.exporter
        if exporter is None:
            raise NotFoundError(f"资源 {self.context.name} 未启用导出", extra={"resource": self.context.name})

        datagrid = self.context.create_datagrid(request)
        datagrid.build_pager()
        query = datagrid.get_query()
        query.set_first_result(None)
        query.set_max_results(None)

        rows = self.collaborators.model_manager.iterate_rows(query, self.context.resource.export_fields)
        content, mimetype = exporter.export(fmt, rows)
        filename = export_filename(self.context.class_name, fmt)
        log_info("导出完成", module="admin", resource=self.context.name, action="export", filename=filename)
        return Exported(filename=filename, content=content, mimetype=mimetype)
