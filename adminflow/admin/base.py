"""后台动作的公共基类."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from markupsafe import escape

from adminflow.admin.results import Rendered
from adminflow.constants import AdminMessageKeys, RequestMarkers
from adminflow.errors import CsrfInvalidError, NotFoundError
from adminflow.utils.structlog_config import log_warning

if TYPE_CHECKING:
    from adminflow.admin.collaborators import AdminCollaborators
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.resource import ResourceContext


def escape_params(params: Mapping[str, object] | None) -> dict[str, str]:
    """对翻译插值参数做 HTML 转义,反馈最终以 Markup 形式输出."""
    return {name: str(escape(value)) for name, value in (params or {}).items()}


class AdminActionBase:
    """各动作共享的渲染、加载、CSRF 与反馈逻辑.

    Args:
        context: 本次请求的资源上下文.
        collaborators: 注入的协作方.

    """

    def __init__(self, context: ResourceContext, collaborators: AdminCollaborators) -> None:
        self.context = context
        self.collaborators = collaborators

    def render(self, template_key: str, request: ActionRequest, **values: object) -> Rendered:
        """渲染资源模板,XHR 请求使用 ajax 外壳,其余使用 layout 外壳."""
        base_template = self.context.template("ajax" if request.is_xhr else "layout")
        context: dict[str, object] = {
            "admin": self.context,
            "base_template": base_template,
        }
        context.update(values)
        return Rendered(self.context.template(template_key), context)

    def load_subject(self, object_id: str) -> object:
        """按标识加载主体对象.

        Raises:
            NotFoundError: 对象不存在时抛出,文案包含标识.

        """
        subject = self.collaborators.model_manager.find(self.context.managed_class, object_id)
        if subject is None:
            raise NotFoundError(
                f"找不到 id 为 {object_id} 的对象",
                extra={"resource": self.context.name, "object_id": object_id},
            )
        return subject

    def identifier_of(self, subject: object) -> str | None:
        identifier = self.collaborators.model_manager.get_identifier(subject)
        return None if identifier is None else str(identifier)

    def validate_csrf(self, request: ActionRequest, intention: str) -> None:
        """校验指定用途的 CSRF 令牌,未配置令牌管理器时跳过.

        Raises:
            CsrfInvalidError: 令牌缺失或无效.

        """
        csrf = self.collaborators.csrf
        if csrf is None:
            return
        token = request.get(RequestMarkers.CSRF_FIELD)
        if not csrf.is_token_valid(intention, token):
            log_warning(
                "CSRF 令牌校验失败",
                module="admin",
                resource=self.context.name,
                intention=intention,
            )
            raise CsrfInvalidError(extra={"resource": self.context.name, "intention": intention})

    def csrf_token(self, intention: str) -> str | None:
        csrf = self.collaborators.csrf
        return None if csrf is None else csrf.get_token(intention)

    def trans(
        self,
        key: str,
        params: Mapping[str, object] | None = None,
        domain: str | None = None,
    ) -> str:
        """翻译文案,插值参数统一做 HTML 转义."""
        return self.collaborators.translator.trans(key, escape_params(params), domain or AdminMessageKeys.DOMAIN)

    def add_feedback(self, category: str, key: str, params: Mapping[str, object] | None = None) -> None:
        self.collaborators.feedback.add(category, self.trans(key, params))

    def show_elements(self, subject: object) -> list[tuple[str, object]]:
        """展示页与预览页的只读字段 (字段名, 值)."""
        return [(name, getattr(subject, name, None)) for name in self.context.resource.show_fields]
