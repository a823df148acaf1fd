"""对象级 ACL 编辑."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from adminflow.admin.base import AdminActionBase
from adminflow.admin.results import Redirected
from adminflow.constants import AdminMessageKeys, CsrfIntention, FlashCategory, HttpMethod, RequestMarkers
from adminflow.errors import NotFoundError
from adminflow.utils.structlog_config import log_info

if TYPE_CHECKING:
    from adminflow.admin.collaborators import AclManipulator
    from adminflow.admin.request import ActionRequest
    from adminflow.admin.results import ActionResult


@dataclass(slots=True)
class AclObjectData:
    """ACL 页面所需的数据."""

    object_id: str
    permissions: list[str]
    users: list[str]
    roles: list[str]
    grants: dict[str, list[str]] = field(default_factory=dict)


class AclEditor(AdminActionBase):
    """渲染并更新对象的访问控制列表.

    提交时 `acl_users_form` 或 `acl_roles_form` 标记决定本次更新用户还是角色,
    每个身份的权限通过 `grants[<身份>]` 多值字段提交.
    """

    def handle(self, request: ActionRequest, object_id: str) -> ActionResult:
        """ACL 页面.

        Raises:
            NotFoundError: 资源未启用 ACL 或对象不存在.
            AuthorizationError: 无 acl 权限.
            CsrfInvalidError: 提交时令牌无效.

        """
        acl = self.collaborators.acl
        if not self.context.resource.acl_enabled or acl is None:
            raise NotFoundError("ACL 未启用", extra={"resource": self.context.name})

        subject = self.load_subject(object_id)
        self.context.check_access("acl", subject)

        data = self._load_data(acl, object_id)
        errors: dict[str, list[str]] = {}

        form_identities = self._submitted_identities(request, data)
        if request.rest_method == HttpMethod.POST and form_identities is not None:
            self.validate_csrf(request, CsrfIntention.ACL)
            updated, errors = self._bind_grants(request, data, form_identities)
            if not errors:
                acl.update_grants(self.context.managed_class, object_id, updated)
                log_info("ACL 已更新", module="admin", resource=self.context.name, action="acl", object_id=object_id)
                self.add_feedback(FlashCategory.SUCCESS, AdminMessageKeys.ACL_EDIT_SUCCESS)
                return Redirected(self.context.generate_object_url("acl", object_id))

        return self.render(
            "acl",
            request,
            action="acl",
            object=subject,
            object_id=object_id,
            acl=data,
            errors=errors,
            csrf_token=self.csrf_token(CsrfIntention.ACL),
        )

    def _load_data(self, acl: AclManipulator, object_id: str) -> AclObjectData:
        return AclObjectData(
            object_id=object_id,
            permissions=list(acl.permissions()),
            users=list(acl.list_users()),
            roles=list(acl.list_roles()),
            grants=acl.get_grants(self.context.managed_class, object_id),
        )

    @staticmethod
    def _submitted_identities(request: ActionRequest, data: AclObjectData) -> list[str] | None:
        if request.has(RequestMarkers.ACL_USERS_FORM):
            return data.users
        if request.has(RequestMarkers.ACL_ROLES_FORM):
            return data.roles
        return None

    @staticmethod
    def _bind_grants(
        request: ActionRequest,
        data: AclObjectData,
        identities: list[str],
    ) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
        """合并提交的权限,未知权限记入 errors."""
        updated = {identity: list(perms) for identity, perms in data.grants.items()}
        errors: dict[str, list[str]] = {}
        for identity in identities:
            submitted = request.get_list(f"grants[{identity}]")
            unknown = [perm for perm in submitted if perm not in data.permissions]
            if unknown:
                errors[identity] = [f"未知权限: {', '.join(unknown)}"]
                continue
            updated[identity] = submitted
        return updated, errors
