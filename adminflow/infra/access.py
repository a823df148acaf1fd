"""基于 Flask-Login 当前用户的访问检查."""

from __future__ import annotations

from collections.abc import Mapping

from flask_login import current_user

from adminflow.constants import AdminRole


class CurrentUserAccessChecker:
    """按当前用户的 `role` 属性查角色动作表.

    未登录用户一律拒绝.可作为 `AdminResource.access_checker` 使用.

    Args:
        role_actions: 角色到可执行动作集合的映射.

    """

    def __init__(self, role_actions: Mapping[str, frozenset[str]] = AdminRole.ACTIONS) -> None:
        self.role_actions = role_actions

    def __call__(self, action: str, subject: object | None = None) -> bool:
        if not current_user or not getattr(current_user, "is_authenticated", False):
            return False
        allowed = self.role_actions.get(getattr(current_user, "role", None) or "", frozenset())
        return AdminRole.ANY_ACTION in allowed or action in allowed
