"""进程内对象级 ACL 存储."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

DEFAULT_PERMISSIONS = ("VIEW", "EDIT", "DELETE", "OWNER")


class InMemoryAclManipulator:
    """按 (类名, 对象标识) 保存 `{身份: [权限]}`.

    Args:
        users: 可授权的用户名.
        roles: 可授权的角色.
        permissions: 可授予的权限.

    """

    def __init__(
        self,
        users: Sequence[str] = (),
        roles: Sequence[str] = (),
        permissions: Sequence[str] = DEFAULT_PERMISSIONS,
    ) -> None:
        self._users = list(users)
        self._roles = list(roles)
        self._permissions = list(permissions)
        self._grants: dict[tuple[str, str], dict[str, list[str]]] = {}

    def permissions(self) -> list[str]:
        return list(self._permissions)

    def list_users(self) -> list[str]:
        return list(self._users)

    def list_roles(self) -> list[str]:
        return list(self._roles)

    def get_grants(self, model_class: type, object_id: str) -> dict[str, list[str]]:
        stored = self._grants.get((model_class.__name__, object_id), {})
        return {identity: list(perms) for identity, perms in stored.items()}

    def update_grants(self, model_class: type, object_id: str, grants: Mapping[str, Sequence[str]]) -> None:
        self._grants[(model_class.__name__, object_id)] = {
            identity: list(perms) for identity, perms in grants.items() if perms
        }
