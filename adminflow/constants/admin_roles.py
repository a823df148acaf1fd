"""后台角色常量.

定义角色与其可执行的后台动作,避免魔法字符串.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import ClassVar


class AdminRole:
    """后台角色与动作权限."""

    ADMIN: ClassVar[str] = "admin"  # 管理员
    EDITOR: ClassVar[str] = "editor"  # 编辑
    VIEWER: ClassVar[str] = "viewer"  # 查看者(只读)

    ALL: ClassVar[tuple[str, ...]] = (ADMIN, EDITOR, VIEWER)

    # 通配,拥有全部动作
    ANY_ACTION: ClassVar[str] = "*"

    READ_ACTIONS: ClassVar[frozenset[str]] = frozenset(
        {"list", "show", "history", "history_view_revision", "history_compare_revisions", "export"},
    )
    WRITE_ACTIONS: ClassVar[frozenset[str]] = frozenset(
        {"create", "edit", "delete", "batch", "batch_delete"},
    )

    ACTIONS: ClassVar[Mapping[str, frozenset[str]]] = MappingProxyType(
        {
            ADMIN: frozenset({ANY_ACTION}),
            EDITOR: READ_ACTIONS | WRITE_ACTIONS,
            VIEWER: READ_ACTIONS,
        },
    )

    DISPLAY_NAMES: ClassVar[Mapping[str, str]] = MappingProxyType(
        {
            ADMIN: "管理员",
            EDITOR: "编辑",
            VIEWER: "查看者",
        },
    )
