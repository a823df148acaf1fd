"""Flask Flash消息类别常量.

定义Flash消息的标准类别,避免魔法字符串.
"""

from __future__ import annotations

from typing import ClassVar


class FlashCategory:
    """Flask Flash消息类别常量.

    后台反馈只使用这四种类别.
    """

    SUCCESS = "success"     # 成功消息(绿色)
    ERROR = "error"         # 错误消息(红色)
    WARNING = "warning"     # 警告消息(黄色)
    INFO = "info"           # 信息消息(蓝色)

    ALL: ClassVar[tuple[str, ...]] = (SUCCESS, ERROR, WARNING, INFO)

    @classmethod
    def is_valid(cls, category: str) -> bool:
        """验证消息类别是否有效.

        Args:
            category: 消息类别字符串

        Returns:
            bool: 是否为有效类别

        """
        return category in cls.ALL
