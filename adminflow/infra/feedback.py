"""基于 Flask flash 的会话级反馈."""

from __future__ import annotations

from flask import flash
from markupsafe import Markup

from adminflow.constants import FlashCategory


class FlashFeedback:
    """写入 Flask flash 消息.

    翻译后的文案中插值参数已转义,整体按 Markup 写入,以便保留重试链接等标记.
    """

    def add(self, category: str, message: str) -> None:
        flash(Markup(message), category if FlashCategory.is_valid(category) else FlashCategory.INFO)
