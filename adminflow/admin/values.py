"""编排过程中流转的值对象."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from adminflow.admin.preview import PreviewSignal


@dataclass(frozen=True, slots=True)
class FormSubmission:
    """一次表单提交的判定结果."""

    data: object
    submitted: bool
    valid: bool
    preview_signal: PreviewSignal = PreviewSignal.NONE


@dataclass(frozen=True, slots=True)
class Revision:
    """对象在某一历史版本的快照.

    revision_id 的排序规则由审计读取器决定.
    """

    object_id: str
    revision_id: str
    snapshot: object
    created_at: datetime | None = None
    author: str | None = None
