"""预览状态机.

根据本次请求携带的预览按钮信号与资源的预览能力,推导提交所处的阶段.
状态机不跨请求保存任何状态.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from adminflow.constants import RequestMarkers

if TYPE_CHECKING:
    from adminflow.admin.request import ActionRequest


class PreviewSignal(str, Enum):
    """预览按钮信号,三者互斥."""

    NONE = "none"
    REQUESTED = "requested"
    APPROVED = "approved"
    DECLINED = "declined"


class PreviewStage(str, Enum):
    """提交阶段."""

    # 表单有效即可写入
    READY_TO_PERSIST = "ready_to_persist"
    # 渲染预览页,不写入
    RENDER_PREVIEW = "render_preview"
    # 预览被拒绝,按普通表单重新渲染
    NOT_IN_PREVIEW = "not_in_preview"


def read_preview_signal(request: ActionRequest) -> PreviewSignal:
    """读取本次请求的预览信号.

    同时出现多个按钮时按 approve > decline > preview 取第一个.
    """
    if request.has(RequestMarkers.BTN_PREVIEW_APPROVE):
        return PreviewSignal.APPROVED
    if request.has(RequestMarkers.BTN_PREVIEW_DECLINE):
        return PreviewSignal.DECLINED
    if request.has(RequestMarkers.BTN_PREVIEW):
        return PreviewSignal.REQUESTED
    return PreviewSignal.NONE


def resolve_preview_stage(signal: PreviewSignal, *, supports_preview: bool) -> PreviewStage:
    """推导提交阶段.

    Args:
        signal: 本次请求的预览信号.
        supports_preview: 资源是否启用预览.

    Returns:
        PreviewStage: 不支持预览时恒为 READY_TO_PERSIST.

    """
    if not supports_preview:
        return PreviewStage.READY_TO_PERSIST
    if signal is PreviewSignal.REQUESTED:
        return PreviewStage.RENDER_PREVIEW
    if signal is PreviewSignal.DECLINED:
        return PreviewStage.NOT_IN_PREVIEW
    # APPROVED,或者尚未进入预览流程
    return PreviewStage.READY_TO_PERSIST
