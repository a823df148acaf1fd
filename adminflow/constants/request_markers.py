"""请求标记常量.

管理后台表单按钮、批量操作与特殊参数名,避免在流程代码中散落魔法字符串.
"""

from typing import ClassVar


class RequestMarkers:
    """改变处理流程的请求参数名."""

    # 强制 XHR 风格(JSON 应答)
    XML_HTTP_REQUEST = "_xml_http_request"
    # 表单方法覆盖,例如 `_method=DELETE`
    METHOD_OVERRIDE = "_method"

    # 预览流程
    BTN_PREVIEW = "btn_preview"
    BTN_PREVIEW_APPROVE = "btn_preview_approve"
    BTN_PREVIEW_DECLINE = "btn_preview_decline"

    # 保存后跳转
    BTN_UPDATE_AND_LIST = "btn_update_and_list"
    BTN_CREATE_AND_LIST = "btn_create_and_list"
    BTN_CREATE_AND_CREATE = "btn_create_and_create"

    SUBCLASS = "subclass"
    LIST_MODE = "_list_mode"
    UNIQID = "uniqid"
    FILTER = "filter"
    EXPORT_FORMAT = "format"

    # 批量操作
    BATCH_DATA = "data"
    BATCH_ACTION = "action"
    BATCH_IDX = "idx"
    BATCH_IDX_LIST = "idx[]"
    BATCH_ALL_ELEMENTS = "all_elements"
    CONFIRMATION = "confirmation"
    CONFIRMATION_OK = "ok"

    # ACL 表单
    ACL_USERS_FORM = "acl_users_form"
    ACL_ROLES_FORM = "acl_roles_form"

    CSRF_FIELD = "_csrf_token"


class CsrfIntention:
    """CSRF 令牌的用途划分,不同用途互不通用."""

    DELETE: ClassVar[str] = "delete"
    BATCH: ClassVar[str] = "batch"
    ACL: ClassVar[str] = "acl"


class AdminMessageKeys:
    """后台反馈文案的翻译键."""

    DOMAIN = "admin"

    CREATE_SUCCESS = "flash_create_success"
    CREATE_ERROR = "flash_create_error"
    EDIT_SUCCESS = "flash_edit_success"
    EDIT_ERROR = "flash_edit_error"
    LOCK_ERROR = "flash_lock_error"
    DELETE_SUCCESS = "flash_delete_success"
    DELETE_ERROR = "flash_delete_error"
    BATCH_EMPTY = "flash_batch_empty"
    BATCH_DELETE_SUCCESS = "flash_batch_delete_success"
    BATCH_DELETE_ERROR = "flash_batch_delete_error"
    ACL_EDIT_SUCCESS = "flash_acl_edit_success"
