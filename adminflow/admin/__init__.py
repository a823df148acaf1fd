"""后台动作编排核心,不依赖 Flask 请求对象."""

from adminflow.admin.batch_actions import (
    BatchActionRegistry,
    BatchActionSpec,
    BatchExecution,
    BatchRequest,
    default_batch_actions,
    default_relevance,
)
from adminflow.admin.collaborators import AdminCollaborators
from adminflow.admin.controller import CrudController
from adminflow.admin.persistence import LockConflict, Persisted, PersistenceFailure, PersistResult, ValidationConflict
from adminflow.admin.request import ActionRequest
from adminflow.admin.resource import AdminHooks, AdminResource, ResourceContext, allow_all
from adminflow.admin.results import ActionResult, Exported, JsonReply, Redirected, Rendered
from adminflow.admin.values import FormSubmission, Revision

__all__ = [
    "ActionRequest",
    "ActionResult",
    "AdminCollaborators",
    "AdminHooks",
    "AdminResource",
    "BatchActionRegistry",
    "BatchActionSpec",
    "BatchExecution",
    "BatchRequest",
    "CrudController",
    "Exported",
    "FormSubmission",
    "JsonReply",
    "LockConflict",
    "PersistResult",
    "Persisted",
    "PersistenceFailure",
    "Redirected",
    "Rendered",
    "ResourceContext",
    "Revision",
    "ValidationConflict",
    "allow_all",
    "default_batch_actions",
    "default_relevance",
]
