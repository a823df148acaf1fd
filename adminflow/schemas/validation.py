"""Schema 校验与错误映射."""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from adminflow.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

GLOBAL_ERROR_FIELD = "__all__"


def validate_or_raise(model: type[ModelT], payload: object, *, message_key: str | None = None) -> ModelT:
    """执行 schema 校验并抛出项目的 ValidationError.

    Args:
        model: pydantic model.
        payload: 待校验的数据.
        message_key: 失败时的 message_key.

    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        errors = collect_field_errors(exc)
        field, messages = next(iter(errors.items()))
        raise ValidationError(messages[0], message_key=message_key, extra={"field": field}) from None


def collect_field_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    """把 pydantic 错误按字段归集,无字段的错误归入 `__all__`."""
    errors: dict[str, list[str]] = {}
    for item in exc.errors():
        loc = item.get("loc") or ()
        field = str(loc[0]) if loc else GLOBAL_ERROR_FIELD
        message = item.get("msg") or "参数校验失败"
        ctx = item.get("ctx")
        if isinstance(ctx, dict) and isinstance(ctx.get("error"), BaseException):
            message = str(ctx["error"])
        errors.setdefault(field, []).append(message)
    if not errors:
        errors[GLOBAL_ERROR_FIELD] = ["参数校验失败"]
    return errors
