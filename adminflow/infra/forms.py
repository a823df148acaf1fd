"""基于 pydantic 的后台表单绑定.

提交时先用 schema 校验请求数据,成功后把字段写回主体对象;
`validate()` 再执行 CSRF 与额外校验器,额外校验器能看到 pre_validate 钩子的修改.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from adminflow.constants import HttpMethod, RequestMarkers
from adminflow.schemas.validation import GLOBAL_ERROR_FIELD, collect_field_errors

if TYPE_CHECKING:
    from adminflow.admin.collaborators import CsrfTokenManager
    from adminflow.admin.request import ActionRequest
    from adminflow.schemas import PayloadSchema
    from adminflow.types import MutablePayloadDict

ExtraValidator = Callable[[object], Mapping[str, Sequence[str]]]

_SUBMIT_METHODS = (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)


@dataclass(slots=True)
class FormView:
    """模板使用的表单视图."""

    name: str
    fields: list[str]
    values: dict[str, object]
    errors: dict[str, list[str]] = field(default_factory=dict)
    csrf_token: str | None = None

    def has_errors(self, name: str | None = None) -> bool:
        if name is None:
            return bool(self.errors)
        return bool(self.errors.get(name))


class PydanticBoundForm:
    """已绑定请求的表单."""

    def __init__(
        self,
        binder: PydanticFormBinder,
        subject: object,
        request: ActionRequest,
    ) -> None:
        self._binder = binder
        self._subject = subject
        self._request = request
        self._submitted = request.rest_method in _SUBMIT_METHODS
        self._raw: MutablePayloadDict = request.body_params() if self._submitted else {}
        self._errors: dict[str, list[str]] = {}
        if self._submitted:
            self._submit()

    @property
    def submitted(self) -> bool:
        return self._submitted

    @property
    def data(self) -> object:
        return self._subject

    @property
    def errors(self) -> dict[str, list[str]]:
        return self._errors

    def _submit(self) -> None:
        try:
            model = self._binder.schema.model_validate(self._raw)
        except PydanticValidationError as exc:
            self._errors = collect_field_errors(exc)
            return
        for name, value in model.model_dump(include=set(self._binder.field_names)).items():
            setattr(self._subject, name, value)

    def validate(self) -> bool:
        """返回表单是否有效.未提交的表单视为无效."""
        if not self._submitted:
            return False
        csrf = self._binder.csrf
        if csrf is not None:
            token = self._request.get(RequestMarkers.CSRF_FIELD)
            if not csrf.is_token_valid(self._binder.csrf_intention, token):
                self._errors.setdefault(GLOBAL_ERROR_FIELD, []).append("CSRF 令牌无效,请刷新页面后重试")
        if not self._errors:
            for validator in self._binder.extra_validators:
                for name, messages in validator(self._subject).items():
                    if messages:
                        self._errors.setdefault(name, []).extend(messages)
        return not self._errors

    def create_view(self) -> FormView:
        values: dict[str, object] = {name: getattr(self._subject, name, None) for name in self._binder.field_names}
        if self._errors:
            # 校验失败时回显用户提交的原始值
            values.update({name: self._raw[name] for name in self._binder.field_names if name in self._raw})
        csrf = self._binder.csrf
        return FormView(
            name=self._binder.name,
            fields=list(self._binder.field_names),
            values=values,
            errors={name: list(messages) for name, messages in self._errors.items()},
            csrf_token=None if csrf is None else csrf.get_token(self._binder.csrf_intention),
        )


class PydanticFormBinder:
    """用 pydantic schema 描述的表单工厂.

    Args:
        schema: 表单 schema,字段名与主体对象属性一致.
        name: 表单名.
        csrf: CSRF 令牌管理器,为 None 时不校验.
        extra_validators: 额外校验器,返回 `{字段: [错误]}`.

    """

    def __init__(
        self,
        schema: type[PayloadSchema],
        *,
        name: str = "form",
        csrf: CsrfTokenManager | None = None,
        extra_validators: Sequence[ExtraValidator] = (),
    ) -> None:
        self.schema = schema
        self.name = name
        self.csrf = csrf
        self.extra_validators = tuple(extra_validators)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self.schema.model_fields)

    @property
    def csrf_intention(self) -> str:
        return f"form_{self.name}"

    def bind(self, subject: object, request: ActionRequest) -> PydanticBoundForm:
        return PydanticBoundForm(self, subject, request)
