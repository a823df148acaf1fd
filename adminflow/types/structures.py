"""通用结构化数据类型别名.

统一 JSON/Mapping 风格的类型,方便在流程、视图、适配器之间共享定义.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from typing import TypeAlias

ScalarValue: TypeAlias = str | int | float | bool | None
PayloadValue: TypeAlias = ScalarValue | Sequence[ScalarValue] | Mapping[str, ScalarValue]
PayloadMapping: TypeAlias = Mapping[str, PayloadValue]
MutablePayloadDict: TypeAlias = dict[str, PayloadValue]
FormErrorMapping: TypeAlias = Mapping[str, Sequence[str]]

JsonValue: TypeAlias = ScalarValue | Sequence["JsonValue"] | Mapping[str, "JsonValue"]
JsonDict: TypeAlias = dict[str, JsonValue]
ContextDict: TypeAlias = dict[str, JsonValue]
StructlogEventDict: TypeAlias = MutableMapping[str, JsonValue]
LoggerExtra: TypeAlias = Mapping[str, JsonValue]

# 模板上下文允许携带任意对象(表单视图、主体对象、datagrid 等)
TemplateContext: TypeAlias = dict[str, object]

