"""类型别名聚合导出."""

from adminflow.types.structures import (
    ContextDict,
    FormErrorMapping,
    JsonDict,
    JsonValue,
    LoggerExtra,
    MutablePayloadDict,
    PayloadMapping,
    PayloadValue,
    ScalarValue,
    StructlogEventDict,
    TemplateContext,
)

__all__ = [
    "ContextDict",
    "FormErrorMapping",
    "JsonDict",
    "JsonValue",
    "LoggerExtra",
    "MutablePayloadDict",
    "PayloadMapping",
    "PayloadValue",
    "ScalarValue",
    "StructlogEventDict",
    "TemplateContext",
]
