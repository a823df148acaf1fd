"""pydantic schema 基础设施."""

from adminflow.schemas.base import PayloadSchema
from adminflow.schemas.validation import collect_field_errors, validate_or_raise

__all__ = ["PayloadSchema", "collect_field_errors", "validate_or_raise"]
