"""Base schema utilities."""

from datetime import datetime
from typing import Any, ClassVar, Iterable, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie", "form"}

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class PartialUpdate(BaseSchema):
    """PATCH body. Fields in NOT_NULL may be left out but not sent as null."""

    NOT_NULL: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_nulls(self):
        for name in self.NOT_NULL:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TimestampMixin(BaseModel):
    """Mixin for created_at/updated_at timestamps."""

    created_at: datetime
    updated_at: Optional[datetime] = None


class IDMixin(BaseModel):
    """Mixin for UUID id field."""

    id: UUID


class ActionResult(BaseModel):
    """Envelope for successful write actions."""

    success: bool = True


def first_error_message(errors: Iterable[dict[str, Any]]) -> str:
    """Human-readable message for the first validation error.

    Messages raised by our own validators are returned as written; built-in
    constraint errors are prefixed with the field name.
    """
    for error in errors:
        msg = str(error.get("msg", "Invalid input"))
        if msg.startswith("Value error, "):
            return msg[len("Value error, "):]
        loc = [str(part) for part in error.get("loc", ()) if str(part) not in _REQUEST_LOCATIONS]
        if loc:
            return f"{'.'.join(loc)}: {msg}"
        return msg
    return "Invalid input"


def parse_model(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate ad-hoc input (form fields, raw JSON) or raise ValueError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValueError(first_error_message(e.errors())) from e
