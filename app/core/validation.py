"""Form validation helpers built on pydantic."""
from typing import Dict, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class FieldValidationError(ValueError):
    """Validation failure carrying per-field messages for the dashboard forms."""

    def __init__(self, message: str, field_errors: Dict[str, List[str]]):
        super().__init__(message)
        self.field_errors = field_errors


def collect_field_errors(error: ValidationError) -> Dict[str, List[str]]:
    field_errors: Dict[str, List[str]] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item.get("loc") else "__root__"
        field_errors.setdefault(field, []).append(item["msg"])
    return field_errors


def validate_form(model: Type[ModelT], data: dict, message: str | None = None) -> ModelT:
    """Validate ``data`` or raise FieldValidationError.

    Without an explicit message the error reads ``Invalid fields: a, b``.
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        field_errors = collect_field_errors(e)
        raise FieldValidationError(
            message or "Invalid fields: " + ", ".join(field_errors),
            field_errors,
        ) from e
