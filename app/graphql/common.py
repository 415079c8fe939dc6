"""
Result types shared by every dashboard mutation
"""
from typing import List, Optional

import strawberry

from app.core.validation import FieldValidationError


@strawberry.type
class FieldError:
    field: str
    messages: List[str]


@strawberry.type
class ActionResponse:
    """`error` is set on failure; `message` on success"""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    field_errors: Optional[List[FieldError]] = None


def ok(message: Optional[str] = None) -> ActionResponse:
    return ActionResponse(success=True, message=message)


def failed(error: str, field_errors: Optional[List[FieldError]] = None) -> ActionResponse:
    return ActionResponse(success=False, error=error, field_errors=field_errors)


def field_errors_of(error: Exception) -> Optional[List[FieldError]]:
    if isinstance(error, FieldValidationError):
        return [FieldError(field=name, messages=msgs) for name, msgs in error.field_errors.items()]
    return None
