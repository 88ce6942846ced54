"""Helpers shared by module DTOs."""

from __future__ import annotations

from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shared.domain.exceptions import InvalidInput

D = TypeVar("D", bound=BaseModel)


def build_dto(dto_class: Type[D], **data: Any) -> D:
    """Instantiate *dto_class*, reporting validation errors as ``InvalidInput``."""
    try:
        return dto_class(**data)
    except PydanticValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or None,
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        raise InvalidInput("Validation failed.", details={"errors": errors}) from exc
