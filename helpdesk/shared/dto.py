"""
DTO Validation
==============

Boundary helper turning pydantic validation failures into the
application's ValidationException.
"""

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from helpdesk.core import ValidationException

DTO = TypeVar("DTO", bound=BaseModel)


def parse_dto(model: Type[DTO], data: Union[DTO, Mapping[str, Any]]) -> DTO:
    """
    Validate caller input into ``model``.

    Raises:
        ValidationException: with pydantic's field errors in details
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationException(
            f"Invalid {model.__name__}",
            {"errors": e.errors(include_url=False)}
        ) from e
