"""Turning raw input into commands without raising."""

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from lifecycle.domain.shared.base import to_domain_error
from lifecycle.domain.shared.exceptions import DomainError
from lifecycle.domain.shared.result import Failure, Result, Success

M = TypeVar("M", bound=BaseModel)


def parse_command(command_type: type[M], raw: Any) -> Result[M, DomainError]:
    """Validate ``raw`` into ``command_type``; a malformed payload becomes a Failure."""
    try:
        return Success(command_type.model_validate(raw))
    except PydanticValidationError as e:
        return Failure(to_domain_error(command_type.__name__, e))
