from .base import AggregateRoot, DomainEvent, DomainService, Entity, Repository, ValueObject
from .exceptions import (
    ConcurrencyError,
    ConflictError,
    DomainError,
    ErrorType,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from .result import Failure, Result, Success, attempt
from .state_machine import TransitionTable

__all__ = [
    "AggregateRoot",
    "ConcurrencyError",
    "ConflictError",
    "DomainError",
    "DomainEvent",
    "DomainService",
    "Entity",
    "ErrorType",
    "Failure",
    "InvalidTransitionError",
    "NotFoundError",
    "Repository",
    "Result",
    "Success",
    "TransitionTable",
    "ValidationError",
    "ValueObject",
    "attempt",
]
