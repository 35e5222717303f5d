"""
Shared Domain Components.

Contém componentes compartilhados entre todos os domínios:
- Exceções de domínio
- Interfaces (Ports)
- Base classes para Domain Events
"""

from .exceptions import (
    DomainException,
    ValidationError,
    EntityNotFoundError,
    BusinessRuleViolationError,
    CannotModifyError,
    IllegalTransitionError,
    AlreadyAssignedError,
    NotAssignedError,
    ConcurrencyError,
)
from .events import DomainEvent
from .interfaces import EventPublisher, UnitOfWork

__all__ = [
    "DomainException",
    "ValidationError",
    "EntityNotFoundError",
    "BusinessRuleViolationError",
    "CannotModifyError",
    "IllegalTransitionError",
    "AlreadyAssignedError",
    "NotAssignedError",
    "ConcurrencyError",
    "DomainEvent",
    "EventPublisher",
    "UnitOfWork",
]
