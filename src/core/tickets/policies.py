"""
Políticas de Status e Prioridade.

Funções puras, sem estado, consultadas pelo agregado TicketEntity:
- StatusPolicy: máquina de estados (tabela de adjacência)
- PriorityPolicy: duração de SLA e severidade por prioridade
"""

from datetime import datetime, timedelta
from typing import Dict, FrozenSet, Optional

from src.core.shared.exceptions import IllegalTransitionError

from .value_objects import TicketPriority, TicketStatus


class StatusPolicy:
    """
    Tabela de transições de status.

    Transições válidas:
    - OPEN → PENDING, IN_PROGRESS, RESOLVED
    - PENDING → OPEN, IN_PROGRESS, RESOLVED
    - IN_PROGRESS → PENDING, RESOLVED
    - RESOLVED → CLOSED, OPEN (reabrir)
    - CLOSED → (terminal)
    """

    TRANSITIONS: Dict[TicketStatus, FrozenSet[TicketStatus]] = {
        TicketStatus.OPEN: frozenset({
            TicketStatus.PENDING,
            TicketStatus.IN_PROGRESS,
            TicketStatus.RESOLVED,
        }),
        TicketStatus.PENDING: frozenset({
            TicketStatus.OPEN,
            TicketStatus.IN_PROGRESS,
            TicketStatus.RESOLVED,
        }),
        TicketStatus.IN_PROGRESS: frozenset({
            TicketStatus.PENDING,
            TicketStatus.RESOLVED,
        }),
        TicketStatus.RESOLVED: frozenset({
            TicketStatus.CLOSED,
            TicketStatus.OPEN,
        }),
        TicketStatus.CLOSED: frozenset(),
    }

    @classmethod
    def allowed_targets(cls, from_status: TicketStatus) -> FrozenSet[TicketStatus]:
        return cls.TRANSITIONS.get(from_status, frozenset())

    @classmethod
    def can_transition(cls, from_status: TicketStatus, to_status: TicketStatus) -> bool:
        return to_status in cls.allowed_targets(from_status)

    @classmethod
    def is_terminal(cls, status: TicketStatus) -> bool:
        return not cls.allowed_targets(status)

    @classmethod
    def ensure_transition(cls, from_status: TicketStatus, to_status: TicketStatus) -> None:
        """
        Raises:
            IllegalTransitionError: Se a transição não está na tabela
        """
        if not cls.can_transition(from_status, to_status):
            raise IllegalTransitionError(from_status, to_status)


class PriorityPolicy:
    """
    SLA e severidade por prioridade.

    SLA por Prioridade:
        URGENT: 4 horas (severidade 4)
        HIGH: 8 horas (severidade 3)
        NORMAL: 24 horas (severidade 2)
        LOW: 48 horas (severidade 1)
    """

    DEFAULT = TicketPriority.NORMAL

    SLA_HOURS: Dict[TicketPriority, int] = {
        TicketPriority.LOW: 48,
        TicketPriority.NORMAL: 24,
        TicketPriority.HIGH: 8,
        TicketPriority.URGENT: 4,
    }

    SEVERITY: Dict[TicketPriority, int] = {
        TicketPriority.LOW: 1,
        TicketPriority.NORMAL: 2,
        TicketPriority.HIGH: 3,
        TicketPriority.URGENT: 4,
    }

    @classmethod
    def sla_duration(cls, priority: TicketPriority) -> timedelta:
        return timedelta(hours=cls.SLA_HOURS[priority])

    @classmethod
    def severity(cls, priority: TicketPriority) -> int:
        return cls.SEVERITY[priority]

    @classmethod
    def compute_deadline(cls, priority: TicketPriority, from_time: datetime) -> datetime:
        return from_time + cls.sla_duration(priority)

    @classmethod
    def next_level(cls, priority: TicketPriority) -> Optional[TicketPriority]:
        """Prioridade um degrau acima, ou None se já for a mais alta."""
        target = cls.severity(priority) + 1
        for candidate, severity in cls.SEVERITY.items():
            if severity == target:
                return candidate
        return None

    @classmethod
    def is_higher(cls, a: TicketPriority, b: TicketPriority) -> bool:
        return cls.severity(a) > cls.severity(b)
