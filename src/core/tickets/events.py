"""
Domain Events do Domínio de Tickets.

União fechada de eventos levantados pelo agregado TicketEntity:
- TicketCreated ("ticket.created")
- TicketAssigned ("ticket.assigned")
- TicketStatusChanged ("ticket.status_changed")
- TicketEscalated ("ticket.escalated")
- TicketResolved ("ticket.resolved")
- TicketClosed ("ticket.closed")
- TicketSLABreached ("ticket.sla_breached")

Uso:
    Eventos são acumulados no agregado e drenados pelo UnitOfWork
    após o commit.

    with uow:
        ticket = TicketEntity.create(...)
        repo.save(ticket)
        uow.track(ticket)
    # eventos publicados aqui
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional, Type, Union

from src.core.shared.events import DomainEvent


# =============================================================================
# CONSTANTES DE TIPO
# =============================================================================

TICKET_CREATED = "ticket.created"
TICKET_ASSIGNED = "ticket.assigned"
TICKET_STATUS_CHANGED = "ticket.status_changed"
TICKET_ESCALATED = "ticket.escalated"
TICKET_RESOLVED = "ticket.resolved"
TICKET_CLOSED = "ticket.closed"
TICKET_SLA_BREACHED = "ticket.sla_breached"


@dataclass(frozen=True)
class TicketEventBase(DomainEvent):
    aggregate_type: ClassVar[str] = "Ticket"


# =============================================================================
# EVENTOS
# =============================================================================

@dataclass(frozen=True)
class TicketCreated(TicketEventBase):
    """
    Ticket foi criado.

    Handlers típicos:
    - Enviar confirmação ao cliente (com o número do ticket)
    - Notificar fila de suporte
    """

    event_type: ClassVar[str] = TICKET_CREATED

    ticket_number: str = ""
    subject: str = ""
    priority: str = ""
    customer_id: Optional[str] = None
    guest_email: Optional[str] = None
    category_id: Optional[str] = None
    sla_deadline: Optional[datetime] = None


@dataclass(frozen=True)
class TicketAssigned(TicketEventBase):
    """Ticket foi atribuído a um agente."""

    event_type: ClassVar[str] = TICKET_ASSIGNED

    agent_id: str = ""
    previous_agent_id: Optional[str] = None
    actor_id: Optional[str] = None
    actor_name: str = ""


@dataclass(frozen=True)
class TicketStatusChanged(TicketEventBase):
    """
    Status do ticket mudou.

    Levantado para toda transição, inclusive as implícitas
    (atribuição, resposta do cliente em ticket pendente).
    """

    event_type: ClassVar[str] = TICKET_STATUS_CHANGED

    from_status: str = ""
    to_status: str = ""
    actor_id: Optional[str] = None
    notes: str = ""


@dataclass(frozen=True)
class TicketEscalated(TicketEventBase):
    """Prioridade subiu e o prazo de SLA foi recalculado."""

    event_type: ClassVar[str] = TICKET_ESCALATED

    previous_priority: str = ""
    new_priority: str = ""
    reason: str = ""
    sla_deadline: Optional[datetime] = None
    actor_id: Optional[str] = None


@dataclass(frozen=True)
class TicketResolved(TicketEventBase):
    """
    Ticket foi resolvido.

    Handlers típicos:
    - Enviar pesquisa de satisfação
    - Atualizar métricas de SLA
    """

    event_type: ClassVar[str] = TICKET_RESOLVED

    resolution: str = ""
    resolved_at: Optional[datetime] = None
    within_sla: bool = True
    actor_id: Optional[str] = None


@dataclass(frozen=True)
class TicketClosed(TicketEventBase):
    """Ticket foi fechado (estado terminal)."""

    event_type: ClassVar[str] = TICKET_CLOSED

    closed_at: Optional[datetime] = None
    actor_id: Optional[str] = None


@dataclass(frozen=True)
class TicketSLABreached(TicketEventBase):
    """
    Prazo de SLA expirou com o ticket ainda ativo.

    Levantado no máximo uma vez por prazo pela varredura periódica.
    """

    event_type: ClassVar[str] = TICKET_SLA_BREACHED

    sla_deadline: Optional[datetime] = None
    priority: str = ""
    assigned_to: Optional[str] = None
    overdue_seconds: float = 0.0


TicketEvent = Union[
    TicketCreated,
    TicketAssigned,
    TicketStatusChanged,
    TicketEscalated,
    TicketResolved,
    TicketClosed,
    TicketSLABreached,
]

EVENT_TYPES: Dict[str, Type[TicketEventBase]] = {
    cls.event_type: cls
    for cls in (
        TicketCreated,
        TicketAssigned,
        TicketStatusChanged,
        TicketEscalated,
        TicketResolved,
        TicketClosed,
        TicketSLABreached,
    )
}


def _is_datetime_field(annotation: Any) -> bool:
    return annotation is datetime or datetime in getattr(annotation, "__args__", ())


def event_from_dict(data: Dict[str, Any]) -> TicketEventBase:
    """
    Reconstrói evento a partir do dicionário produzido por `to_dict()`.

    Raises:
        ValueError: Se o tipo do evento é desconhecido
    """
    event_type = data.get("event_type")
    event_cls = EVENT_TYPES.get(event_type)
    if event_cls is None:
        raise ValueError(f"Tipo de evento desconhecido: {event_type}")

    payload = dict(data.get("data", {}))
    for f in fields(event_cls):
        value = payload.get(f.name)
        if isinstance(value, str) and _is_datetime_field(f.type):
            payload[f.name] = datetime.fromisoformat(value)

    return event_cls(
        aggregate_id=data["aggregate_id"],
        occurred_at=datetime.fromisoformat(data["occurred_at"]),
        event_id=data["event_id"],
        version=data.get("version", 1),
        **payload,
    )
