"""
Domínio de Tickets - Ciclo de vida de atendimento ao cliente.

Este módulo contém:
- Value objects (TicketStatus, TicketPriority, TicketNumber, ...)
- Políticas (StatusPolicy, PriorityPolicy)
- Agregado TicketEntity com MessageEntity e StatusHistoryEntry
- Domain Events (união fechada TicketEvent)
- DTOs, Ports e Use Cases

Características do Domínio:
- SLA calculado por prioridade e recalculado a cada mudança de prioridade
- Transições de status controladas por tabela
- Transições implícitas em atribuição e respostas do cliente
- Eventos publicados somente após commit
"""

from .value_objects import (
    TicketStatus,
    TicketPriority,
    SenderType,
    TicketNumber,
    GuestContact,
    Attachment,
    Actor,
)
from .policies import StatusPolicy, PriorityPolicy
from .entities import TicketEntity, MessageEntity, StatusHistoryEntry
from .events import (
    TicketEvent,
    TicketCreated,
    TicketAssigned,
    TicketStatusChanged,
    TicketEscalated,
    TicketResolved,
    TicketClosed,
    TicketSLABreached,
    EVENT_TYPES,
)
from .ports import TicketRepository, InMemoryTicketRepository
from .use_cases import (
    CreateTicketService,
    GetTicketService,
    AssignTicketService,
    EscalateTicketService,
    ResolveTicketService,
    CloseTicketService,
    ReopenTicketService,
    AddMessageService,
    CheckOverdueTicketsService,
)

__all__ = [
    # Value objects / policies
    "TicketStatus",
    "TicketPriority",
    "SenderType",
    "TicketNumber",
    "GuestContact",
    "Attachment",
    "Actor",
    "StatusPolicy",
    "PriorityPolicy",
    # Entities
    "TicketEntity",
    "MessageEntity",
    "StatusHistoryEntry",
    # Events
    "TicketEvent",
    "TicketCreated",
    "TicketAssigned",
    "TicketStatusChanged",
    "TicketEscalated",
    "TicketResolved",
    "TicketClosed",
    "TicketSLABreached",
    "EVENT_TYPES",
    # Ports
    "TicketRepository",
    "InMemoryTicketRepository",
    # Use Cases
    "CreateTicketService",
    "GetTicketService",
    "AssignTicketService",
    "EscalateTicketService",
    "ResolveTicketService",
    "CloseTicketService",
    "ReopenTicketService",
    "AddMessageService",
    "CheckOverdueTicketsService",
]
