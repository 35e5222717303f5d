"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

Tipos de DTOs:
- Input DTOs: Dados de entrada já extraídos da requisição (imutáveis)
- Output DTOs: Formatam dados para resposta (API JSON)

Actor: todo DTO de comando que altera estado carrega `actor_id` e
`actor_name` opcionais; o domínio nunca busca o ator por conta própria.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .entities import MessageEntity, StatusHistoryEntry, TicketEntity
from .value_objects import Actor


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CreateTicketInputDTO:
    """
    DTO de entrada para abrir ticket.

    Attributes:
        subject: Assunto do ticket
        content: Mensagem inicial do cliente (opcional)
        customer_id: Cliente autenticado
        guest_email/guest_name/guest_phone: Contato de convidado
        priority: Valor da prioridade (ex: "high")
        category_id: Categoria (validada por existência)
        order_id/order_number: Pedido relacionado
        tags: Tags iniciais
        attachments: Anexos da mensagem inicial (dicts name/url/size/mime_type)
    """

    subject: str
    content: str = ""
    customer_id: Optional[str] = None
    guest_email: Optional[str] = None
    guest_name: str = ""
    guest_phone: str = ""
    priority: str = "normal"
    category_id: Optional[str] = None
    order_id: Optional[str] = None
    order_number: str = ""
    tags: tuple = field(default_factory=tuple)
    attachments: tuple = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "subject": self.subject,
            "content": self.content,
            "customer_id": self.customer_id,
            "guest_email": self.guest_email,
            "guest_name": self.guest_name,
            "guest_phone": self.guest_phone,
            "priority": self.priority,
            "category_id": self.category_id,
            "order_id": self.order_id,
            "order_number": self.order_number,
            "tags": list(self.tags),
            "attachments": list(self.attachments),
        }


@dataclass(frozen=True)
class TicketActionInputDTO:
    """
    DTO genérico para ações de status/prioridade sobre um ticket.

    Usado por: desatribuir, escalar, pendente, resolver, fechar, reabrir.

    Attributes:
        ticket_id: ID do ticket
        notes: Motivo / resolução / observação
        actor_id: Quem executa a ação
        actor_name: Nome de exibição do ator
    """

    ticket_id: str
    notes: str = ""
    actor_id: Optional[str] = None
    actor_name: str = ""

    @property
    def actor(self) -> Optional[Actor]:
        return Actor.from_values(self.actor_id, self.actor_name)

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "notes": self.notes,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
        }


@dataclass(frozen=True)
class AssignTicketInputDTO:
    """
    DTO de entrada para atribuir ticket.

    Attributes:
        ticket_id: ID do ticket
        agent_id: Agente que passa a responder pelo ticket
        allow_reassign: Se False, falha quando outro agente já detém o ticket
    """

    ticket_id: str
    agent_id: str
    actor_id: Optional[str] = None
    actor_name: str = ""
    allow_reassign: bool = True

    @property
    def actor(self) -> Optional[Actor]:
        return Actor.from_values(self.actor_id, self.actor_name)

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "agent_id": self.agent_id,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "allow_reassign": self.allow_reassign,
        }


@dataclass(frozen=True)
class ChangeStatusInputDTO:
    """DTO de entrada para mudança administrativa de status."""

    ticket_id: str
    status: str
    notes: str = ""
    actor_id: Optional[str] = None
    actor_name: str = ""

    @property
    def actor(self) -> Optional[Actor]:
        return Actor.from_values(self.actor_id, self.actor_name)

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "status": self.status,
            "notes": self.notes,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
        }


@dataclass(frozen=True)
class ChangePriorityInputDTO:
    """DTO de entrada para alterar prioridade diretamente."""

    ticket_id: str
    priority: str
    reason: str = ""
    actor_id: Optional[str] = None
    actor_name: str = ""

    @property
    def actor(self) -> Optional[Actor]:
        return Actor.from_values(self.actor_id, self.actor_name)

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "priority": self.priority,
            "reason": self.reason,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
        }


@dataclass(frozen=True)
class AddMessageInputDTO:
    """
    DTO de entrada para adicionar mensagem.

    Attributes:
        ticket_id: ID do ticket
        sender_type: "customer", "agent" ou "system"
        content: Texto da mensagem (pode vir de resposta pronta)
        canned_response_id: Resposta pronta usada como conteúdo
        is_internal: Nota interna (apenas agentes/sistema)
        attachments: Anexos (dicts name/url/size/mime_type)
    """

    ticket_id: str
    sender_type: str
    content: str = ""
    sender_id: Optional[str] = None
    sender_name: str = ""
    sender_email: str = ""
    is_internal: bool = False
    canned_response_id: Optional[str] = None
    attachments: tuple = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "sender_type": self.sender_type,
            "content": self.content,
            "sender_id": self.sender_id,
            "sender_name": self.sender_name,
            "sender_email": self.sender_email,
            "is_internal": self.is_internal,
            "canned_response_id": self.canned_response_id,
            "attachments": list(self.attachments),
        }


@dataclass(frozen=True)
class MarkMessagesReadInputDTO:
    """Leitor ("customer" ou "agent") marca mensagens da outra parte."""

    ticket_id: str
    reader: str

    def to_dict(self) -> dict:
        return {"ticket_id": self.ticket_id, "reader": self.reader}


@dataclass(frozen=True)
class RateSatisfactionInputDTO:
    ticket_id: str
    rating: int
    comment: str = ""

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "rating": self.rating,
            "comment": self.comment,
        }


@dataclass(frozen=True)
class ChangeCategoryInputDTO:
    ticket_id: str
    category_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"ticket_id": self.ticket_id, "category_id": self.category_id}


@dataclass(frozen=True)
class TagInputDTO:
    ticket_id: str
    tag: str

    def to_dict(self) -> dict:
        return {"ticket_id": self.ticket_id, "tag": self.tag}


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class MessageOutputDTO:
    id: str
    sender_type: str
    sender_id: Optional[str]
    sender_name: str
    content: str
    is_internal: bool
    attachments: List[dict]
    read_at: Optional[datetime]
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: MessageEntity) -> "MessageOutputDTO":
        return cls(
            id=entity.id,
            sender_type=entity.sender_type.value,
            sender_id=entity.sender_id,
            sender_name=entity.sender_name,
            content=entity.content,
            is_internal=entity.is_internal,
            attachments=[a.to_dict() for a in entity.attachments],
            read_at=entity.read_at,
            created_at=entity.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sender_type": self.sender_type,
            "sender_id": self.sender_id,
            "sender_name": self.sender_name,
            "content": self.content,
            "is_internal": self.is_internal,
            "attachments": self.attachments,
            "read_at": _iso(self.read_at),
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class StatusHistoryOutputDTO:
    from_status: str
    to_status: str
    changed_by: Optional[str]
    changed_by_name: str
    notes: str
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: StatusHistoryEntry) -> "StatusHistoryOutputDTO":
        return cls(
            from_status=entry.from_status.value,
            to_status=entry.to_status.value,
            changed_by=entry.changed_by,
            changed_by_name=entry.changed_by_name,
            notes=entry.notes,
            created_at=entry.created_at,
        )

    def to_dict(self) -> dict:
        return {
            "from_status": self.from_status,
            "to_status": self.to_status,
            "changed_by": self.changed_by,
            "changed_by_name": self.changed_by_name,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class TicketOutputDTO:
    """
    DTO de saída completo com dados do ticket.

    `is_overdue` é calculado no momento da conversão (nunca persistido).
    Notas internas só são incluídas quando `include_internal=True`.
    """

    id: str
    ticket_number: str
    subject: str
    status: str
    priority: str
    customer_id: Optional[str]
    guest_email: Optional[str]
    guest_name: str
    category_id: Optional[str]
    assigned_to: Optional[str]
    order_id: Optional[str]
    order_number: str
    sla_deadline: Optional[datetime]
    is_overdue: bool
    first_response_at: Optional[datetime]
    resolved_at: Optional[datetime]
    closed_at: Optional[datetime]
    satisfaction_rating: Optional[int]
    satisfaction_comment: str
    created_at: datetime
    updated_at: datetime
    tags: List[str] = field(default_factory=list)
    messages: List[MessageOutputDTO] = field(default_factory=list)
    status_history: List[StatusHistoryOutputDTO] = field(default_factory=list)

    @classmethod
    def from_entity(cls, entity: TicketEntity, include_internal: bool = True) -> "TicketOutputDTO":
        """
        Converte entidade em DTO.

        Args:
            entity: Agregado de ticket
            include_internal: Incluir notas internas (visão do agente)
        """
        return cls(
            id=entity.id,
            ticket_number=entity.ticket_number,
            subject=entity.subject,
            status=entity.status.value,
            priority=entity.priority.value,
            customer_id=entity.customer_id,
            guest_email=entity.guest.email if entity.guest else None,
            guest_name=entity.owner_name,
            category_id=entity.category_id,
            assigned_to=entity.assigned_to,
            order_id=entity.order_id,
            order_number=entity.order_number,
            sla_deadline=entity.sla_deadline,
            is_overdue=entity.is_overdue,
            first_response_at=entity.first_response_at,
            resolved_at=entity.resolved_at,
            closed_at=entity.closed_at,
            satisfaction_rating=entity.satisfaction_rating,
            satisfaction_comment=entity.satisfaction_comment,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            tags=list(entity.tags),
            messages=[
                MessageOutputDTO.from_entity(m)
                for m in entity.visible_messages(include_internal)
            ],
            status_history=[
                StatusHistoryOutputDTO.from_entity(h) for h in entity.status_history
            ],
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "ticket_number": self.ticket_number,
            "subject": self.subject,
            "status": self.status,
            "priority": self.priority,
            "customer_id": self.customer_id,
            "guest_email": self.guest_email,
            "guest_name": self.guest_name,
            "category_id": self.category_id,
            "assigned_to": self.assigned_to,
            "order_id": self.order_id,
            "order_number": self.order_number,
            "sla_deadline": _iso(self.sla_deadline),
            "is_overdue": self.is_overdue,
            "first_response_at": _iso(self.first_response_at),
            "resolved_at": _iso(self.resolved_at),
            "closed_at": _iso(self.closed_at),
            "satisfaction_rating": self.satisfaction_rating,
            "satisfaction_comment": self.satisfaction_comment,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "tags": self.tags,
            "messages": [m.to_dict() for m in self.messages],
            "status_history": [h.to_dict() for h in self.status_history],
        }


@dataclass
class SLABreachReportDTO:
    """Resultado da varredura de SLA."""

    checked: int
    breached: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "checked": self.checked,
            "breached": self.breached,
            "skipped": self.skipped,
        }
