"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- TicketEntity → campos de TicketModel (para persistência)
- TicketModel (+ mensagens e histórico) → TicketEntity
- MessageEntity / StatusHistoryEntry ↔ models filhos

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Reconstituição bypassa factories (dados já validados)
"""

from typing import Iterable, List, Optional

from src.core.tickets.entities import (
    MessageEntity,
    StatusHistoryEntry,
    TicketEntity,
)
from src.core.tickets.value_objects import (
    Attachment,
    GuestContact,
    SenderType,
    TicketPriority,
    TicketStatus,
)

from .models import TicketMessageModel, TicketModel, TicketStatusHistoryModel


class MessageMapper:

    @staticmethod
    def to_model(entity: MessageEntity, position: int) -> TicketMessageModel:
        return TicketMessageModel(
            id=entity.id,
            ticket_id=entity.ticket_id,
            position=position,
            sender_type=entity.sender_type.value,
            sender_id=entity.sender_id,
            sender_name=entity.sender_name,
            sender_email=entity.sender_email,
            content=entity.content,
            attachments=[a.to_dict() for a in entity.attachments],
            is_internal=entity.is_internal,
            read_at=entity.read_at,
            created_at=entity.created_at,
        )

    @staticmethod
    def to_entity(model: TicketMessageModel) -> MessageEntity:
        return MessageEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            sender_type=SenderType(model.sender_type),
            sender_id=model.sender_id,
            sender_name=model.sender_name,
            sender_email=model.sender_email,
            content=model.content,
            attachments=[Attachment.from_dict(a) for a in model.attachments or []],
            is_internal=model.is_internal,
            read_at=model.read_at,
            created_at=model.created_at,
        )


class StatusHistoryMapper:

    @staticmethod
    def to_model(entry: StatusHistoryEntry, position: int) -> TicketStatusHistoryModel:
        return TicketStatusHistoryModel(
            id=entry.id,
            ticket_id=entry.ticket_id,
            position=position,
            from_status=entry.from_status.value,
            to_status=entry.to_status.value,
            changed_by=entry.changed_by,
            changed_by_name=entry.changed_by_name,
            notes=entry.notes,
            created_at=entry.created_at,
        )

    @staticmethod
    def to_entity(model: TicketStatusHistoryModel) -> StatusHistoryEntry:
        return StatusHistoryEntry(
            id=model.id,
            ticket_id=model.ticket_id,
            from_status=TicketStatus(model.from_status),
            to_status=TicketStatus(model.to_status),
            changed_by=model.changed_by,
            changed_by_name=model.changed_by_name,
            notes=model.notes,
            created_at=model.created_at,
        )


class TicketMapper:
    """
    Mapper para conversão entre TicketEntity e TicketModel.

    - to_fields(): Entity → dict de colunas (sem id/version)
    - to_entity(): Model → Entity (mensagens e histórico via prefetch)
    """

    @staticmethod
    def to_fields(entity: TicketEntity) -> dict:
        """
        Colunas do ticket para create/update.

        Note:
            `id` e `version` ficam a cargo do Repository.
        """
        guest = entity.guest
        return {
            'ticket_number': entity.ticket_number,
            'customer_id': entity.customer_id,
            'guest_email': guest.email if guest else '',
            'guest_name': guest.name if guest else '',
            'guest_phone': guest.phone if guest else '',
            'subject': entity.subject,
            'category_id': entity.category_id,
            'order_id': entity.order_id,
            'order_number': entity.order_number,
            'status': entity.status.value,
            'priority': entity.priority.value,
            'assigned_to': entity.assigned_to,
            'sla_deadline': entity.sla_deadline,
            'sla_breach_reported_at': entity.sla_breach_reported_at,
            'first_response_at': entity.first_response_at,
            'resolved_at': entity.resolved_at,
            'closed_at': entity.closed_at,
            'satisfaction_rating': entity.satisfaction_rating,
            'satisfaction_comment': entity.satisfaction_comment,
            'tags': list(entity.tags),
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }

    @staticmethod
    def to_entity(
        model: TicketModel,
        messages: Optional[Iterable[TicketMessageModel]] = None,
        history: Optional[Iterable[TicketStatusHistoryModel]] = None,
    ) -> TicketEntity:
        """
        Reconstitui o agregado.

        Args:
            model: Linha do ticket
            messages: Mensagens (default: model.messages.all())
            history: Histórico (default: model.status_history.all())
        """
        if messages is None:
            messages = model.messages.all()
        if history is None:
            history = model.status_history.all()

        guest = None
        if model.guest_email:
            guest = GuestContact(
                email=model.guest_email,
                name=model.guest_name,
                phone=model.guest_phone,
            )

        return TicketEntity(
            id=model.id,
            ticket_number=model.ticket_number,
            customer_id=model.customer_id,
            guest=guest,
            subject=model.subject,
            category_id=model.category_id,
            order_id=model.order_id,
            order_number=model.order_number,
            status=TicketStatus(model.status),
            priority=TicketPriority(model.priority),
            assigned_to=model.assigned_to,
            sla_deadline=model.sla_deadline,
            sla_breach_reported_at=model.sla_breach_reported_at,
            first_response_at=model.first_response_at,
            resolved_at=model.resolved_at,
            closed_at=model.closed_at,
            satisfaction_rating=model.satisfaction_rating,
            satisfaction_comment=model.satisfaction_comment,
            tags=list(model.tags or []),
            messages=[MessageMapper.to_entity(m) for m in messages],
            status_history=[StatusHistoryMapper.to_entity(h) for h in history],
            created_at=model.created_at,
            updated_at=model.updated_at,
            version=model.version,
        )

    @classmethod
    def to_entity_list(cls, models: Iterable[TicketModel]) -> List[TicketEntity]:
        return [cls.to_entity(m) for m in models]
