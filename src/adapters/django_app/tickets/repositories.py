"""
Repositórios Django para persistência de Tickets.

Implementam as interfaces (Ports) definidas no Core.
São DRIVEN ADAPTERS - acionados pelo Core em resposta a operações.

Responsabilidades:
- Gravar ticket, mensagens novas, leituras e histórico novo em uma
  única transação
- Controle otimista de concorrência pela coluna `version`
- Lookups de referência (categorias, respostas prontas)
"""

from datetime import datetime
from typing import List, Optional
import logging

from django.db import IntegrityError, transaction
from django.db.models import F

from src.core.shared.exceptions import ConcurrencyError
from src.core.tickets.entities import TicketEntity
from src.core.tickets.value_objects import TicketStatus

from .mappers import MessageMapper, StatusHistoryMapper, TicketMapper
from .models import (
    CannedResponseModel,
    CategoryModel,
    TicketMessageModel,
    TicketModel,
    TicketStatusHistoryModel,
)

logger = logging.getLogger(__name__)


ACTIVE_STATUSES = [s.value for s in TicketStatus if s.is_active]


class DjangoTicketRepository:
    """
    Implementação Django do TicketRepository.

    Example:
        repo = DjangoTicketRepository()
        repo.save(ticket)
        ticket = repo.get_by_id(ticket.id)
    """

    def __init__(self):
        self._mapper = TicketMapper()

    def _queryset(self):
        return TicketModel.objects.prefetch_related('messages', 'status_history')

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste ticket (create ou update) e seus filhos novos.

        Raises:
            ConcurrencyError: Outro processo gravou o ticket antes
                (ou número de ticket duplicado)
        """
        fields = self._mapper.to_fields(ticket)

        try:
            with transaction.atomic():
                if ticket.version == 0:
                    TicketModel.objects.create(id=ticket.id, version=1, **fields)
                else:
                    updated = TicketModel.objects.filter(
                        id=ticket.id,
                        version=ticket.version,
                    ).update(version=F('version') + 1, **fields)
                    if updated == 0:
                        raise ConcurrencyError(
                            f"Ticket {ticket.ticket_number} foi modificado por outro processo"
                        )

                self._save_messages(ticket)
                self._save_history(ticket)
        except IntegrityError as e:
            logger.warning(f"Integrity error saving ticket {ticket.id}: {e}")
            raise ConcurrencyError(
                f"Conflito ao gravar ticket {ticket.ticket_number}"
            ) from e

        ticket.version += 1
        logger.debug(f"Ticket saved: {ticket.ticket_number} v{ticket.version}")

    def _save_messages(self, ticket: TicketEntity) -> None:
        stored = dict(
            TicketMessageModel.objects.filter(ticket_id=ticket.id)
            .values_list('id', 'read_at')
        )

        new_rows = []
        for position, message in enumerate(ticket.messages):
            if message.id not in stored:
                new_rows.append(MessageMapper.to_model(message, position))
            elif message.read_at and stored[message.id] is None:
                TicketMessageModel.objects.filter(id=message.id).update(
                    read_at=message.read_at
                )

        if new_rows:
            TicketMessageModel.objects.bulk_create(new_rows)

    def _save_history(self, ticket: TicketEntity) -> None:
        stored = set(
            TicketStatusHistoryModel.objects.filter(ticket_id=ticket.id)
            .values_list('id', flat=True)
        )
        new_rows = [
            StatusHistoryMapper.to_model(entry, position)
            for position, entry in enumerate(ticket.status_history)
            if entry.id not in stored
        ]
        if new_rows:
            TicketStatusHistoryModel.objects.bulk_create(new_rows)

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        try:
            model = self._queryset().get(id=ticket_id)
        except TicketModel.DoesNotExist:
            logger.debug(f"Ticket not found: {ticket_id}")
            return None
        return self._mapper.to_entity(model)

    def get_by_number(self, ticket_number: str) -> Optional[TicketEntity]:
        number = (ticket_number or '').strip().upper()
        model = self._queryset().filter(ticket_number=number).first()
        return self._mapper.to_entity(model) if model else None

    def exists(self, ticket_id: str) -> bool:
        return TicketModel.objects.filter(id=ticket_id).exists()

    def list_overdue(self, now: datetime) -> List[TicketEntity]:
        """Tickets ativos com prazo de SLA vencido e ainda não avisados."""
        models = self._queryset().filter(
            status__in=ACTIVE_STATUSES,
            sla_deadline__lt=now,
        ).exclude(
            sla_breach_reported_at__gte=F('sla_deadline'),
        ).order_by('sla_deadline')
        return self._mapper.to_entity_list(models)


class DjangoCategoryLookup:
    """Existência de categorias ativas."""

    def exists(self, category_id: str) -> bool:
        return CategoryModel.objects.filter(id=category_id, is_active=True).exists()


class DjangoCannedResponseLookup:
    """Conteúdo e contagem de uso de respostas prontas."""

    def get_content(self, response_id: str) -> Optional[str]:
        return (
            CannedResponseModel.objects.filter(id=response_id, is_active=True)
            .values_list('content', flat=True)
            .first()
        )

    def record_usage(self, response_id: str) -> None:
        CannedResponseModel.objects.filter(id=response_id).update(
            usage_count=F('usage_count') + 1
        )
