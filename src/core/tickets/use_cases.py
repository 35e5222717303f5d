"""
Use Cases (Application Services) do Domínio de Tickets.

Cada serviço executa um comando completo:
1. Abre o Unit of Work
2. Carrega (ou cria) o agregado
3. Invoca UMA operação do agregado
4. Persiste via repositório e registra o agregado no UoW
5. Eventos são publicados pelo UoW somente após o commit

Use Cases implementados:
- CreateTicketService, GetTicketService
- AssignTicketService, UnassignTicketService
- EscalateTicketService, ChangePriorityService
- SetPendingService, ResolveTicketService, CloseTicketService,
  ReopenTicketService, ChangeStatusService
- AddMessageService, MarkMessagesReadService
- RateSatisfactionService, ChangeCategoryService,
  AddTagService, RemoveTagService
- CheckOverdueTicketsService (varredura de SLA)

Regras de SLA, status e escalação ficam no agregado; os serviços
nunca as recalculam.
"""

from datetime import datetime
from typing import Optional

from src.core.shared.exceptions import ConcurrencyError, EntityNotFoundError
from src.core.shared.interfaces import UnitOfWork

from .dtos import (
    AddMessageInputDTO,
    AssignTicketInputDTO,
    ChangeCategoryInputDTO,
    ChangePriorityInputDTO,
    ChangeStatusInputDTO,
    CreateTicketInputDTO,
    MarkMessagesReadInputDTO,
    RateSatisfactionInputDTO,
    SLABreachReportDTO,
    TagInputDTO,
    TicketActionInputDTO,
    TicketOutputDTO,
)
from .entities import MessageEntity, TicketEntity
from .ports import (
    CannedResponseLookup,
    CategoryLookup,
    TicketRepository,
    load_ticket,
)
from .value_objects import (
    Attachment,
    GuestContact,
    SenderType,
    TicketPriority,
    TicketStatus,
    utc_now,
)


def _ensure_category(lookup: Optional[CategoryLookup], category_id: Optional[str]) -> None:
    if category_id and lookup is not None and not lookup.exists(category_id):
        raise EntityNotFoundError(
            f"Categoria {category_id} não encontrada",
            entity_type="Category",
            entity_id=category_id
        )


def _attachments(raw) -> list:
    return [a if isinstance(a, Attachment) else Attachment.from_dict(a) for a in raw or ()]


class TicketCommandService:
    """
    Base dos serviços que alteram um ticket existente.

    Subclasses implementam `apply(ticket, input_dto)`; carga,
    persistência e rastreamento de eventos ficam aqui.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        """
        Args:
            ticket_repo: Repositório para persistência
            uow: Unit of Work para transação atômica
        """
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, input_dto) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
            DomainException: Regras violadas pelo agregado
        """
        with self.uow:
            ticket = load_ticket(self.ticket_repo, input_dto.ticket_id)
            self.apply(ticket, input_dto)
            self.ticket_repo.save(ticket)
            self.uow.track(ticket)

        return TicketOutputDTO.from_entity(ticket)

    def apply(self, ticket: TicketEntity, input_dto) -> None:
        raise NotImplementedError


# =============================================================================
# CRIAÇÃO / CONSULTA
# =============================================================================

class CreateTicketService:
    """
    Use Case: Abrir um novo ticket.

    Fluxo:
    1. Converter prioridade e contato do convidado
    2. Validar categoria (existência)
    3. Criar agregado (+ mensagem inicial do cliente, se houver)
    4. Persistir e publicar TicketCreated após commit

    Example:
        service = CreateTicketService(ticket_repo, uow, category_lookup)
        output = service.execute(CreateTicketInputDTO(
            subject="Pedido atrasado",
            content="Meu pedido não chegou",
            guest_email="a@b.com",
        ))
        print(output.ticket_number)
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        category_lookup: Optional[CategoryLookup] = None,
    ):
        self.ticket_repo = ticket_repo
        self.uow = uow
        self.category_lookup = category_lookup

    def execute(self, input_dto: CreateTicketInputDTO) -> TicketOutputDTO:
        """
        Raises:
            ValidationError: Dados inválidos (assunto, dono, prioridade)
            EntityNotFoundError: Categoria inexistente
        """
        priority = TicketPriority.from_string(input_dto.priority or "normal")

        guest = None
        if input_dto.guest_email:
            guest = GuestContact(
                email=input_dto.guest_email.strip(),
                name=(input_dto.guest_name or "").strip(),
                phone=(input_dto.guest_phone or "").strip(),
            )

        with self.uow:
            _ensure_category(self.category_lookup, input_dto.category_id)

            ticket = TicketEntity.create(
                subject=input_dto.subject,
                customer_id=input_dto.customer_id,
                guest=guest,
                priority=priority,
                category_id=input_dto.category_id,
                order_id=input_dto.order_id,
                order_number=input_dto.order_number,
                tags=input_dto.tags,
            )

            if input_dto.content and input_dto.content.strip():
                ticket.add_message(MessageEntity.from_customer(
                    ticket.id,
                    input_dto.content,
                    customer_id=input_dto.customer_id,
                    name=guest.name if guest else "",
                    email=guest.email if guest else "",
                    attachments=_attachments(input_dto.attachments),
                ))

            self.ticket_repo.save(ticket)
            self.uow.track(ticket)

        return TicketOutputDTO.from_entity(ticket)


class GetTicketService:
    """Use Case: Obter ticket por ID ou pelo número legível."""

    def __init__(self, ticket_repo: TicketRepository):
        self.ticket_repo = ticket_repo

    def execute(self, ticket_id: str, include_internal: bool = True) -> TicketOutputDTO:
        """
        Raises:
            EntityNotFoundError: Se ticket não existe
        """
        ticket = load_ticket(self.ticket_repo, ticket_id)
        return TicketOutputDTO.from_entity(ticket, include_internal=include_internal)

    def by_number(self, ticket_number: str, include_internal: bool = False) -> TicketOutputDTO:
        ticket = self.ticket_repo.get_by_number(ticket_number)
        if ticket is None:
            raise EntityNotFoundError(
                f"Ticket {ticket_number} não encontrado",
                entity_type="Ticket",
                entity_id=ticket_number
            )
        return TicketOutputDTO.from_entity(ticket, include_internal=include_internal)


# =============================================================================
# ATRIBUIÇÃO
# =============================================================================

class AssignTicketService(TicketCommandService):
    """Use Case: Atribuir ticket a um agente (abre -> em andamento)."""

    def apply(self, ticket: TicketEntity, input_dto: AssignTicketInputDTO) -> None:
        ticket.assign(
            input_dto.agent_id,
            input_dto.actor,
            allow_reassign=input_dto.allow_reassign,
        )


class UnassignTicketService(TicketCommandService):
    def apply(self, ticket: TicketEntity, input_dto: TicketActionInputDTO) -> None:
        ticket.unassign(input_dto.actor)


# =============================================================================
# PRIORIDADE
# =============================================================================

class EscalateTicketService(TicketCommandService):
    """Use Case: Escalar prioridade em um nível."""

    def apply(self, ticket: TicketEntity, input_dto: TicketActionInputDTO) -> None:
        ticket.escalate(input_dto.notes, input_dto.actor)


class ChangePriorityService(TicketCommandService):
    def apply(self, ticket: TicketEntity, input_dto: ChangePriorityInputDTO) -> None:
        priority = TicketPriority.from_string(input_dto.priority)
        ticket.change_priority(priority, input_dto.actor, reason=input_dto.reason)


# =============================================================================
# STATUS
# =============================================================================

class SetPendingService(TicketCommandService):
    def apply(self, ticket: TicketEntity, input_dto: TicketActionInputDTO) -> None:
        ticket.set_pending(input_dto.notes, input_dto.actor)


class ResolveTicketService(TicketCommandService):
    """Use Case: Resolver ticket (registra resolved_at)."""

    def apply(self, ticket: TicketEntity, input_dto: TicketActionInputDTO) -> None:
        ticket.resolve(input_dto.notes, input_dto.actor)


class CloseTicketService(TicketCommandService):
    def apply(self, ticket: TicketEntity, input_dto: TicketActionInputDTO) -> None:
        ticket.close(input_dto.actor, input_dto.notes)


class ReopenTicketService(TicketCommandService):
    """Use Case: Reabrir ticket resolvido (limpa resolved_at)."""

    def apply(self, ticket: TicketEntity, input_dto: TicketActionInputDTO) -> None:
        ticket.reopen(input_dto.notes, input_dto.actor)


class ChangeStatusService(TicketCommandService):
    """Use Case: Mudança administrativa de status (qualquer alvo válido)."""

    def apply(self, ticket: TicketEntity, input_dto: ChangeStatusInputDTO) -> None:
        target = TicketStatus.from_string(input_dto.status)
        ticket.change_status(target, input_dto.actor, input_dto.notes)


# =============================================================================
# MENSAGENS
# =============================================================================

class AddMessageService(TicketCommandService):
    """
    Use Case: Adicionar mensagem ao ticket.

    Quando `canned_response_id` é informado, o conteúdo da resposta
    pronta é usado se a mensagem vier sem texto, e o uso é registrado.

    Efeitos no agregado: primeira resposta de agente e retorno de
    ticket pendente quando o cliente responde.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        canned_responses: Optional[CannedResponseLookup] = None,
    ):
        super().__init__(ticket_repo, uow)
        self.canned_responses = canned_responses

    def apply(self, ticket: TicketEntity, input_dto: AddMessageInputDTO) -> None:
        sender_type = SenderType.from_string(input_dto.sender_type)
        content = input_dto.content

        if input_dto.canned_response_id:
            canned = None
            if self.canned_responses is not None:
                canned = self.canned_responses.get_content(input_dto.canned_response_id)
            if canned is None:
                raise EntityNotFoundError(
                    f"Resposta pronta {input_dto.canned_response_id} não encontrada",
                    entity_type="CannedResponse",
                    entity_id=input_dto.canned_response_id
                )
            if not content or not content.strip():
                content = canned

        message = MessageEntity.create(
            ticket.id,
            sender_type,
            content,
            sender_id=input_dto.sender_id,
            sender_name=input_dto.sender_name,
            sender_email=input_dto.sender_email,
            attachments=_attachments(input_dto.attachments),
            is_internal=input_dto.is_internal,
        )
        ticket.add_message(message)

        if input_dto.canned_response_id:
            self.canned_responses.record_usage(input_dto.canned_response_id)


class MarkMessagesReadService:
    """Use Case: Marcar como lidas as mensagens da outra parte."""

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, input_dto: MarkMessagesReadInputDTO) -> int:
        """
        Returns:
            Quantidade de mensagens marcadas
        """
        reader = SenderType.from_string(input_dto.reader)
        with self.uow:
            ticket = load_ticket(self.ticket_repo, input_dto.ticket_id)
            marked = ticket.mark_messages_as_read(reader)
            if marked:
                self.ticket_repo.save(ticket)
        return marked


# =============================================================================
# SATISFAÇÃO / CATEGORIZAÇÃO
# =============================================================================

class RateSatisfactionService(TicketCommandService):
    def apply(self, ticket: TicketEntity, input_dto: RateSatisfactionInputDTO) -> None:
        ticket.rate_satisfaction(input_dto.rating, input_dto.comment)


class ChangeCategoryService(TicketCommandService):
    def __init__(
        self,
        ticket_repo: TicketRepository,
        uow: UnitOfWork,
        category_lookup: Optional[CategoryLookup] = None,
    ):
        super().__init__(ticket_repo, uow)
        self.category_lookup = category_lookup

    def apply(self, ticket: TicketEntity, input_dto: ChangeCategoryInputDTO) -> None:
        _ensure_category(self.category_lookup, input_dto.category_id)
        ticket.set_category(input_dto.category_id)


class AddTagService(TicketCommandService):
    def apply(self, ticket: TicketEntity, input_dto: TagInputDTO) -> None:
        ticket.add_tag(input_dto.tag)


class RemoveTagService(TicketCommandService):
    def apply(self, ticket: TicketEntity, input_dto: TagInputDTO) -> None:
        ticket.remove_tag(input_dto.tag)


# =============================================================================
# SLA
# =============================================================================

class CheckOverdueTicketsService:
    """
    Use Case: Varredura periódica de SLA.

    Para cada ticket ativo com prazo vencido, levanta TicketSLABreached
    (uma vez por prazo). Cada ticket é gravado em sua própria transação;
    conflito de versão apenas pula o ticket, que volta na próxima varredura.
    """

    def __init__(self, ticket_repo: TicketRepository, uow: UnitOfWork):
        self.ticket_repo = ticket_repo
        self.uow = uow

    def execute(self, now: Optional[datetime] = None) -> SLABreachReportDTO:
        now = now or utc_now()
        candidates = self.ticket_repo.list_overdue(now)
        report = SLABreachReportDTO(checked=len(candidates))

        for ticket in candidates:
            try:
                with self.uow:
                    if ticket.report_sla_breach(now):
                        self.ticket_repo.save(ticket)
                        self.uow.track(ticket)
                        report.breached.append(ticket.id)
            except ConcurrencyError:
                report.skipped.append(ticket.id)

        return report
