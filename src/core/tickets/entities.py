"""
Entidades do Domínio de Tickets.

Entidades:
- TicketEntity: Agregado principal (fronteira de consistência)
- MessageEntity: Mensagem do histórico de conversa do ticket
- StatusHistoryEntry: Registro de auditoria de cada transição

Regras de Negócio Encapsuladas:
- Transições de status apenas via StatusPolicy
- Prazo de SLA sempre coerente com a prioridade atual
- Timestamps de primeira resposta/resolução/fechamento derivados
- Transições implícitas (atribuição, mensagens de agente e cliente)
- Eventos de domínio acumulados no próprio agregado
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
import uuid

from src.core.shared.exceptions import (
    AlreadyAssignedError,
    CannotModifyError,
    NotAssignedError,
    ValidationError,
)

from .events import (
    TicketAssigned,
    TicketClosed,
    TicketCreated,
    TicketEscalated,
    TicketEventBase,
    TicketResolved,
    TicketSLABreached,
    TicketStatusChanged,
)
from .policies import PriorityPolicy, StatusPolicy
from .value_objects import (
    Actor,
    Attachment,
    GuestContact,
    SenderType,
    TicketNumber,
    TicketPriority,
    TicketStatus,
    utc_now,
)


def _new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# MESSAGE
# =============================================================================

@dataclass
class MessageEntity:
    """
    Mensagem trocada no ticket.

    Imutável após criação, exceto `read_at`. Notas internas
    (`is_internal=True`) nunca são exibidas ao cliente.

    Example:
        msg = MessageEntity.from_agent(ticket.id, "agent-1", "Ana", "Verificando")
        ticket.add_message(msg)
    """

    id: str = field(default_factory=_new_id)
    ticket_id: str = ""
    sender_type: SenderType = SenderType.CUSTOMER
    sender_id: Optional[str] = None
    sender_name: str = ""
    sender_email: str = ""
    content: str = ""
    attachments: List[Attachment] = field(default_factory=list)
    is_internal: bool = False
    read_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create(
        cls,
        ticket_id: str,
        sender_type: SenderType,
        content: str,
        sender_id: Optional[str] = None,
        sender_name: str = "",
        sender_email: str = "",
        attachments: Optional[Iterable[Attachment]] = None,
        is_internal: bool = False,
    ) -> "MessageEntity":
        """
        Factory method com validações.

        Raises:
            ValidationError: Conteúdo vazio, ticket ausente ou nota
                interna escrita por cliente
        """
        if not ticket_id:
            raise ValidationError("Ticket da mensagem é obrigatório", field="ticket_id")
        if not content or not content.strip():
            raise ValidationError("Conteúdo da mensagem é obrigatório", field="content")
        if is_internal and not sender_type.can_write_internal_notes:
            raise ValidationError(
                "Clientes não podem criar notas internas",
                field="is_internal"
            )

        return cls(
            ticket_id=ticket_id,
            sender_type=sender_type,
            sender_id=sender_id,
            sender_name=sender_name or "",
            sender_email=sender_email or "",
            content=content.strip(),
            attachments=list(attachments or []),
            is_internal=is_internal,
            created_at=utc_now(),
        )

    @classmethod
    def from_customer(
        cls,
        ticket_id: str,
        content: str,
        customer_id: Optional[str] = None,
        name: str = "",
        email: str = "",
        attachments: Optional[Iterable[Attachment]] = None,
    ) -> "MessageEntity":
        return cls.create(
            ticket_id,
            SenderType.CUSTOMER,
            content,
            sender_id=customer_id,
            sender_name=name,
            sender_email=email,
            attachments=attachments,
        )

    @classmethod
    def from_agent(
        cls,
        ticket_id: str,
        agent_id: str,
        name: str,
        content: str,
        is_internal: bool = False,
        attachments: Optional[Iterable[Attachment]] = None,
    ) -> "MessageEntity":
        return cls.create(
            ticket_id,
            SenderType.AGENT,
            content,
            sender_id=agent_id,
            sender_name=name,
            attachments=attachments,
            is_internal=is_internal,
        )

    @classmethod
    def from_system(cls, ticket_id: str, content: str, is_internal: bool = False) -> "MessageEntity":
        return cls.create(
            ticket_id,
            SenderType.SYSTEM,
            content,
            sender_name="System",
            is_internal=is_internal,
        )

    def mark_as_read(self, at: Optional[datetime] = None) -> bool:
        """Marca como lida uma única vez. Retorna True se marcou agora."""
        if self.read_at is not None:
            return False
        self.read_at = at or utc_now()
        return True

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    @property
    def is_from_customer(self) -> bool:
        return self.sender_type == SenderType.CUSTOMER

    @property
    def is_from_agent(self) -> bool:
        return self.sender_type == SenderType.AGENT

    @property
    def is_from_system(self) -> bool:
        return self.sender_type == SenderType.SYSTEM

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)


# =============================================================================
# STATUS HISTORY
# =============================================================================

@dataclass(frozen=True)
class StatusHistoryEntry:
    """Registro imutável de uma transição de status."""

    ticket_id: str
    from_status: TicketStatus
    to_status: TicketStatus
    changed_by: Optional[str] = None
    changed_by_name: str = ""
    notes: str = ""
    created_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=_new_id)

    @property
    def is_resolution(self) -> bool:
        return self.to_status == TicketStatus.RESOLVED

    @property
    def is_closure(self) -> bool:
        return self.to_status == TicketStatus.CLOSED

    @property
    def is_reopen(self) -> bool:
        return (
            self.from_status == TicketStatus.RESOLVED
            and self.to_status == TicketStatus.OPEN
        )

    @property
    def is_system_change(self) -> bool:
        return self.changed_by is None


# =============================================================================
# TICKET (AGREGADO)
# =============================================================================

@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Ticket.

    Agregado principal do domínio de suporte. Toda mudança de estado
    passa por um método deste agregado; cada método valida antes de
    alterar qualquer campo (tudo ou nada).

    Invariantes:
    - Dono: customer_id ou contato de convidado (ao menos um)
    - Status só muda via StatusPolicy, com entrada no histórico
    - sla_deadline coerente com a prioridade atual
    - first_response_at e closed_at definidos no máximo uma vez
    - resolved_at só é limpo ao reabrir
    - Avaliação apenas com status resolvido ou fechado

    Example:
        ticket = TicketEntity.create(
            subject="Pedido não chegou",
            guest=GuestContact(email="a@b.com"),
        )
        ticket.assign("agent-1", Actor("admin-1", "Admin"))
        ticket.resolve("Reenviado", actor)
        events = ticket.drain_events()
    """

    # Identificação
    id: str = field(default_factory=_new_id)
    ticket_number: str = ""

    # Dono
    customer_id: Optional[str] = None
    guest: Optional[GuestContact] = None

    # Dados principais
    subject: str = ""
    category_id: Optional[str] = None
    order_id: Optional[str] = None
    order_number: str = ""

    # Estado
    status: TicketStatus = TicketStatus.OPEN
    priority: TicketPriority = PriorityPolicy.DEFAULT
    assigned_to: Optional[str] = None

    # SLA
    sla_deadline: Optional[datetime] = None
    sla_breach_reported_at: Optional[datetime] = None

    # Marcos
    first_response_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    # Satisfação
    satisfaction_rating: Optional[int] = None
    satisfaction_comment: str = ""

    # Coleções
    tags: List[str] = field(default_factory=list)
    messages: List[MessageEntity] = field(default_factory=list)
    status_history: List[StatusHistoryEntry] = field(default_factory=list)

    # Timestamps
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    # Controle de concorrência otimista (incrementado pelo repositório)
    version: int = 0

    _events: List[TicketEventBase] = field(default_factory=list, repr=False, compare=False)

    SUBJECT_MAX_LENGTH = 255
    RATING_MIN = 1
    RATING_MAX = 5

    # -------------------------------------------------------------------------
    # Criação
    # -------------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        subject: str,
        customer_id: Optional[str] = None,
        guest: Optional[GuestContact] = None,
        priority: Optional[TicketPriority] = None,
        category_id: Optional[str] = None,
        order_id: Optional[str] = None,
        order_number: str = "",
        tags: Optional[Iterable[str]] = None,
        ticket_number: Optional[str] = None,
    ) -> "TicketEntity":
        """
        Factory method para criar ticket com validações.

        Args:
            subject: Assunto (obrigatório)
            customer_id: Cliente autenticado (identidade do dono)
            guest: Contato de convidado (quando não há customer_id)
            priority: Prioridade (default: NORMAL)
            category_id: Categoria opcional (existência validada no use case)
            order_id: Pedido relacionado (opcional)
            order_number: Número legível do pedido (opcional)
            tags: Tags iniciais
            ticket_number: Número pré-alocado; gerado se omitido

        Returns:
            Ticket aberto com prazo de SLA calculado

        Raises:
            ValidationError: Assunto vazio ou dono ausente
        """
        cls._validate_subject(subject)
        if not customer_id and guest is None:
            raise ValidationError(
                "Informe o cliente ou o contato do convidado",
                field="owner"
            )

        now = utc_now()
        priority = priority or PriorityPolicy.DEFAULT
        number = (
            TicketNumber.parse(ticket_number) if ticket_number
            else TicketNumber.generate(now)
        )

        ticket = cls(
            ticket_number=str(number),
            customer_id=customer_id or None,
            guest=guest,
            subject=subject.strip(),
            category_id=category_id or None,
            order_id=order_id or None,
            order_number=order_number or "",
            status=TicketStatus.OPEN,
            priority=priority,
            sla_deadline=PriorityPolicy.compute_deadline(priority, now),
            created_at=now,
            updated_at=now,
        )
        for tag in tags or []:
            ticket._add_tag(tag)

        ticket._record(TicketCreated(
            aggregate_id=ticket.id,
            occurred_at=now,
            ticket_number=ticket.ticket_number,
            subject=ticket.subject,
            priority=priority.value,
            customer_id=ticket.customer_id,
            guest_email=guest.email if guest else None,
            category_id=ticket.category_id,
            sla_deadline=ticket.sla_deadline,
        ))
        return ticket

    @classmethod
    def _validate_subject(cls, subject: str) -> None:
        if not subject or not subject.strip():
            raise ValidationError("Assunto é obrigatório", field="subject")
        if len(subject.strip()) > cls.SUBJECT_MAX_LENGTH:
            raise ValidationError(
                f"Assunto deve ter no máximo {cls.SUBJECT_MAX_LENGTH} caracteres",
                field="subject"
            )

    # -------------------------------------------------------------------------
    # Atribuição
    # -------------------------------------------------------------------------

    def assign(
        self,
        agent_id: str,
        actor: Optional[Actor] = None,
        allow_reassign: bool = True,
    ) -> None:
        """
        Atribui ticket a um agente.

        Regras:
        - Ticket fechado não pode ser atribuído
        - Se `allow_reassign=False`, falha quando outro agente já detém o ticket
        - Ticket aberto passa implicitamente para IN_PROGRESS
          (com histórico "Assigned to agent")

        Raises:
            ValidationError: agent_id vazio
            CannotModifyError: Ticket fechado
            AlreadyAssignedError: Já atribuído a outro agente
        """
        if not agent_id:
            raise ValidationError("ID do agente é obrigatório", field="agent_id")
        self._ensure_not_closed("atribuir")
        if not allow_reassign and self.assigned_to and self.assigned_to != agent_id:
            raise AlreadyAssignedError(
                f"Ticket já atribuído ao agente {self.assigned_to}",
                assigned_to=self.assigned_to,
            )

        previous = self.assigned_to
        self.assigned_to = agent_id
        self._touch()
        self._record(TicketAssigned(
            aggregate_id=self.id,
            agent_id=agent_id,
            previous_agent_id=previous,
            actor_id=actor.id if actor else None,
            actor_name=actor.name if actor else "",
        ))

        if self.status == TicketStatus.OPEN:
            self._transition(TicketStatus.IN_PROGRESS, actor, "Assigned to agent")

    def unassign(self, actor: Optional[Actor] = None) -> None:
        """
        Remove a atribuição.

        Ticket em IN_PROGRESS volta implicitamente para OPEN apenas se a
        StatusPolicy permitir a aresta; com a tabela atual o status é
        mantido e só a atribuição é removida.

        Raises:
            NotAssignedError: Nenhum agente atribuído
        """
        if not self.assigned_to:
            raise NotAssignedError()

        back_to_open = (
            self.status == TicketStatus.IN_PROGRESS
            and StatusPolicy.can_transition(self.status, TicketStatus.OPEN)
        )

        self.assigned_to = None
        self._touch()

        if back_to_open:
            self._transition(TicketStatus.OPEN, actor, "Unassigned")

    # -------------------------------------------------------------------------
    # Prioridade / SLA
    # -------------------------------------------------------------------------

    def escalate(self, reason: str = "", actor: Optional[Actor] = None) -> None:
        """
        Sobe a prioridade um degrau e recalcula o SLA a partir de agora.

        Não altera status.

        Raises:
            CannotModifyError: Ticket fechado ou já na prioridade máxima
        """
        self._ensure_not_closed("escalar")
        next_priority = PriorityPolicy.next_level(self.priority)
        if next_priority is None:
            raise CannotModifyError(
                "Ticket já está na prioridade mais alta (already at highest priority)",
                rule="already_highest_priority",
            )

        self._apply_priority(next_priority, reason, actor)

    def change_priority(
        self,
        priority: TicketPriority,
        actor: Optional[Actor] = None,
        reason: str = "",
    ) -> bool:
        """
        Define a prioridade diretamente (uso administrativo).

        O prazo de SLA é recalculado a partir de agora. TicketEscalated
        só é levantado quando a severidade aumenta.

        Returns:
            False se a prioridade já era a informada

        Raises:
            CannotModifyError: Ticket fechado
        """
        self._ensure_not_closed("alterar prioridade de")
        if priority == self.priority:
            return False

        self._apply_priority(priority, reason, actor)
        return True

    def _apply_priority(
        self,
        priority: TicketPriority,
        reason: str,
        actor: Optional[Actor],
    ) -> None:
        previous = self.priority
        now = utc_now()
        self.priority = priority
        self.sla_deadline = PriorityPolicy.compute_deadline(priority, now)
        self._touch(now)

        if PriorityPolicy.is_higher(priority, previous):
            self._record(TicketEscalated(
                aggregate_id=self.id,
                occurred_at=now,
                previous_priority=previous.value,
                new_priority=priority.value,
                reason=reason or "",
                sla_deadline=self.sla_deadline,
                actor_id=actor.id if actor else None,
            ))

    def is_overdue_at(self, now: datetime) -> bool:
        if self.sla_deadline is None:
            return False
        if not self.status.is_active:
            return False
        return now > self.sla_deadline

    @property
    def is_overdue(self) -> bool:
        """
        Verifica se o SLA expirou.

        Derivado em tempo de leitura; nunca persistido.
        """
        return self.is_overdue_at(utc_now())

    @property
    def sla_time_remaining(self) -> Optional[timedelta]:
        """Positivo dentro do prazo, negativo se atrasado, None se inativo."""
        if self.sla_deadline is None or not self.status.is_active:
            return None
        return self.sla_deadline - utc_now()

    @property
    def sla_breach_reported(self) -> bool:
        """Aviso de SLA já emitido para o prazo atual."""
        return (
            self.sla_breach_reported_at is not None
            and self.sla_deadline is not None
            and self.sla_breach_reported_at >= self.sla_deadline
        )

    def report_sla_breach(self, now: Optional[datetime] = None) -> bool:
        """
        Levanta TicketSLABreached uma única vez por prazo.

        Um novo prazo (escalação, troca de prioridade) permite um
        novo aviso quando ele também expirar.

        Returns:
            True se o evento foi levantado
        """
        now = now or utc_now()
        if not self.is_overdue_at(now) or self.sla_breach_reported:
            return False

        self.sla_breach_reported_at = now
        self._record(TicketSLABreached(
            aggregate_id=self.id,
            occurred_at=now,
            sla_deadline=self.sla_deadline,
            priority=self.priority.value,
            assigned_to=self.assigned_to,
            overdue_seconds=(now - self.sla_deadline).total_seconds(),
        ))
        return True

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def set_pending(self, reason: str = "", actor: Optional[Actor] = None) -> None:
        """Aguardando resposta do cliente."""
        self._transition(TicketStatus.PENDING, actor, reason)

    def resolve(self, resolution: str = "", actor: Optional[Actor] = None) -> None:
        """
        Marca o ticket como resolvido e registra `resolved_at`.

        Raises:
            IllegalTransitionError: Status atual não permite resolver
        """
        self._transition(TicketStatus.RESOLVED, actor, resolution)
        if self.resolved_at is None:
            self.resolved_at = self.updated_at

        self._record(TicketResolved(
            aggregate_id=self.id,
            occurred_at=self.resolved_at,
            resolution=resolution or "",
            resolved_at=self.resolved_at,
            within_sla=self.sla_deadline is None or self.resolved_at <= self.sla_deadline,
            actor_id=actor.id if actor else None,
        ))

    def close(self, actor: Optional[Actor] = None, notes: str = "Ticket closed") -> None:
        """
        Fecha o ticket (estado terminal).

        Raises:
            IllegalTransitionError: Ticket não está resolvido (ou já fechado)
        """
        self._transition(TicketStatus.CLOSED, actor, notes or "Ticket closed")
        if self.closed_at is None:
            self.closed_at = self.updated_at

        self._record(TicketClosed(
            aggregate_id=self.id,
            occurred_at=self.closed_at,
            closed_at=self.closed_at,
            actor_id=actor.id if actor else None,
        ))

    def reopen(self, reason: str = "", actor: Optional[Actor] = None) -> None:
        """
        Reabre um ticket resolvido, limpando `resolved_at`.

        Raises:
            IllegalTransitionError: Ticket fechado ou já aberto
            CannotModifyError: Ticket não está resolvido
        """
        StatusPolicy.ensure_transition(self.status, TicketStatus.OPEN)
        if self.status != TicketStatus.RESOLVED:
            raise CannotModifyError(
                "Apenas tickets resolvidos podem ser reabertos",
                rule="reopen_requires_resolved",
            )

        self.resolved_at = None
        self._transition(TicketStatus.OPEN, actor, reason)

    def change_status(
        self,
        target: TicketStatus,
        actor: Optional[Actor] = None,
        notes: str = "",
    ) -> None:
        """
        Ponto de entrada administrativo para mudar status.

        Encaminha para a operação específica quando existe uma, para
        que timestamps e eventos correspondentes sejam aplicados.
        """
        if target == TicketStatus.RESOLVED:
            self.resolve(notes, actor)
        elif target == TicketStatus.CLOSED:
            self.close(actor, notes)
        elif target == TicketStatus.PENDING:
            self.set_pending(notes, actor)
        elif target == TicketStatus.OPEN and self.status == TicketStatus.RESOLVED:
            self.reopen(notes, actor)
        else:
            self._transition(target, actor, notes)

    def _transition(
        self,
        target: TicketStatus,
        actor: Optional[Actor],
        notes: str = "",
    ) -> None:
        """
        Primitiva única de mudança de status.

        Valida na StatusPolicy, registra histórico, atualiza status e
        `updated_at` e levanta TicketStatusChanged. Em caso de falha
        nada é alterado.

        Raises:
            IllegalTransitionError: Transição fora da tabela
        """
        StatusPolicy.ensure_transition(self.status, target)

        now = utc_now()
        previous = self.status
        self.status_history.append(StatusHistoryEntry(
            ticket_id=self.id,
            from_status=previous,
            to_status=target,
            changed_by=actor.id if actor else None,
            changed_by_name=actor.name if actor else "",
            notes=notes or "",
            created_at=now,
        ))
        self.status = target
        self._touch(now)

        self._record(TicketStatusChanged(
            aggregate_id=self.id,
            occurred_at=now,
            from_status=previous.value,
            to_status=target.value,
            actor_id=actor.id if actor else None,
            notes=notes or "",
        ))

    # -------------------------------------------------------------------------
    # Mensagens
    # -------------------------------------------------------------------------

    def add_message(self, message: MessageEntity) -> None:
        """
        Adiciona mensagem ao ticket.

        Efeitos colaterais:
        - Primeira mensagem de agente registra `first_response_at` (uma vez)
        - Mensagem de agente (inclusive nota interna) em ticket OPEN move
          o ticket para IN_PROGRESS, sem ator
        - Resposta pública do cliente em ticket PENDING devolve o ticket
          para IN_PROGRESS (se atribuído) ou OPEN, sem ator

        Raises:
            ValidationError: Mensagem de outro ticket ou sem conteúdo
        """
        if message.ticket_id != self.id:
            raise ValidationError(
                "Mensagem pertence a outro ticket",
                field="ticket_id"
            )
        if not message.content or not message.content.strip():
            raise ValidationError("Conteúdo da mensagem é obrigatório", field="content")

        reply_target = None
        if message.is_from_agent and self.status == TicketStatus.OPEN:
            reply_target = TicketStatus.IN_PROGRESS
        elif (
            message.is_from_customer
            and not message.is_internal
            and self.status == TicketStatus.PENDING
        ):
            reply_target = TicketStatus.IN_PROGRESS if self.assigned_to else TicketStatus.OPEN

        now = utc_now()
        self.messages.append(message)
        self._touch(now)

        if self.first_response_at is None and message.is_from_agent:
            self.first_response_at = now

        if reply_target is not None:
            note = "Agent replied" if message.is_from_agent else "Customer replied"
            self._transition(reply_target, None, note)

    def visible_messages(self, include_internal: bool = False) -> List[MessageEntity]:
        """Mensagens visíveis; notas internas só para agentes."""
        if include_internal:
            return list(self.messages)
        return [m for m in self.messages if not m.is_internal]

    def _unread_for(self, reader: SenderType) -> List[MessageEntity]:
        if reader == SenderType.CUSTOMER:
            return [
                m for m in self.messages
                if not m.is_from_customer and not m.is_internal and not m.is_read
            ]
        return [m for m in self.messages if m.is_from_customer and not m.is_read]

    def mark_messages_as_read(
        self,
        reader: SenderType,
        at: Optional[datetime] = None,
    ) -> int:
        """
        Marca como lidas as mensagens enviadas pela outra parte.

        Returns:
            Quantidade de mensagens marcadas
        """
        at = at or utc_now()
        return sum(1 for m in self._unread_for(reader) if m.mark_as_read(at))

    def unread_count_for(self, reader: SenderType) -> int:
        return len(self._unread_for(reader))

    # -------------------------------------------------------------------------
    # Satisfação / categorização
    # -------------------------------------------------------------------------

    def rate_satisfaction(self, rating: int, comment: str = "") -> None:
        """
        Registra avaliação do cliente.

        Raises:
            ValidationError: Ticket não resolvido/fechado ou nota fora de 1..5
        """
        if self.status not in (TicketStatus.RESOLVED, TicketStatus.CLOSED):
            raise ValidationError(
                "Apenas tickets resolvidos ou fechados podem ser avaliados",
                field="satisfaction_rating"
            )
        if (
            isinstance(rating, bool)
            or not isinstance(rating, int)
            or not self.RATING_MIN <= rating <= self.RATING_MAX
        ):
            raise ValidationError(
                f"Avaliação deve estar entre {self.RATING_MIN} e {self.RATING_MAX}",
                field="satisfaction_rating"
            )

        self.satisfaction_rating = rating
        self.satisfaction_comment = (comment or "").strip()
        self._touch()

    def set_category(self, category_id: Optional[str]) -> None:
        self.category_id = category_id or None
        self._touch()

    def add_tag(self, tag: str) -> bool:
        """Adiciona tag normalizada. Retorna False se vazia ou repetida."""
        added = self._add_tag(tag)
        if added:
            self._touch()
        return added

    def _add_tag(self, tag: str) -> bool:
        clean = (tag or "").strip().lower()
        if not clean or clean in self.tags:
            return False
        self.tags.append(clean)
        return True

    def remove_tag(self, tag: str) -> bool:
        clean = (tag or "").strip().lower()
        if clean not in self.tags:
            return False
        self.tags.remove(clean)
        self._touch()
        return True

    # -------------------------------------------------------------------------
    # Eventos
    # -------------------------------------------------------------------------

    def _record(self, event: TicketEventBase) -> None:
        self._events.append(event)

    @property
    def pending_events(self) -> List[TicketEventBase]:
        return list(self._events)

    def drain_events(self) -> List[TicketEventBase]:
        """
        Retorna e limpa os eventos acumulados.

        Deve ser chamado uma vez, após a persistência ter sido confirmada.
        """
        events, self._events = self._events, []
        return events

    # -------------------------------------------------------------------------
    # Auxiliares
    # -------------------------------------------------------------------------

    def _ensure_not_closed(self, action: str) -> None:
        if self.status == TicketStatus.CLOSED:
            raise CannotModifyError(
                f"Não é possível {action} ticket fechado",
                rule="ticket_closed_immutable",
            )

    def _touch(self, now: Optional[datetime] = None) -> None:
        self.updated_at = now or utc_now()

    @property
    def is_guest(self) -> bool:
        return self.customer_id is None

    @property
    def is_assigned(self) -> bool:
        return self.assigned_to is not None

    @property
    def owner_email(self) -> str:
        return self.guest.email if self.guest else ""

    @property
    def owner_name(self) -> str:
        return self.guest.name if self.guest else ""

    @property
    def resolution_time(self) -> Optional[timedelta]:
        if self.resolved_at is None:
            return None
        return self.resolved_at - self.created_at

    def __repr__(self) -> str:
        return (
            f"TicketEntity("
            f"number={self.ticket_number}, "
            f"status={self.status.value}, "
            f"priority={self.priority.value}"
            f")"
        )

    def __eq__(self, other: object) -> bool:
        """Comparação por ID (identidade de entidade)."""
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
