"""
Testes Unitários para o agregado TicketEntity.

Estratégia de Teste:
- Relógio congelado (fixture `clock`) para prazos determinísticos
- Verifica estado, histórico e eventos acumulados no agregado
- Falhas devem deixar o agregado intacto (tudo ou nada)
"""

import re
from datetime import timedelta

import pytest

from src.core.shared.exceptions import (
    AlreadyAssignedError,
    CannotModifyError,
    IllegalTransitionError,
    NotAssignedError,
    ValidationError,
)
from src.core.tickets.entities import MessageEntity, TicketEntity
from src.core.tickets.events import (
    TicketAssigned,
    TicketClosed,
    TicketCreated,
    TicketEscalated,
    TicketResolved,
    TicketSLABreached,
    TicketStatusChanged,
)
from src.core.tickets.policies import PriorityPolicy
from src.core.tickets.value_objects import (
    GuestContact,
    SenderType,
    TicketPriority,
    TicketStatus,
)


def event_classes(ticket):
    return [type(e) for e in ticket.drain_events()]


# =============================================================================
# Criação
# =============================================================================

class TestTicketCreation:
    """Testes para TicketEntity.create."""

    def test_guest_ticket_with_defaults(self, clock):
        """Cenário base: convidado, prioridade padrão."""
        ticket = TicketEntity.create(subject="Help", guest=GuestContact(email="a@b.com"))

        assert ticket.status == TicketStatus.OPEN
        assert ticket.priority == TicketPriority.NORMAL
        assert ticket.sla_deadline == ticket.created_at + timedelta(hours=24)
        assert ticket.created_at == clock.now
        assert re.match(r"^TKT-\d{8}-\d{4}$", ticket.ticket_number)
        assert ticket.ticket_number.startswith("TKT-20240115-")
        assert ticket.is_guest
        assert ticket.owner_email == "a@b.com"
        assert ticket.version == 0
        assert ticket.status_history == []

    def test_creation_records_created_event(self, clock):
        ticket = TicketEntity.create(
            subject="Pedido atrasado",
            guest=GuestContact(email="a@b.com"),
            priority=TicketPriority.HIGH,
        )

        events = ticket.drain_events()
        assert len(events) == 1
        event = events[0]
        assert isinstance(event, TicketCreated)
        assert event.aggregate_id == ticket.id
        assert event.ticket_number == ticket.ticket_number
        assert event.priority == "high"
        assert event.guest_email == "a@b.com"
        assert event.sla_deadline == clock.now + timedelta(hours=8)

    def test_customer_id_is_identity_when_both_given(self):
        ticket = TicketEntity.create(
            subject="Troca",
            customer_id="cust-1",
            guest=GuestContact(email="a@b.com"),
        )
        assert not ticket.is_guest
        assert ticket.customer_id == "cust-1"

    def test_missing_owner_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(subject="Sem dono")
        assert exc_info.value.field == "owner"

    @pytest.mark.parametrize("subject", ["", "   ", "x" * 256])
    def test_invalid_subject_fails(self, subject):
        with pytest.raises(ValidationError) as exc_info:
            TicketEntity.create(subject=subject, customer_id="cust-1")
        assert exc_info.value.field == "subject"

    def test_subject_is_trimmed(self):
        ticket = TicketEntity.create(subject="  Reembolso  ", customer_id="cust-1")
        assert ticket.subject == "Reembolso"

    def test_tags_are_normalized_and_unique(self):
        ticket = TicketEntity.create(
            subject="Entrega",
            customer_id="cust-1",
            tags=[" VIP ", "vip", "Entrega", ""],
        )
        assert ticket.tags == ["vip", "entrega"]

    def test_preallocated_ticket_number_is_parsed(self):
        ticket = TicketEntity.create(
            subject="Entrega",
            customer_id="cust-1",
            ticket_number="tkt-20240101-0007",
        )
        assert ticket.ticket_number == "TKT-20240101-0007"


# =============================================================================
# Atribuição
# =============================================================================

class TestAssignment:

    def test_assign_open_ticket_moves_to_in_progress(self, clock, make_ticket, agent):
        ticket = make_ticket()

        ticket.assign("agent-1", agent)

        assert ticket.assigned_to == "agent-1"
        assert ticket.status == TicketStatus.IN_PROGRESS
        assert len(ticket.status_history) == 1
        entry = ticket.status_history[0]
        assert entry.from_status == TicketStatus.OPEN
        assert entry.to_status == TicketStatus.IN_PROGRESS
        assert entry.notes == "Assigned to agent"
        assert entry.changed_by == "agent-1"
        assert entry.changed_by_name == "Ana Agente"

    def test_assign_records_assigned_then_status_changed(self, make_ticket, agent):
        ticket = make_ticket()

        ticket.assign("agent-1", agent)

        events = ticket.drain_events()
        assert [type(e) for e in events] == [TicketAssigned, TicketStatusChanged]
        assert events[0].agent_id == "agent-1"
        assert events[0].previous_agent_id is None
        assert events[1].from_status == "open"
        assert events[1].to_status == "in_progress"

    def test_assign_pending_ticket_keeps_status(self, make_ticket):
        ticket = make_ticket()
        ticket.set_pending("Aguardando foto do produto")
        ticket.drain_events()

        ticket.assign("agent-1")

        assert ticket.status == TicketStatus.PENDING
        assert event_classes(ticket) == [TicketAssigned]

    def test_reassign_records_previous_agent(self, make_ticket):
        ticket = make_ticket()
        ticket.assign("agent-1")
        ticket.drain_events()

        ticket.assign("agent-2")

        events = ticket.drain_events()
        assert len(events) == 1
        assert events[0].previous_agent_id == "agent-1"
        assert len(ticket.status_history) == 1

    def test_reassign_disallowed_fails(self, make_ticket):
        ticket = make_ticket()
        ticket.assign("agent-1")
        ticket.drain_events()

        with pytest.raises(AlreadyAssignedError) as exc_info:
            ticket.assign("agent-2", allow_reassign=False)

        assert exc_info.value.assigned_to == "agent-1"
        assert ticket.assigned_to == "agent-1"
        assert ticket.drain_events() == []

    def test_same_agent_is_accepted_without_reassign(self, make_ticket):
        ticket = make_ticket()
        ticket.assign("agent-1")
        ticket.assign("agent-1", allow_reassign=False)
        assert ticket.assigned_to == "agent-1"

    def test_assign_requires_agent(self, make_ticket):
        with pytest.raises(ValidationError):
            make_ticket().assign("")

    def test_unassign_in_progress_keeps_status(self, clock, make_ticket, agent):
        """Sem aresta in_progress → open na tabela, só a atribuição sai."""
        ticket = make_ticket()
        ticket.assign("agent-1", agent)
        ticket.drain_events()
        clock.advance(minutes=5)

        ticket.unassign(agent)

        assert ticket.assigned_to is None
        assert ticket.status == TicketStatus.IN_PROGRESS
        assert ticket.updated_at == clock.now
        assert len(ticket.status_history) == 1
        assert ticket.drain_events() == []

    def test_unassign_pending_keeps_status(self, make_ticket):
        ticket = make_ticket()
        ticket.set_pending()
        ticket.assign("agent-1")

        ticket.unassign()

        assert ticket.assigned_to is None
        assert ticket.status == TicketStatus.PENDING

    def test_unassign_without_agent_fails(self, make_ticket):
        with pytest.raises(NotAssignedError):
            make_ticket().unassign()


# =============================================================================
# Prioridade / SLA
# =============================================================================

class TestEscalation:

    def test_escalate_recomputes_deadline_from_now(self, clock, make_ticket, agent):
        ticket = make_ticket()
        clock.advance(hours=1)

        ticket.escalate("Cliente VIP", agent)

        assert ticket.priority == TicketPriority.HIGH
        assert ticket.sla_deadline == clock.now + timedelta(hours=8)
        assert ticket.status == TicketStatus.OPEN
        assert ticket.status_history == []

        events = ticket.drain_events()
        assert len(events) == 1
        event = events[0]
        assert isinstance(event, TicketEscalated)
        assert event.previous_priority == "normal"
        assert event.new_priority == "high"
        assert event.reason == "Cliente VIP"
        assert event.actor_id == "agent-1"

    def test_escalate_from_low_until_urgent(self, clock, make_ticket):
        """low -> normal -> high -> urgent e depois falha."""
        ticket = make_ticket(priority=TicketPriority.LOW)
        deadlines = [ticket.sla_deadline]

        for expected in (TicketPriority.NORMAL, TicketPriority.HIGH, TicketPriority.URGENT):
            clock.advance(minutes=1)
            ticket.escalate()
            assert ticket.priority == expected
            assert ticket.sla_deadline == PriorityPolicy.compute_deadline(expected, clock.now)
            deadlines.append(ticket.sla_deadline)

        with pytest.raises(CannotModifyError) as exc_info:
            ticket.escalate()

        assert exc_info.value.rule == "already_highest_priority"
        assert ticket.priority == TicketPriority.URGENT
        # Cada escalação aperta o prazo (SLA menor a partir de agora)
        assert deadlines == sorted(deadlines, reverse=True)
        assert len(set(deadlines)) == 4

    def test_escalate_closed_ticket_fails(self, make_ticket):
        ticket = make_ticket()
        ticket.resolve()
        ticket.close()

        with pytest.raises(CannotModifyError):
            ticket.escalate()

    def test_lowering_priority_does_not_record_escalation(self, clock, make_ticket):
        ticket = make_ticket(priority=TicketPriority.HIGH)
        clock.advance(hours=2)

        changed = ticket.change_priority(TicketPriority.LOW)

        assert changed is True
        assert ticket.sla_deadline == clock.now + timedelta(hours=48)
        assert ticket.drain_events() == []

    def test_raising_priority_records_escalation(self, make_ticket):
        ticket = make_ticket(priority=TicketPriority.LOW)

        ticket.change_priority(TicketPriority.URGENT, reason="Diretoria")

        events = ticket.drain_events()
        assert [type(e) for e in events] == [TicketEscalated]
        assert events[0].previous_priority == "low"
        assert events[0].new_priority == "urgent"

    def test_same_priority_is_a_no_op(self, make_ticket):
        ticket = make_ticket()
        deadline = ticket.sla_deadline

        assert ticket.change_priority(TicketPriority.NORMAL) is False
        assert ticket.sla_deadline == deadline


class TestOverdue:

    def test_overdue_after_deadline(self, clock, make_ticket):
        ticket = make_ticket(priority=TicketPriority.URGENT)

        clock.advance(hours=4)
        assert not ticket.is_overdue

        clock.advance(seconds=1)
        assert ticket.is_overdue
        assert ticket.sla_time_remaining < timedelta(0)

    def test_resolved_ticket_is_never_overdue(self, clock, make_ticket):
        ticket = make_ticket(priority=TicketPriority.URGENT)
        ticket.resolve()
        clock.advance(days=3)

        assert not ticket.is_overdue
        assert ticket.sla_time_remaining is None

    def test_breach_reported_once_per_deadline(self, clock, make_ticket):
        ticket = make_ticket(priority=TicketPriority.URGENT)
        ticket.assign("agent-1")
        ticket.drain_events()
        clock.advance(hours=5)

        assert ticket.report_sla_breach(clock.now) is True
        assert ticket.report_sla_breach(clock.now) is False

        events = ticket.drain_events()
        assert [type(e) for e in events] == [TicketSLABreached]
        assert events[0].assigned_to == "agent-1"
        assert events[0].overdue_seconds == 3600.0

    def test_new_deadline_allows_new_breach(self, clock, make_ticket):
        ticket = make_ticket(priority=TicketPriority.HIGH)
        clock.advance(hours=9)
        assert ticket.report_sla_breach(clock.now)

        ticket.escalate("Atrasado")
        clock.advance(hours=5)

        assert ticket.report_sla_breach(clock.now) is True

    def test_not_overdue_is_not_reported(self, clock, make_ticket):
        ticket = make_ticket()
        assert ticket.report_sla_breach(clock.now) is False
        assert ticket.sla_breach_reported_at is None


# =============================================================================
# Status
# =============================================================================

class TestStatusTransitions:

    def test_scenario_create_assign_resolve(self, clock, agent):
        """Cenário completo: criar, atribuir, resolver, reatribuir."""
        ticket = TicketEntity.create(subject="Help", guest=GuestContact(email="a@b.com"))
        ticket.assign("agent-x", agent)
        assert ticket.status == TicketStatus.IN_PROGRESS
        assert len(ticket.status_history) == 1

        clock.advance(hours=2)
        ticket.resolve("fixed", agent)
        assert ticket.status == TicketStatus.RESOLVED
        assert ticket.resolved_at == clock.now
        assert len(ticket.status_history) == 2

        ticket.assign("agent-y", agent)
        assert ticket.assigned_to == "agent-y"
        assert ticket.status == TicketStatus.RESOLVED

        with pytest.raises(IllegalTransitionError):
            ticket.set_pending("Aguardando")

    def test_illegal_transition_leaves_ticket_untouched(self, clock, make_ticket):
        ticket = make_ticket()
        updated_at = ticket.updated_at
        clock.advance(minutes=5)

        with pytest.raises(IllegalTransitionError):
            ticket.close()

        assert ticket.status == TicketStatus.OPEN
        assert ticket.status_history == []
        assert ticket.updated_at == updated_at
        assert ticket.closed_at is None
        assert ticket.drain_events() == []

    def test_resolve_records_status_change_and_resolution(self, clock, make_ticket, agent):
        ticket = make_ticket()
        clock.advance(hours=3)

        ticket.resolve("Reenviado", agent)

        events = ticket.drain_events()
        assert [type(e) for e in events] == [TicketStatusChanged, TicketResolved]
        resolved = events[1]
        assert resolved.resolution == "Reenviado"
        assert resolved.within_sla is True
        assert resolved.resolved_at == clock.now
        assert ticket.resolution_time == timedelta(hours=3)

    def test_resolve_after_deadline_is_outside_sla(self, clock, make_ticket):
        ticket = make_ticket()
        clock.advance(hours=25)

        ticket.resolve()

        resolved = ticket.drain_events()[-1]
        assert resolved.within_sla is False

    def test_close_stamps_closed_at_once(self, clock, make_ticket, agent):
        ticket = make_ticket()
        ticket.resolve()
        clock.advance(days=1)

        ticket.close(agent, "Confirmado pelo cliente")

        assert ticket.status == TicketStatus.CLOSED
        assert ticket.closed_at == clock.now
        assert event_classes(ticket)[-1] == TicketClosed

        with pytest.raises(IllegalTransitionError):
            ticket.close(agent)
        assert ticket.closed_at == clock.now

    def test_close_default_note(self, make_ticket):
        ticket = make_ticket()
        ticket.resolve()

        ticket.close()

        assert ticket.status_history[-1].notes == "Ticket closed"

    def test_closed_ticket_rejects_every_operation(self, make_ticket):
        ticket = make_ticket()
        ticket.resolve()
        ticket.close()
        ticket.drain_events()

        with pytest.raises(CannotModifyError):
            ticket.assign("agent-1")
        with pytest.raises(CannotModifyError):
            ticket.escalate()
        with pytest.raises(CannotModifyError):
            ticket.change_priority(TicketPriority.URGENT)
        for operation in (ticket.set_pending, ticket.resolve, ticket.reopen):
            with pytest.raises(IllegalTransitionError):
                operation()

        assert ticket.status == TicketStatus.CLOSED
        assert ticket.drain_events() == []

    def test_reopen_clears_resolved_at(self, make_ticket, agent):
        ticket = make_ticket()
        ticket.assign("agent-1")
        ticket.add_message(MessageEntity.from_agent(ticket.id, "agent-1", "Ana", "Olá"))
        first_response = ticket.first_response_at
        ticket.resolve()

        ticket.reopen("Problema voltou", agent)

        assert ticket.status == TicketStatus.OPEN
        assert ticket.resolved_at is None
        assert ticket.first_response_at == first_response
        assert ticket.status_history[-1].is_reopen

    def test_reopen_requires_resolved(self, make_ticket):
        ticket = make_ticket()
        ticket.set_pending()

        with pytest.raises(CannotModifyError) as exc_info:
            ticket.reopen()

        assert not isinstance(exc_info.value, IllegalTransitionError)
        assert ticket.status == TicketStatus.PENDING

    def test_reopen_open_ticket_is_illegal(self, make_ticket):
        with pytest.raises(IllegalTransitionError):
            make_ticket().reopen()

    def test_change_status_dispatches_to_resolve(self, make_ticket):
        ticket = make_ticket()

        ticket.change_status(TicketStatus.RESOLVED, notes="Resolvido por telefone")

        assert ticket.resolved_at is not None
        assert event_classes(ticket) == [TicketStatusChanged, TicketResolved]

    def test_change_status_plain_transition(self, make_ticket, agent):
        ticket = make_ticket()

        ticket.change_status(TicketStatus.IN_PROGRESS, agent, "Triagem")

        assert ticket.status == TicketStatus.IN_PROGRESS
        assert ticket.status_history[-1].notes == "Triagem"


# =============================================================================
# Mensagens
# =============================================================================

class TestMessages:

    def test_first_agent_message_sets_first_response_once(self, clock, make_ticket):
        ticket = make_ticket()
        created_at = ticket.created_at
        clock.advance(minutes=30)

        ticket.add_message(MessageEntity.from_agent(ticket.id, "agent-1", "Ana", "Olá!"))
        first_response = ticket.first_response_at

        assert created_at <= first_response <= clock.now

        clock.advance(minutes=30)
        ticket.add_message(MessageEntity.from_agent(ticket.id, "agent-1", "Ana", "Alguma novidade?"))
        assert ticket.first_response_at == first_response

    def test_customer_message_does_not_set_first_response(self, make_ticket):
        ticket = make_ticket()
        ticket.add_message(MessageEntity.from_customer(ticket.id, "Oi?"))
        assert ticket.first_response_at is None

    def test_internal_note_by_agent(self, make_ticket):
        ticket = make_ticket()
        ticket.add_message(MessageEntity.from_agent(
            ticket.id, "agent-1", "Ana", "Verificar transportadora", is_internal=True
        ))

        assert len(ticket.visible_messages()) == 0
        assert len(ticket.visible_messages(include_internal=True)) == 1

    def test_customer_cannot_write_internal_note(self, make_ticket):
        ticket = make_ticket()
        with pytest.raises(ValidationError) as exc_info:
            MessageEntity.create(ticket.id, SenderType.CUSTOMER, "Segredo", is_internal=True)
        assert exc_info.value.field == "is_internal"

    def test_empty_message_rejected(self, make_ticket):
        ticket = make_ticket()
        with pytest.raises(ValidationError):
            MessageEntity.from_customer(ticket.id, "   ")

    def test_message_for_other_ticket_rejected(self, make_ticket):
        ticket = make_ticket()
        other = make_ticket()

        with pytest.raises(ValidationError):
            ticket.add_message(MessageEntity.from_customer(other.id, "Oi"))
        assert ticket.messages == []

    def test_customer_reply_on_pending_assigned_ticket(self, make_ticket, agent):
        ticket = make_ticket()
        ticket.assign("agent-1", agent)
        ticket.set_pending("Aguardando nota fiscal", agent)
        ticket.drain_events()

        ticket.add_message(MessageEntity.from_customer(ticket.id, "Segue a nota"))

        assert ticket.status == TicketStatus.IN_PROGRESS
        entry = ticket.status_history[-1]
        assert entry.notes == "Customer replied"
        assert entry.is_system_change
        assert event_classes(ticket) == [TicketStatusChanged]

    def test_customer_reply_on_pending_unassigned_ticket(self, make_ticket):
        ticket = make_ticket()
        ticket.set_pending()

        ticket.add_message(MessageEntity.from_customer(ticket.id, "Respondendo"))

        assert ticket.status == TicketStatus.OPEN

    def test_agent_message_moves_open_ticket_to_in_progress(self, make_ticket):
        ticket = make_ticket()

        ticket.add_message(MessageEntity.from_agent(ticket.id, "agent-1", "Ana", "Olá"))

        assert ticket.status == TicketStatus.IN_PROGRESS
        assert ticket.assigned_to is None
        entry = ticket.status_history[-1]
        assert entry.from_status == TicketStatus.OPEN
        assert entry.notes == "Agent replied"
        assert entry.is_system_change
        assert event_classes(ticket) == [TicketStatusChanged]

    def test_agent_internal_note_also_moves_open_ticket(self, make_ticket):
        ticket = make_ticket()

        ticket.add_message(MessageEntity.from_agent(
            ticket.id, "agent-1", "Ana", "Verificar transportadora", is_internal=True
        ))

        assert ticket.status == TicketStatus.IN_PROGRESS

    def test_customer_message_keeps_open_ticket(self, make_ticket):
        ticket = make_ticket()

        ticket.add_message(MessageEntity.from_customer(ticket.id, "Alguém?"))

        assert ticket.status == TicketStatus.OPEN
        assert ticket.status_history == []

    def test_agent_message_on_pending_keeps_status(self, make_ticket):
        ticket = make_ticket()
        ticket.set_pending()

        ticket.add_message(MessageEntity.from_agent(ticket.id, "agent-1", "Ana", "Lembrete"))

        assert ticket.status == TicketStatus.PENDING

    def test_mark_messages_as_read_by_customer(self, make_ticket):
        ticket = make_ticket()
        ticket.add_message(MessageEntity.from_customer(ticket.id, "Oi"))
        ticket.add_message(MessageEntity.from_agent(ticket.id, "agent-1", "Ana", "Olá"))
        ticket.add_message(MessageEntity.from_agent(
            ticket.id, "agent-1", "Ana", "Nota", is_internal=True
        ))

        assert ticket.unread_count_for(SenderType.CUSTOMER) == 1
        assert ticket.mark_messages_as_read(SenderType.CUSTOMER) == 1
        assert ticket.mark_messages_as_read(SenderType.CUSTOMER) == 0
        assert ticket.unread_count_for(SenderType.AGENT) == 1


# =============================================================================
# Satisfação / Tags
# =============================================================================

class TestSatisfactionAndTags:

    def test_rating_open_ticket_fails(self, make_ticket):
        ticket = make_ticket()
        with pytest.raises(ValidationError):
            ticket.rate_satisfaction(3, "ok")
        assert ticket.satisfaction_rating is None

    def test_rating_after_resolve(self, make_ticket):
        ticket = make_ticket()
        ticket.resolve()

        ticket.rate_satisfaction(3, " ok ")

        assert ticket.satisfaction_rating == 3
        assert ticket.satisfaction_comment == "ok"

    @pytest.mark.parametrize("rating", [0, 6, True, "5"])
    def test_rating_out_of_range(self, make_ticket, rating):
        ticket = make_ticket()
        ticket.resolve()
        with pytest.raises(ValidationError) as exc_info:
            ticket.rate_satisfaction(rating)
        assert exc_info.value.field == "satisfaction_rating"

    def test_add_and_remove_tags(self, make_ticket):
        ticket = make_ticket()

        assert ticket.add_tag("Urgente") is True
        assert ticket.add_tag("urgente ") is False
        assert ticket.remove_tag("URGENTE") is True
        assert ticket.remove_tag("urgente") is False
        assert ticket.tags == []

    def test_set_category(self, make_ticket):
        ticket = make_ticket()
        ticket.set_category("cat-1")
        assert ticket.category_id == "cat-1"
        ticket.set_category("")
        assert ticket.category_id is None


class TestIdentity:

    def test_equality_by_id(self, make_ticket):
        ticket = make_ticket()
        copy = TicketEntity(id=ticket.id, subject="Outro")
        assert ticket == copy
        assert hash(ticket) == hash(copy)
        assert ticket != make_ticket()

    def test_drain_empties_buffer(self):
        ticket = TicketEntity.create(subject="Help", customer_id="cust-1")
        assert len(ticket.pending_events) == 1
        assert len(ticket.drain_events()) == 1
        assert ticket.drain_events() == []
