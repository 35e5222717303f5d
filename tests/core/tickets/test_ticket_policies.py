"""
Testes Unitários para Políticas e Value Objects de Tickets.

Coverage:
- StatusPolicy (tabela de transições completa)
- PriorityPolicy (SLA, severidade, próximo nível)
- TicketNumber, GuestContact, Actor, enums
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.core.shared.exceptions import IllegalTransitionError, ValidationError
from src.core.tickets.policies import PriorityPolicy, StatusPolicy
from src.core.tickets.value_objects import (
    Actor,
    Attachment,
    GuestContact,
    SenderType,
    TicketNumber,
    TicketPriority,
    TicketStatus,
)


S = TicketStatus

ALLOWED = {
    (S.OPEN, S.PENDING),
    (S.OPEN, S.IN_PROGRESS),
    (S.OPEN, S.RESOLVED),
    (S.PENDING, S.OPEN),
    (S.PENDING, S.IN_PROGRESS),
    (S.PENDING, S.RESOLVED),
    (S.IN_PROGRESS, S.PENDING),
    (S.IN_PROGRESS, S.RESOLVED),
    (S.RESOLVED, S.CLOSED),
    (S.RESOLVED, S.OPEN),
}

ALL_PAIRS = [(a, b) for a in TicketStatus for b in TicketStatus]


class TestStatusPolicy:
    """Testes para a máquina de estados."""

    @pytest.mark.parametrize("from_status,to_status", ALL_PAIRS)
    def test_table_matches_allowed_pairs(self, from_status, to_status):
        """Toda combinação fora da tabela é rejeitada."""
        expected = (from_status, to_status) in ALLOWED
        assert StatusPolicy.can_transition(from_status, to_status) is expected

    def test_closed_is_terminal(self):
        assert StatusPolicy.is_terminal(S.CLOSED)
        assert StatusPolicy.allowed_targets(S.CLOSED) == frozenset()

    @pytest.mark.parametrize("status", [S.OPEN, S.PENDING, S.IN_PROGRESS, S.RESOLVED])
    def test_non_closed_statuses_are_not_terminal(self, status):
        assert not StatusPolicy.is_terminal(status)

    def test_in_progress_cannot_go_back_to_open(self):
        """Retorno a OPEN só por pendente ou reabertura."""
        assert not StatusPolicy.can_transition(S.IN_PROGRESS, S.OPEN)

    def test_ensure_transition_raises_with_statuses(self):
        with pytest.raises(IllegalTransitionError) as exc_info:
            StatusPolicy.ensure_transition(S.OPEN, S.CLOSED)

        error = exc_info.value
        assert error.from_status == S.OPEN
        assert error.to_status == S.CLOSED
        assert error.rule == "illegal_transition"
        assert error.to_dict()["from_status"] == "open"
        assert error.to_dict()["to_status"] == "closed"

    def test_ensure_transition_accepts_valid_pair(self):
        StatusPolicy.ensure_transition(S.RESOLVED, S.CLOSED)


class TestPriorityPolicy:
    """Testes para SLA e severidade."""

    @pytest.mark.parametrize("priority,hours", [
        (TicketPriority.LOW, 48),
        (TicketPriority.NORMAL, 24),
        (TicketPriority.HIGH, 8),
        (TicketPriority.URGENT, 4),
    ])
    def test_sla_duration(self, priority, hours):
        assert PriorityPolicy.sla_duration(priority) == timedelta(hours=hours)

    def test_default_is_normal(self):
        assert PriorityPolicy.DEFAULT == TicketPriority.NORMAL

    def test_severity_strictly_increases(self):
        order = [TicketPriority.LOW, TicketPriority.NORMAL, TicketPriority.HIGH, TicketPriority.URGENT]
        severities = [PriorityPolicy.severity(p) for p in order]
        assert severities == [1, 2, 3, 4]

    def test_next_level_chain(self):
        assert PriorityPolicy.next_level(TicketPriority.LOW) == TicketPriority.NORMAL
        assert PriorityPolicy.next_level(TicketPriority.NORMAL) == TicketPriority.HIGH
        assert PriorityPolicy.next_level(TicketPriority.HIGH) == TicketPriority.URGENT
        assert PriorityPolicy.next_level(TicketPriority.URGENT) is None

    def test_compute_deadline(self):
        start = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        deadline = PriorityPolicy.compute_deadline(TicketPriority.HIGH, start)
        assert deadline == datetime(2024, 1, 15, 20, 0, tzinfo=timezone.utc)

    def test_is_higher(self):
        assert PriorityPolicy.is_higher(TicketPriority.URGENT, TicketPriority.HIGH)
        assert not PriorityPolicy.is_higher(TicketPriority.LOW, TicketPriority.NORMAL)
        assert not PriorityPolicy.is_higher(TicketPriority.HIGH, TicketPriority.HIGH)


class TestTicketNumber:
    """Testes para o número legível do ticket."""

    def test_generate_uses_date_and_sequence(self):
        now = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
        number = TicketNumber.generate(now, sequence=42)

        assert str(number) == "TKT-20240115-0042"
        assert number.issued_on == date(2024, 1, 15)
        assert number.sequence == 42

    def test_generate_without_sequence_matches_pattern(self):
        number = TicketNumber.generate()
        assert TicketNumber.is_valid(number.value)

    @pytest.mark.parametrize("sequence", [-1, 10000])
    def test_generate_rejects_out_of_range_sequence(self, sequence):
        with pytest.raises(ValidationError):
            TicketNumber.generate(sequence=sequence)

    def test_parse_normalizes_case_and_spaces(self):
        assert TicketNumber.parse("  tkt-20240115-0001 ").value == "TKT-20240115-0001"

    @pytest.mark.parametrize("text", ["", "TKT-2024-0001", "ABC-20240115-0001", "TKT-20240115-12345"])
    def test_invalid_numbers_rejected(self, text):
        assert not TicketNumber.is_valid(text)
        with pytest.raises(ValidationError) as exc_info:
            TicketNumber(text)
        assert exc_info.value.field == "ticket_number"


class TestEnums:

    def test_status_from_string(self):
        assert TicketStatus.from_string("In Progress") == TicketStatus.IN_PROGRESS
        assert TicketStatus.from_string("resolved") == TicketStatus.RESOLVED

    def test_status_from_string_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketStatus.from_string("archived")
        assert exc_info.value.field == "status"

    def test_priority_from_string_invalid(self):
        with pytest.raises(ValidationError) as exc_info:
            TicketPriority.from_string("critical")
        assert exc_info.value.field == "priority"

    def test_active_statuses(self):
        active = {s for s in TicketStatus if s.is_active}
        assert active == {S.OPEN, S.PENDING, S.IN_PROGRESS}

    def test_only_agents_and_system_write_internal_notes(self):
        assert SenderType.AGENT.can_write_internal_notes
        assert SenderType.SYSTEM.can_write_internal_notes
        assert not SenderType.CUSTOMER.can_write_internal_notes


class TestContactAndActor:

    def test_guest_requires_email(self):
        with pytest.raises(ValidationError) as exc_info:
            GuestContact(email="")
        assert exc_info.value.field == "guest_email"

    def test_guest_rejects_malformed_email(self):
        with pytest.raises(ValidationError):
            GuestContact(email="sem-arroba")

    def test_actor_from_values(self):
        assert Actor.from_values(None, None) is None
        assert Actor.from_values("agent-1", "Ana") == Actor(id="agent-1", name="Ana")
        assert Actor.from_values(None, "Sistema").is_anonymous

    def test_attachment_from_dict_defaults(self):
        attachment = Attachment.from_dict({"name": "nota.pdf", "url": "https://files/nota.pdf"})
        assert attachment.size == 0
        assert attachment.mime_type == "application/octet-stream"
