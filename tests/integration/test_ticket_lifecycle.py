"""
Testes de Integração End-to-End.

Fluxo completo pelo container:
- Use Case → DjangoUnitOfWork → DjangoTicketRepository → Database
- Domain Events → Publisher (após commit) → Dispatcher Celery
"""

import json
from datetime import timedelta
from unittest.mock import patch

import pytest
from dependency_injector import providers

from src.adapters.django_app.events import handlers
from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.config.container import get_container, reset_container
from src.core.shared.exceptions import ConcurrencyError, IllegalTransitionError
from src.core.tickets.dtos import (
    AddMessageInputDTO,
    AssignTicketInputDTO,
    CreateTicketInputDTO,
    RateSatisfactionInputDTO,
    TicketActionInputDTO,
)


pytestmark = [pytest.mark.integration, pytest.mark.django_db]


@pytest.fixture
def container():
    reset_container()
    c = get_container()
    yield c
    c.event_publisher.reset_override()
    reset_container()


@pytest.fixture
def publisher(container):
    in_memory = InMemoryEventPublisher()
    container.event_publisher.override(providers.Object(in_memory))
    return in_memory


def action(ticket_id, notes=""):
    return TicketActionInputDTO(ticket_id=ticket_id, notes=notes, actor_id="agent-1", actor_name="Ana")


class TestTicketLifecycle:

    def test_guest_ticket_from_creation_to_rating(
        self, container, publisher, clock, django_capture_on_commit_callbacks
    ):
        """Cenário: convidado abre, agente atende, resolve, fecha e cliente avalia."""
        with django_capture_on_commit_callbacks(execute=True):
            created = container.create_ticket_service().execute(CreateTicketInputDTO(
                subject="Help", content="Meu pedido não chegou", guest_email="a@b.com",
            ))
            container.assign_ticket_service().execute(AssignTicketInputDTO(
                ticket_id=created.id, agent_id="agent-x", actor_id="admin-1",
            ))
            clock.advance(minutes=20)
            container.add_message_service().execute(AddMessageInputDTO(
                ticket_id=created.id, sender_type="agent", sender_id="agent-x",
                sender_name="Xavier", content="Estamos verificando",
            ))
            clock.advance(hours=2)
            resolved = container.resolve_ticket_service().execute(action(created.id, "fixed"))
            reassigned = container.assign_ticket_service().execute(AssignTicketInputDTO(
                ticket_id=created.id, agent_id="agent-y",
            ))

        assert created.sla_deadline == created.created_at + timedelta(hours=24)
        assert resolved.status == "resolved"
        assert len(resolved.status_history) == 2
        assert reassigned.assigned_to == "agent-y"
        assert reassigned.status == "resolved"

        with pytest.raises(IllegalTransitionError):
            container.set_pending_service().execute(action(created.id))

        closed = container.close_ticket_service().execute(action(created.id))
        rated = container.rate_satisfaction_service().execute(
            RateSatisfactionInputDTO(ticket_id=created.id, rating=4)
        )

        assert closed.closed_at is not None
        assert rated.satisfaction_rating == 4
        assert rated.first_response_at == clock.now - timedelta(hours=2)

        assert publisher.event_types() == [
            "ticket.created",
            "ticket.assigned",
            "ticket.status_changed",
            "ticket.status_changed",
            "ticket.resolved",
            "ticket.assigned",
        ]
        resolved_payload = publisher.payloads("ticket.resolved")[0]
        assert resolved_payload["aggregate_id"] == created.id
        assert resolved_payload["data"]["within_sla"] is True

    def test_failed_command_publishes_nothing(
        self, container, publisher, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            created = container.create_ticket_service().execute(
                CreateTicketInputDTO(subject="Help", customer_id="cust-1")
            )
        publisher.clear()

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(IllegalTransitionError):
                container.close_ticket_service().execute(action(created.id))

        assert callbacks == []
        assert publisher.event_types() == []
        stored = container.get_ticket_service().execute(created.id)
        assert stored.status == "open"
        assert stored.status_history == []

    def test_concurrent_writers_one_wins(self, container, publisher):
        created = container.create_ticket_service().execute(
            CreateTicketInputDTO(subject="Help", customer_id="cust-1")
        )
        repo = container.ticket_repository()

        first = repo.get_by_id(created.id)
        second = repo.get_by_id(created.id)
        first.assign("agent-1")
        repo.save(first)

        second.assign("agent-2")
        with pytest.raises(ConcurrencyError):
            repo.save(second)

        assert repo.get_by_id(created.id).assigned_to == "agent-1"

    def test_events_reach_celery_dispatcher(
        self, container, clock, django_capture_on_commit_callbacks
    ):
        """Com o publisher Celery, cada evento vira uma chamada ao dispatcher."""
        container.config.event_publisher_mode.from_value("celery")

        with patch.object(handlers.dispatch_domain_event, "delay") as delay:
            with django_capture_on_commit_callbacks(execute=True):
                created = container.create_ticket_service().execute(
                    CreateTicketInputDTO(subject="Help", guest_email="a@b.com", priority="urgent")
                )

        delay.assert_called_once()
        event_type, payload = delay.call_args.args
        assert event_type == "ticket.created"
        assert json.loads(payload)["data"]["ticket_number"] == created.ticket_number

        with patch.object(handlers.handle_ticket_created, "delay") as handler_delay:
            assert handlers.dispatch_domain_event(event_type, payload) is True
        handler_delay.assert_called_once()
