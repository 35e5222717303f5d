"""
Fixtures dos testes de adapters Django.

- Repositório e lookups reais (SQLite em memória)
- Container global com publisher em memória
"""

import uuid

import pytest
from dependency_injector import providers


@pytest.fixture
def ticket_repository():
    from src.adapters.django_app.tickets.repositories import DjangoTicketRepository
    return DjangoTicketRepository()


@pytest.fixture
def category(db):
    from src.adapters.django_app.tickets.models import CategoryModel
    return CategoryModel.objects.create(
        id=str(uuid.uuid4()),
        name="Entrega",
        slug="entrega",
    )


@pytest.fixture
def canned_response(db, category):
    from src.adapters.django_app.tickets.models import CannedResponseModel
    return CannedResponseModel.objects.create(
        id=str(uuid.uuid4()),
        title="Reenvio",
        content="Seu pedido foi reenviado.",
        category=category,
    )


@pytest.fixture
def publisher():
    """
    Container global com o publisher trocado por um em memória.

    Eventos só chegam aqui após o commit; use
    `django_capture_on_commit_callbacks(execute=True)` nas asserções.
    """
    from src.adapters.django_app.events.publishers import InMemoryEventPublisher
    from src.config.container import get_container, reset_container

    reset_container()
    container = get_container()
    in_memory = InMemoryEventPublisher()
    container.event_publisher.override(providers.Object(in_memory))

    yield in_memory

    container.event_publisher.reset_override()
    reset_container()
