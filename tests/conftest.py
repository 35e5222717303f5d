"""
Configurações globais do Pytest para o SupportDesk.

Este arquivo é carregado automaticamente pelo pytest e:
- Configura Django (SQLite em memória) antes da coleta
- Fornece relógio controlável para o domínio
- Fornece fixtures de tickets reutilizadas pelas suítes
"""

from datetime import datetime, timedelta, timezone

import pytest


def pytest_configure(config):
    """Configura Django antes dos testes."""
    import django
    from django.conf import settings

    if not settings.configured:
        settings.configure(
            DEBUG=True,
            SECRET_KEY='test-secret-key',
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.admin',
                'django.contrib.auth',
                'django.contrib.contenttypes',
                'django.contrib.sessions',
                'django.contrib.messages',
                'src.adapters.django_app.tickets',
            ],
            MIDDLEWARE=[],
            ROOT_URLCONF='src.config.urls',
            TEMPLATES=[{
                'BACKEND': 'django.template.backends.django.DjangoTemplates',
                'APP_DIRS': True,
                'OPTIONS': {'context_processors': []},
            }],
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
            TIME_ZONE='UTC',
            EVENT_PUBLISHER_MODE='sync',
            CELERY_TASK_ALWAYS_EAGER=True,
        )
        django.setup()

    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


# =============================================================================
# Relógio
# =============================================================================

class FrozenClock:
    """Relógio fixo que substitui `utc_now` do domínio."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock(monkeypatch):
    """Congela o relógio do domínio em 2024-01-15 12:00 UTC."""
    frozen = FrozenClock(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))
    monkeypatch.setattr("src.core.tickets.entities.utc_now", frozen)
    monkeypatch.setattr("src.core.tickets.use_cases.utc_now", frozen)
    return frozen


# =============================================================================
# Tickets
# =============================================================================

@pytest.fixture
def agent():
    from src.core.tickets.value_objects import Actor
    return Actor(id="agent-1", name="Ana Agente")


@pytest.fixture
def make_ticket():
    """Factory de tickets já com eventos de criação drenados."""
    from src.core.tickets.entities import TicketEntity
    from src.core.tickets.value_objects import GuestContact

    def _make(drain: bool = True, **kwargs) -> TicketEntity:
        kwargs.setdefault("subject", "Pedido não chegou")
        if "customer_id" not in kwargs and "guest" not in kwargs:
            kwargs["guest"] = GuestContact(email="cliente@example.com", name="Carla")
        ticket = TicketEntity.create(**kwargs)
        if drain:
            ticket.drain_events()
        return ticket

    return _make
