"""
Unit of Work - Implementação Django.

Gerencia a transação de um comando e a publicação de eventos.

Responsabilidades:
- Abrir/fechar transação (django.db.transaction.atomic)
- Commit/Rollback coordenado
- Publicar eventos somente após commit (transaction.on_commit)
- Engolir e logar falhas de publicação (best-effort, sem retry)
"""

from typing import List, Optional
import logging

from django.db import transaction

from src.core.shared.events import DomainEvent
from src.core.shared.interfaces import EventPublisher, UnitOfWork

logger = logging.getLogger(__name__)


def publish_safely(publisher: Optional[EventPublisher], events: List[DomainEvent]) -> None:
    """
    Entrega eventos ao publisher, um a um.

    Falhas são logadas e descartadas: a operação de negócio já foi
    confirmada e não pode falhar por causa da publicação.
    """
    for event in events:
        logger.info(
            f"Publishing event: {event.event_type} "
            f"for aggregate {event.aggregate_id}"
        )
        if publisher is None:
            continue
        try:
            publisher.publish_event(event)
        except Exception as e:
            logger.error(
                f"Failed to publish event {event.event_type} "
                f"({event.event_id}): {e}"
            )


class DjangoUnitOfWork(UnitOfWork):
    """
    Implementação Django do Unit of Work.

    A transação é um `transaction.atomic()`; se já existir uma transação
    externa (ex.: request ATOMIC_REQUESTS ou testes), vira savepoint e os
    eventos só saem quando a transação mais externa confirmar.

    Example:
        with DjangoUnitOfWork(publisher) as uow:
            repo.save(ticket)
            uow.track(ticket)
        # Commit + eventos publicados

    Example com rollback:
        with DjangoUnitOfWork(publisher) as uow:
            repo.save(ticket)
            uow.track(ticket)
            raise Exception("Erro!")
        # Rollback, eventos descartados
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None, using: Optional[str] = None):
        """
        Args:
            event_publisher: Publicador de eventos (Celery, logging, ...)
            using: Alias do banco (default: 'default')
        """
        super().__init__()
        self._event_publisher = event_publisher
        self._using = using
        self._atomic = None
        self._committed = False
        self._rolled_back = False

    def _begin_transaction(self) -> None:
        self._committed = False
        self._rolled_back = False
        self.clear_events()
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        logger.debug("Transaction started")

    def commit(self) -> None:
        """
        Confirma transação e agenda publicação dos eventos.

        Raises:
            Exception: Se o commit falhar (eventos descartados)
        """
        if self._atomic is None:
            logger.warning("Commit without active transaction")
            return

        events = self.collect_events()
        publisher = self._event_publisher

        # Registrado antes de sair do atomic para ser executado no commit real
        transaction.on_commit(
            lambda: publish_safely(publisher, events),
            using=self._using,
        )

        atomic, self._atomic = self._atomic, None
        atomic.__exit__(None, None, None)
        self._committed = True
        logger.debug("Transaction committed")

    def rollback(self) -> None:
        """Desfaz mudanças e descarta eventos."""
        self.discard_events()
        if self._atomic is None:
            return

        atomic, self._atomic = self._atomic, None
        try:
            atomic.__exit__(Exception, Exception("rollback"), None)
        finally:
            self._rolled_back = True
            logger.debug("Transaction rolled back")

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back


class InMemoryUnitOfWork(UnitOfWork):
    """
    Unit of Work em memória para testes.

    Não persiste nada; publica os eventos drenados no publisher
    informado (se houver) e guarda-os em `published_events`.

    Example:
        uow = InMemoryUnitOfWork()
        with uow:
            repo.save(ticket)
            uow.track(ticket)

        assert uow.committed
        assert uow.published_events[0].event_type == "ticket.created"
    """

    def __init__(self, event_publisher: Optional[EventPublisher] = None):
        super().__init__()
        self._event_publisher = event_publisher
        self._committed = False
        self._rolled_back = False
        self._published_events: List[DomainEvent] = []

    def _begin_transaction(self) -> None:
        self.clear_events()

    def commit(self) -> None:
        self._committed = True
        events = self.collect_events()
        self._published_events.extend(events)
        publish_safely(self._event_publisher, events)

    def rollback(self) -> None:
        self._rolled_back = True
        self.discard_events()

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def rolled_back(self) -> bool:
        return self._rolled_back

    @property
    def published_events(self) -> List[DomainEvent]:
        return self._published_events

    def reset(self) -> None:
        """Reset para próximo teste."""
        self._committed = False
        self._rolled_back = False
        self._published_events.clear()
        self.clear_events()
