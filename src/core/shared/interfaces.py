"""
Interfaces (Ports) - Contratos entre Core e Adapters.

Tipos de Ports:
- Driven Ports (lado direito): UnitOfWork, EventPublisher, Repository
- Driving Ports (lado esquerdo): Definidos nos Use Cases

Princípio: Core define interfaces; Adapters implementam.
"""

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, Protocol, TypeVar

from .events import DomainEvent


T = TypeVar("T")


class EventSource(Protocol):
    """Agregado que acumula eventos (ex: TicketEntity)."""

    def drain_events(self) -> List[DomainEvent]:
        ...


class EventPublisher(ABC):
    """
    Sink de eventos.

    Recebe o tipo do evento (routing key, ex: "ticket.created") e o
    payload já serializado. Implementações podem falhar; quem chama
    (Unit of Work) registra a falha e segue, sem retry síncrono.

    Example:
        class CeleryEventPublisher(EventPublisher):
            def publish(self, event_type, payload):
                dispatch_domain_event.delay(event_type, payload.decode())
    """

    @abstractmethod
    def publish(self, event_type: str, payload: bytes) -> None:
        """
        Publica um evento serializado.

        Args:
            event_type: Constante do tipo do evento
            payload: JSON UTF-8 do evento
        """
        raise NotImplementedError

    def publish_event(self, event: DomainEvent) -> None:
        """Serializa e publica um evento de domínio."""
        self.publish(event.event_type, event.to_payload())


class UnitOfWork(ABC):
    """
    Unit of Work - Coordena transações atômicas.

    Pattern: Context Manager
        with uow:
            repo.save(ticket)
            uow.track(ticket)
        # Commit automático ao sair sem erro; eventos publicados depois
        # Rollback automático se exceção; eventos descartados

    Responsabilidades:
    - Gerenciar início/fim de transação
    - Commit/Rollback coordenado
    - Drenar eventos dos agregados rastreados somente após commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._tracked: List[EventSource] = []

    def __enter__(self) -> "UnitOfWork":
        self._begin_transaction()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
        else:
            self.commit()
        return False  # Não suprime exceções

    @abstractmethod
    def _begin_transaction(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """
        Confirma a transação e publica eventos.

        Note:
            Eventos só são publicados após commit bem-sucedido.
        """
        raise NotImplementedError

    @abstractmethod
    def rollback(self) -> None:
        """Desfaz mudanças e descarta eventos pendentes."""
        raise NotImplementedError

    def track(self, aggregate: EventSource) -> None:
        """
        Registra agregado cujos eventos serão drenados no commit.

        Args:
            aggregate: Agregado alterado nesta unidade de trabalho
        """
        if not any(tracked is aggregate for tracked in self._tracked):
            self._tracked.append(aggregate)

    def publish_event(self, event: DomainEvent) -> None:
        """Enfileira evento avulso para publicação após commit."""
        self._events.append(event)

    def collect_events(self) -> List[DomainEvent]:
        """
        Drena eventos avulsos e dos agregados rastreados.

        Returns:
            Eventos na ordem em que foram levantados por agregado
        """
        events = list(self._events)
        for aggregate in self._tracked:
            events.extend(aggregate.drain_events())
        self.clear_events()
        return events

    def clear_events(self) -> None:
        self._events.clear()
        self._tracked.clear()

    def discard_events(self) -> None:
        """Descarta eventos pendentes (rollback)."""
        for aggregate in self._tracked:
            aggregate.drain_events()
        self.clear_events()


class Repository(Protocol, Generic[T]):
    """
    Interface genérica para repositórios.

    Usando Protocol para permitir duck typing.
    """

    def save(self, entity: T) -> None:
        ...

    def get_by_id(self, entity_id: str) -> Optional[T]:
        ...

    def exists(self, entity_id: str) -> bool:
        ...


UoW = UnitOfWork
