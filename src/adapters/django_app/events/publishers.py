"""
Event Publishers - Sinks de Eventos de Domínio.

Todos recebem `(event_type, payload)` com o payload já serializado
(JSON UTF-8) pelo Unit of Work.

Implementações:
- LoggingEventPublisher: Apenas loga (desenvolvimento)
- CeleryEventPublisher: Despacha para o router Celery (produção)
- InMemoryEventPublisher: Guarda eventos para asserções (testes)
- CompositeEventPublisher: Replica para vários publishers
"""

from typing import Any, Callable, Dict, List, Tuple
import json
import logging

from src.core.shared.interfaces import EventPublisher

logger = logging.getLogger(__name__)


class LoggingEventPublisher(EventPublisher):
    """Publisher que apenas loga eventos."""

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level

    def publish(self, event_type: str, payload: bytes) -> None:
        logger.log(
            self._log_level,
            f"[EVENT] {event_type} | payload={payload.decode('utf-8')}"
        )


class CeleryEventPublisher(EventPublisher):
    """
    Publisher que envia eventos para o dispatcher Celery.

    Erros do broker são propagados; o Unit of Work os registra e segue.
    """

    def __init__(self, also_log: bool = True):
        self._also_log = also_log

    def publish(self, event_type: str, payload: bytes) -> None:
        if self._also_log:
            logger.info(f"[EVENT->CELERY] {event_type}")

        from src.adapters.django_app.events.handlers import dispatch_domain_event
        dispatch_domain_event.delay(event_type, payload.decode('utf-8'))


class InMemoryEventPublisher(EventPublisher):
    """
    Publisher em memória para testes.

    Example:
        publisher = InMemoryEventPublisher()
        uow = InMemoryUnitOfWork(publisher)
        ...
        assert publisher.event_types() == ["ticket.created"]
    """

    def __init__(self):
        self._published: List[Tuple[str, bytes]] = []
        self._handlers: Dict[str, List[Callable[[Dict[str, Any]], None]]] = {}

    def publish(self, event_type: str, payload: bytes) -> None:
        self._published.append((event_type, payload))
        for handler in self._handlers.get(event_type, []):
            handler(json.loads(payload))

    @property
    def published(self) -> List[Tuple[str, bytes]]:
        return list(self._published)

    def event_types(self) -> List[str]:
        return [event_type for event_type, _ in self._published]

    def payloads(self, event_type: str) -> List[Dict[str, Any]]:
        """Payloads desserializados de um tipo de evento."""
        return [
            json.loads(payload)
            for published_type, payload in self._published
            if published_type == event_type
        ]

    def register_handler(self, event_type: str, handler: Callable[[Dict[str, Any]], None]) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def clear(self) -> None:
        self._published.clear()


class CompositeEventPublisher(EventPublisher):
    """
    Publisher que delega para múltiplos publishers.

    A falha de um destino não impede os demais.
    """

    def __init__(self, publishers: List[EventPublisher] = None):
        self._publishers = list(publishers or [])

    def add_publisher(self, publisher: EventPublisher) -> None:
        self._publishers.append(publisher)

    def publish(self, event_type: str, payload: bytes) -> None:
        for publisher in self._publishers:
            try:
                publisher.publish(event_type, payload)
            except Exception as e:
                logger.error(
                    f"Erro ao publicar {event_type} em {publisher.__class__.__name__}: {e}"
                )


def get_event_publisher(mode: str = "sync") -> EventPublisher:
    """
    Factory para obter publisher apropriado.

    Args:
        mode: "celery" para processamento assíncrono; qualquer outro
            valor usa apenas logging
    """
    if mode == "celery":
        return CeleryEventPublisher()
    return LoggingEventPublisher()
