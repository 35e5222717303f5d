"""
Domain Events - Base compartilhada.

Eventos descrevem fatos já ocorridos em um agregado. São acumulados
no próprio agregado durante a operação e drenados pelo Unit of Work
somente após o commit da transação.

Características:
- Imutáveis (dataclass frozen)
- Auto-geração de ID e timestamp
- Tipo identificado por constante de classe (ex: "ticket.created")
- Serializáveis para JSON (payload entregue ao publisher)
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict
import json
import uuid


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _serialize(value: Any) -> Any:
    """Converte valores de domínio em tipos aceitos por JSON."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class DomainEvent:
    """
    Campos comuns a todos os eventos de domínio.

    Subclasses definem `event_type` (constante estável usada como
    routing key) e `aggregate_type`, e acrescentam seus campos de payload.

    Attributes:
        aggregate_id: ID do agregado que gerou o evento
        occurred_at: Momento em que o evento ocorreu (UTC)
        event_id: Identificador único do evento
        version: Versão do schema do evento
    """

    aggregate_id: str = ""
    occurred_at: datetime = field(default_factory=_utc_now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    version: int = 1

    event_type: ClassVar[str] = ""
    aggregate_type: ClassVar[str] = ""

    _BASE_FIELDS: ClassVar[frozenset] = frozenset(
        {"aggregate_id", "occurred_at", "event_id", "version"}
    )

    def __post_init__(self):
        if not self.aggregate_id:
            raise ValueError("aggregate_id é obrigatório")

    def event_data(self) -> Dict[str, Any]:
        """Campos específicos do evento, já serializados."""
        return {
            f.name: _serialize(getattr(self, f.name))
            for f in fields(self)
            if f.name not in self._BASE_FIELDS
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializa evento para dicionário.

        Returns:
            Dicionário com envelope e dados do evento
        """
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self.event_data(),
        }

    def to_payload(self) -> bytes:
        """Payload UTF-8 JSON entregue ao EventPublisher."""
        return json.dumps(self.to_dict(), sort_keys=True).encode("utf-8")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"event_id={self.event_id[:8]}..., "
            f"aggregate_id={self.aggregate_id}, "
            f"occurred_at={self.occurred_at.isoformat()}"
            f")"
        )
