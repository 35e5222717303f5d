"""
Value Objects do Domínio de Tickets.

Tipos imutáveis que descrevem atributos do ticket sem identidade própria:
- TicketStatus / TicketPriority / SenderType: enumerações persistidas
- TicketNumber: identificador legível TKT-YYYYMMDD-NNNN
- GuestContact: dados de contato do cliente anônimo
- Attachment: descritor de anexo de mensagem
- Actor: quem executou uma ação (opcional em ações do sistema)
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional
import re
import time

from src.core.shared.exceptions import ValidationError


def utc_now() -> datetime:
    """Relógio do domínio (sempre timezone-aware, UTC)."""
    return datetime.now(timezone.utc)


class TicketStatus(Enum):
    """
    Estados possíveis de um ticket.

    Fluxo de Estados:
        OPEN ⇄ PENDING → IN_PROGRESS → RESOLVED → CLOSED
          ↑______________________________|  (reopen)
    """

    OPEN = "open"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def is_active(self) -> bool:
        """Ticket ainda exige atenção (conta para SLA)."""
        return self not in (TicketStatus.RESOLVED, TicketStatus.CLOSED)

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def from_string(cls, value: str) -> "TicketStatus":
        """
        Converte string para enum (aceita nome ou valor).

        Raises:
            ValidationError: Se valor inválido
        """
        normalized = (value or "").strip().lower().replace(" ", "_")
        for status in cls:
            if status.value == normalized:
                return status
        raise ValidationError(f"Status inválido: {value}", field="status")


class TicketPriority(Enum):
    """
    Níveis de prioridade.

    SLA e severidade são definidos em PriorityPolicy.
    """

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def label(self) -> str:
        return self.value.title()

    @classmethod
    def from_string(cls, value: str) -> "TicketPriority":
        """
        Converte string para enum (aceita nome ou valor).

        Raises:
            ValidationError: Se valor inválido
        """
        normalized = (value or "").strip().lower()
        for priority in cls:
            if priority.value == normalized:
                return priority
        raise ValidationError(f"Prioridade inválida: {value}", field="priority")


class SenderType(Enum):
    """Autor de uma mensagem."""

    CUSTOMER = "customer"
    AGENT = "agent"
    SYSTEM = "system"

    @property
    def can_write_internal_notes(self) -> bool:
        return self in (SenderType.AGENT, SenderType.SYSTEM)

    @classmethod
    def from_string(cls, value: str) -> "SenderType":
        normalized = (value or "").strip().lower()
        for sender in cls:
            if sender.value == normalized:
                return sender
        raise ValidationError(f"Tipo de remetente inválido: {value}", field="sender_type")


@dataclass(frozen=True)
class TicketNumber:
    """
    Número legível do ticket no formato TKT-YYYYMMDD-NNNN.

    O número é visível para o cliente e estável entre versões.
    A unicidade é garantida pela camada de persistência (coluna unique);
    a sequência gerada aqui é apenas best-effort.

    Example:
        number = TicketNumber.generate()
        str(number)  # "TKT-20240115-0042"
    """

    value: str

    PREFIX = "TKT"
    PATTERN = re.compile(r"^TKT-\d{8}-\d{4}$")

    def __post_init__(self):
        if not self.PATTERN.match(self.value):
            raise ValidationError(
                f"Número de ticket inválido: {self.value}",
                field="ticket_number"
            )

    @classmethod
    def generate(
        cls,
        now: Optional[datetime] = None,
        sequence: Optional[int] = None,
    ) -> "TicketNumber":
        """
        Gera novo número para a data informada.

        Args:
            now: Data de emissão (default: agora em UTC)
            sequence: Sequência do dia; se omitida, derivada do relógio

        Returns:
            TicketNumber válido
        """
        now = now or utc_now()
        if sequence is None:
            sequence = time.time_ns() % 10000
        if not 0 <= sequence <= 9999:
            raise ValidationError(
                "Sequência deve estar entre 0 e 9999",
                field="ticket_number"
            )
        return cls(f"{cls.PREFIX}-{now:%Y%m%d}-{sequence:04d}")

    @classmethod
    def parse(cls, text: str) -> "TicketNumber":
        """Normaliza (strip/upper) e valida um número informado pelo usuário."""
        return cls((text or "").strip().upper())

    @classmethod
    def is_valid(cls, text: str) -> bool:
        return bool(cls.PATTERN.match((text or "").strip().upper()))

    @property
    def issued_on(self) -> date:
        return datetime.strptime(self.value[4:12], "%Y%m%d").date()

    @property
    def sequence(self) -> int:
        return int(self.value[-4:])

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class GuestContact:
    """Contato de cliente não autenticado."""

    email: str
    name: str = ""
    phone: str = ""

    def __post_init__(self):
        if not self.email or not self.email.strip():
            raise ValidationError("Email do convidado é obrigatório", field="guest_email")
        if "@" not in self.email:
            raise ValidationError("Email do convidado inválido", field="guest_email")

    def to_dict(self) -> dict:
        return {"email": self.email, "name": self.name, "phone": self.phone}


@dataclass(frozen=True)
class Attachment:
    """Descritor de anexo (o arquivo em si é armazenado fora do domínio)."""

    name: str
    url: str
    size: int = 0
    mime_type: str = "application/octet-stream"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "url": self.url,
            "size": self.size,
            "mime_type": self.mime_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Attachment":
        return cls(
            name=data.get("name", ""),
            url=data.get("url", ""),
            size=int(data.get("size") or 0),
            mime_type=data.get("mime_type") or "application/octet-stream",
        )


@dataclass(frozen=True)
class Actor:
    """
    Identidade que executa uma ação.

    Ações disparadas pelo próprio sistema (ex.: resposta do cliente
    reabrindo um ticket pendente) não possuem ator.
    """

    id: Optional[str] = None
    name: str = ""

    @property
    def is_anonymous(self) -> bool:
        return self.id is None

    @classmethod
    def from_values(cls, actor_id: Optional[str], actor_name: Optional[str] = None) -> Optional["Actor"]:
        if not actor_id and not actor_name:
            return None
        return cls(id=actor_id or None, name=actor_name or "")
