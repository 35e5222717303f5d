"""
Ports (Interfaces) do Domínio de Tickets.

Contratos que os Adapters de infraestrutura implementam:
- TicketRepository: persistência do agregado (ticket + mensagens + histórico)
- CategoryLookup: existência de categorias (dados de referência)
- CannedResponseLookup: conteúdo de respostas prontas

Implementações em memória ficam aqui para testes e prototipagem.
"""

from datetime import datetime
from typing import Dict, List, Optional, Protocol, runtime_checkable

from src.core.shared.exceptions import EntityNotFoundError

from .entities import TicketEntity


@runtime_checkable
class TicketRepository(Protocol):
    """
    Interface para persistência de Tickets.

    `save` deve gravar o ticket e todas as mensagens e entradas de
    histórico novas em uma única transação.

    Implementações:
    - DjangoTicketRepository (ORM, controle otimista por versão)
    - InMemoryTicketRepository (testes)
    """

    def save(self, ticket: TicketEntity) -> None:
        """
        Persiste ticket (create ou update).

        Raises:
            ConcurrencyError: Versão persistida difere da carregada
        """
        ...

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        ...

    def get_by_number(self, ticket_number: str) -> Optional[TicketEntity]:
        ...

    def exists(self, ticket_id: str) -> bool:
        ...

    def list_overdue(self, now: datetime) -> List[TicketEntity]:
        """
        Tickets ativos cujo prazo de SLA já passou e ainda sem aviso
        emitido para o prazo atual.

        Args:
            now: Instante de referência
        """
        ...


def load_ticket(repo: TicketRepository, ticket_id: str) -> TicketEntity:
    """
    Carrega ticket ou falha.

    Raises:
        EntityNotFoundError: Se ticket não existe
    """
    ticket = repo.get_by_id(ticket_id)
    if ticket is None:
        raise EntityNotFoundError(
            f"Ticket {ticket_id} não encontrado",
            entity_type="Ticket",
            entity_id=ticket_id
        )
    return ticket


class CategoryLookup(Protocol):
    def exists(self, category_id: str) -> bool:
        ...


class CannedResponseLookup(Protocol):
    def get_content(self, response_id: str) -> Optional[str]:
        """Conteúdo da resposta pronta ativa, ou None."""
        ...

    def record_usage(self, response_id: str) -> None:
        ...


class InMemoryTicketRepository:
    """
    Implementação em memória do TicketRepository.

    Útil para testes unitários e prototipagem. Não usar em produção!

    Example:
        repo = InMemoryTicketRepository()
        repo.save(ticket)
        found = repo.get_by_id(ticket.id)
    """

    def __init__(self):
        self._tickets: Dict[str, TicketEntity] = {}

    def save(self, ticket: TicketEntity) -> None:
        ticket.version += 1
        self._tickets[ticket.id] = ticket

    def get_by_id(self, ticket_id: str) -> Optional[TicketEntity]:
        return self._tickets.get(ticket_id)

    def get_by_number(self, ticket_number: str) -> Optional[TicketEntity]:
        number = (ticket_number or "").strip().upper()
        for ticket in self._tickets.values():
            if ticket.ticket_number == number:
                return ticket
        return None

    def exists(self, ticket_id: str) -> bool:
        return ticket_id in self._tickets

    def list_overdue(self, now: datetime) -> List[TicketEntity]:
        return [
            t for t in self._tickets.values()
            if t.is_overdue_at(now) and not t.sla_breach_reported
        ]

    def list_all(self) -> List[TicketEntity]:
        return list(self._tickets.values())

    def count(self) -> int:
        return len(self._tickets)

    def clear(self) -> None:
        """Limpa todos os dados (útil para testes)."""
        self._tickets.clear()


class InMemoryCategoryLookup:
    def __init__(self, category_ids=None):
        self._ids = set(category_ids or [])

    def add(self, category_id: str) -> None:
        self._ids.add(category_id)

    def exists(self, category_id: str) -> bool:
        return category_id in self._ids


class InMemoryCannedResponseLookup:
    def __init__(self, responses: Optional[Dict[str, str]] = None):
        self._responses: Dict[str, str] = dict(responses or {})
        self.usage: Dict[str, int] = {}

    def add(self, response_id: str, content: str) -> None:
        self._responses[response_id] = content

    def get_content(self, response_id: str) -> Optional[str]:
        return self._responses.get(response_id)

    def record_usage(self, response_id: str) -> None:
        self.usage[response_id] = self.usage.get(response_id, 0) + 1
