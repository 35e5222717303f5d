"""
Dependency Injection Container.

Configura e gerencia todas as dependências da aplicação.
Usa dependency-injector para lazy-loading e injeção automática.

Padrões:
- Singleton: Uma instância para toda app (repositories, lookups, publisher)
- Factory: Nova instância por chamada (services, UoW)

Adapters Django são importados de forma tardia (só depois do
django.setup()); use cases do Core são referenciados diretamente.
Em testes, os providers de infraestrutura são sobrescritos com
implementações em memória via `.override()`.
"""

from typing import Optional

from dependency_injector import containers, providers

from src.core.tickets import use_cases


def _django_ticket_repository():
    from src.adapters.django_app.tickets.repositories import DjangoTicketRepository
    return DjangoTicketRepository()


def _django_category_lookup():
    from src.adapters.django_app.tickets.repositories import DjangoCategoryLookup
    return DjangoCategoryLookup()


def _django_canned_response_lookup():
    from src.adapters.django_app.tickets.repositories import DjangoCannedResponseLookup
    return DjangoCannedResponseLookup()


def _event_publisher(mode: Optional[str]):
    from src.adapters.django_app.events.publishers import get_event_publisher
    return get_event_publisher(mode or "sync")


def _django_unit_of_work(event_publisher):
    from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork
    return DjangoUnitOfWork(event_publisher=event_publisher)


class Container(containers.DeclarativeContainer):
    """
    Container principal de Dependency Injection.

    Example:
        container = get_container()
        service = container.create_ticket_service()
        output = service.execute(input_dto)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    config = providers.Configuration()

    # =========================================================================
    # Infrastructure
    # =========================================================================

    event_publisher = providers.Singleton(
        _event_publisher,
        mode=config.event_publisher_mode,
    )

    ticket_repository = providers.Singleton(_django_ticket_repository)
    category_lookup = providers.Singleton(_django_category_lookup)
    canned_response_lookup = providers.Singleton(_django_canned_response_lookup)

    unit_of_work = providers.Factory(
        _django_unit_of_work,
        event_publisher=event_publisher,
    )

    # =========================================================================
    # Services / Use Cases
    # =========================================================================

    create_ticket_service = providers.Factory(
        use_cases.CreateTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        category_lookup=category_lookup,
    )

    get_ticket_service = providers.Factory(
        use_cases.GetTicketService,
        ticket_repo=ticket_repository,
    )

    assign_ticket_service = providers.Factory(
        use_cases.AssignTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    unassign_ticket_service = providers.Factory(
        use_cases.UnassignTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    escalate_ticket_service = providers.Factory(
        use_cases.EscalateTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    change_priority_service = providers.Factory(
        use_cases.ChangePriorityService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    set_pending_service = providers.Factory(
        use_cases.SetPendingService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    resolve_ticket_service = providers.Factory(
        use_cases.ResolveTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    close_ticket_service = providers.Factory(
        use_cases.CloseTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    reopen_ticket_service = providers.Factory(
        use_cases.ReopenTicketService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    change_status_service = providers.Factory(
        use_cases.ChangeStatusService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    add_message_service = providers.Factory(
        use_cases.AddMessageService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        canned_responses=canned_response_lookup,
    )

    mark_messages_read_service = providers.Factory(
        use_cases.MarkMessagesReadService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    rate_satisfaction_service = providers.Factory(
        use_cases.RateSatisfactionService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    change_category_service = providers.Factory(
        use_cases.ChangeCategoryService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
        category_lookup=category_lookup,
    )

    add_tag_service = providers.Factory(
        use_cases.AddTagService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    remove_tag_service = providers.Factory(
        use_cases.RemoveTagService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )

    check_overdue_tickets_service = providers.Factory(
        use_cases.CheckOverdueTicketsService,
        ticket_repo=ticket_repository,
        uow=unit_of_work,
    )


# =============================================================================
# Container Global (Singleton)
# =============================================================================

_container: Optional[Container] = None


def get_container() -> Container:
    """
    Retorna instância global do container (lazy).

    A configuração vem dos settings Django.
    """
    global _container

    if _container is None:
        from django.conf import settings

        _container = Container()
        _container.config.from_dict({
            "event_publisher_mode": getattr(settings, "EVENT_PUBLISHER_MODE", "sync"),
        })

    return _container


def reset_container() -> None:
    """Reset do container (para testes)."""
    global _container
    _container = None
