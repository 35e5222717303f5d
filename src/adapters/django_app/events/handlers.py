"""
Event Handlers - Processadores de Eventos de Domínio.

Handlers executados via Celery quando eventos de ticket são publicados.
O envio de notificações fica fora deste serviço; os handlers registram
o fato em log e em métricas.

Padrão:
    dispatch_domain_event(event_type, payload_json)
        -> handle_<evento>.delay(event_dict)

Tarefas agendadas (Beat):
- check_overdue_tickets: varredura de SLA
"""

from typing import Any, Dict
import json
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


# =============================================================================
# Event Handlers - Tickets
# =============================================================================

@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    acks_late=True,
)
def handle_ticket_created(self, event: Dict[str, Any]) -> None:
    data = event.get('data', {})
    logger.info(
        f"[HANDLER] ticket.created: {data.get('ticket_number')} | "
        f"priority={data.get('priority')} | "
        f"owner={data.get('customer_id') or data.get('guest_email')}"
    )
    record_metric.delay(
        metric_name='tickets_created',
        value=1,
        tags={'priority': data.get('priority', '')}
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_assigned(self, event: Dict[str, Any]) -> None:
    data = event.get('data', {})
    logger.info(
        f"[HANDLER] ticket.assigned: {event.get('aggregate_id')} | "
        f"agent={data.get('agent_id')} | previous={data.get('previous_agent_id')}"
    )
    record_metric.delay(metric_name='tickets_assigned', value=1, tags={})


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_status_changed(self, event: Dict[str, Any]) -> None:
    data = event.get('data', {})
    logger.info(
        f"[HANDLER] ticket.status_changed: {event.get('aggregate_id')} | "
        f"{data.get('from_status')} -> {data.get('to_status')}"
    )
    record_metric.delay(
        metric_name='ticket_status_transitions',
        value=1,
        tags={'from': data.get('from_status', ''), 'to': data.get('to_status', '')}
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_escalated(self, event: Dict[str, Any]) -> None:
    """
    Ações:
    - Log de alerta quando a prioridade chega a urgent
    - Métrica de escalação
    """
    data = event.get('data', {})
    new_priority = data.get('new_priority')
    log = logger.warning if new_priority == 'urgent' else logger.info
    log(
        f"[HANDLER] ticket.escalated: {event.get('aggregate_id')} | "
        f"{data.get('previous_priority')} -> {new_priority} | "
        f"reason={data.get('reason', '')}"
    )
    record_metric.delay(
        metric_name='tickets_escalated',
        value=1,
        tags={'priority': new_priority or ''}
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_resolved(self, event: Dict[str, Any]) -> None:
    data = event.get('data', {})
    logger.info(
        f"[HANDLER] ticket.resolved: {event.get('aggregate_id')} | "
        f"within_sla={data.get('within_sla')}"
    )
    record_metric.delay(
        metric_name='tickets_resolved',
        value=1,
        tags={'within_sla': str(bool(data.get('within_sla'))).lower()}
    )


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_closed(self, event: Dict[str, Any]) -> None:
    logger.info(f"[HANDLER] ticket.closed: {event.get('aggregate_id')}")
    record_metric.delay(metric_name='tickets_closed', value=1, tags={})


@shared_task(bind=True, max_retries=3, default_retry_delay=60, acks_late=True)
def handle_ticket_sla_breached(self, event: Dict[str, Any]) -> None:
    data = event.get('data', {})
    logger.warning(
        f"[HANDLER] ticket.sla_breached: {event.get('aggregate_id')} | "
        f"deadline={data.get('sla_deadline')} | "
        f"assigned_to={data.get('assigned_to')}"
    )
    record_metric.delay(
        metric_name='tickets_sla_breached',
        value=1,
        tags={'priority': data.get('priority', '')}
    )


EVENT_HANDLERS = {
    'ticket.created': handle_ticket_created,
    'ticket.assigned': handle_ticket_assigned,
    'ticket.status_changed': handle_ticket_status_changed,
    'ticket.escalated': handle_ticket_escalated,
    'ticket.resolved': handle_ticket_resolved,
    'ticket.closed': handle_ticket_closed,
    'ticket.sla_breached': handle_ticket_sla_breached,
}


# =============================================================================
# Event Dispatcher (Router)
# =============================================================================

@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def dispatch_domain_event(self, event_type: str, payload: str) -> bool:
    """
    Dispatcher central para Domain Events.

    Args:
        event_type: Constante do evento (ex: 'ticket.created')
        payload: JSON do evento

    Returns:
        True se havia handler para o tipo
    """
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.warning(f"[DISPATCHER] Handler não encontrado para {event_type}")
        return False

    try:
        event = json.loads(payload)
    except ValueError as e:
        logger.error(f"[DISPATCHER] Payload inválido para {event_type}: {e}")
        return False

    logger.info(f"[DISPATCHER] Roteando {event_type} para handler")
    handler.delay(event)
    return True


# =============================================================================
# Metric Tasks
# =============================================================================

@shared_task(bind=True, ignore_result=True)
def record_metric(
    self,
    metric_name: str,
    value: float,
    tags: Dict[str, str] = None
) -> None:
    """
    Registra métrica para monitoramento.

    Args:
        metric_name: Nome da métrica
        value: Valor
        tags: Tags para dimensões
    """
    logger.info(f"[METRIC] {metric_name}={value} | tags={tags or {}}")


# =============================================================================
# Scheduled Tasks (Beat)
# =============================================================================

@shared_task(bind=True)
def check_overdue_tickets(self) -> int:
    """
    Varredura de SLA: levanta ticket.sla_breached para tickets vencidos.

    Executada periodicamente pelo Celery Beat
    (SLA_BREACH_CHECK_INTERVAL_SECONDS).

    Returns:
        Número de tickets com aviso de SLA emitido nesta execução
    """
    logger.info("[SCHEDULED] Verificando tickets com SLA vencido...")

    from src.config.container import get_container

    service = get_container().check_overdue_tickets_service()
    report = service.execute()

    logger.info(
        f"[SCHEDULED] {report.checked} vencidos, "
        f"{len(report.breached)} avisos emitidos, "
        f"{len(report.skipped)} ignorados por conflito"
    )
    record_metric.delay(
        metric_name='tickets_overdue',
        value=report.checked,
        tags={}
    )
    return len(report.breached)
