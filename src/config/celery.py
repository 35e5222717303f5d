"""
Configuração do Celery para processamento assíncrono.

O Celery é usado para:
- Processar Domain Events publicados após commit
- Varredura periódica de SLA (beat)

Arquitetura:
- Broker: Redis ou RabbitMQ (CELERY_BROKER_URL)
- Backend: Redis (resultados de tarefas)

Uso:
    celery -A src.config.celery worker -l INFO
    celery -A src.config.celery beat -l INFO
"""

import os

from celery import Celery
from kombu import Exchange, Queue

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

app = Celery('supportdesk')

# Demais opções CELERY_* vêm dos settings Django
app.config_from_object('django.conf:settings', namespace='CELERY')

app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_default_retry_delay=60,
    result_expires=3600,
)

app.conf.task_default_queue = 'default'
app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('events', Exchange('events'), routing_key='events.#'),
)

app.conf.task_routes = {
    'src.adapters.django_app.events.handlers.*': {'queue': 'events'},
}

# A agenda do Beat (varredura de SLA) vem de CELERY_BEAT_SCHEDULE nos settings
app.autodiscover_tasks([
    'src.adapters.django_app.events',
], related_name='handlers')
