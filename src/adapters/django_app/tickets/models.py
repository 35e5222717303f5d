"""
Django Models para o domínio de Tickets.

Estes models são ADAPTERS - implementam a persistência para as
entidades de domínio definidas em src/core/tickets/entities.py.

IMPORTANTE:
- Models NÃO contêm lógica de negócio
- Lógica de negócio fica nas Entities do Core
- Models são mapeados para/de Entities via Mappers

Tabelas:
- TicketModel: Ticket (agregado raiz)
- TicketMessageModel: Mensagens do ticket
- TicketStatusHistoryModel: Histórico de transições (append-only)
- CategoryModel / CannedResponseModel: Dados de referência (admin)
"""

from django.db import models
from django.utils import timezone


class TicketStatusChoices(models.TextChoices):
    """Choices para status de ticket (espelha TicketStatus do Core)."""
    OPEN = 'open', 'Open'
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in_progress', 'In Progress'
    RESOLVED = 'resolved', 'Resolved'
    CLOSED = 'closed', 'Closed'


class TicketPriorityChoices(models.TextChoices):
    """Choices para prioridade de ticket (espelha TicketPriority do Core)."""
    LOW = 'low', 'Low'
    NORMAL = 'normal', 'Normal'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


class SenderTypeChoices(models.TextChoices):
    CUSTOMER = 'customer', 'Customer'
    AGENT = 'agent', 'Agent'
    SYSTEM = 'system', 'System'


# =============================================================================
# Dados de referência
# =============================================================================

class CategoryModel(models.Model):
    """Categoria de ticket (gerenciada apenas pelo admin)."""

    id = models.CharField(max_length=36, primary_key=True)
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100, unique=True)
    description = models.TextField(blank=True, default='')
    is_active = models.BooleanField(default=True, db_index=True)
    sort_order = models.IntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_categories'
        verbose_name = 'Categoria'
        verbose_name_plural = 'Categorias'
        ordering = ['sort_order', 'name']

    def __str__(self):
        return self.name


class CannedResponseModel(models.Model):
    """Resposta pronta usada por agentes ao responder tickets."""

    id = models.CharField(max_length=36, primary_key=True)
    title = models.CharField(max_length=200)
    content = models.TextField()
    category = models.ForeignKey(
        CategoryModel,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='canned_responses',
    )
    usage_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'ticket_canned_responses'
        verbose_name = 'Resposta Pronta'
        verbose_name_plural = 'Respostas Prontas'
        ordering = ['-usage_count', 'title']

    def __str__(self):
        return self.title


# =============================================================================
# Ticket
# =============================================================================

class TicketModel(models.Model):
    """
    Model Django para persistência de Tickets.

    `version` implementa controle otimista: o repositório só atualiza
    a linha se a versão gravada for a mesma carregada.
    """

    # Primary Key - UUID gerado pela Entity
    id = models.CharField(max_length=36, primary_key=True, editable=False)

    ticket_number = models.CharField(
        max_length=20,
        unique=True,
        help_text="Número legível TKT-YYYYMMDD-NNNN"
    )

    # Dono
    customer_id = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    guest_email = models.EmailField(blank=True, default='', db_index=True)
    guest_name = models.CharField(max_length=200, blank=True, default='')
    guest_phone = models.CharField(max_length=50, blank=True, default='')

    # Dados principais
    subject = models.CharField(max_length=255)
    category = models.ForeignKey(
        CategoryModel,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='tickets',
    )
    order_id = models.CharField(max_length=100, null=True, blank=True)
    order_number = models.CharField(max_length=100, blank=True, default='')

    # Estado
    status = models.CharField(
        max_length=20,
        choices=TicketStatusChoices.choices,
        default=TicketStatusChoices.OPEN,
        db_index=True,
    )
    priority = models.CharField(
        max_length=20,
        choices=TicketPriorityChoices.choices,
        default=TicketPriorityChoices.NORMAL,
        db_index=True,
    )
    assigned_to = models.CharField(max_length=100, null=True, blank=True, db_index=True)

    # SLA e marcos
    sla_deadline = models.DateTimeField(null=True, blank=True, db_index=True)
    sla_breach_reported_at = models.DateTimeField(null=True, blank=True)
    first_response_at = models.DateTimeField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    # Satisfação
    satisfaction_rating = models.PositiveSmallIntegerField(null=True, blank=True)
    satisfaction_comment = models.TextField(blank=True, default='')

    tags = models.JSONField(default=list, blank=True)

    # Timestamps (definidos pela Entity)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = 'tickets'
        verbose_name = 'Ticket'
        verbose_name_plural = 'Tickets'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'sla_deadline'], name='tickets_status_sla_idx'),
            models.Index(fields=['assigned_to', 'status'], name='tickets_assignee_idx'),
            models.Index(fields=['customer_id', 'created_at'], name='tickets_customer_idx'),
        ]

    def __str__(self):
        return f"{self.ticket_number} {self.subject}"

    def __repr__(self):
        return f"<TicketModel {self.ticket_number} status={self.status}>"


class TicketMessageModel(models.Model):
    """Mensagem do ticket. Apenas `read_at` é atualizado após a criação."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='messages',
    )
    position = models.PositiveIntegerField(default=0)
    sender_type = models.CharField(max_length=20, choices=SenderTypeChoices.choices)
    sender_id = models.CharField(max_length=100, null=True, blank=True)
    sender_name = models.CharField(max_length=200, blank=True, default='')
    sender_email = models.CharField(max_length=254, blank=True, default='')
    content = models.TextField()
    attachments = models.JSONField(default=list, blank=True)
    is_internal = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_messages'
        verbose_name = 'Mensagem'
        verbose_name_plural = 'Mensagens'
        ordering = ['position']
        indexes = [
            models.Index(fields=['ticket', 'position'], name='ticket_msg_position_idx'),
        ]

    def __str__(self):
        return f"{self.sender_type} @ {self.created_at}"


class TicketStatusHistoryModel(models.Model):
    """Histórico de transições de status (append-only)."""

    id = models.CharField(max_length=36, primary_key=True, editable=False)
    ticket = models.ForeignKey(
        TicketModel,
        on_delete=models.CASCADE,
        related_name='status_history',
    )
    position = models.PositiveIntegerField(default=0)
    from_status = models.CharField(max_length=20, choices=TicketStatusChoices.choices)
    to_status = models.CharField(max_length=20, choices=TicketStatusChoices.choices)
    changed_by = models.CharField(max_length=100, null=True, blank=True)
    changed_by_name = models.CharField(max_length=200, blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'ticket_status_history'
        verbose_name = 'Histórico de Status'
        verbose_name_plural = 'Histórico de Status'
        ordering = ['position']
        indexes = [
            models.Index(fields=['ticket', 'position'], name='ticket_hist_position_idx'),
        ]

    def __str__(self):
        return f"{self.from_status} -> {self.to_status} @ {self.created_at}"
