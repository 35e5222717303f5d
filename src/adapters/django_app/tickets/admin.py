"""
Django Admin para o domínio de Tickets.

Categorias e respostas prontas são gerenciadas aqui. Tickets são
somente leitura: toda mudança de estado passa pelos use cases.
"""

from django.contrib import admin
from django.utils.html import format_html
from django.utils import timezone

from .models import (
    CannedResponseModel,
    CategoryModel,
    TicketMessageModel,
    TicketModel,
    TicketStatusHistoryModel,
)


@admin.register(CategoryModel)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'is_active', 'sort_order']
    list_filter = ['is_active']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ['name']}
    ordering = ['sort_order', 'name']


@admin.register(CannedResponseModel)
class CannedResponseAdmin(admin.ModelAdmin):
    list_display = ['title', 'category', 'usage_count', 'is_active', 'updated_at']
    list_filter = ['is_active', 'category']
    search_fields = ['title', 'content']
    readonly_fields = ['usage_count', 'created_at', 'updated_at']


class TicketMessageInline(admin.TabularInline):
    model = TicketMessageModel
    extra = 0
    can_delete = False
    fields = ['created_at', 'sender_type', 'sender_name', 'is_internal', 'content', 'read_at']
    readonly_fields = fields


class TicketStatusHistoryInline(admin.TabularInline):
    model = TicketStatusHistoryModel
    extra = 0
    can_delete = False
    fields = ['created_at', 'from_status', 'to_status', 'changed_by_name', 'notes']
    readonly_fields = fields


@admin.register(TicketModel)
class TicketAdmin(admin.ModelAdmin):
    """Admin (somente leitura) para TicketModel."""

    list_display = [
        'ticket_number',
        'subject',
        'status_badge',
        'priority',
        'assigned_to',
        'created_at',
        'sla_status',
    ]

    list_filter = [
        'status',
        'priority',
        'category',
        'created_at',
    ]

    search_fields = [
        'ticket_number',
        'subject',
        'customer_id',
        'guest_email',
        'assigned_to',
    ]

    fieldsets = [
        ('Identificação', {
            'fields': ['id', 'ticket_number', 'subject', 'category', 'tags'],
        }),
        ('Cliente', {
            'fields': ['customer_id', 'guest_email', 'guest_name', 'guest_phone',
                       'order_id', 'order_number'],
        }),
        ('Estado', {
            'fields': ['status', 'priority', 'assigned_to', 'sla_deadline',
                       'sla_breach_reported_at'],
        }),
        ('Marcos', {
            'fields': ['first_response_at', 'resolved_at', 'closed_at',
                       'satisfaction_rating', 'satisfaction_comment'],
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at', 'version'],
            'classes': ['collapse'],
        }),
    ]

    inlines = [TicketMessageInline, TicketStatusHistoryInline]

    ordering = ['-created_at']

    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description='Status')
    def status_badge(self, obj):
        colors = {
            'open': '#17a2b8',
            'pending': '#6c757d',
            'in_progress': '#ffc107',
            'resolved': '#28a745',
            'closed': '#343a40',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display()
        )

    @admin.display(description='SLA')
    def sla_status(self, obj):
        if not obj.sla_deadline:
            return '-'

        if obj.status in ('resolved', 'closed'):
            return format_html('<span style="color: {};">{}</span>', '#28a745', '✓ Concluído')

        if timezone.now() > obj.sla_deadline:
            return format_html(
                '<span style="color: {}; font-weight: bold;">{}</span>', '#dc3545', '⚠ Atrasado'
            )

        return format_html('<span style="color: {};">{}</span>', '#28a745', '✓ No prazo')
