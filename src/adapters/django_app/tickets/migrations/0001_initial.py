"""
Migration inicial para o domínio de Tickets.

Cria as tabelas:
- ticket_categories: Categorias (admin)
- ticket_canned_responses: Respostas prontas (admin)
- tickets: Agregado Ticket
- ticket_messages: Mensagens do ticket
- ticket_status_history: Histórico de status (append-only)
"""

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


STATUS_CHOICES = [
    ('open', 'Open'),
    ('pending', 'Pending'),
    ('in_progress', 'In Progress'),
    ('resolved', 'Resolved'),
    ('closed', 'Closed'),
]

PRIORITY_CHOICES = [
    ('low', 'Low'),
    ('normal', 'Normal'),
    ('high', 'High'),
    ('urgent', 'Urgent'),
]

SENDER_TYPE_CHOICES = [
    ('customer', 'Customer'),
    ('agent', 'Agent'),
    ('system', 'System'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='CategoryModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('slug', models.SlugField(max_length=100, unique=True)),
                ('description', models.TextField(blank=True, default='')),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Categoria',
                'verbose_name_plural': 'Categorias',
                'db_table': 'ticket_categories',
                'ordering': ['sort_order', 'name'],
            },
        ),
        migrations.CreateModel(
            name='CannedResponseModel',
            fields=[
                ('id', models.CharField(max_length=36, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('content', models.TextField()),
                ('usage_count', models.PositiveIntegerField(default=0)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='canned_responses',
                    to='tickets.categorymodel',
                )),
            ],
            options={
                'verbose_name': 'Resposta Pronta',
                'verbose_name_plural': 'Respostas Prontas',
                'db_table': 'ticket_canned_responses',
                'ordering': ['-usage_count', 'title'],
            },
        ),
        migrations.CreateModel(
            name='TicketModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('ticket_number', models.CharField(
                    help_text='Número legível TKT-YYYYMMDD-NNNN',
                    max_length=20,
                    unique=True,
                )),
                ('customer_id', models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ('guest_email', models.EmailField(blank=True, db_index=True, default='', max_length=254)),
                ('guest_name', models.CharField(blank=True, default='', max_length=200)),
                ('guest_phone', models.CharField(blank=True, default='', max_length=50)),
                ('subject', models.CharField(max_length=255)),
                ('order_id', models.CharField(blank=True, max_length=100, null=True)),
                ('order_number', models.CharField(blank=True, default='', max_length=100)),
                ('status', models.CharField(choices=STATUS_CHOICES, db_index=True, default='open', max_length=20)),
                ('priority', models.CharField(choices=PRIORITY_CHOICES, db_index=True, default='normal', max_length=20)),
                ('assigned_to', models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ('sla_deadline', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('sla_breach_reported_at', models.DateTimeField(blank=True, null=True)),
                ('first_response_at', models.DateTimeField(blank=True, null=True)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('satisfaction_rating', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('satisfaction_comment', models.TextField(blank=True, default='')),
                ('tags', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('version', models.PositiveIntegerField(default=1)),
                ('category', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='tickets',
                    to='tickets.categorymodel',
                )),
            ],
            options={
                'verbose_name': 'Ticket',
                'verbose_name_plural': 'Tickets',
                'db_table': 'tickets',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'sla_deadline'], name='tickets_status_sla_idx'),
                    models.Index(fields=['assigned_to', 'status'], name='tickets_assignee_idx'),
                    models.Index(fields=['customer_id', 'created_at'], name='tickets_customer_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TicketMessageModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField(default=0)),
                ('sender_type', models.CharField(choices=SENDER_TYPE_CHOICES, max_length=20)),
                ('sender_id', models.CharField(blank=True, max_length=100, null=True)),
                ('sender_name', models.CharField(blank=True, default='', max_length=200)),
                ('sender_email', models.CharField(blank=True, default='', max_length=254)),
                ('content', models.TextField()),
                ('attachments', models.JSONField(blank=True, default=list)),
                ('is_internal', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='messages',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'verbose_name': 'Mensagem',
                'verbose_name_plural': 'Mensagens',
                'db_table': 'ticket_messages',
                'ordering': ['position'],
                'indexes': [
                    models.Index(fields=['ticket', 'position'], name='ticket_msg_position_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TicketStatusHistoryModel',
            fields=[
                ('id', models.CharField(editable=False, max_length=36, primary_key=True, serialize=False)),
                ('position', models.PositiveIntegerField(default=0)),
                ('from_status', models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ('to_status', models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ('changed_by', models.CharField(blank=True, max_length=100, null=True)),
                ('changed_by_name', models.CharField(blank=True, default='', max_length=200)),
                ('notes', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('ticket', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='status_history',
                    to='tickets.ticketmodel',
                )),
            ],
            options={
                'verbose_name': 'Histórico de Status',
                'verbose_name_plural': 'Histórico de Status',
                'db_table': 'ticket_status_history',
                'ordering': ['position'],
                'indexes': [
                    models.Index(fields=['ticket', 'position'], name='ticket_hist_position_idx'),
                ],
            },
        ),
    ]
