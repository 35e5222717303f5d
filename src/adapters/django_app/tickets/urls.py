"""
URL patterns da API JSON de Tickets (montada em /api/tickets/).

Ver api_views para o contrato de cada endpoint.
"""

from django.urls import path
from . import api_views

app_name = 'tickets'

urlpatterns = [
    path('', api_views.TicketAPICreateView.as_view(), name='create'),

    # Antes do <pk> para não conflitar
    path('number/<str:ticket_number>/', api_views.TicketAPIByNumberView.as_view(), name='by_number'),

    path('<str:pk>/', api_views.TicketAPIDetailView.as_view(), name='detail'),

    # Atribuição
    path('<str:pk>/assign/', api_views.TicketAPIAssignView.as_view(), name='assign'),
    path('<str:pk>/unassign/', api_views.TicketAPIUnassignView.as_view(), name='unassign'),

    # Prioridade
    path('<str:pk>/escalate/', api_views.TicketAPIEscalateView.as_view(), name='escalate'),
    path('<str:pk>/priority/', api_views.TicketAPIPriorityView.as_view(), name='priority'),

    # Status
    path('<str:pk>/pending/', api_views.TicketAPIPendingView.as_view(), name='pending'),
    path('<str:pk>/resolve/', api_views.TicketAPIResolveView.as_view(), name='resolve'),
    path('<str:pk>/close/', api_views.TicketAPICloseView.as_view(), name='close'),
    path('<str:pk>/reopen/', api_views.TicketAPIReopenView.as_view(), name='reopen'),
    path('<str:pk>/status/', api_views.TicketAPIStatusView.as_view(), name='status'),

    # Mensagens
    path('<str:pk>/messages/', api_views.TicketAPIMessageView.as_view(), name='messages'),
    path('<str:pk>/messages/read/', api_views.TicketAPIMarkReadView.as_view(), name='messages_read'),

    # Satisfação / Categorização
    path('<str:pk>/rating/', api_views.TicketAPIRatingView.as_view(), name='rating'),
    path('<str:pk>/category/', api_views.TicketAPICategoryView.as_view(), name='category'),
    path('<str:pk>/tags/', api_views.TicketAPITagsView.as_view(), name='tags'),
    path('<str:pk>/tags/<str:tag>/', api_views.TicketAPITagDetailView.as_view(), name='tag_detail'),
]
