"""
URL Configuration do SupportDesk.

Estrutura:
- /admin/ - Django Admin
- /api/tickets/ - API JSON de Tickets
- /health/ - Health check
"""

from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/tickets/', include('src.adapters.django_app.tickets.urls')),
    path('health/', health, name='health'),
]
