"""
API Views JSON para o domínio de Tickets.

Endpoints (prefixo /api/tickets/):
- POST   /                          - Abrir ticket
- GET    /number/<ticket_number>/   - Consultar por número (visão do cliente)
- GET    /<id>/                     - Obter ticket
- POST   /<id>/assign/              - Atribuir a agente
- POST   /<id>/unassign/            - Remover atribuição
- POST   /<id>/escalate/            - Escalar prioridade
- POST   /<id>/priority/            - Alterar prioridade
- POST   /<id>/pending/             - Aguardar cliente
- POST   /<id>/resolve/             - Resolver
- POST   /<id>/close/               - Fechar
- POST   /<id>/reopen/              - Reabrir
- POST   /<id>/status/              - Mudança administrativa de status
- POST   /<id>/messages/            - Adicionar mensagem
- POST   /<id>/messages/read/       - Marcar mensagens como lidas
- POST   /<id>/rating/              - Avaliar atendimento
- POST   /<id>/category/            - Alterar categoria
- POST   /<id>/tags/                - Adicionar tag
- DELETE /<id>/tags/<tag>/          - Remover tag

Formato:
- Entrada: JSON
- Saída: JSON com estrutura {success, data/error, meta}

O ator (actor_id/actor_name) vem do corpo da requisição ou, na falta
dele, do usuário autenticado na sessão.
"""

import json
import logging
from typing import Any, Dict, Optional

from django.views import View
from django.http import JsonResponse, HttpRequest
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt

from src.core.tickets.dtos import (
    AddMessageInputDTO,
    AssignTicketInputDTO,
    ChangeCategoryInputDTO,
    ChangePriorityInputDTO,
    ChangeStatusInputDTO,
    CreateTicketInputDTO,
    MarkMessagesReadInputDTO,
    RateSatisfactionInputDTO,
    TagInputDTO,
    TicketActionInputDTO,
)
from src.core.shared.exceptions import (
    ValidationError,
    EntityNotFoundError,
    BusinessRuleViolationError,
    ConcurrencyError,
    DomainException,
)
from src.config.container import get_container

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================

def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Cria resposta JSON padronizada.

    Args:
        success: Se operação foi bem sucedida
        data: Dados da resposta
        error: Mensagem de erro (se aplicável)
        status: HTTP status code
        meta: Metadados adicionais
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Parseia body JSON do request.

    Raises:
        ValueError: Se JSON inválido ou não for um objeto
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON inválido: {e}")

    if not isinstance(data, dict):
        raise ValueError("Corpo da requisição deve ser um objeto JSON")
    return data


def get_user_id(request: HttpRequest) -> Optional[str]:
    """Extrai ID do usuário autenticado (ou None)."""
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return str(user.pk)
    return None


def get_user_name(request: HttpRequest) -> str:
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user.get_username()
    return ''


def parse_flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes')


# =============================================================================
# Base API View
# =============================================================================

@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    View base para APIs JSON.

    Fornece:
    - Parsing de JSON
    - Acesso ao container DI
    - Tratamento de erros padronizado
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Obtém service do container."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def actor_fields(self, request: HttpRequest, data: Dict) -> Dict[str, Any]:
        """actor_id/actor_name do corpo, com fallback para o usuário da sessão."""
        return {
            'actor_id': data.get('actor_id') or get_user_id(request),
            'actor_name': data.get('actor_name') or get_user_name(request),
        }

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Trata exceções e retorna resposta apropriada.

        ValidationError -> 400, EntityNotFoundError -> 404,
        BusinessRuleViolationError -> 422, ConcurrencyError -> 409,
        inesperado -> 500.
        """
        if isinstance(e, ValidationError):
            return json_response(
                success=False,
                error=str(e),
                status=400,
                meta={'code': e.code, 'field': e.field}
            )

        if isinstance(e, EntityNotFoundError):
            return json_response(
                success=False,
                error=str(e),
                status=404,
                meta={'code': e.code}
            )

        if isinstance(e, BusinessRuleViolationError):
            return json_response(
                success=False,
                error=str(e),
                status=422,
                meta=e.to_dict()
            )

        if isinstance(e, ConcurrencyError):
            logger.warning(f"Conflito de versão na API: {e}")
            return json_response(
                success=False,
                error=str(e),
                status=409,
                meta={'code': e.code}
            )

        if isinstance(e, DomainException):
            return json_response(
                success=False,
                error=str(e),
                status=400,
                meta={'code': e.code}
            )

        if isinstance(e, ValueError):
            return json_response(
                success=False,
                error=str(e),
                status=400
            )

        logger.exception(f"Erro inesperado na API: {e}")
        return json_response(
            success=False,
            error="Erro interno do servidor",
            status=500
        )


class TicketCommandAPIView(BaseAPIView):
    """
    POST que executa um comando sobre um ticket existente.

    Subclasses definem `service_name` e `build_input`; a resposta é o
    ticket atualizado.
    """

    service_name: str = ''
    log_message: str = ''

    def build_input(self, request: HttpRequest, pk: str, data: Dict):
        raise NotImplementedError

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            input_dto = self.build_input(request, pk, data)
            output = self.get_service(self.service_name).execute(input_dto)

            if self.log_message:
                logger.info(f"API: Ticket {output.ticket_number} {self.log_message}")

            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class TicketActionAPIView(TicketCommandAPIView):
    """Comando que recebe apenas notas e ator."""

    def build_input(self, request: HttpRequest, pk: str, data: Dict):
        return TicketActionInputDTO(
            ticket_id=pk,
            notes=data.get('notes', ''),
            **self.actor_fields(request, data),
        )


# =============================================================================
# Criação / Consulta
# =============================================================================

class TicketAPICreateView(BaseAPIView):
    """
    POST /api/tickets/

    Body JSON:
    {
        "subject": "string (obrigatório)",
        "content": "string (mensagem inicial, opcional)",
        "customer_id": "string" | "guest_email": "string",
        "guest_name": "string", "guest_phone": "string",
        "priority": "low|normal|high|urgent (opcional)",
        "category_id": "string", "order_id": "string", "order_number": "string",
        "tags": ["string"], "attachments": [{"name", "url", "size", "mime_type"}]
    }
    """

    def post(self, request: HttpRequest) -> JsonResponse:
        try:
            data = self.parse_body(request)

            input_dto = CreateTicketInputDTO(
                subject=data.get('subject', ''),
                content=data.get('content', ''),
                customer_id=data.get('customer_id') or get_user_id(request),
                guest_email=data.get('guest_email'),
                guest_name=data.get('guest_name', ''),
                guest_phone=data.get('guest_phone', ''),
                priority=data.get('priority') or 'normal',
                category_id=data.get('category_id'),
                order_id=data.get('order_id'),
                order_number=data.get('order_number', ''),
                tags=tuple(data.get('tags') or ()),
                attachments=tuple(data.get('attachments') or ()),
            )

            output = self.get_service('create_ticket_service').execute(input_dto)

            logger.info(f"API: Ticket criado: {output.ticket_number}")

            return json_response(success=True, data=output.to_dict(), status=201)

        except Exception as e:
            return self.handle_exception(e)


class TicketAPIDetailView(BaseAPIView):
    """
    GET /api/tickets/<id>/

    Query params:
    - include_internal: inclui notas internas (default: true)
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            include_internal = parse_flag(request.GET.get('include_internal'), True)
            output = self.get_service('get_ticket_service').execute(pk, include_internal)
            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class TicketAPIByNumberView(BaseAPIView):
    """GET /api/tickets/number/<ticket_number>/ - sem notas internas."""

    def get(self, request: HttpRequest, ticket_number: str) -> JsonResponse:
        try:
            output = self.get_service('get_ticket_service').by_number(ticket_number)
            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Atribuição
# =============================================================================

class TicketAPIAssignView(TicketCommandAPIView):
    """
    POST /api/tickets/<id>/assign/

    Body JSON:
    {
        "agent_id": "string (obrigatório)",
        "allow_reassign": true
    }
    """

    service_name = 'assign_ticket_service'
    log_message = 'atribuído'

    def build_input(self, request, pk, data):
        if not data.get('agent_id'):
            raise ValidationError("agent_id é obrigatório", field="agent_id")

        return AssignTicketInputDTO(
            ticket_id=pk,
            agent_id=data['agent_id'],
            allow_reassign=bool(data.get('allow_reassign', True)),
            **self.actor_fields(request, data),
        )


class TicketAPIUnassignView(TicketActionAPIView):
    service_name = 'unassign_ticket_service'
    log_message = 'sem atribuição'


# =============================================================================
# Prioridade
# =============================================================================

class TicketAPIEscalateView(TicketActionAPIView):
    """POST /api/tickets/<id>/escalate/ - `notes` é o motivo."""

    service_name = 'escalate_ticket_service'
    log_message = 'escalado'


class TicketAPIPriorityView(TicketCommandAPIView):
    """
    POST /api/tickets/<id>/priority/

    Body JSON:
    {
        "priority": "low|normal|high|urgent (obrigatório)",
        "reason": "string (opcional)"
    }
    """

    service_name = 'change_priority_service'
    log_message = 'com prioridade alterada'

    def build_input(self, request, pk, data):
        return ChangePriorityInputDTO(
            ticket_id=pk,
            priority=data.get('priority', ''),
            reason=data.get('reason', ''),
            **self.actor_fields(request, data),
        )


# =============================================================================
# Status
# =============================================================================

class TicketAPIPendingView(TicketActionAPIView):
    service_name = 'set_pending_service'
    log_message = 'aguardando cliente'


class TicketAPIResolveView(TicketActionAPIView):
    """POST /api/tickets/<id>/resolve/ - `notes` é a resolução."""

    service_name = 'resolve_ticket_service'
    log_message = 'resolvido'


class TicketAPICloseView(TicketActionAPIView):
    service_name = 'close_ticket_service'
    log_message = 'fechado'


class TicketAPIReopenView(TicketActionAPIView):
    """POST /api/tickets/<id>/reopen/ - `notes` é o motivo."""

    service_name = 'reopen_ticket_service'
    log_message = 'reaberto'


class TicketAPIStatusView(TicketCommandAPIView):
    """
    POST /api/tickets/<id>/status/

    Body JSON:
    {
        "status": "open|pending|in_progress|resolved|closed (obrigatório)",
        "notes": "string (opcional)"
    }
    """

    service_name = 'change_status_service'
    log_message = 'com status alterado'

    def build_input(self, request, pk, data):
        return ChangeStatusInputDTO(
            ticket_id=pk,
            status=data.get('status', ''),
            notes=data.get('notes', ''),
            **self.actor_fields(request, data),
        )


# =============================================================================
# Mensagens
# =============================================================================

class TicketAPIMessageView(TicketCommandAPIView):
    """
    POST /api/tickets/<id>/messages/

    Body JSON:
    {
        "sender_type": "customer|agent|system (obrigatório)",
        "content": "string",
        "sender_id": "string", "sender_name": "string", "sender_email": "string",
        "is_internal": false,
        "canned_response_id": "string (opcional)",
        "attachments": [...]
    }
    """

    service_name = 'add_message_service'

    def build_input(self, request, pk, data):
        return AddMessageInputDTO(
            ticket_id=pk,
            sender_type=data.get('sender_type', ''),
            content=data.get('content', ''),
            sender_id=data.get('sender_id') or get_user_id(request),
            sender_name=data.get('sender_name') or get_user_name(request),
            sender_email=data.get('sender_email', ''),
            is_internal=bool(data.get('is_internal', False)),
            canned_response_id=data.get('canned_response_id'),
            attachments=tuple(data.get('attachments') or ()),
        )

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        response = super().post(request, pk)
        if response.status_code == 200:
            response.status_code = 201
        return response


class TicketAPIMarkReadView(BaseAPIView):
    """
    POST /api/tickets/<id>/messages/read/

    Body JSON:
    {
        "reader": "customer|agent (obrigatório)"
    }
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            data = self.parse_body(request)
            marked = self.get_service('mark_messages_read_service').execute(
                MarkMessagesReadInputDTO(ticket_id=pk, reader=data.get('reader', ''))
            )
            return json_response(success=True, data={'marked': marked})

        except Exception as e:
            return self.handle_exception(e)


# =============================================================================
# Satisfação / Categorização
# =============================================================================

class TicketAPIRatingView(TicketCommandAPIView):
    """
    POST /api/tickets/<id>/rating/

    Body JSON:
    {
        "rating": 1..5 (obrigatório),
        "comment": "string (opcional)"
    }
    """

    service_name = 'rate_satisfaction_service'
    log_message = 'avaliado'

    def build_input(self, request, pk, data):
        return RateSatisfactionInputDTO(
            ticket_id=pk,
            rating=data.get('rating'),
            comment=data.get('comment', ''),
        )


class TicketAPICategoryView(TicketCommandAPIView):
    """POST /api/tickets/<id>/category/ - `category_id` nulo remove a categoria."""

    service_name = 'change_category_service'

    def build_input(self, request, pk, data):
        return ChangeCategoryInputDTO(ticket_id=pk, category_id=data.get('category_id'))


class TicketAPITagsView(TicketCommandAPIView):
    """POST /api/tickets/<id>/tags/ {"tag": "string"}"""

    service_name = 'add_tag_service'

    def build_input(self, request, pk, data):
        return TagInputDTO(ticket_id=pk, tag=data.get('tag', ''))


class TicketAPITagDetailView(BaseAPIView):
    """DELETE /api/tickets/<id>/tags/<tag>/"""

    def delete(self, request: HttpRequest, pk: str, tag: str) -> JsonResponse:
        try:
            output = self.get_service('remove_tag_service').execute(
                TagInputDTO(ticket_id=pk, tag=tag)
            )
            return json_response(success=True, data=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)
