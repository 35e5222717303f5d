"""
Exceções de Domínio do Support Desk.

Exceções tipadas usadas para comunicar falhas entre as camadas.
O adapter HTTP converte cada família em um status code.

Hierarquia:
    DomainException (base)
    ├── ValidationError (dados de entrada inválidos)
    ├── EntityNotFoundError (entidade ou referência inexistente)
    ├── BusinessRuleViolationError (regra de negócio violada)
    │   ├── CannotModifyError (operação proibida no estado atual)
    │   │   └── IllegalTransitionError (transição fora da tabela)
    │   ├── AlreadyAssignedError
    │   └── NotAssignedError
    └── ConcurrencyError (conflito de versão na persistência)
"""


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Example:
        try:
            ticket.close(actor)
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    def __init__(self, message: str, code: str = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Example:
        if not subject.strip():
            raise ValidationError("Assunto é obrigatório", field="subject")
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """Entidade não encontrada no repositório ou lookup."""

    def __init__(self, message: str, entity_type: str = None, entity_id: str = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Example:
        if ticket.status == TicketStatus.CLOSED:
            raise BusinessRuleViolationError(
                "Ticket fechado não pode ser alterado",
                rule="ticket_closed_immutable"
            )
    """

    def __init__(self, message: str, rule: str = None, code: str = None):
        self.rule = rule
        super().__init__(message, code or "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class CannotModifyError(BusinessRuleViolationError):
    """A operação não é permitida no estado atual do ticket."""

    def __init__(self, message: str, rule: str = "cannot_modify", code: str = None):
        super().__init__(message, rule=rule, code=code or "CANNOT_MODIFY")


class IllegalTransitionError(CannotModifyError):
    """
    Transição de status rejeitada pela política de status.

    Attributes:
        from_status: Status atual do ticket
        to_status: Status solicitado
    """

    def __init__(self, from_status, to_status):
        self.from_status = from_status
        self.to_status = to_status
        from_value = getattr(from_status, "value", from_status)
        to_value = getattr(to_status, "value", to_status)
        super().__init__(
            f"Transição de '{from_value}' para '{to_value}' não é permitida",
            rule="illegal_transition",
            code="ILLEGAL_TRANSITION",
        )

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["from_status"] = getattr(self.from_status, "value", self.from_status)
        result["to_status"] = getattr(self.to_status, "value", self.to_status)
        return result


class AlreadyAssignedError(BusinessRuleViolationError):
    """Ticket já está atribuído a outro agente."""

    def __init__(self, message: str, assigned_to: str = None):
        self.assigned_to = assigned_to
        super().__init__(message, rule="already_assigned", code="ALREADY_ASSIGNED")


class NotAssignedError(BusinessRuleViolationError):
    """Ticket não possui agente atribuído."""

    def __init__(self, message: str = "Ticket não está atribuído a nenhum agente"):
        super().__init__(message, rule="not_assigned", code="NOT_ASSIGNED")


class ConcurrencyError(DomainException):
    """
    Erro de concorrência/conflito de versão.

    Lançada pelo repositório quando a versão persistida do ticket
    difere da versão carregada (outro processo salvou antes).
    """

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")
