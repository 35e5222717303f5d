"""
Core Domain Layer - O Hexágono.

Este pacote contém a lógica de negócio pura, sem dependências de frameworks.
Características:
- Zero dependências externas (Django, Celery, etc.)
- 100% testável sem banco de dados
- Sem logging nem I/O: efeitos saem como Domain Events

Domínios:
- shared: exceções, interfaces (ports) e base de eventos
- tickets: ciclo de vida de tickets de atendimento
"""
