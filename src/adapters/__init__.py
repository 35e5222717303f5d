"""
Adapters - implementações de infraestrutura para as portas do Core.
"""
