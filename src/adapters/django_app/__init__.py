"""Adapters Django: ORM, Unit of Work, eventos (Celery) e API JSON."""
