"""Repositories for the printdesk database."""
from printdesk.infra.database.repositories.order import OrderRepository

__all__ = ["OrderRepository"]
