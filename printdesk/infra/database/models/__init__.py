"""
printdesk.infra.database.models – SQLAlchemy 2.0 ORM models.
"""
from printdesk.infra.database.models.base import Base, JSONVariant
from printdesk.infra.database.models.order import OrderRecord

__all__ = [
    "Base",
    "JSONVariant",
    "OrderRecord",
]
