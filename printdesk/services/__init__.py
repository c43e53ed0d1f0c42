"""Service layer: order facade and uploaded-file storage."""
from printdesk.services.file_service import FileService
from printdesk.services.order_service import OrderService

__all__ = [
    "FileService",
    "OrderService",
]
