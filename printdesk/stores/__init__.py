"""
Order stores: one contract, three interchangeable backends.

    store = build_order_store(load_storage_config())   # picks ORDER_BACKEND
    await store.initialize()
"""
from printdesk.stores.base import OrderStore, generate_order_id, sort_orders, utc_now_iso
from printdesk.stores.database import DatabaseOrderStore
from printdesk.stores.json_file import JsonFileOrderStore
from printdesk.stores.keyvalue import LIMITATION_NOTE, KeyValueOrderStore
from printdesk.stores.registry import OrderStoreRegistry, build_order_store, default_registry
from printdesk.stores.types import FileReference, Order, OrderDraft, StoredFile

__all__ = [
    "OrderStore",
    "JsonFileOrderStore",
    "KeyValueOrderStore",
    "DatabaseOrderStore",
    "LIMITATION_NOTE",
    "OrderStoreRegistry",
    "default_registry",
    "build_order_store",
    "generate_order_id",
    "sort_orders",
    "utc_now_iso",
    "FileReference",
    "Order",
    "OrderDraft",
    "StoredFile",
]
