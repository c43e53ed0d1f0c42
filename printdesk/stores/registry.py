"""
Order backend registry: map backend name -> build an OrderStore from StorageConfig.

The backend is chosen once per deployment (``ORDER_BACKEND``); register a
builder to add another one.
"""
from __future__ import annotations

from typing import Callable, Dict

from printdesk.config import StorageConfig, load_database_config
from printdesk.core.exceptions import ConfigurationError
from printdesk.stores.base import OrderStore
from printdesk.stores.database import DatabaseOrderStore
from printdesk.stores.json_file import JsonFileOrderStore
from printdesk.stores.keyvalue import KeyValueOrderStore

StoreBuilder = Callable[[StorageConfig], OrderStore]


class OrderStoreRegistry:
    """Maps backend id to a builder that takes StorageConfig and returns an OrderStore."""

    def __init__(self) -> None:
        self._builders: Dict[str, StoreBuilder] = {}

    def register(self, backend: str, builder: StoreBuilder) -> None:
        self._builders[backend] = builder

    @property
    def names(self) -> list[str]:
        return sorted(self._builders)

    def build(self, config: StorageConfig) -> OrderStore:
        """Build the store named by ``config.backend``. Raises KeyError if unknown."""
        builder = self._builders.get(config.backend)
        if builder is None:
            raise KeyError(f"Unknown order backend: {config.backend!r}. Registered: {self.names}")
        return builder(config)


def _build_file_store(config: StorageConfig) -> OrderStore:
    return JsonFileOrderStore(config.orders_path)


def _build_keyvalue_store(config: StorageConfig) -> OrderStore:
    if config.kv_storage_file:
        return KeyValueOrderStore.open_shelf(config.kv_storage_file, key=config.kv_storage_key)
    return KeyValueOrderStore(key=config.kv_storage_key)


def _build_database_store(config: StorageConfig) -> OrderStore:
    try:
        db_config = load_database_config()
    except ValueError as exc:
        raise ConfigurationError(f"Invalid database configuration: {exc}", cause=exc) from exc
    return DatabaseOrderStore.from_config(db_config)


default_registry = OrderStoreRegistry()
default_registry.register("file", _build_file_store)
default_registry.register("keyvalue", _build_keyvalue_store)
default_registry.register("database", _build_database_store)


def build_order_store(config: StorageConfig) -> OrderStore:
    return default_registry.build(config)
