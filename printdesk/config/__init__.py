"""
printdesk config: load from env.

load_storage_config() always; load_database_config() only for ORDER_BACKEND=database.
"""
from printdesk.config.database import DatabaseConfig, load_database_config
from printdesk.config.storage import StorageConfig, load_storage_config

__all__ = [
    "DatabaseConfig",
    "load_database_config",
    "StorageConfig",
    "load_storage_config",
]
