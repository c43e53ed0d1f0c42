"""
printdesk.config.storage – which order backend runs and where things live on disk.

Env vars: ORDER_BACKEND, DATA_DIR, ORDERS_FILE, UPLOADS_DIR, MAX_UPLOAD_BYTES,
         KV_STORAGE_KEY, KV_STORAGE_FILE, CORS_ORIGINS, UPLOAD_RATE_LIMIT.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

BACKENDS = frozenset({"file", "keyvalue", "database"})

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB
DEFAULT_UPLOAD_RATE_LIMIT = "60/minute"


@dataclass(frozen=True)
class StorageConfig:
    backend: str = "file"
    data_dir: str = "./data"
    orders_file: str = "orders.json"
    uploads_dir: str = "./uploads"
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    kv_storage_key: str = "xeroxOrders"
    # Without a file the key-value backend lives in process memory only
    kv_storage_file: Optional[str] = None
    cors_origins: Tuple[str, ...] = field(default=("*",))
    # slowapi limit string for POST /api/upload, per client address
    upload_rate_limit: str = DEFAULT_UPLOAD_RATE_LIMIT

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"ORDER_BACKEND must be one of {sorted(BACKENDS)}, got {self.backend!r}")
        if not isinstance(self.max_upload_bytes, int) or self.max_upload_bytes < 1:
            raise ValueError(f"max_upload_bytes must be a positive integer, got {self.max_upload_bytes!r}")
        if not self.orders_file.strip():
            raise ValueError("orders_file must be a non-empty string")
        if not self.kv_storage_key.strip():
            raise ValueError("kv_storage_key must be a non-empty string")
        if not self.upload_rate_limit.strip():
            raise ValueError("upload_rate_limit must be a non-empty string")

    @property
    def orders_path(self) -> Path:
        return Path(self.data_dir) / self.orders_file

    @property
    def uploads_path(self) -> Path:
        return Path(self.uploads_dir)

    @classmethod
    def from_env(cls, **overrides: object) -> StorageConfig:
        def _str(attr: str, var: str, default: str) -> str:
            v = overrides.get(attr)
            return str(v) if v is not None else os.environ.get(var, default).strip()

        raw_max = overrides.get("max_upload_bytes") or os.environ.get("MAX_UPLOAD_BYTES")
        kv_file = overrides.get("kv_storage_file") or os.environ.get("KV_STORAGE_FILE") or None
        raw_origins = overrides.get("cors_origins")
        if raw_origins is None:
            raw_origins = tuple(
                o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()
            ) or ("*",)
        return cls(
            backend=_str("backend", "ORDER_BACKEND", "file").lower(),
            data_dir=_str("data_dir", "DATA_DIR", "./data"),
            orders_file=_str("orders_file", "ORDERS_FILE", "orders.json"),
            uploads_dir=_str("uploads_dir", "UPLOADS_DIR", "./uploads"),
            max_upload_bytes=int(raw_max) if raw_max else DEFAULT_MAX_UPLOAD_BYTES,
            kv_storage_key=_str("kv_storage_key", "KV_STORAGE_KEY", "xeroxOrders"),
            kv_storage_file=str(kv_file) if kv_file else None,
            cors_origins=tuple(raw_origins),
            upload_rate_limit=_str("upload_rate_limit", "UPLOAD_RATE_LIMIT", DEFAULT_UPLOAD_RATE_LIMIT),
        )


def load_storage_config(**overrides: object) -> StorageConfig:
    return StorageConfig.from_env(**overrides)
