"""Order backend storing the collection as one JSON string under a single key.

This is the server-side counterpart of keeping orders in browser local
storage: the data lives only in the mapping handed to the store. With the
default in-process dict it is lost on restart and invisible to other
processes; with a ``shelve`` file it survives restarts but is still local to
one machine.
"""
from __future__ import annotations

import logging
import shelve
from typing import MutableMapping, Optional

from printdesk.stores.base import Clock
from printdesk.stores.collection import CollectionOrderStore

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "xeroxOrders"

LIMITATION_NOTE = (
    "Orders are kept in local key-value storage on this machine only. "
    "They are not shared with other devices or server instances."
)


class KeyValueOrderStore(CollectionOrderStore):
    backend = "keyvalue"

    def __init__(
        self,
        storage: Optional[MutableMapping[str, str]] = None,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(clock=clock)
        self.storage: MutableMapping[str, str] = storage if storage is not None else {}
        self.key = key

    @classmethod
    def open_shelf(cls, filename: str, **kwargs) -> "KeyValueOrderStore":
        """Back the store with a ``shelve`` file instead of process memory."""
        return cls(shelve.open(filename), **kwargs)

    def _read_raw(self) -> Optional[str]:
        return self.storage.get(self.key)

    def _write_raw(self, payload: str) -> None:
        self.storage[self.key] = payload

    def _clear(self) -> None:
        self.storage.pop(self.key, None)

    async def close(self) -> None:
        close = getattr(self.storage, "close", None)
        if callable(close):
            close()
            logger.debug("keyvalue: storage closed")
