"""Order backend persisting the whole collection as one pretty-printed JSON file."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from printdesk.core.exceptions import PersistenceError
from printdesk.stores.base import Clock
from printdesk.stores.collection import CollectionOrderStore


class JsonFileOrderStore(CollectionOrderStore):
    """``data/orders.json`` holding a JSON array of camelCase orders.

    Writes go to a temp file in the same directory and are renamed over the
    target, so a failed write leaves the previous file intact.
    """

    backend = "file"
    blocking_io = True

    def __init__(self, path: Union[str, Path], *, clock: Optional[Clock] = None) -> None:
        super().__init__(clock=clock)
        self.path = Path(path)

    def _create_if_missing(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self._write_raw("[]")
        except OSError as exc:
            raise PersistenceError(f"Could not initialise {self.path}", cause=exc) from exc

    async def initialize(self) -> None:
        await self._io(self._create_if_missing)

    def _read_raw(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write_raw(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
