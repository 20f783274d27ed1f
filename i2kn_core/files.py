"""
i2kn_core.files
---------------
Process-facing files API used by the networking and UI layers.

Wraps a single NodeContext behind a run-once ``init``. Every other operation
raises UninitializedError until ``init`` has succeeded.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import threading

from .errors import AlreadyInitializedError, UninitializedError
from .node import NodeContext, create_repo, init_node
from .storage import LoadResult
from .store import RecordInput, RecordStore


class FilesAPI:
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self._config = config
        self._lock = threading.Lock()
        self._store: Optional[RecordStore] = None

    @property
    def initialized(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> RecordStore:
        if self._store is None:
            raise UninitializedError("Files API must be initialized first")
        return self._store

    @property
    def context(self) -> NodeContext:
        return self.store.ctx

    def init(self, private_key_material) -> NodeContext:
        with self._lock:
            if self._store is not None:
                raise AlreadyInitializedError(
                    f"Files API already initialized as {self._store.ctx.peer_id}"
                )
            ctx = init_node(private_key_material, self._config)
            self._store = RecordStore(ctx)
            return ctx

    def create_repo(self) -> bool:
        return create_repo(self.context)

    def save(self, record: RecordInput, previous_cid: Optional[str] = None) -> str:
        return self.store.save(record, previous_cid)

    def load(self, cid: str) -> LoadResult:
        return self.store.load(cid)

    def load_json(self, cid: str) -> str:
        return self.store.load(cid).to_json()

    def history(self, cid: str, limit: Optional[int] = None) -> List[LoadResult]:
        return self.store.history(cid, limit)

    def list_cids(self) -> List[str]:
        return self.store.list_cids()

    def save_clear(self, name: str, content: str) -> None:
        self.store.save_clear(name, content)

    def load_clear(self, name: str) -> str:
        return self.store.load_clear(name)

    def erase_dir(self) -> None:
        self.store.erase_dir()
