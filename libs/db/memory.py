"""In-process document store.

Optimistic concurrency: every document carries a version number. A
transaction records the version of each document it reads and, at commit,
re-validates those versions under a lock before applying its buffered writes.
A mismatch raises ``TransactionConflictError`` and the transaction body is
retried. Every read yields to the event loop, so concurrent tasks interleave
the way they would against a networked store.
"""

from __future__ import annotations

import asyncio
import copy
import uuid
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.db.documents import (
    Document,
    DocumentExistsError,
    DocumentNotFoundError,
    Filter,
    T,
    TransactionAbortedError,
    TransactionConflictError,
    TransactionFn,
    WriteBuffer,
    apply_query,
    collection_id_of,
    document_path,
    resolve_sentinels,
)

logger = get_logger(__name__)


class InMemoryDocumentStore:
    """Dictionary-backed ``DocumentStore`` used by tests and local development."""

    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}
        self._lock = asyncio.Lock()
        self._last_write: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _write_time(self) -> datetime:
        """Server write time, strictly increasing across writes."""
        now = utc_now()
        if self._last_write is not None and now <= self._last_write:
            now = self._last_write + timedelta(microseconds=1)
        self._last_write = now
        return now

    @staticmethod
    def _copy(doc: Optional[Document]) -> Optional[Document]:
        if doc is None:
            return None
        return Document(
            id=doc.id,
            collection=doc.collection,
            data=copy.deepcopy(doc.data),
            create_time=doc.create_time,
            update_time=doc.update_time,
            version=doc.version,
        )

    def _in_collection(self, collection: str) -> list[Document]:
        return [d for d in self._docs.values() if d.collection == collection]

    def _apply(
        self,
        kind: str,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        merge: bool,
        now: datetime,
    ) -> None:
        path = document_path(collection, doc_id)
        current = self._docs.get(path)

        if kind == "delete":
            self._docs.pop(path, None)
            return
        if kind == "create" and current is not None:
            raise DocumentExistsError(path)
        if kind == "update" and current is None:
            raise DocumentNotFoundError(path)

        base = current.data if current is not None else {}
        resolved = resolve_sentinels(data, now, base)
        if kind == "update" or (kind == "set" and merge):
            new_data = {**copy.deepcopy(base), **resolved}
        else:
            new_data = resolved

        self._docs[path] = Document(
            id=doc_id,
            collection=collection,
            data=new_data,
            create_time=current.create_time if current is not None else now,
            update_time=now,
            version=(current.version + 1) if current is not None else 1,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        await asyncio.sleep(0)
        return self._copy(self._docs.get(document_path(collection, doc_id)))

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        await asyncio.sleep(0)
        docs = apply_query(self._in_collection(collection), filters, order_by, descending, limit)
        return [self._copy(d) for d in docs]

    async def query_group(
        self, collection_id: str, filters: Sequence[Filter] = ()
    ) -> list[Document]:
        await asyncio.sleep(0)
        candidates = [
            d for d in self._docs.values() if collection_id_of(d.collection) == collection_id
        ]
        return [self._copy(d) for d in apply_query(candidates, filters)]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        async with self._lock:
            self._apply("set", collection, doc_id, data, merge, self._write_time())

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        async with self._lock:
            self._apply("update", collection, doc_id, data, False, self._write_time())

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        async with self._lock:
            self._apply("create", collection, doc_id, data, False, self._write_time())
        return doc_id

    async def delete(self, collection: str, doc_id: str) -> None:
        async with self._lock:
            self._docs.pop(document_path(collection, doc_id), None)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def run_transaction(
        self, fn: TransactionFn[T], max_attempts: Optional[int] = None
    ) -> T:
        attempts = max_attempts or get_settings().TRANSACTION_MAX_ATTEMPTS
        for attempt in range(1, attempts + 1):
            txn = _MemoryTransaction(self)
            result = await fn(txn)
            try:
                await txn.commit()
                return result
            except TransactionConflictError:
                logger.debug("Transaction conflict, attempt %d of %d", attempt, attempts)
                await asyncio.sleep(0)
        raise TransactionAbortedError(f"Transaction failed after {attempts} attempts")


class _MemoryTransaction(WriteBuffer):
    def __init__(self, store: InMemoryDocumentStore) -> None:
        super().__init__()
        self._store = store
        # path -> version observed (0 when the document did not exist)
        self._read_versions: dict[str, int] = {}
        # (query args, paths matched at read time)
        self._query_snapshots: list[tuple[tuple, set[str]]] = []

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        doc = await self._store.get(collection, doc_id)
        self._read_versions.setdefault(
            document_path(collection, doc_id), doc.version if doc else 0
        )
        return doc

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        docs = await self._store.query(collection, filters, order_by, descending, limit)
        args = (collection, tuple(filters), order_by, descending, limit)
        self._query_snapshots.append((args, {d.path for d in docs}))
        for doc in docs:
            self._read_versions.setdefault(doc.path, doc.version)
        return docs

    def _validate(self) -> None:
        docs = self._store._docs
        for path, version in self._read_versions.items():
            current = docs.get(path)
            if (current.version if current else 0) != version:
                raise TransactionConflictError(f"Document changed during transaction: {path}")
        for (collection, filters, order_by, descending, limit), paths in self._query_snapshots:
            matched = apply_query(
                self._store._in_collection(collection), filters, order_by, descending, limit
            )
            if {d.path for d in matched} != paths:
                raise TransactionConflictError(f"Query results changed during transaction: {collection}")

    async def commit(self) -> None:
        async with self._store._lock:
            self._validate()
            if not self.writes:
                return
            now = self._store._write_time()
            snapshot = dict(self._store._docs)
            try:
                for write in self.writes:
                    self._store._apply(
                        write.kind, write.collection, write.doc_id, write.data, write.merge, now
                    )
            except Exception:
                self._store._docs = snapshot
                raise
