"""SQLAlchemy-backed document store.

Documents live in a single ``documents`` table keyed by
``(collection_path, doc_id)`` with their fields in a JSON column (JSONB on
PostgreSQL). Transactions lock every row they read with
``SELECT ... FOR UPDATE`` and retry when the database reports a serialization
failure, a deadlock, or a concurrent insert of the same key.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import DateTime, Integer, String, delete, select, type_coerce
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from libs.common.config import get_settings
from libs.common.datetime_utils import ensure_aware, utc_now
from libs.common.logging import get_logger
from libs.db.base import Base
from libs.db.documents import (
    Document,
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentStoreError,
    Filter,
    PendingWrite,
    T,
    TransactionAbortedError,
    TransactionFn,
    WriteBuffer,
    apply_query,
    collection_id_of,
    document_path,
    resolve_sentinels,
)

logger = get_logger(__name__)

# SQLSTATE codes worth retrying: serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = {"40001", "40P01"}

_DATETIME_KEY = "__datetime__"


class DocumentRow(Base):
    """One document of any collection."""

    __tablename__ = "documents"

    collection_path: Mapped[str] = mapped_column(String(512), primary_key=True)
    doc_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    # Last collection segment, used by collection-group queries
    collection_id: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    data: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


# ---------------------------------------------------------------------------
# JSON encoding
# ---------------------------------------------------------------------------


def encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return {_DATETIME_KEY: ensure_aware(value).isoformat()}
    if isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    return value


def decode_value(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {_DATETIME_KEY}:
            return datetime.fromisoformat(value[_DATETIME_KEY])
        return {k: decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    return value


def _to_document(row: DocumentRow) -> Document:
    return Document(
        id=row.doc_id,
        collection=row.collection_path,
        data=decode_value(row.data or {}),
        create_time=ensure_aware(row.created_at),
        update_time=ensure_aware(row.updated_at),
        version=row.version,
    )


def _is_retryable(exc: DBAPIError) -> bool:
    if isinstance(exc, IntegrityError):
        return True
    code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    return code in RETRYABLE_SQLSTATES


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class SqlDocumentStore:
    """``DocumentStore`` on top of an async SQLAlchemy session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # -- statements ---------------------------------------------------------

    @staticmethod
    def _select(collection: str, filters: Sequence[Filter], dialect: str):
        stmt = select(DocumentRow).where(DocumentRow.collection_path == collection)
        if dialect == "postgresql":
            # Push scalar equality filters down as JSONB containment
            for f in filters:
                if f.op == "==" and isinstance(f.value, (str, int, float, bool)):
                    stmt = stmt.where(
                        type_coerce(DocumentRow.data, JSONB).contains({f.field: f.value})
                    )
        return stmt

    @staticmethod
    async def _fetch(
        session: AsyncSession, collection: str, doc_id: str, for_update: bool = False
    ) -> Optional[DocumentRow]:
        stmt = select(DocumentRow).where(
            DocumentRow.collection_path == collection,
            DocumentRow.doc_id == doc_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def _query(
        self,
        session: AsyncSession,
        collection: str,
        filters: Sequence[Filter],
        order_by: Optional[str],
        descending: bool,
        limit: Optional[int],
        for_update: bool = False,
    ) -> list[Document]:
        stmt = self._select(collection, filters, session.bind.dialect.name)
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        docs = [_to_document(row) for row in result.scalars().all()]
        return apply_query(docs, filters, order_by, descending, limit)

    async def _apply(self, session: AsyncSession, write: PendingWrite, now: datetime) -> None:
        row = await self._fetch(session, write.collection, write.doc_id, for_update=True)

        if write.kind == "delete":
            if row is not None:
                await session.delete(row)
            return
        if write.kind == "create" and row is not None:
            raise DocumentExistsError(write.path)
        if write.kind == "update" and row is None:
            raise DocumentNotFoundError(write.path)

        current = decode_value(row.data) if row is not None else {}
        resolved = resolve_sentinels(write.data, now, current)
        if write.kind == "update" or (write.kind == "set" and write.merge):
            new_data = {**current, **resolved}
        else:
            new_data = resolved

        if row is None:
            session.add(
                DocumentRow(
                    collection_path=write.collection,
                    doc_id=write.doc_id,
                    collection_id=collection_id_of(write.collection),
                    data=encode_value(new_data),
                    version=1,
                    created_at=now,
                    updated_at=now,
                )
            )
        else:
            row.data = encode_value(new_data)
            row.version = row.version + 1
            row.updated_at = now
        await session.flush()

    async def _write(self, write: PendingWrite) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await self._apply(session, write, utc_now())
        except (DocumentExistsError, DocumentNotFoundError):
            raise
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Write to {write.path} failed: {e}") from e

    # -- reads --------------------------------------------------------------

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            async with self._session_factory() as session:
                row = await self._fetch(session, collection, doc_id)
                return _to_document(row) if row is not None else None
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Read of {collection}/{doc_id} failed: {e}") from e

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        try:
            async with self._session_factory() as session:
                return await self._query(session, collection, filters, order_by, descending, limit)
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Query of {collection} failed: {e}") from e

    async def query_group(
        self, collection_id: str, filters: Sequence[Filter] = ()
    ) -> list[Document]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(DocumentRow).where(DocumentRow.collection_id == collection_id)
                )
                docs = [_to_document(row) for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Group query of {collection_id} failed: {e}") from e
        return apply_query(docs, filters)

    # -- writes -------------------------------------------------------------

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None:
        await self._write(PendingWrite("set", collection, doc_id, dict(data), merge))

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        await self._write(PendingWrite("update", collection, doc_id, dict(data)))

    async def add(self, collection: str, data: dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        await self._write(PendingWrite("create", collection, doc_id, dict(data)))
        return doc_id

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        delete(DocumentRow).where(
                            DocumentRow.collection_path == collection,
                            DocumentRow.doc_id == doc_id,
                        )
                    )
        except SQLAlchemyError as e:
            raise DocumentStoreError(f"Delete of {collection}/{doc_id} failed: {e}") from e

    # -- transactions -------------------------------------------------------

    async def run_transaction(
        self, fn: TransactionFn[T], max_attempts: Optional[int] = None
    ) -> T:
        attempts = max_attempts or get_settings().TRANSACTION_MAX_ATTEMPTS
        for attempt in range(1, attempts + 1):
            txn: Optional[_SqlTransaction] = None
            try:
                async with self._session_factory() as session:
                    async with session.begin():
                        txn = _SqlTransaction(self, session)
                        result = await fn(txn)
                        now = utc_now()
                        for write in txn.writes:
                            await self._apply(session, write, now)
                return result
            except DocumentExistsError as e:
                # A row this transaction saw as missing was inserted concurrently
                if txn is None or e.path not in txn.missing_reads:
                    raise
                logger.debug("Concurrent insert of %s, attempt %d of %d", e.path, attempt, attempts)
            except DBAPIError as e:
                if not _is_retryable(e):
                    raise DocumentStoreError(f"Transaction failed: {e}") from e
                logger.debug(
                    "Retryable transaction error, attempt %d of %d: %s", attempt, attempts, e
                )
            except SQLAlchemyError as e:
                raise DocumentStoreError(f"Transaction failed: {e}") from e
        raise TransactionAbortedError(f"Transaction failed after {attempts} attempts")


class _SqlTransaction(WriteBuffer):
    def __init__(self, store: SqlDocumentStore, session: AsyncSession) -> None:
        super().__init__()
        self._store = store
        self._session = session
        self.missing_reads: set[str] = set()

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        row = await self._store._fetch(self._session, collection, doc_id, for_update=True)
        if row is None:
            # FOR UPDATE locks nothing here; remember the gap
            self.missing_reads.add(document_path(collection, doc_id))
            return None
        return _to_document(row)

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        return await self._store._query(
            self._session, collection, filters, order_by, descending, limit, for_update=True
        )
