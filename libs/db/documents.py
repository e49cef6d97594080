"""Document store contract.

The dashboard persists everything as documents in hierarchical collections
(``stores/{store_id}/coupons/{coupon_id}``). Business code depends only on the
``DocumentStore`` protocol defined here; adapters live in ``libs.db.memory``
(in-process) and ``libs.db.sql`` (SQLAlchemy).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class DocumentStoreError(Exception):
    """Infrastructure failure talking to the document store."""


class DocumentNotFoundError(DocumentStoreError):
    """Update targeted a document that does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Document not found: {path}")
        self.path = path


class DocumentExistsError(DocumentStoreError):
    """Create targeted a document that already exists."""

    def __init__(self, path: str):
        super().__init__(f"Document already exists: {path}")
        self.path = path


class TransactionConflictError(DocumentStoreError):
    """A document read inside a transaction changed before commit."""


class TransactionAbortedError(DocumentStoreError):
    """A transaction kept conflicting until it ran out of attempts."""


# ---------------------------------------------------------------------------
# Write sentinels
# ---------------------------------------------------------------------------


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Increment:
    """Add ``amount`` to a numeric field at write time (missing counts as 0)."""

    amount: float = 1


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def collection_path(*segments: str) -> str:
    """Join path segments: collection_path("stores", "s1", "team") -> "stores/s1/team"."""
    if not segments or len(segments) % 2 == 0:
        raise ValueError("A collection path needs an odd number of segments")
    if any(not s or "/" in s for s in segments):
        raise ValueError(f"Invalid path segment in {segments!r}")
    return "/".join(segments)


def document_path(collection: str, doc_id: str) -> str:
    return f"{collection}/{doc_id}"


def collection_id_of(collection: str) -> str:
    return collection.rsplit("/", 1)[-1]


# ---------------------------------------------------------------------------
# Documents and queries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Document:
    id: str
    collection: str
    data: dict[str, Any]
    create_time: datetime
    update_time: datetime
    version: int = 1

    @property
    def path(self) -> str:
        return document_path(self.collection, self.id)

    @property
    def collection_id(self) -> str:
        return collection_id_of(self.collection)

    @property
    def parent_id(self) -> Optional[str]:
        """Id of the owning document for subcollections, e.g. the store id."""
        segments = self.collection.split("/")
        return segments[-2] if len(segments) > 1 else None

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Data plus the document id, the shape API responses use."""
        return {"id": self.id, **copy.deepcopy(self.data)}


OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "in", "array_contains")

_MISSING = object()


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")

    def matches(self, data: dict[str, Any]) -> bool:
        actual = data.get(self.field, _MISSING)
        if self.op == "!=":
            return actual is _MISSING or actual != self.value
        if actual is _MISSING:
            return False
        if self.op == "==":
            return actual == self.value
        if self.op == "in":
            return actual in self.value
        if self.op == "array_contains":
            return isinstance(actual, list) and self.value in actual
        if actual is None or self.value is None:
            return False
        try:
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            return actual >= self.value
        except TypeError:
            return False


def where(field_name: str, op: str, value: Any) -> Filter:
    return Filter(field_name, op, value)


def apply_query(
    documents: Iterable[Document],
    filters: Sequence[Filter] = (),
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> list[Document]:
    """Filter, order and limit documents in Python.

    Documents missing the ``order_by`` field are excluded, like an ordered
    query on a document database.
    """
    results = [d for d in documents if all(f.matches(d.data) for f in filters)]
    if order_by:
        results = [d for d in results if d.data.get(order_by) is not None]
        results.sort(key=lambda d: d.data[order_by], reverse=descending)
    if limit is not None:
        results = results[:limit]
    return results


def resolve_sentinels(
    data: dict[str, Any],
    now: datetime,
    current: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Replace SERVER_TIMESTAMP and Increment values with concrete ones."""
    current = current or {}
    resolved: dict[str, Any] = {}
    for key, value in data.items():
        if value is SERVER_TIMESTAMP:
            resolved[key] = now
        elif isinstance(value, Increment):
            base = current.get(key) or 0
            resolved[key] = base + value.amount
        else:
            resolved[key] = copy.deepcopy(value)
    return resolved


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


class Transaction(Protocol):
    """Reads are tracked for conflict detection; writes apply on commit."""

    async def get(self, collection: str, doc_id: str) -> Optional[Document]: ...

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]: ...

    def set(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None: ...

    def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> None: ...

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None: ...

    def delete(self, collection: str, doc_id: str) -> None: ...


TransactionFn = Callable[[Transaction], Awaitable[T]]


class DocumentStore(Protocol):
    async def get(self, collection: str, doc_id: str) -> Optional[Document]: ...

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]: ...

    async def query_group(
        self, collection_id: str, filters: Sequence[Filter] = ()
    ) -> list[Document]: ...

    async def set(
        self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False
    ) -> None: ...

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None: ...

    async def add(self, collection: str, data: dict[str, Any]) -> str: ...

    async def delete(self, collection: str, doc_id: str) -> None: ...

    async def run_transaction(
        self, fn: TransactionFn[T], max_attempts: Optional[int] = None
    ) -> T: ...


# ---------------------------------------------------------------------------
# Shared transaction write buffer
# ---------------------------------------------------------------------------


@dataclass
class PendingWrite:
    kind: str  # "set" | "create" | "update" | "delete"
    collection: str
    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)
    merge: bool = False

    @property
    def path(self) -> str:
        return document_path(self.collection, self.doc_id)


class WriteBuffer:
    """Collects transactional writes in call order."""

    def __init__(self) -> None:
        self.writes: list[PendingWrite] = []

    def set(self, collection: str, doc_id: str, data: dict[str, Any], merge: bool = False) -> None:
        self.writes.append(PendingWrite("set", collection, doc_id, dict(data), merge))

    def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.writes.append(PendingWrite("create", collection, doc_id, dict(data)))

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.writes.append(PendingWrite("update", collection, doc_id, dict(data)))

    def delete(self, collection: str, doc_id: str) -> None:
        self.writes.append(PendingWrite("delete", collection, doc_id))
