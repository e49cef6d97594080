"""Unit tests for the in-process document store."""

import asyncio

import pytest

from libs.db.documents import (
    SERVER_TIMESTAMP,
    DocumentExistsError,
    DocumentNotFoundError,
    Increment,
    TransactionAbortedError,
    collection_path,
    where,
)

# ---------------------------------------------------------------------------
# Basic reads and writes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_set_merge_and_update(store):
    await store.set("stores", "s1", {"name": "Acme", "owner_id": "u1"})
    await store.set("stores", "s1", {"name": "Acme Co"}, merge=True)

    doc = await store.get("stores", "s1")
    assert doc.data == {"name": "Acme Co", "owner_id": "u1"}
    assert doc.version == 2

    await store.set("stores", "s1", {"name": "Replaced"})
    assert (await store.get("stores", "s1")).data == {"name": "Replaced"}

    with pytest.raises(DocumentNotFoundError):
        await store.update("stores", "missing", {"name": "x"})


@pytest.mark.asyncio
@pytest.mark.unit
async def test_returned_documents_are_copies(store):
    await store.set("stores", "s1", {"tags": ["a"]})

    doc = await store.get("stores", "s1")
    doc.data["tags"].append("b")

    assert (await store.get("stores", "s1")).get("tags") == ["a"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sentinels(store):
    await store.set("counters", "c1", {"count": Increment(2), "at": SERVER_TIMESTAMP})
    await store.update("counters", "c1", {"count": Increment(-1)})

    doc = await store.get("counters", "c1")
    assert doc.get("count") == 1
    assert doc.get("at") is not None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_query_filters_order_and_limit(store):
    for i, status in enumerate(["active", "disabled", "active"]):
        await store.set("stores/s1/coupons", f"c{i}", {"status": status, "rank": i})

    active = await store.query(
        "stores/s1/coupons", [where("status", "==", "active")], order_by="rank", descending=True
    )
    assert [d.id for d in active] == ["c2", "c0"]
    assert len(await store.query("stores/s1/coupons", limit=2)) == 2
    # Subcollections of other parents are separate
    assert await store.query("stores/s2/coupons") == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_collection_group_query(store):
    await store.set("stores/s1/team", "u1", {"user_id": "u1"})
    await store.set("stores/s2/team", "u1", {"user_id": "u1"})
    await store.set("stores/s2/team", "u2", {"user_id": "u2"})

    docs = await store.query_group("team", [where("user_id", "==", "u1")])

    assert sorted(d.parent_id for d in docs) == ["s1", "s2"]


@pytest.mark.unit
def test_collection_path_validation():
    assert collection_path("stores", "s1", "team") == "stores/s1/team"
    with pytest.raises(ValueError):
        collection_path("stores", "s1")
    with pytest.raises(ValueError):
        collection_path("stores", "a/b", "team")


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_transaction_writes_commit_together(store):
    await store.set("accounts", "a", {"balance": 10})

    async def move(txn):
        await txn.get("accounts", "a")
        txn.update("accounts", "a", {"balance": Increment(-5)})
        txn.create("accounts", "b", {"balance": 5})
        txn.create("accounts", "a", {"balance": 0})  # fails: already exists

    with pytest.raises(DocumentExistsError):
        await store.run_transaction(move)

    assert (await store.get("accounts", "a")).get("balance") == 10
    assert await store.get("accounts", "b") is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_conflicting_transactions_retry_and_see_fresh_data(store):
    await store.set("counters", "c", {"value": 0})

    async def bump(txn):
        doc = await txn.get("counters", "c")
        txn.update("counters", "c", {"value": doc.get("value") + 1})
        return doc.get("value")

    await asyncio.gather(*(store.run_transaction(bump) for _ in range(4)))

    assert (await store.get("counters", "c")).get("value") == 4


@pytest.mark.asyncio
@pytest.mark.unit
async def test_query_inside_transaction_detects_new_matches(store):
    attempts = []

    async def claim(txn):
        attempts.append(1)
        taken = await txn.query("claims", [where("code", "==", "X")])
        if taken:
            return False
        # Another writer claims the code between the read and the commit
        if len(attempts) == 1:
            await store.set("claims", "other", {"code": "X"})
        txn.create("claims", "mine", {"code": "X"})
        return True

    assert await store.run_transaction(claim) is False
    assert len(attempts) == 2
    assert await store.get("claims", "mine") is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_transaction_gives_up_after_max_attempts(store):
    async def always_conflicts(txn):
        doc = await txn.get("counters", "c")
        await store.set("counters", "c", {"value": (doc.get("value") if doc else 0) + 1})
        txn.update("counters", "c", {"touched": True})

    with pytest.raises(TransactionAbortedError):
        await store.run_transaction(always_conflicts, max_attempts=3)
