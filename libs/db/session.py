from functools import lru_cache

from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.db.config import get_session_factory
from libs.db.documents import DocumentStore
from libs.db.memory import InMemoryDocumentStore
from libs.db.sql import SqlDocumentStore

logger = get_logger(__name__)


@lru_cache
def _build_store() -> DocumentStore:
    backend = get_settings().STORE_BACKEND
    logger.info("Using %s document store", backend)
    if backend == "memory":
        return InMemoryDocumentStore()
    return SqlDocumentStore(get_session_factory())


def get_document_store() -> DocumentStore:
    """
    FastAPI dependency that returns the process-wide document store.
    Tests replace it through ``app.dependency_overrides``.
    """
    return _build_store()
