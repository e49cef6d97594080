import pytest

from libs.auth.resolver import AuthorizationResolver
from libs.db.memory import InMemoryDocumentStore
from tests.factories import FrozenClock, RecordingMailer


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def resolver(store) -> AuthorizationResolver:
    return AuthorizationResolver(store)
