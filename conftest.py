import os
from typing import AsyncGenerator

import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient

# Optional local overrides for test runs (e.g. a Postgres DATABASE_URL)
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("AUTH_JWT_SECRET", "test-jwt-secret")

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()

from libs.db.session import get_document_store  # noqa: E402
from services.dashboard_service.app.main import app  # noqa: E402
from services.dashboard_service.dependencies import get_clock, get_mailer  # noqa: E402


@pytest_asyncio.fixture
async def client(store, clock, mailer) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the dashboard app, with the document store,
    clock and invitation mailer replaced by the test doubles.
    """
    from libs.common.rate_limit import limiter

    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_mailer] = lambda: mailer
    limiter.reset()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
