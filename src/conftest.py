import os
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from uuid import uuid4

# must be set before the engine is created on first import of src.config
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(tempfile.mkdtemp(prefix='shindig-tests-')) / 'shindig.db'}",
)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.config.database import async_session_manager, engine  # noqa: E402
from src.custom_fields.dtos import GuestIdentityDTO  # noqa: E402
from src.main import app  # noqa: E402
from src.models import Base, Event, Guest  # noqa: E402


@pytest.fixture(autouse=True)
async def database():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # pooled connections belong to this test's event loop
    await engine.dispose()


@pytest.fixture
def client_factory():
    """Build a test client with some dependencies swapped out."""

    @asynccontextmanager
    async def factory(overrides: dict | None = None):
        app.dependency_overrides.update(overrides or {})
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                yield ac
        finally:
            app.dependency_overrides.clear()

    return factory


@pytest.fixture
async def client(client_factory):
    async with client_factory() as ac:
        yield ac


@pytest.fixture
def make_event():
    async def factory(slug: str | None = None, is_public: bool = True) -> Event:
        slug = slug or f"event-{uuid4().hex[:8]}"
        async with async_session_manager() as session:
            event = Event(title=f"Event {slug}", slug=slug, is_public=is_public)
            session.add(event)
            await session.flush()
        return event

    return factory


@pytest.fixture
async def event(make_event) -> Event:
    return await make_event(slug="summer-potluck")


@pytest.fixture
def make_guest(event):
    async def factory(name: str, event_id=None) -> GuestIdentityDTO:
        async with async_session_manager() as session:
            guest = Guest(
                event_id=event_id or event.uuid,
                name=name,
                email=None,
                rsvp_token=str(uuid4()),
            )
            session.add(guest)
            await session.flush()
        return GuestIdentityDTO(id=guest.uuid, event_id=guest.event_id, name=guest.name)

    return factory
