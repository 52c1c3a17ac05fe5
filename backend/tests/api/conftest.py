"""API test fixtures — FastAPI client over the test DB, seeded users and a fake image service.

Invariants:
    - get_db overridden to use the per-test SQLite database
    - db_manager patched so the readiness probe sees the test engine
    - Image generation never reaches the network: FakeImageService via dependency_overrides
    - Served and uploaded files live under tmp_path
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

import aixchange.infrastructure.database as db_module
from aixchange.api.routes.media import get_image_store
from aixchange.config import get_settings
from aixchange.core.domain_types import EventStatus, EventType, SolutionStatus, UserRole
from aixchange.core.errors import ImageGenerationError
from aixchange.infrastructure.database import DatabaseSessionManager, get_db
from aixchange.infrastructure.image_store import ImageStore
from aixchange.main import app
from aixchange.models import Event, Solution, User
from aixchange.services.image_service import ImageService, get_image_service
from aixchange.services.security import create_session_token, hash_password


class FakeImageService(ImageService):
    """Stores a fixed PNG payload instead of calling the image API."""

    PNG = b"\x89PNG\r\n\x1a\nfake"

    def __init__(self, store: ImageStore, fail: bool = False):
        self.store = store
        self.size = "1024x1024"
        self.format = "png"
        self.fail = fail
        self.prompts: list[str] = []
        self.client = self

    async def generate_png(self, prompt, context=None):
        self.prompts.append(prompt)
        if self.fail:
            raise ImageGenerationError("boom", "connection_error")
        return self.PNG


@pytest.fixture
def image_store(tmp_path):
    return ImageStore(tmp_path / "external-images")


@pytest.fixture
def fake_images(image_store):
    return FakeImageService(image_store)


@pytest.fixture
async def client(test_engine, test_session_factory, image_store, fake_images):
    """FastAPI test client with DB and image dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_service] = lambda: fake_images
    app.dependency_overrides[get_image_store] = lambda: image_store

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


async def create_user(
    db, email, role=UserRole.USER, name="Test User", password="secret123", **kw,
):
    user = User(
        email=email, name=name, role=role.value,
        password_hash=hash_password(password), **kw,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def make_user(test_db):
    async def _make(email, role=UserRole.USER, **kw):
        return await create_user(test_db, email, role, **kw)
    return _make


@pytest.fixture
async def admin_user(test_db):
    return await create_user(test_db, "admin@example.com", UserRole.ADMIN, name="Admin")


@pytest.fixture
async def member(test_db):
    return await create_user(test_db, "member@example.com", name="Member")


@pytest.fixture
async def other_member(test_db):
    return await create_user(test_db, "other@example.com", name="Other")


def bearer(user) -> dict:
    settings = get_settings()
    token = create_session_token(
        user_id=user.id, role=user.role,
        secret=settings.jwt_secret, algorithm=settings.jwt_algorithm, expire_minutes=60,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def member_headers(member):
    return bearer(member)


@pytest.fixture
def other_headers(other_member):
    return bearer(other_member)


@pytest.fixture
def make_solution(test_db, member):
    async def _make(title="Vision API", published=True, **kw):
        fields = dict(
            title=title,
            description="Detects objects in images",
            launch_url="https://example.com/app",
            category="Computer Vision",
            provider="Acme",
            status=SolutionStatus.ACTIVE.value,
            tags=["vision"],
            is_published=published,
            author_id=member.id,
        )
        fields.update(kw)
        solution = Solution(**fields)
        test_db.add(solution)
        await test_db.commit()
        return solution
    return _make


@pytest.fixture
def make_event(test_db, admin_user):
    async def _make(title="Spring Hackathon", status=EventStatus.ACTIVE, **kw):
        start = datetime.now(timezone.utc) + timedelta(days=1)
        fields = dict(
            title=title,
            description="Build things",
            short_description="Build",
            rules="Be nice",
            type=EventType.HACKATHON.value,
            status=status.value,
            start_date=start,
            end_date=start + timedelta(days=2),
            created_by_id=admin_user.id,
        )
        fields.update(kw)
        event = Event(**fields)
        test_db.add(event)
        await test_db.commit()
        return event
    return _make


@pytest.fixture
def submission():
    """Factory for a valid solution form payload (camelCase)."""
    def _payload(**overrides) -> dict:
        payload = {
            "title": "Speech Helper",
            "description": "Transcribes meetings accurately",
            "category": "Speech Recognition",
            "provider": "Acme",
            "launchUrl": "https://example.com/speech",
            "tokenCost": 2,
            "rating": 4,
            "status": "Active",
            "resourceConfig": {"cpu": "2", "memory": "4GB", "storage": "10GB"},
            "tags": ["speech", "audio"],
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def headers_for():
    return bearer
