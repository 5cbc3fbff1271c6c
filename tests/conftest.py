"""
Test configuration and fixtures for the marketplace API.
Provides database fixtures, test data factories, and common test utilities.
"""

import io
import os
import tempfile
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Iterable, Optional

# Settings are read once at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "testing"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="marketplace-uploads-")

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database import AsyncSessionLocal, create_tables, engine, get_db
from marketplace.main import app
from marketplace.models.image import PropertyImage
from marketplace.models.message import Message
from marketplace.models.property import Property
from marketplace.models.request import PropertyRequest
from marketplace.models.user import User, UserRole
from marketplace.repositories.image import ImageRepository
from marketplace.repositories.message import MessageRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.request import RequestRepository
from marketplace.repositories.user import UserRepository
from marketplace.services.authorization import Actor, AuthorizationPolicy
from marketplace.services.storage import LocalBlobStore
from marketplace.utils.auth import create_access_token
from marketplace.utils.dependencies import get_blob_store

DEFAULT_PASSWORD = "testpassword123"


@pytest.fixture(autouse=True)
async def setup_test_database():
    """Fresh in-memory schema per test; disposing the engine drops the database."""
    await create_tables()
    yield
    await engine.dispose()


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    """Blob store rooted in a per-test temporary directory."""
    return LocalBlobStore(str(tmp_path / "uploads"))


@pytest.fixture
def policy() -> AuthorizationPolicy:
    return AuthorizationPolicy()


@pytest.fixture
def strict_policy() -> AuthorizationPolicy:
    return AuthorizationPolicy(property_ownership_required=True)


@pytest.fixture
async def async_client(db_session: AsyncSession, blob_store: LocalBlobStore) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client sharing the test session and blob store."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def image_repository(db_session: AsyncSession) -> ImageRepository:
    return ImageRepository(db_session)


@pytest.fixture
def request_repository(db_session: AsyncSession) -> RequestRepository:
    return RequestRepository(db_session)


@pytest.fixture
def message_repository(db_session: AsyncSession) -> MessageRepository:
    return MessageRepository(db_session)


def make_image_bytes(fmt: str = "JPEG", size=(120, 120), color=(200, 30, 30)) -> bytes:
    """Encode a small solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        first_name: str = "Test",
        last_name: str = "User",
        roles: Iterable[UserRole] = (UserRole.CLIENT,),
        is_active: bool = True
    ) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(
            {
                "email": email or f"test{uuid.uuid4().hex[:8]}@example.com",
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
                "is_active": is_active,
            },
            roles=roles,
        )


class PropertyFactory:
    """Factory for creating test properties."""

    @staticmethod
    async def create_property(
        property_repo: PropertyRepository,
        owner_id: Optional[uuid.UUID],
        title: str = "Test Property",
        status: str = "Available",
        price: Decimal = Decimal("1000.00"),
        bedrooms: int = 2,
        bathrooms: int = 1,
        area: int = 1000
    ) -> Property:
        return await property_repo.create_property({
            "title": title,
            "description": "A beautiful test property",
            "address": "1 Test Street",
            "price": price,
            "bedrooms": bedrooms,
            "bathrooms": bathrooms,
            "area": area,
            "status": status,
            "owner_id": owner_id,
        })


class ImageFactory:
    """Factory for images backed by a real file in the blob store."""

    @staticmethod
    async def create_image(
        image_repo: ImageRepository,
        blob_store: LocalBlobStore,
        property_id: uuid.UUID,
        filename: str = "photo.jpg"
    ) -> PropertyImage:
        content = make_image_bytes()
        url = await blob_store.save(content, filename)
        return await image_repo.create({
            "property_id": property_id,
            "url": url,
            "filename": filename,
            "file_size": len(content),
            "mime_type": "image/jpeg",
        })


class RequestFactory:
    @staticmethod
    async def create_request(
        request_repo: RequestRepository,
        property_id: uuid.UUID,
        user_id: uuid.UUID,
        notes: str = "interested",
        status: str = "Pending"
    ) -> PropertyRequest:
        return await request_repo.create({
            "property_id": property_id,
            "user_id": user_id,
            "notes": notes,
            "status": status,
        })


class MessageFactory:
    @staticmethod
    async def create_message(
        message_repo: MessageRepository,
        from_user_id: uuid.UUID,
        to_user_id: uuid.UUID,
        subject: str = "Hello",
        body: str = "Is this still available?"
    ) -> Message:
        return await message_repo.create({
            "from_user_id": from_user_id,
            "to_user_id": to_user_id,
            "subject": subject,
            "body": body,
        })


# Common test fixtures
@pytest.fixture
async def test_client_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, email="client@example.com", first_name="Carla")


@pytest.fixture
async def test_agent(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="agent@example.com",
        first_name="Andy",
        roles=(UserRole.AGENT,)
    )


@pytest.fixture
async def test_admin(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="admin@example.com",
        first_name="Ada",
        roles=(UserRole.ADMIN,)
    )


@pytest.fixture
async def test_property(property_repository: PropertyRepository, test_agent: User) -> Property:
    return await PropertyFactory.create_property(property_repository, owner_id=test_agent.id)


@pytest.fixture
async def test_image(
    image_repository: ImageRepository,
    blob_store: LocalBlobStore,
    test_property: Property
) -> PropertyImage:
    return await ImageFactory.create_image(image_repository, blob_store, test_property.id)


@pytest.fixture
async def test_request(
    request_repository: RequestRepository,
    test_property: Property,
    test_client_user: User
) -> PropertyRequest:
    return await RequestFactory.create_request(request_repository, test_property.id, test_client_user.id)


# Utility functions for tests
def actor_for(user: User) -> Actor:
    return Actor.from_user(user)


def auth_headers(user: User) -> dict:
    """Bearer header for the user's current session."""
    token = create_access_token(
        user_id=user.id,
        email=user.email,
        roles=user.roles,
        session_version=user.session_version
    )
    return {"Authorization": f"Bearer {token}"}
