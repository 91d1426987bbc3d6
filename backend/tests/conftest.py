import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("FIREBASE_PROJECT_ID", "passport-test")
os.environ.setdefault("STORAGE_PROVIDER", "gcs")

import uuid
from datetime import datetime, timedelta

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# FORCE model registration
import passport.models  # noqa

from passport.core.database import Base, get_db
from passport.core.security import AuthenticatedUser, verify_firebase_token, verify_optional_token
from passport.main import app
from passport.models.enums import PrimaryRole, PropertyPermission, PropertyStatus
from passport.models.property import Property
from passport.models.stakeholder import PropertyStakeholder
from passport.models.user import User
from passport.routers.integrations import get_http_transport
from passport.services.signed_urls import signed_url_cache
from passport.services.storage import StorageProviderInterface, StorageService, get_storage_service


class FakeStorageProvider(StorageProviderInterface):
    """In-memory object store; signed URLs are deterministic."""

    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.deleted: list[tuple[str, str]] = []
        self.fail_uploads = False

    async def upload_object(self, bucket, object_path, data, content_type):
        if self.fail_uploads:
            raise RuntimeError("bucket unavailable")
        self.objects[(bucket, object_path)] = data

    async def generate_signed_url(self, bucket, object_path, ttl_seconds):
        return f"https://storage.test/{bucket}/{object_path}?ttl={ttl_seconds}"

    async def delete_object(self, bucket, object_path):
        self.deleted.append((bucket, object_path))
        return self.objects.pop((bucket, object_path), None) is not None


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage_provider():
    signed_url_cache.clear_all()
    return FakeStorageProvider()


@pytest.fixture
def upstream():
    """Swap in an httpx.MockTransport handler per test: upstream.handler = fn."""

    class Upstream:
        handler = None
        requests: list[httpx.Request] = []

    def route(request: httpx.Request) -> httpx.Response:
        Upstream.requests.append(request)
        if Upstream.handler is None:
            return httpx.Response(503)
        return Upstream.handler(request)

    Upstream.requests = []
    Upstream.transport = httpx.MockTransport(route)
    return Upstream


@pytest.fixture
async def client(session_factory, storage_provider, upstream):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage_service] = lambda: StorageService(storage_provider)
    app.dependency_overrides[get_http_transport] = lambda: upstream.transport
    app.dependency_overrides[verify_optional_token] = lambda: None

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def login_as(user: User) -> None:
    """Authenticate subsequent requests as this user."""
    principal = AuthenticatedUser(uid=user.firebase_uid, email=user.email, email_verified=True)
    app.dependency_overrides[verify_firebase_token] = lambda: principal
    app.dependency_overrides[verify_optional_token] = lambda: principal


def logout() -> None:
    app.dependency_overrides.pop(verify_firebase_token, None)
    app.dependency_overrides[verify_optional_token] = lambda: None


async def create_user(db, email=None, role=PrimaryRole.CONSUMER, full_name="Test User") -> User:
    email = email or f"user-{uuid.uuid4().hex[:8]}@example.com"
    user = User(
        firebase_uid=f"fb-{uuid.uuid4().hex}",
        email=email.lower(),
        full_name=full_name,
        primary_role=role,
    )
    db.add(user)
    await db.commit()
    return user


async def create_property(db, owner: User = None, **fields) -> Property:
    values = {
        "title": "Rose Cottage",
        "display_address": "1 Rose Lane, York, YO1 7HH",
    }
    values.update(fields)
    prop = Property(created_by_user_id=owner.id if owner else None, **values)
    db.add(prop)
    await db.commit()
    return prop


async def grant(
    db,
    prop: Property,
    user: User,
    status: PropertyStatus = None,
    permission: PropertyPermission = PropertyPermission.VIEWER,
    expires_in_days: int = None,
) -> PropertyStakeholder:
    row = PropertyStakeholder(
        property_id=prop.id,
        user_id=user.id,
        status=status,
        permission=permission,
        expires_at=datetime.utcnow() + timedelta(days=expires_in_days) if expires_in_days is not None else None,
    )
    db.add(row)
    await db.commit()
    return row
