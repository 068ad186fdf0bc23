"""测试公共 Fixtures：内存 SQLite + ASGITransport 驱动的 FastAPI 应用"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from bookswap.client import BookSwapClient, ClientConfig, MemoryTokenStore
from bookswap.enums import BookCondition
from bookswap.server.config import settings
from bookswap.server.database import Base, get_db
from bookswap.server.models.book import Book
from bookswap.server.models.user import User
from bookswap.server.utils.security import hash_password, create_access_token


# ──────────── 内存数据库引擎 ────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

# 每个测试绑定一个新引擎，连接不跨事件循环复用
TestSessionLocal = async_sessionmaker(class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """每个测试前建库建表，测试后释放"""
    test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    TestSessionLocal.configure(bind=test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await test_engine.dispose()


async def _override_get_db():
    async with TestSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """封面图片写到临时目录"""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", path)
    return path


# ──────────── FastAPI TestClient ────────────

@pytest.fixture
def app():
    from bookswap.server.main import app

    app.dependency_overrides[get_db] = _override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ──────────── 测试用户 ────────────

async def _make_user(name: str, email: str) -> User:
    async with TestSessionLocal() as db:
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password_hash=hash_password("password123"),
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user


@pytest_asyncio.fixture
async def alice() -> User:
    return await _make_user("Alice", "alice@example.com")


@pytest_asyncio.fixture
async def bob() -> User:
    return await _make_user("Bob", "bob@example.com")


@pytest_asyncio.fixture
async def carol() -> User:
    return await _make_user("Carol", "carol@example.com")


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def alice_headers(alice: User) -> dict:
    return headers_for(alice)


@pytest.fixture
def bob_headers(bob: User) -> dict:
    return headers_for(bob)


@pytest.fixture
def carol_headers(carol: User) -> dict:
    return headers_for(carol)


# ──────────── 测试书籍 ────────────

@pytest_asyncio.fixture
async def dune(alice: User) -> Book:
    """Alice 上架的《Dune》"""
    async with TestSessionLocal() as db:
        book = Book(
            id=str(uuid.uuid4()),
            title="Dune",
            author="Frank Herbert",
            condition=BookCondition.GOOD.value,
            description="Paperback, some shelf wear",
            owner_id=alice.id,
        )
        db.add(book)
        await db.commit()
        await db.refresh(book)
        return book


# ──────────── 客户端 ────────────

@pytest.fixture
def make_client(app):
    """构造指向测试应用的 BookSwapClient；可传入 token_store 或自定义 transport"""
    def factory(token_store=None, transport=None) -> BookSwapClient:
        swap_client = BookSwapClient(
            config=ClientConfig(api_url="http://test", base_url="http://cdn.test"),
            token_store=token_store or MemoryTokenStore(),
            transport=transport or ASGITransport(app=app),
        )
        return swap_client

    return factory


async def logged_in(make_client, email: str) -> BookSwapClient:
    swap_client = make_client()
    await swap_client.start()
    await swap_client.session.login(email, "password123")
    return swap_client
