"""Shared fixtures: a throwaway SQLite database per test, seeded rows, HTTP client."""
import httpx
import pytest
import pytest_asyncio

from api.main import create_app
from core.database import Database
from core.security import hash_password
from patterns.domain_config import AuthConfig, BookstoreConfig, DatabaseConfig
from verticals.bookstore.models.db_models import Book, User
from verticals.bookstore.repository import create_unit_of_work

CATALOG = [
    ("The Hobbit", "J.R.R. Tolkien", 150000),
    ("1984", "George Orwell", 120000),
    ("Brave New World", "Aldous Huxley", 140000),
    ("The Lord of the Rings", "J.R.R. Tolkien", 270000),
]


@pytest.fixture
def config(tmp_path):
    return BookstoreConfig(
        database=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'bookstore.db'}"),
        auth=AuthConfig(secret="test-secret", expiry_seconds=3600),
    )


@pytest_asyncio.fixture
async def database(config):
    db = Database(config.database)
    await db.init_db()
    yield db
    await db.close()


@pytest.fixture
def uow(database):
    return create_unit_of_work(database)


@pytest_asyncio.fixture
async def book_ids(uow):
    async def load(repos):
        return [
            await repos.books.create(Book(title=t, author=a, price=p))
            for t, a, p in CATALOG
        ]

    return await uow.run(load)


@pytest_asyncio.fixture
async def user_id(uow):
    return await uow.run(
        lambda repos: repos.users.create(
            User(name="Satrio", email="satrio@test.test", password=hash_password("secret"))
        )
    )


@pytest_asyncio.fixture
async def client(config, database):
    app = create_app(config, database=database)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
