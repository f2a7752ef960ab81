"""Test demo data seeding."""
import pytest

from verticals.bookstore.models.schemas import LoginRequest
from verticals.bookstore.seed import BOOKS, DEMO_PASSWORD, seed
from verticals.bookstore.usecases.user import UserUseCase


@pytest.mark.asyncio
async def test_seed_loads_catalog_once(database, uow):
    assert await seed(database) == len(BOOKS)
    assert await seed(database) == 0

    async with uow.reader() as repos:
        assert await repos.books.count() == len(BOOKS)


@pytest.mark.asyncio
async def test_seeded_users_can_log_in(database, uow, config):
    await seed(database)
    out = await UserUseCase(uow, config.auth).login(
        LoginRequest(email="satmoko@test.test", password=DEMO_PASSWORD)
    )
    assert out.user.name == "Satmoko"
