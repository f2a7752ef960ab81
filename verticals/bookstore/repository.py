"""Bookstore repositories and the scoped handle handed out by the unit-of-work.

Each repository is bound to one session. ``BookstoreRepositories`` groups
them so that everything reached through a handle shares that session:

    async with uow.reader() as repos:              # plain reads
        orders = await repos.orders.list_by_user(user_id, 10, 0)

    await uow.run(lambda repos: repos.books.create(book))   # one transaction
"""

from dataclasses import dataclass
from datetime import datetime

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import Database, get_database
from patterns.repository import BaseRepository
from patterns.unit_of_work import UnitOfWork
from verticals.bookstore.models.db_models import Book, Order, OrderItem, User


# ---------------------------------------------------------------------------
# Book repository
# ---------------------------------------------------------------------------

@dataclass
class BookFilter:
    """Optional listing filters. Zero prices and None dates are ignored."""

    title: str | None = None
    author: str | None = None
    min_price: float = 0
    max_price: float = 0
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int = 10
    offset: int = 0


class BookRepository(BaseRepository[Book]):
    """Repository for book CRUD and filtered listing."""

    model = Book

    async def search(self, flt: BookFilter) -> tuple[list[Book], int]:
        """Filter books and return (page, total_count)."""
        conditions = []
        if flt.title:
            conditions.append(Book.title.ilike(f"%{flt.title}%"))
        if flt.author:
            conditions.append(Book.author.ilike(f"%{flt.author}%"))
        if flt.min_price > 0:
            conditions.append(Book.price >= flt.min_price)
        if flt.max_price > 0:
            conditions.append(Book.price <= flt.max_price)
        if flt.start_date is not None:
            conditions.append(Book.created_at >= flt.start_date)
        if flt.end_date is not None:
            conditions.append(Book.created_at <= flt.end_date)

        stmt = (
            select(Book)
            .where(*conditions)
            .order_by(Book.id)
            .offset(flt.offset)
            .limit(flt.limit)
        )
        count_stmt = select(func.count()).select_from(Book).where(*conditions)

        result = await self.session.execute(stmt)
        books = list(result.scalars().all())

        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        return books, total

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Book))
        return result.scalar() or 0


# ---------------------------------------------------------------------------
# User repository
# ---------------------------------------------------------------------------

class UserRepository(BaseRepository[User]):
    """Repository for users."""

    model = User

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Order repositories
# ---------------------------------------------------------------------------

class OrderRepository(BaseRepository[Order]):
    """Repository for order headers."""

    model = Order

    async def list_by_user(self, user_id: int, limit: int, offset: int) -> list[Order]:
        """Newest orders first; id breaks ties between equal timestamps."""
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class OrderItemRepository(BaseRepository[OrderItem]):
    """Repository for order lines."""

    model = OrderItem

    async def list_by_order(self, order_id: int) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Scoped handle
# ---------------------------------------------------------------------------

class BookstoreRepositories:
    """All bookstore repositories bound to one session."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.books = BookRepository(session)
        self.users = UserRepository(session)
        self.orders = OrderRepository(session)
        self.order_items = OrderItemRepository(session)


BookstoreUnitOfWork = UnitOfWork[BookstoreRepositories]


def create_unit_of_work(database: Database) -> BookstoreUnitOfWork:
    return UnitOfWork(database.session_factory, BookstoreRepositories)


# ---------------------------------------------------------------------------
# FastAPI dependency factory
# ---------------------------------------------------------------------------

def get_unit_of_work(
    database: Database = Depends(get_database),
) -> BookstoreUnitOfWork:
    """FastAPI dependency for the bookstore unit-of-work."""
    return create_unit_of_work(database)
