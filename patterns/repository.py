"""Async repository pattern for database access.

Provides a generic base repository bound to one session. The session is
either the transaction owned by a UnitOfWork or a plain read session from
``UnitOfWork.reader()``; repositories never open or commit sessions
themselves. Storage errors (``SQLAlchemyError``) propagate to the caller.

Example: BookRepository extending BaseRepository.
"""

from typing import Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.base import Base

# ---------------------------------------------------------------------------
# Type variable for model classes
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=Base)


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class BaseRepository(Generic[ModelT]):
    """Generic async repository with create + get-by-id.

    Subclass and set `model` to your SQLAlchemy model::

        class BookRepository(BaseRepository[Book]):
            model = Book

            async def search_by_title(self, query: str):
                stmt = select(self.model).where(self.model.title.ilike(f"%{query}%"))
                result = await self.session.execute(stmt)
                return list(result.scalars().all())
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    # -- Get by ID --

    async def get_by_id(self, item_id: int) -> ModelT | None:
        """Get a single row by primary key, or None when absent."""
        stmt = select(self.model).where(self.model.id == item_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    # -- Create --

    async def create(self, item: ModelT) -> int:
        """Insert a row and return the identity assigned by the store."""
        self.session.add(item)
        await self.session.flush()
        return item.id
