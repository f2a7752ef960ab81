"""Transactional unit-of-work over an async SQLAlchemy session factory.

The unit-of-work owns the session for one transaction and hands the caller
an explicit scoped handle built from that session (for the bookstore, a
``BookstoreRepositories``). Every repository reached through the handle
shares the transaction, so there is no need to look anything up in an
ambient context.

    uow = UnitOfWork(database.session_factory, BookstoreRepositories)

    async def place(repos: BookstoreRepositories) -> int:
        order_id = await repos.orders.create(Order(user_id=1, status="success"))
        await repos.order_items.create(OrderItem(order_id=order_id, book_id=7, quantity=2))
        return order_id

    order_id = await uow.run(place)

Failure semantics of ``run``:
- begin / commit failures surface as system-category ``InternalError``
- anything raised by the function (including cancellation) triggers a
  rollback and is re-raised unchanged
- a failed rollback raises ``RollbackError`` that keeps the original failure
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Generic, TypeVar

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AppError, InternalError, RollbackError

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

ScopeT = TypeVar("ScopeT")
ResultT = TypeVar("ResultT")


class UnitOfWork(Generic[ScopeT]):
    """Run a function atomically against a single session.

    ``session_factory`` is usually an ``async_sessionmaker``; ``scope`` turns
    a session into the handle passed to the function.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        scope: Callable[[AsyncSession], ScopeT],
    ):
        self._session_factory = session_factory
        self._scope = scope

    async def run(self, fn: Callable[[ScopeT], Awaitable[ResultT]]) -> ResultT:
        """Execute ``fn`` inside one transaction and return its result."""
        with tracer.start_as_current_span("UnitOfWork.run", record_exception=False) as span:
            session = self._session_factory()
            try:
                try:
                    await session.begin()
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, "Failed to begin transaction"))
                    logger.error("transaction.begin_failed", error=str(exc))
                    raise InternalError(f"failed to begin transaction: {exc}") from exc

                try:
                    result = await fn(self._scope(session))
                except BaseException as exc:
                    # recorded by the caller where it is categorized
                    span.set_status(Status(StatusCode.ERROR, "Transaction rolled back"))
                    await self._rollback(session, exc, span)
                    raise

                try:
                    await session.commit()
                except Exception as exc:
                    span.record_exception(exc)
                    span.set_status(Status(StatusCode.ERROR, "Failed to commit transaction"))
                    logger.error("transaction.commit_failed", error=str(exc))
                    raise InternalError(f"failed to commit transaction: {exc}") from exc

                span.set_status(Status(StatusCode.OK))
                return result
            finally:
                await session.close()

    async def _rollback(
        self, session: AsyncSession, original: BaseException, span: trace.Span
    ) -> None:
        try:
            await session.rollback()
        except Exception as rollback_exc:
            span.record_exception(rollback_exc)
            logger.error(
                "transaction.rollback_failed",
                error=str(rollback_exc),
                original_error=str(original),
            )
            raise RollbackError(rollback_exc, original) from original

        if isinstance(original, AppError) and original.is_user_error:
            logger.info("transaction.rolled_back", reason=original.message)
        else:
            logger.warning("transaction.rolled_back", reason=repr(original))

    @asynccontextmanager
    async def reader(self) -> AsyncIterator[ScopeT]:
        """Yield a handle bound to a plain pooled session.

        Meant for reads outside any unit-of-work; nothing is committed.
        """
        async with self._session_factory() as session:
            yield self._scope(session)
