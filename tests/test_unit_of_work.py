"""Test the transactional unit-of-work."""
import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from core.errors import InternalError, RollbackError, UserError
from patterns.unit_of_work import UnitOfWork
from verticals.bookstore.models.db_models import Book


class FakeSession:
    """Records transaction calls; raises for steps listed in ``fail_on``."""

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on or {}

    def _step(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise self.fail_on[name]

    async def begin(self):
        self._step("begin")

    async def commit(self):
        self._step("commit")

    async def rollback(self):
        self._step("rollback")

    async def close(self):
        self.calls.append("close")


def fake_uow(session):
    return UnitOfWork(lambda: session, lambda s: s)


@pytest.mark.asyncio
async def test_commits_and_returns_result():
    session = FakeSession()

    async def body(handle):
        assert handle is session
        return 42

    assert await fake_uow(session).run(body) == 42
    assert session.calls == ["begin", "commit", "close"]


@pytest.mark.asyncio
async def test_user_error_rolls_back_and_propagates_unchanged():
    session = FakeSession()
    err = UserError("Book ID Not Found")

    async def body(handle):
        raise err

    with pytest.raises(UserError) as exc_info:
        await fake_uow(session).run(body)
    assert exc_info.value is err
    assert session.calls == ["begin", "rollback", "close"]


@pytest.mark.asyncio
async def test_unexpected_exception_rolls_back():
    session = FakeSession()

    async def body(handle):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        await fake_uow(session).run(body)
    assert "rollback" in session.calls
    assert "commit" not in session.calls


@pytest.mark.asyncio
async def test_begin_failure_is_system_error():
    session = FakeSession(fail_on={"begin": OperationalError("BEGIN", {}, Exception("db down"))})
    called = False

    async def body(handle):
        nonlocal called
        called = True

    with pytest.raises(InternalError) as exc_info:
        await fake_uow(session).run(body)
    assert exc_info.value.is_system_error
    assert not called
    assert session.calls == ["begin", "close"]


@pytest.mark.asyncio
async def test_commit_failure_is_system_error():
    session = FakeSession(fail_on={"commit": OperationalError("COMMIT", {}, Exception("disk full"))})

    async def body(handle):
        return "ok"

    with pytest.raises(InternalError) as exc_info:
        await fake_uow(session).run(body)
    assert exc_info.value.is_system_error
    assert "commit" in exc_info.value.message


@pytest.mark.asyncio
async def test_rollback_failure_keeps_original_error():
    session = FakeSession(fail_on={"rollback": RuntimeError("connection lost")})
    original = UserError("Book ID Not Found")

    async def body(handle):
        raise original

    with pytest.raises(RollbackError) as exc_info:
        await fake_uow(session).run(body)
    err = exc_info.value
    assert err.original is original
    assert err.__cause__ is original
    assert err.is_user_error
    assert "connection lost" in err.message
    assert "Book ID Not Found" in err.message
    assert session.calls[-1] == "close"


@pytest.mark.asyncio
async def test_rollback_failure_after_uncategorized_error_is_system():
    session = FakeSession(fail_on={"rollback": RuntimeError("connection lost")})

    async def body(handle):
        raise KeyError("oops")

    with pytest.raises(RollbackError) as exc_info:
        await fake_uow(session).run(body)
    assert exc_info.value.is_system_error


@pytest.mark.asyncio
async def test_cancellation_rolls_back():
    session = FakeSession()
    started = asyncio.Event()

    async def body(handle):
        started.set()
        await asyncio.sleep(10)

    task = asyncio.create_task(fake_uow(session).run(body))
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert session.calls == ["begin", "rollback", "close"]


# ---------------------------------------------------------------------------
# Against a real store
# ---------------------------------------------------------------------------

async def _count_books(uow):
    async with uow.reader() as repos:
        result = await repos.session.execute(select(func.count()).select_from(Book))
        return result.scalar()


@pytest.mark.asyncio
async def test_failed_run_leaves_no_rows(uow):
    async def body(repos):
        await repos.books.create(Book(title="Ulysses", author="James Joyce", price=260000))
        raise UserError("abort")

    with pytest.raises(UserError):
        await uow.run(body)
    assert await _count_books(uow) == 0


@pytest.mark.asyncio
async def test_successful_run_is_visible_to_readers(uow):
    book_id = await uow.run(
        lambda repos: repos.books.create(Book(title="Ulysses", author="James Joyce", price=260000))
    )
    async with uow.reader() as repos:
        book = await repos.books.get_by_id(book_id)
    assert book is not None
    assert book.title == "Ulysses"
