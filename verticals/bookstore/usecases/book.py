"""Book catalog use cases: filtered listing, creation, lookup."""

from opentelemetry import trace
from sqlalchemy.exc import SQLAlchemyError

from core.errors import InternalError, UserError
from verticals.bookstore.models.db_models import Book
from verticals.bookstore.models.schemas import BookCreate, BookResponse, ListBooksResponse
from verticals.bookstore.repository import BookFilter, BookstoreUnitOfWork

tracer = trace.get_tracer(__name__)


class BookUseCase:
    def __init__(self, uow: BookstoreUnitOfWork):
        self.uow = uow

    async def list_books(self, flt: BookFilter) -> ListBooksResponse:
        if flt.limit < 0:
            raise UserError(f"invalid limit: {flt.limit}")
        if flt.offset < 0:
            raise UserError(f"invalid offset: {flt.offset}")

        with tracer.start_as_current_span("BookUseCase.list_books", record_exception=False) as span:
            try:
                async with self.uow.reader() as repos:
                    books, total = await repos.books.search(flt)
            except SQLAlchemyError as exc:
                span.record_exception(exc)
                raise InternalError("Database Error") from exc

            return ListBooksResponse(
                books=[BookResponse.model_validate(b) for b in books],
                total_count=total,
                limit=flt.limit,
                offset=flt.offset,
            )

    async def create_book(self, request: BookCreate) -> BookResponse:
        with tracer.start_as_current_span("BookUseCase.create_book", record_exception=False) as span:
            try:
                book_id = await self.uow.run(
                    lambda repos: repos.books.create(
                        Book(title=request.title, author=request.author, price=request.price)
                    )
                )
            except SQLAlchemyError as exc:
                span.record_exception(exc)
                raise InternalError("Database Error") from exc

            return BookResponse(
                id=book_id,
                title=request.title,
                author=request.author,
                price=request.price,
            )

    async def get_book(self, book_id: int) -> BookResponse:
        with tracer.start_as_current_span("BookUseCase.get_book", record_exception=False) as span:
            try:
                async with self.uow.reader() as repos:
                    book = await repos.books.get_by_id(book_id)
            except SQLAlchemyError as exc:
                span.record_exception(exc)
                raise InternalError("Database Error") from exc

            if book is None:
                raise UserError("Book ID Not Found")
            return BookResponse.model_validate(book)
