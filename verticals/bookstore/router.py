"""Bookstore API router.

- Auth: register / login (public)
- Books: filtered listing, lookup, creation (bearer token)
- Orders: transactional placement and paginated history (bearer token)

Use cases raise core.errors.AppError; the app-level handler maps user
errors to 400 and system errors to 500.
"""

from datetime import date, datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from api.middleware import require_user_id
from verticals.bookstore.models.schemas import (
    AuthResponse,
    BookCreate,
    BookResponse,
    CreateOrderRequest,
    CreateOrderResponse,
    ListBooksResponse,
    LoginRequest,
    OrderListResponse,
    RegisterRequest,
)
from verticals.bookstore.repository import (
    BookFilter,
    BookstoreUnitOfWork,
    get_unit_of_work,
)
from verticals.bookstore.usecases import BookUseCase, OrderUseCase, UserUseCase

router = APIRouter()


# ============================================================================
# Use case dependencies
# ============================================================================

def get_user_usecase(
    request: Request,
    uow: BookstoreUnitOfWork = Depends(get_unit_of_work),
) -> UserUseCase:
    return UserUseCase(uow, request.app.state.config.auth)


def get_book_usecase(uow: BookstoreUnitOfWork = Depends(get_unit_of_work)) -> BookUseCase:
    return BookUseCase(uow)


def get_order_usecase(
    request: Request,
    uow: BookstoreUnitOfWork = Depends(get_unit_of_work),
) -> OrderUseCase:
    return OrderUseCase(uow, request.app.state.config.orders)


# ============================================================================
# Auth Endpoints
# ============================================================================

@router.post("/auth/register", response_model=AuthResponse, status_code=201)
async def register(
    request: RegisterRequest,
    usecase: UserUseCase = Depends(get_user_usecase),
):
    """Create an account and return a bearer token."""
    return await usecase.register(request)


@router.post("/auth/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    usecase: UserUseCase = Depends(get_user_usecase),
):
    """Exchange email + password for a bearer token."""
    return await usecase.login(request)


# ============================================================================
# Book Endpoints
# ============================================================================

@router.get("/books", response_model=ListBooksResponse)
async def list_books(
    title: Optional[str] = None,
    author: Optional[str] = None,
    min_price: float = 0,
    max_price: float = 0,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(10),
    offset: int = Query(0),
    _user_id: int = Depends(require_user_id),
    usecase: BookUseCase = Depends(get_book_usecase),
):
    """List books with optional title/author/price/date filters."""
    return await usecase.list_books(
        BookFilter(
            title=title,
            author=author,
            min_price=min_price,
            max_price=max_price,
            start_date=datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None,
            end_date=datetime.combine(end_date, time.max, tzinfo=timezone.utc) if end_date else None,
            limit=limit,
            offset=offset,
        )
    )


@router.get("/books/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: int,
    _user_id: int = Depends(require_user_id),
    usecase: BookUseCase = Depends(get_book_usecase),
):
    return await usecase.get_book(book_id)


@router.post("/books", response_model=BookResponse, status_code=201)
async def create_book(
    request: BookCreate,
    _user_id: int = Depends(require_user_id),
    usecase: BookUseCase = Depends(get_book_usecase),
):
    """Add a book to the catalog."""
    return await usecase.create_book(request)


# ============================================================================
# Order Endpoints
# ============================================================================

@router.post("/orders", response_model=CreateOrderResponse, status_code=201)
async def create_order(
    request: CreateOrderRequest,
    user_id: int = Depends(require_user_id),
    usecase: OrderUseCase = Depends(get_order_usecase),
):
    """Place an order. All items are written or none are."""
    return await usecase.create_order(request, user_id)


@router.get("/orders", response_model=OrderListResponse)
async def get_orders(
    limit: Optional[int] = None,
    offset: int = 0,
    user_id: int = Depends(require_user_id),
    usecase: OrderUseCase = Depends(get_order_usecase),
):
    """The caller's orders, newest first."""
    orders = await usecase.get_orders(user_id, limit=limit, offset=offset)
    return OrderListResponse(orders=orders)
