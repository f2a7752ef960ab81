"""Pydantic schemas for API request/response validation.

Order item fields are only type-checked here; the order rules re-validate
emptiness, book ids and quantities and report them as user errors.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------

class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0)


class BookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    price: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ListBooksResponse(BaseModel):
    books: list[BookResponse]
    total_count: int
    limit: int
    offset: int


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

class OrderItemIn(BaseModel):
    book_id: int
    quantity: int


class CreateOrderRequest(BaseModel):
    items: list[OrderItemIn] = Field(default_factory=list)


class CreateOrderResponse(BaseModel):
    order_id: int
    items: list[OrderItemIn]
    status: str
    created_at: datetime


class OrderResponse(BaseModel):
    order_id: int
    items: list[OrderItemIn]
    status: str
    created_at: datetime


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class ErrorResponse(BaseModel):
    error: str
