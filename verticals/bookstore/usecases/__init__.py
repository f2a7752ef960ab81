"""Bookstore use cases: orders (transactional core), users, books."""

from verticals.bookstore.usecases.book import BookUseCase
from verticals.bookstore.usecases.order import OrderUseCase
from verticals.bookstore.usecases.user import UserUseCase

__all__ = ["BookUseCase", "OrderUseCase", "UserUseCase"]
