"""Bookstore vertical.

- SQLAlchemy models (users, books, orders, order items)
- Session-bound repositories grouped into a unit-of-work handle
- Use cases: transactional order placement, registration/login, catalog
- FastAPI router under /api/v1
- Pure-function order rules
"""
