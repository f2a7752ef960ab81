"""Reusable building blocks behind the bookstore.

Each module is a self-contained pattern: the transactional unit-of-work,
session-bound repositories, the order status lifecycle, pure-function rules,
and dataclass configuration.
"""
