"""Create tables and load demo users and books.

Idempotent: does nothing when the catalog already has books.

    bookstore-seed          # uses DATABASE_URL etc. from the environment
"""

import asyncio

import structlog

from core.database import Database
from core.observability.logging import configure_logging
from core.security import hash_password
from patterns.domain_config import BookstoreConfig
from verticals.bookstore.models.db_models import Book, User
from verticals.bookstore.repository import BookstoreRepositories, create_unit_of_work

logger = structlog.get_logger(__name__)

DEMO_PASSWORD = "password123"

USERS = [
    ("Satrio", "satrio@test.test"),
    ("Satmoko", "satmoko@test.test"),
]

BOOKS = [
    ("The Hobbit", "J.R.R. Tolkien", 150000),
    ("1984", "George Orwell", 120000),
    ("The Catcher in the Rye", "J.D. Salinger", 130000),
    ("To Kill a Mockingbird", "Harper Lee", 140000),
    ("The Great Gatsby", "F. Scott Fitzgerald", 110000),
    ("Pride and Prejudice", "Jane Austen", 160000),
    ("Moby Dick", "Herman Melville", 180000),
    ("War and Peace", "Leo Tolstoy", 250000),
    ("The Divine Comedy", "Dante Alighieri", 300000),
    ("Crime and Punishment", "Fyodor Dostoevsky", 190000),
    ("The Odyssey", "Homer", 220000),
    ("Brave New World", "Aldous Huxley", 140000),
    ("The Iliad", "Homer", 230000),
    ("The Brothers Karamazov", "Fyodor Dostoevsky", 210000),
    ("The Alchemist", "Paulo Coelho", 170000),
    ("One Hundred Years of Solitude", "Gabriel Garcia Marquez", 200000),
    ("Don Quixote", "Miguel de Cervantes", 240000),
    ("Ulysses", "James Joyce", 260000),
    ("The Sound and the Fury", "William Faulkner", 180000),
    ("Madame Bovary", "Gustave Flaubert", 190000),
    ("The Lord of the Rings", "J.R.R. Tolkien", 270000),
    ("Jane Eyre", "Charlotte Bronte", 150000),
    ("The Old Man and the Sea", "Ernest Hemingway", 120000),
    ("Wuthering Heights", "Emily Bronte", 140000),
    ("The Stranger", "Albert Camus", 130000),
    ("Les Miserables", "Victor Hugo", 280000),
    ("Anna Karenina", "Leo Tolstoy", 250000),
    ("The Count of Monte Cristo", "Alexandre Dumas", 260000),
]


async def seed(database: Database) -> int:
    """Insert demo data in one transaction. Returns the number of books added."""
    await database.init_db()
    uow = create_unit_of_work(database)

    async def load(repos: BookstoreRepositories) -> int:
        if await repos.books.count() > 0:
            return 0
        for name, email in USERS:
            if await repos.users.get_by_email(email) is None:
                await repos.users.create(
                    User(name=name, email=email, password=hash_password(DEMO_PASSWORD))
                )
        for title, author, price in BOOKS:
            await repos.books.create(Book(title=title, author=author, price=price))
        return len(BOOKS)

    added = await uow.run(load)
    logger.info("seed.completed", books_added=added)
    return added


async def _main() -> None:
    config = BookstoreConfig.from_env()
    configure_logging(config.server.log_level, json=config.server.log_json)
    database = Database(config.database)
    try:
        await seed(database)
    finally:
        await database.close()


def main() -> None:
    asyncio.run(_main())


if __name__ == "__main__":
    main()
