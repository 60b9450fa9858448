import os
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from pathlib import Path

import oreally.api.exceptions
from oreally.api.models import BookRecord
from oreally.settings import DEFAULT_DB_PATH

TABLE_NAME = "book_queue"


class Storage:
    """
    Single file SQLite store for the book queue

    Every operation opens its own connection and closes it before returning,
    so no connection or lock is held between calls.

    Args:
        db_path (str | Path | None): Database file. Defaults to ~/.oreally/database.db
    """

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    def is_ready(self) -> bool:
        """
        Is the database file present?
        """

        return self.db_path.exists()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if not self.is_ready():
            raise oreally.api.exceptions.StoreError(f"Database is not ready at {self.db_path}")

        try:
            with closing(sqlite3.connect(self.db_path)) as conn:
                with conn:
                    yield conn
        except sqlite3.Error as e:
            raise oreally.api.exceptions.StoreError(f"Database error at {self.db_path}: {e}", errors=[e]) from e

    def setup(self):
        """
        Creates the database file and the queue table

        Raises:
            oreally.api.exceptions.AlreadyInitialized: If the database file already exists
            oreally.api.exceptions.StoreError: If the file or table cannot be created
        """

        if self.is_ready():
            raise oreally.api.exceptions.AlreadyInitialized(f"Database file already exists at {self.db_path}")

        try:
            os.makedirs(self.db_path.parent, exist_ok=True)
            self.db_path.touch(exist_ok=False)
        except OSError as e:
            raise oreally.api.exceptions.StoreError(
                f"Unable to create database file at {self.db_path}", errors=[e]
            ) from e

        try:
            with self._connect() as conn:
                conn.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                        id INTEGER PRIMARY KEY,
                        url TEXT NOT NULL
                    )
                    """
                )
        except oreally.api.exceptions.StoreError:
            self.drop()
            raise

    def drop(self):
        """
        Removes the database file, if there is one
        """

        try:
            if self.db_path.exists():
                os.remove(self.db_path)
        except OSError as e:
            raise oreally.api.exceptions.StoreError(
                f"Unable to remove database file at {self.db_path}", errors=[e]
            ) from e

    def flush(self):
        """
        Drops and re-creates the database, leaving an empty queue
        """

        self.drop()
        self.setup()

    def insert(self, book: BookRecord) -> BookRecord:
        """
        Stores a book and sets its ID. Books that already have an ID are returned unchanged.

        Args:
            book (BookRecord): Book to store

        Returns:
            (BookRecord): The same book, with its ID set

        Raises:
            oreally.api.exceptions.StoreError: If the database is not ready or the insert fails
        """

        if book.is_stored:
            return book

        with self._connect() as conn:
            cursor = conn.execute(f"INSERT INTO {TABLE_NAME} (url) VALUES (?)", (book.url,))
            book.id = cursor.lastrowid

        return book

    def all(self) -> list[BookRecord]:
        """
        Gets every queued book, oldest first

        Returns:
            (list[BookRecord]): Queued books ordered by ID
        """

        with self._connect() as conn:
            rows = conn.execute(f"SELECT id, url FROM {TABLE_NAME} ORDER BY id ASC").fetchall()

        return [BookRecord(id=row_id, url=url) for row_id, url in rows]

    def delete(self, book: BookRecord):
        """
        Removes a book from the queue. Unstored or unknown books are ignored.

        Args:
            book (BookRecord): Book to remove
        """

        if not book.is_stored:
            return

        with self._connect() as conn:
            conn.execute(f"DELETE FROM {TABLE_NAME} WHERE id = ?", (book.id,))
