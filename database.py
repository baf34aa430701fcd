"""
Flat-file persistence for the catalog and the user list.

books file: isbn|title|author|genre|available(0/1)|borrow_count
users file: id|name|borrowed_count|isbn_1|...|isbn_n

Fields are not escaped, so a literal '|' inside a field cannot be stored;
input is validated before it reaches the catalog. Saving overwrites the
target file in place with no backup of the previous contents.
"""

import logging
import os
from typing import Iterable, List

from book import Book
from config import settings
from exceptions import MalformedRecordError
from user import MAX_BORROWED, User

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"
BOOK_FIELDS = 6
USER_HEADER_FIELDS = 3

BOOKS_FILE = settings.books_file
USERS_FILE = settings.users_file


def _parse_int(value: str, line: str, field: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise MalformedRecordError(line, f"{field} is not an integer") from e


# ------------------------- Codec ------------------------- #
def format_book(book: Book) -> str:
    return FIELD_SEPARATOR.join([
        book.isbn,
        book.title,
        book.author,
        book.genre,
        "1" if book.available else "0",
        str(book.borrow_count),
    ])


def parse_book(line: str) -> Book:
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) < BOOK_FIELDS:
        raise MalformedRecordError(line, f"expected {BOOK_FIELDS} fields, got {len(fields)}")
    isbn, title, author, genre, available, borrow_count = fields[:BOOK_FIELDS]
    if not isbn.strip() or not title.strip():
        raise MalformedRecordError(line, "empty isbn or title")
    count = _parse_int(borrow_count, line, "borrow_count")
    if count < 0:
        raise MalformedRecordError(line, "negative borrow_count")
    return Book(
        isbn=isbn,
        title=title,
        author=author,
        genre=genre,
        available=_parse_int(available, line, "available") != 0,
        borrow_count=count,
    )


def format_user(user: User) -> str:
    return FIELD_SEPARATOR.join([str(user.id), user.name, str(len(user.borrowed)), *user.borrowed])


def parse_user(line: str) -> User:
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) < USER_HEADER_FIELDS:
        raise MalformedRecordError(line, f"expected at least {USER_HEADER_FIELDS} fields, got {len(fields)}")
    user_id = _parse_int(fields[0], line, "id")
    name = fields[1]
    if not name.strip():
        raise MalformedRecordError(line, "empty name")
    count = _parse_int(fields[2], line, "borrowed_count")
    if count < 0 or count > MAX_BORROWED:
        raise MalformedRecordError(line, f"borrowed_count {count} outside 0..{MAX_BORROWED}")
    borrowed = [isbn.strip() for isbn in fields[USER_HEADER_FIELDS:USER_HEADER_FIELDS + count]]
    if len(borrowed) < count or not all(borrowed):
        raise MalformedRecordError(line, f"expected {count} borrowed ISBNs")
    return User(user_id=user_id, name=name, borrowed=borrowed)


# ------------------------- Load / save ------------------------- #
def _read_lines(path: str) -> List[str]:
    if not os.path.exists(path):
        logger.info(f"No data file at {path}, starting empty")
        return []
    with open(path, "r", encoding="utf-8") as f:
        return [line.rstrip("\r\n") for line in f if line.strip()]


def load_books(path: str = None) -> List[Book]:
    """Read every well-formed book line. Missing file means an empty catalog."""
    path = path or BOOKS_FILE
    books: List[Book] = []
    for line in _read_lines(path):
        try:
            books.append(parse_book(line))
        except MalformedRecordError as e:
            logger.warning(f"Skipping book record in {path}: {e}")
    logger.info(f"Loaded {len(books)} books from {path}")
    return books


def load_users(path: str = None) -> List[User]:
    """Read every well-formed user line, in file order."""
    path = path or USERS_FILE
    users: List[User] = []
    for line in _read_lines(path):
        try:
            users.append(parse_user(line))
        except MalformedRecordError as e:
            logger.warning(f"Skipping user record in {path}: {e}")
    logger.info(f"Loaded {len(users)} users from {path}")
    return users


def _write_lines(path: str, lines: Iterable[str]) -> int:
    count = 0
    try:
        with open(path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
                count += 1
    except OSError as e:
        logger.error(f"Could not write {path}: {e}")
        raise
    return count


def save_books(books: Iterable[Book], path: str = None) -> int:
    path = path or BOOKS_FILE
    count = _write_lines(path, (format_book(b) for b in books))
    logger.info(f"Saved {count} books to {path}")
    return count


def save_users(users: Iterable[User], path: str = None) -> int:
    path = path or USERS_FILE
    count = _write_lines(path, (format_user(u) for u in users))
    logger.info(f"Saved {count} users to {path}")
    return count
