from __future__ import annotations

import logging
from typing import NamedTuple

from book import Book
from exceptions import (
    BookNotFoundError,
    BookUnavailableError,
    BorrowLimitReachedError,
    NotBorrowedByUserError,
    UserNotFoundError,
)
from indexes import BookIndex
from user import MAX_BORROWED, User
from user_registry import UserRegistry

logger = logging.getLogger(__name__)


class Loan(NamedTuple):
    user: User
    book: Book


class CirculationService:
    """Issue/return state machine over the book index and the user registry.

    Every check runs before any mutation, so a failed call leaves no trace.
    """

    def __init__(self, books: BookIndex, users: UserRegistry, borrow_limit: int = MAX_BORROWED) -> None:
        self.books = books
        self.users = users
        self.borrow_limit = borrow_limit

    def _resolve(self, user_id: int, isbn: str) -> Loan:
        user = self.users.find(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        book = self.books.find(isbn)
        if book is None:
            raise BookNotFoundError(isbn)
        return Loan(user, book)

    def issue(self, user_id: int, isbn: str) -> Loan:
        try:
            user, book = self._resolve(user_id, isbn)
            if not book.available:
                raise BookUnavailableError(isbn, book.title)
            if not user.can_borrow(self.borrow_limit):
                raise BorrowLimitReachedError(user_id, self.borrow_limit)
        except (UserNotFoundError, BookNotFoundError, BookUnavailableError, BorrowLimitReachedError) as e:
            logger.warning(f"[issue] rejected: {e}")
            raise

        user.borrowed.append(isbn)
        book.available = False
        book.borrow_count += 1
        logger.info(f"[issue] '{book.title}' issued to '{user.name}' (ID: {user.id})")
        return Loan(user, book)

    def return_book(self, user_id: int, isbn: str) -> Loan:
        try:
            user, book = self._resolve(user_id, isbn)
            if not user.has_borrowed(isbn):
                raise NotBorrowedByUserError(user_id, isbn)
        except (UserNotFoundError, BookNotFoundError, NotBorrowedByUserError) as e:
            logger.warning(f"[return] rejected: {e}")
            raise

        # list.remove drops the first match and shifts the rest left
        user.borrowed.remove(isbn)
        book.available = True
        logger.info(f"[return] '{book.title}' returned by '{user.name}' (ID: {user.id})")
        return Loan(user, book)
