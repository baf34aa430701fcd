class LibraryError(Exception):
    """Base exception for library system errors."""


class DuplicateIsbnError(LibraryError, ValueError):
    """Trying to add a book whose ISBN is already in the catalog."""

    def __init__(self, isbn: str) -> None:
        self.isbn = isbn
        super().__init__(f"Book with ISBN {isbn} already exists.")


class BookNotFoundError(LibraryError, LookupError):
    """Requested ISBN does not exist in the library."""

    def __init__(self, isbn: str) -> None:
        self.isbn = isbn
        super().__init__(f"Book with ISBN {isbn} not found.")


class UserNotFoundError(LibraryError, LookupError):
    """Requested user id does not exist in the library."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found.")


class BookUnavailableError(LibraryError):
    """Issue requested for a book that is already on loan."""

    def __init__(self, isbn: str, title: str = "") -> None:
        self.isbn = isbn
        super().__init__(f"Book '{title or isbn}' is not available for borrowing.")


class BookBorrowedError(LibraryError):
    """Removal blocked because the book is currently on loan."""

    def __init__(self, isbn: str, title: str = "") -> None:
        self.isbn = isbn
        super().__init__(f"Cannot remove book '{title or isbn}' (ISBN: {isbn}) as it is currently borrowed.")


class HasBorrowedBooksError(LibraryError):
    """Removal blocked because the user still holds loans."""

    def __init__(self, user_id: int, name: str = "") -> None:
        self.user_id = user_id
        super().__init__(f"Cannot remove user '{name}' (ID: {user_id}) as they still have borrowed books.")


class BorrowLimitReachedError(LibraryError):
    """User already holds the maximum number of loans."""

    def __init__(self, user_id: int, limit: int) -> None:
        self.user_id = user_id
        self.limit = limit
        super().__init__(f"User {user_id} has reached the maximum number of books that can be borrowed ({limit}).")


class NotBorrowedByUserError(LibraryError):
    def __init__(self, user_id: int, isbn: str) -> None:
        self.user_id = user_id
        self.isbn = isbn
        super().__init__(f"User {user_id} has not borrowed book with ISBN {isbn}.")


class MalformedRecordError(LibraryError, ValueError):
    """A persisted line could not be parsed into a record."""

    def __init__(self, line: str, reason: str) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed record ({reason}): {line!r}")
