import logging
from typing import List, Optional

import database
from book import Book
from circulation import CirculationService, Loan
from config import settings
from exceptions import DuplicateIsbnError
from indexes import BookIndex, TitleIndex
from reports import ReportEngine
from user import User
from user_registry import UserRegistry

logger = logging.getLogger(__name__)


class Library:
    """Owns the catalog indexes and the user registry, and wires the services over them.

    Constructed empty; call load() (or use it as a context manager) to hydrate
    from the data files, and save()/close() to persist both files again.
    """

    def __init__(self, books_file: Optional[str] = None, users_file: Optional[str] = None,
                 autosave: Optional[bool] = None) -> None:
        self.books_file = books_file or settings.books_file
        self.users_file = users_file or settings.users_file
        self.autosave = settings.autosave if autosave is None else autosave

        self.books = BookIndex()
        self.titles = TitleIndex(self.books)
        self.users = UserRegistry()

        self.circulation = CirculationService(self.books, self.users)
        self.reports = ReportEngine(self.books, self.titles, self.users)

    def __enter__(self) -> "Library":
        self.load()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()

    # ------------------------- Books ------------------------- #
    def add_book(self, isbn: str, title: str, author: str, genre: str = "") -> Book:
        """Add a new available book. A reused ISBN leaves the catalog untouched."""
        book = Book(isbn=isbn, title=title, author=author, genre=genre)
        self._index_book(book)
        logger.info(f"Book '{book.title}' added (ISBN: {book.isbn})")
        return book

    def _index_book(self, book: Book) -> None:
        if not self.books.insert(book):
            logger.warning(f"Book with ISBN {book.isbn} already exists, not adding duplicate")
            raise DuplicateIsbnError(book.isbn)
        self.titles.insert(book)

    def remove_book(self, isbn: str) -> Book:
        book = self.books.remove(isbn.strip())
        self.titles.remove(book)
        logger.info(f"Book '{book.title}' (ISBN: {book.isbn}) removed")
        return book

    def find_book(self, isbn: str) -> Optional[Book]:
        return self.books.find(isbn.strip())

    def find_by_title(self, title: str) -> Optional[Book]:
        return self.titles.find_exact(title.strip())

    def search_by_author(self, author: str) -> List[Book]:
        """Books whose author matches exactly, in hash table order."""
        author = author.strip()
        return [b for b in self.books if b.author == author]

    def list_books(self) -> List[Book]:
        return self.reports.list_all()

    # ------------------------- Users ------------------------- #
    def add_user(self, name: str) -> User:
        return self.users.add(name)

    def find_user(self, user_id: int) -> Optional[User]:
        return self.users.find(user_id)

    def remove_user(self, user_id: int) -> User:
        return self.users.remove(user_id)

    def list_users(self) -> List[User]:
        return self.users.all()

    def borrowed_books_of(self, user: User) -> List[Book]:
        """Resolve a user's loans to Book records, in borrow order."""
        books = []
        for isbn in user.borrowed:
            book = self.books.find(isbn)
            if book is not None:
                books.append(book)
        return books

    # ------------------------- Circulation ------------------------- #
    def issue_book(self, user_id: int, isbn: str) -> Loan:
        return self.circulation.issue(user_id, isbn.strip())

    def return_book(self, user_id: int, isbn: str) -> Loan:
        return self.circulation.return_book(user_id, isbn.strip())

    # ------------------------- Persistence ------------------------- #
    def load(self) -> None:
        """Hydrate from the data files. Only valid on an empty Library."""
        for book in database.load_books(self.books_file):
            try:
                self._index_book(book)
            except DuplicateIsbnError:
                logger.warning(f"Duplicate ISBN {book.isbn} in {self.books_file}, keeping the first record")
        for user in database.load_users(self.users_file):
            if self.users.find(user.id) is not None:
                logger.warning(f"Duplicate user ID {user.id} in {self.users_file}, keeping the first record")
                continue
            self.users.append_loaded(user)
        self._reconcile_loans()

    def _reconcile_loans(self) -> None:
        """Make book availability agree with the loans recorded on users."""
        held = set()
        for user in self.users:
            kept = []
            for isbn in user.borrowed:
                if isbn in held or self.books.find(isbn) is None:
                    logger.warning(f"Dropping loan of {isbn} from user {user.id}: unknown or already held")
                    continue
                held.add(isbn)
                kept.append(isbn)
            user.borrowed[:] = kept

        for book in self.books:
            on_loan = book.isbn in held
            if book.available == on_loan:
                logger.warning(f"Correcting availability of {book.isbn} to match recorded loans")
                book.available = not on_loan

    def save(self) -> None:
        database.save_books(self.books, self.books_file)
        database.save_users(self.users, self.users_file)

    def close(self) -> None:
        if self.autosave:
            self.save()
