from __future__ import annotations

from typing import Any, Dict, List, Tuple

from book import Book
from indexes import BookIndex, TitleIndex
from user import User
from user_registry import UserRegistry

MOST_BORROWED_LIMIT = 10


class ReportEngine:
    """Read-only views over the catalog and the user registry. Nothing here mutates state."""

    def __init__(self, books: BookIndex, titles: TitleIndex, users: UserRegistry) -> None:
        self.books = books
        self.titles = titles
        self.users = users

    def list_all(self) -> List[Book]:
        return self.titles.inorder()

    def list_available(self) -> List[Book]:
        return [b for b in self.books if b.available]

    def list_borrowed(self) -> List[Tuple[Book, User]]:
        """(book, borrower) pairs in user order, then each user's borrow order."""
        pairs: List[Tuple[Book, User]] = []
        for user in self.users:
            for isbn in user.borrowed:
                book = self.books.find(isbn)
                if book is not None:
                    pairs.append((book, user))
        return pairs

    def most_borrowed(self, limit: int = MOST_BORROWED_LIMIT) -> List[Book]:
        # sorted() is stable: ties keep hash table traversal order
        ranked = sorted(self.books, key=lambda b: b.borrow_count, reverse=True)
        return [b for b in ranked[:limit] if b.borrow_count > 0]

    def active_users(self) -> List[User]:
        active = [u for u in self.users if u.borrowed]
        return sorted(active, key=lambda u: len(u.borrowed), reverse=True)

    def summary(self) -> Dict[str, Any]:
        books = list(self.books)
        available = sum(1 for b in books if b.available)
        return {
            "total_books": len(books),
            "available_books": available,
            "borrowed_books": len(books) - available,
            "unique_authors": len({b.author for b in books}),
            "total_users": len(self.users),
            "active_users": sum(1 for u in self.users if u.borrowed),
            "longest_chain": self.books.longest_chain(),
            "title_tree_height": self.titles.height(),
        }
