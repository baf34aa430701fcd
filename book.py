from __future__ import annotations


class Book:
    """Represents a single book item in the library."""

    def __init__(self, isbn: str, title: str, author: str, genre: str = "",
                 available: bool = True, borrow_count: int = 0) -> None:
        self.isbn = isbn.strip()
        self.title = title.strip()
        self.author = author.strip()
        self.genre = genre.strip()
        self.available = available
        # lifetime popularity counter, never decremented on return
        self.borrow_count = borrow_count

    @property
    def status(self) -> str:
        return "Available" if self.available else "Borrowed"

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ISBN: {self.isbn})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(isbn={self.isbn!r}, title={self.title!r}, available={self.available})"

    def to_dict(self) -> dict:
        return {
            "isbn": self.isbn,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "available": self.available,
            "borrow_count": self.borrow_count,
        }
