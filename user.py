from __future__ import annotations

from typing import List, Optional

MAX_BORROWED = 10


class User:
    """A registered library user and the ISBNs they currently hold, in borrow order."""

    def __init__(self, user_id: int, name: str, borrowed: Optional[List[str]] = None) -> None:
        self.id = user_id
        self.name = name.strip()
        self.borrowed: List[str] = list(borrowed or [])

    @property
    def borrowed_count(self) -> int:
        return len(self.borrowed)

    def has_borrowed(self, isbn: str) -> bool:
        return isbn in self.borrowed

    def can_borrow(self, limit: int = MAX_BORROWED) -> bool:
        return len(self.borrowed) < limit

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} (ID: {self.id})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"User(id={self.id}, name={self.name!r}, borrowed={self.borrowed!r})"

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "borrowed": list(self.borrowed)}
