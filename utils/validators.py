from typing import Optional

from database import FIELD_SEPARATOR

MAX_ISBN_LENGTH = 19


class ISBNValidator:
    """Checks ISBN keys before they reach the catalog.

    Any non-blank token up to 19 characters is accepted; the catalog is keyed by
    the raw string, so checksums are not enforced.
    """

    @staticmethod
    def normalize_isbn(raw: Optional[str]) -> str:
        if raw is None:
            return ""
        return raw.strip()

    @staticmethod
    def is_valid_isbn(isbn: Optional[str]) -> bool:
        s = ISBNValidator.normalize_isbn(isbn)
        if not s or len(s) > MAX_ISBN_LENGTH:
            return False
        if FIELD_SEPARATOR in s:
            return False
        return not any(ch.isspace() for ch in s)


class TextValidator:
    """Field validation for titles, authors, genres and user names."""

    @staticmethod
    def validate_field(text: Optional[str]) -> bool:
        if text is None:
            return False
        t = text.strip()
        if not t:
            return False
        # the data files are pipe-delimited, one record per line
        return FIELD_SEPARATOR not in t and "\n" not in t and "\r" not in t

    @staticmethod
    def validate_optional_field(text: Optional[str]) -> bool:
        if text is None or not text.strip():
            return True
        return TextValidator.validate_field(text)


def parse_user_id(raw) -> int:
    """Convert a user id typed at a prompt to an int."""
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid user ID: {raw!r}") from None


def validate_new_book(isbn: str, title: str, author: str, genre: str = "") -> None:
    """Raise ValueError describing the first field that cannot be stored."""
    if not ISBNValidator.is_valid_isbn(isbn):
        raise ValueError(f"Invalid ISBN: {isbn!r} (1-{MAX_ISBN_LENGTH} characters, no spaces or '|').")
    if not TextValidator.validate_field(title):
        raise ValueError("Title cannot be empty or contain '|'.")
    if not TextValidator.validate_field(author):
        raise ValueError("Author cannot be empty or contain '|'.")
    if not TextValidator.validate_optional_field(genre):
        raise ValueError("Genre cannot contain '|'.")


def validate_user_name(name: str) -> None:
    if not TextValidator.validate_field(name):
        raise ValueError("User name cannot be empty or contain '|'.")
