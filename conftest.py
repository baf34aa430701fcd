import pytest

from library import Library
from utils.ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture
def data_files(tmp_path):
    # Each test gets its own pair of data files
    return str(tmp_path / "books.dat"), str(tmp_path / "users.dat")


@pytest.fixture
def lib(data_files):
    books_file, users_file = data_files
    lib = Library(books_file=books_file, users_file=users_file, autosave=False)
    yield lib


@pytest.fixture
def stocked(lib):
    """A library with a few books and two users, nothing on loan."""
    lib.add_book("111", "Go", "A", "Tech")
    lib.add_book("222", "Dune", "Frank Herbert", "Sci-Fi")
    lib.add_book("333", "Clean Code", "Robert C. Martin", "Software")
    lib.add_book("444", "Children of Dune", "Frank Herbert", "Sci-Fi")
    lib.add_user("Alice Reader")
    lib.add_user("Bob Borrower")
    return lib


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")
