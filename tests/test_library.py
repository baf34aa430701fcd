import pytest

from exceptions import (
    BookBorrowedError,
    BookNotFoundError,
    DuplicateIsbnError,
    HasBorrowedBooksError,
    UserNotFoundError,
)
from library import Library


def test_add_list_and_find(lib):
    assert lib.list_books() == []

    book = lib.add_book("9780199535675", "Ulysses", "James Joyce", "Fiction")

    assert lib.find_book(book.isbn) is book
    assert len(lib.list_books()) == 1
    assert lib.list_books()[0].title == "Ulysses"
    assert book.available is True
    assert book.borrow_count == 0


def test_add_duplicate_isbn(lib):
    lib.add_book("1234567890", "Test Book", "Test Author", "Misc")

    with pytest.raises(DuplicateIsbnError, match="Book with ISBN 1234567890 already exists."):
        lib.add_book("1234567890", "Other Book", "Other Author", "Misc")

    # a DuplicateIsbnError is still a ValueError for callers that only know that
    with pytest.raises(ValueError):
        lib.add_book("1234567890", "Other Book", "Other Author", "Misc")

    assert len(lib.list_books()) == 1
    assert lib.find_book("1234567890").title == "Test Book"


def test_remove(lib):
    lib.add_book("123", "Test", "Author")
    removed = lib.remove_book("123")
    assert removed.title == "Test"
    assert lib.find_book("123") is None
    assert lib.find_by_title("Test") is None
    assert lib.list_books() == []

    with pytest.raises(BookNotFoundError):
        lib.remove_book("123")


def test_remove_borrowed_book_is_blocked(stocked):
    stocked.issue_book(1001, "111")
    with pytest.raises(BookBorrowedError):
        stocked.remove_book("111")
    assert stocked.find_book("111") is not None

    stocked.return_book(1001, "111")
    stocked.remove_book("111")
    assert stocked.find_book("111") is None


def test_isbn_can_be_reused_after_remove(lib):
    lib.add_book("123", "First", "Author")
    lib.remove_book("123")
    book = lib.add_book("123", "Second", "Author")
    assert lib.find_by_title("Second") is book
    assert [b.title for b in lib.list_books()] == ["Second"]


def test_find_by_title_and_author(stocked):
    assert stocked.find_by_title("Dune").isbn == "222"
    assert stocked.find_by_title("  Dune ").isbn == "222"
    assert stocked.find_by_title("dune") is None

    herbert = stocked.search_by_author("Frank Herbert")
    assert {b.isbn for b in herbert} == {"222", "444"}
    assert stocked.search_by_author("Frank") == []


def test_users(lib):
    alice = lib.add_user("Alice")
    assert lib.find_user(alice.id) is alice
    assert lib.list_users() == [alice]

    lib.add_book("111", "Go", "A")
    lib.issue_book(alice.id, "111")
    with pytest.raises(HasBorrowedBooksError):
        lib.remove_user(alice.id)
    assert [b.isbn for b in lib.borrowed_books_of(alice)] == ["111"]

    lib.return_book(alice.id, "111")
    lib.remove_user(alice.id)
    assert lib.find_user(alice.id) is None
    with pytest.raises(UserNotFoundError):
        lib.remove_user(alice.id)


def _snapshot(lib):
    books = {(b.isbn, b.title, b.author, b.genre, b.available, b.borrow_count) for b in lib.books}
    users = {(u.id, u.name, tuple(u.borrowed)) for u in lib.list_users()}
    return books, users


def test_persistence_round_trip(stocked, data_files):
    stocked.issue_book(1001, "111")
    stocked.issue_book(1001, "333")
    stocked.issue_book(1002, "222")
    stocked.return_book(1001, "111")
    stocked.save()

    books_file, users_file = data_files
    reloaded = Library(books_file=books_file, users_file=users_file, autosave=False)
    reloaded.load()

    assert _snapshot(reloaded) == _snapshot(stocked)
    assert [b.title for b in reloaded.list_books()] == [b.title for b in stocked.list_books()]
    # the id counter continues after the highest stored id
    assert reloaded.add_user("Carol").id == 1003


def test_reload_keeps_saved_user_order(stocked, data_files):
    stocked.save()
    reloaded = Library(*data_files, autosave=False)
    reloaded.load()
    assert [u.id for u in reloaded.list_users()] == [u.id for u in stocked.list_users()]


def test_context_manager_loads_and_saves(data_files):
    with Library(*data_files, autosave=True) as lib:
        lib.add_book("111", "Go", "A", "Tech")
        lib.add_user("Alice")

    with Library(*data_files, autosave=False) as lib:
        assert lib.find_book("111").title == "Go"
        assert lib.find_user(1001).name == "Alice"


def test_context_manager_skips_save_on_error(data_files):
    with pytest.raises(RuntimeError):
        with Library(*data_files, autosave=True) as lib:
            lib.add_book("111", "Go", "A", "Tech")
            raise RuntimeError("boom")

    with Library(*data_files, autosave=False) as lib:
        assert lib.find_book("111") is None


def test_load_reconciles_inconsistent_files(data_files):
    books_file, users_file = data_files
    with open(books_file, "w", encoding="utf-8") as f:
        f.write("111|Go|A|Tech|1|1\n")       # marked available but held below
        f.write("222|Dune|B|Sci-Fi|0|4\n")   # marked borrowed but nobody holds it
        f.write("111|Go Again|A|Tech|1|0\n") # duplicate ISBN
    with open(users_file, "w", encoding="utf-8") as f:
        f.write("1001|Alice|2|111|999\n")    # 999 does not exist
        f.write("1002|Bob|1|111\n")          # already held by Alice

    lib = Library(books_file, users_file, autosave=False)
    lib.load()

    assert len(lib.books) == 2
    assert lib.find_book("111").title == "Go"
    assert lib.find_book("111").available is False
    assert lib.find_book("222").available is True
    assert lib.find_user(1001).borrowed == ["111"]
    assert lib.find_user(1002).borrowed == []


def test_load_keeps_first_of_duplicate_user_ids(data_files, caplog):
    books_file, users_file = data_files
    with open(books_file, "w", encoding="utf-8") as f:
        f.write("111|Go|A|Tech|0|1\n")
    with open(users_file, "w", encoding="utf-8") as f:
        f.write("1001|Alice|1|111\n")
        f.write("1001|Impostor|0\n")
        f.write("1002|Bob|0\n")

    lib = Library(books_file, users_file, autosave=False)
    with caplog.at_level("WARNING"):
        lib.load()

    assert [(u.id, u.name) for u in lib.list_users()] == [(1001, "Alice"), (1002, "Bob")]
    assert "Duplicate user ID 1001" in caplog.text

    lib.return_book(1001, "111")
    lib.remove_user(1001)
    assert lib.find_user(1001) is None
    assert lib.users.next_user_id == 1003


def test_load_keeps_loan_with_padded_isbn(data_files):
    books_file, users_file = data_files
    with open(books_file, "w", encoding="utf-8") as f:
        f.write("111|Go|A|Tech|0|1\n")
    with open(users_file, "w", encoding="utf-8") as f:
        f.write("1001|Ann|1|111 \n")

    lib = Library(books_file, users_file, autosave=False)
    lib.load()

    assert lib.find_user(1001).borrowed == ["111"]
    assert lib.find_book("111").available is False


def test_example_session(lib):
    lib.add_book("111", "Go", "A", "Tech")
    lib.add_user("Reader")

    lib.issue_book(1001, "111")
    book = lib.find_book("111")
    assert (book.available, book.borrow_count) == (False, 1)

    lib.return_book(1001, "111")
    assert (book.available, book.borrow_count) == (True, 1)
