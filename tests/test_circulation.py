import pytest

from exceptions import (
    BookNotFoundError,
    BookUnavailableError,
    BorrowLimitReachedError,
    NotBorrowedByUserError,
    UserNotFoundError,
)
from circulation import CirculationService
from user import MAX_BORROWED, User


def test_issue_then_return(lib):
    lib.add_book("111", "Go", "A", "Tech")
    user = lib.add_user("Reader")
    assert user.id == 1001

    user, book = lib.issue_book(1001, "111")
    assert book.available is False
    assert book.borrow_count == 1
    assert user.borrowed == ["111"]

    lib.return_book(1001, "111")
    assert book.available is True
    # popularity counter survives the return
    assert book.borrow_count == 1
    assert user.borrowed == []

    with pytest.raises(NotBorrowedByUserError):
        lib.return_book(1001, "111")


def test_issue_unknown_user_or_book(stocked):
    with pytest.raises(UserNotFoundError):
        stocked.issue_book(4242, "111")
    with pytest.raises(BookNotFoundError):
        stocked.issue_book(1001, "nope")


def test_user_checked_before_book(stocked):
    with pytest.raises(UserNotFoundError):
        stocked.issue_book(4242, "nope")


def test_issue_unavailable_book(stocked):
    stocked.issue_book(1001, "111")
    with pytest.raises(BookUnavailableError):
        stocked.issue_book(1002, "111")
    assert stocked.find_user(1002).borrowed == []
    assert stocked.find_book("111").borrow_count == 1


def _fill_to_limit(lib, user_id):
    for i in range(MAX_BORROWED):
        lib.add_book(f"L{i}", f"Loan {i}", "Author")
        lib.issue_book(user_id, f"L{i}")


def test_borrow_limit(stocked):
    _fill_to_limit(stocked, 1001)
    user = stocked.find_user(1001)
    assert len(user.borrowed) == MAX_BORROWED

    with pytest.raises(BorrowLimitReachedError):
        stocked.issue_book(1001, "222")

    # no side effects on the failed call
    book = stocked.find_book("222")
    assert book.available is True
    assert book.borrow_count == 0
    assert len(user.borrowed) == MAX_BORROWED


def test_unavailable_reported_before_limit(stocked):
    stocked.issue_book(1002, "222")
    _fill_to_limit(stocked, 1001)
    with pytest.raises(BookUnavailableError):
        stocked.issue_book(1001, "222")


def test_return_preserves_order_of_remaining_loans(stocked):
    for isbn in ("111", "222", "333", "444"):
        stocked.issue_book(1001, isbn)
    stocked.return_book(1001, "222")
    assert stocked.find_user(1001).borrowed == ["111", "333", "444"]


def test_return_book_held_by_someone_else(stocked):
    stocked.issue_book(1002, "111")
    with pytest.raises(NotBorrowedByUserError):
        stocked.return_book(1001, "111")
    assert stocked.find_book("111").available is False
    assert stocked.find_user(1002).borrowed == ["111"]


def test_return_unknown_user_or_book(stocked):
    with pytest.raises(UserNotFoundError):
        stocked.return_book(4242, "111")
    with pytest.raises(BookNotFoundError):
        stocked.return_book(1001, "nope")


def test_repeat_borrows_count_up(stocked):
    for _ in range(3):
        stocked.issue_book(1001, "111")
        stocked.return_book(1001, "111")
    assert stocked.find_book("111").borrow_count == 3


def test_availability_matches_loans(stocked):
    stocked.issue_book(1001, "111")
    stocked.issue_book(1002, "333")
    stocked.return_book(1001, "111")
    stocked.issue_book(1002, "111")

    held = {isbn for user in stocked.list_users() for isbn in user.borrowed}
    for book in stocked.books:
        assert book.available == (book.isbn not in held)


def test_service_enforces_its_own_limit(stocked):
    service = CirculationService(stocked.books, stocked.users, borrow_limit=2)
    service.issue(1001, "111")
    service.issue(1001, "222")
    with pytest.raises(BorrowLimitReachedError):
        service.issue(1001, "333")
    assert stocked.find_book("333").available is True


def test_user_borrow_helpers():
    user = User(1001, "Alice", ["111"])
    assert user.has_borrowed("111")
    assert not user.has_borrowed("222")
    assert user.can_borrow()
    assert not user.can_borrow(limit=1)
