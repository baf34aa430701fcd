import logging
import sys
from contextlib import contextmanager
from functools import wraps
from typing import Iterator, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import settings
from exceptions import LibraryError
from library import Library
from utils.ui_helpers import (
    print_book_detail,
    print_book_list,
    print_borrowed_result,
    print_message,
    print_most_borrowed_result,
    print_stats_result,
    print_user_detail,
    print_user_list,
    set_output_mode,
)
from utils.validators import ISBNValidator, parse_user_id, validate_new_book, validate_user_name

logging.basicConfig(level=getattr(logging, settings.log_level, logging.WARNING))
logger = logging.getLogger(__name__)

APP_NAME = settings.app_name

console = Console()

REPORTS = ("all", "available", "borrowed", "popular", "active")

# Data file overrides from the global options; None falls back to settings
_state = {"books_file": None, "users_file": None}


@contextmanager
def library_session(save: bool = True) -> Iterator[Library]:
    """Load both data files, yield the Library, and save both files on a clean exit."""
    lib = Library(books_file=_state["books_file"], users_file=_state["users_file"], autosave=save)
    with lib:
        yield lib


def report_errors(func):
    """Turn library and validation errors into a printed message instead of a traceback."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (LibraryError, ValueError) as e:
            print_message(f"Error: {e}", style="bold red")
        except OSError as e:
            logger.error(f"Data file error: {e}")
            print_message(f"Could not access data files: {e}", style="bold red")
        return None
    return wrapper


# ------------------------- Actions shared by commands and menu ------------------------- #
def do_add_book(lib: Library, isbn: str, title: str, author: str, genre: str) -> None:
    validate_new_book(isbn, title, author, genre)
    book = lib.add_book(ISBNValidator.normalize_isbn(isbn), title, author, genre)
    print_message(f"Book '{book.title}' added successfully.", style="green")


def do_remove_book(lib: Library, isbn: str) -> None:
    book = lib.remove_book(isbn)
    print_message(f"Book '{book.title}' (ISBN: {book.isbn}) removed successfully.", style="green")


def do_add_user(lib: Library, name: str) -> None:
    validate_user_name(name)
    user = lib.add_user(name)
    print_message(f"User '{user.name}' added successfully with ID: {user.id}", style="green")


def do_find_user(lib: Library, user_id: int) -> None:
    user = lib.find_user(user_id)
    if user is None:
        print_message(f"User with ID {user_id} not found.", style="yellow")
        return
    print_user_detail(user, lib.borrowed_books_of(user))


def do_remove_user(lib: Library, user_id: int) -> None:
    user = lib.remove_user(user_id)
    print_message(f"User '{user.name}' (ID: {user.id}) removed successfully.", style="green")


def do_issue(lib: Library, user_id: int, isbn: str) -> None:
    user, book = lib.issue_book(user_id, isbn)
    print_message(f"Book '{book.title}' issued to user '{user.name}' successfully.", style="green")


def do_return(lib: Library, user_id: int, isbn: str) -> None:
    user, book = lib.return_book(user_id, isbn)
    print_message(f"Book '{book.title}' returned by user '{user.name}' successfully.", style="green")


def do_find_isbn(lib: Library, isbn: str) -> None:
    book = lib.find_book(isbn)
    if book is None:
        print_message(f"Book with ISBN {isbn} not found.", style="yellow")
        return
    print_book_detail(book)


def do_find_title(lib: Library, title: str) -> None:
    book = lib.find_by_title(title)
    if book is None:
        print_message(f"Book with title '{title}' not found.", style="yellow")
        return
    print_book_detail(book)


def do_find_author(lib: Library, author: str) -> None:
    books = lib.search_by_author(author)
    print_book_list(books, title=f"Books by {author}", empty_message=f"No books found by author '{author}'.")


def do_report(lib: Library, kind: str) -> None:
    kind = kind.lower().strip()
    if kind == "all":
        print_book_list(lib.reports.list_all(), title="All Books")
    elif kind == "available":
        print_book_list(lib.reports.list_available(), title="Available Books",
                        empty_message="No available books in the library.")
    elif kind == "borrowed":
        print_borrowed_result(lib.reports.list_borrowed())
    elif kind == "popular":
        print_most_borrowed_result(lib.reports.most_borrowed())
    elif kind == "active":
        print_user_list(lib.reports.active_users(), title="Active Users",
                        empty_message="No active users at the moment.")
    else:
        raise ValueError(f"Unknown report '{kind}'. Use one of: {', '.join(REPORTS)}")


# --- Typer CLI Application ---
app = typer.Typer(help=f"{APP_NAME} CLI")


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    books_file: Optional[str] = typer.Option(None, "--books-file", help="Books data file"),
    users_file: Optional[str] = typer.Option(None, "--users-file", help="Users data file"),
):
    """Global options for the CLI (output mode, data files)."""
    if output:
        set_output_mode(output)
    _state["books_file"] = books_file
    _state["users_file"] = users_file
    if ctx.invoked_subcommand is None:
        run_menu()


@app.command("add-book")
@report_errors
def cli_add_book(isbn: str, title: str, author: str, genre: str = typer.Argument("")):
    """Add a new book to the catalog."""
    with library_session() as lib:
        do_add_book(lib, isbn, title, author, genre)


@app.command("remove-book")
@report_errors
def cli_remove_book(isbn: str):
    """Remove a book by ISBN (only when it is not on loan)."""
    with library_session() as lib:
        do_remove_book(lib, isbn)


@app.command("list")
@report_errors
def cli_list():
    """List all books in title order."""
    with library_session(save=False) as lib:
        do_report(lib, "all")


@app.command("add-user")
@report_errors
def cli_add_user(name: str):
    """Register a new user; the ID is assigned automatically."""
    with library_session() as lib:
        do_add_user(lib, name)


@app.command("find-user")
@report_errors
def cli_find_user(user_id: str):
    """Show a user and the books they hold."""
    with library_session(save=False) as lib:
        do_find_user(lib, parse_user_id(user_id))


@app.command("remove-user")
@report_errors
def cli_remove_user(user_id: str):
    """Remove a user who has no books on loan."""
    with library_session() as lib:
        do_remove_user(lib, parse_user_id(user_id))


@app.command("users")
@report_errors
def cli_users():
    """List all registered users."""
    with library_session(save=False) as lib:
        print_user_list(lib.list_users())


@app.command("issue")
@report_errors
def cli_issue(user_id: str, isbn: str):
    """Issue a book to a user."""
    with library_session() as lib:
        do_issue(lib, parse_user_id(user_id), isbn)


@app.command("return")
@report_errors
def cli_return(user_id: str, isbn: str):
    """Return a book borrowed by a user."""
    with library_session() as lib:
        do_return(lib, parse_user_id(user_id), isbn)


@app.command("find")
@report_errors
def cli_find(isbn: str):
    """Find a book by ISBN and show its details."""
    with library_session(save=False) as lib:
        do_find_isbn(lib, isbn)


@app.command("find-title")
@report_errors
def cli_find_title(title: str):
    """Find a book by its exact title."""
    with library_session(save=False) as lib:
        do_find_title(lib, title)


@app.command("find-author")
@report_errors
def cli_find_author(author: str):
    """List books by an author (exact match)."""
    with library_session(save=False) as lib:
        do_find_author(lib, author)


@app.command("report")
@report_errors
def cli_report(kind: str = typer.Argument(..., help="all | available | borrowed | popular | active")):
    """Show one of the circulation reports."""
    with library_session(save=False) as lib:
        do_report(lib, kind)


@app.command("stats")
@report_errors
def cli_stats():
    """Show library statistics."""
    with library_session(save=False) as lib:
        print_stats_result(lib.reports.summary())


# ------------------------- Interactive menu ------------------------- #
def _render_menu(title: str, items) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for key, label, icon in items:
        table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")
    console.print(Panel(table, title=title, border_style="cyan", box=box.HEAVY, padding=(1, 2)))


def _choose(title: str, items) -> str:
    _render_menu(title, items)
    return Prompt.ask("Enter your choice", choices=[key for key, _, _ in items], default="0").strip()


def _ask_user_id() -> int:
    return parse_user_id(Prompt.ask("Enter user ID"))


@report_errors
def _book_menu_action(lib: Library, choice: str) -> None:
    if choice == "1":
        do_add_book(
            lib,
            Prompt.ask("Enter ISBN"),
            Prompt.ask("Enter Title"),
            Prompt.ask("Enter Author"),
            Prompt.ask("Enter Genre", default=""),
        )
    elif choice == "2":
        isbn = Prompt.ask("Enter ISBN of the book to remove")
        if Confirm.ask("Are you sure you want to remove this book?", default=False):
            do_remove_book(lib, isbn)
    elif choice == "3":
        do_report(lib, "all")


@report_errors
def _user_menu_action(lib: Library, choice: str) -> None:
    if choice == "1":
        do_add_user(lib, Prompt.ask("Enter user name"))
    elif choice == "2":
        do_find_user(lib, _ask_user_id())
    elif choice == "3":
        user_id = _ask_user_id()
        if Confirm.ask("Are you sure you want to remove this user?", default=False):
            do_remove_user(lib, user_id)
    elif choice == "4":
        print_user_list(lib.list_users())


@report_errors
def _circulation_menu_action(lib: Library, choice: str) -> None:
    if choice == "1":
        do_issue(lib, _ask_user_id(), Prompt.ask("Enter ISBN of the book to issue"))
    elif choice == "2":
        do_return(lib, _ask_user_id(), Prompt.ask("Enter ISBN of the book to return"))


@report_errors
def _search_menu_action(lib: Library, choice: str) -> None:
    if choice == "1":
        do_find_isbn(lib, Prompt.ask("Enter ISBN"))
    elif choice == "2":
        do_find_title(lib, Prompt.ask("Enter Title"))
    elif choice == "3":
        do_find_author(lib, Prompt.ask("Enter Author"))


@report_errors
def _report_menu_action(lib: Library, choice: str) -> None:
    if choice in ("1", "2", "3", "4", "5"):
        do_report(lib, REPORTS[int(choice) - 1])
    elif choice == "6":
        print_stats_result(lib.reports.summary())


SUBMENUS = {
    "1": ("Book Management", [
        ("1", "Add New Book", "➕"),
        ("2", "Remove Book", "🗑️"),
        ("3", "List All Books", "📚"),
        ("0", "Back to Main Menu", "↩️"),
    ], _book_menu_action),
    "2": ("User Management", [
        ("1", "Add New User", "➕"),
        ("2", "Find User", "🔎"),
        ("3", "Remove User", "🗑️"),
        ("4", "List All Users", "👥"),
        ("0", "Back to Main Menu", "↩️"),
    ], _user_menu_action),
    "3": ("Issue/Return Books", [
        ("1", "Issue Book", "📤"),
        ("2", "Return Book", "📥"),
        ("0", "Back to Main Menu", "↩️"),
    ], _circulation_menu_action),
    "4": ("Search", [
        ("1", "Search by ISBN", "🔢"),
        ("2", "Search by Title", "🔤"),
        ("3", "Search by Author", "✍️"),
        ("0", "Back to Main Menu", "↩️"),
    ], _search_menu_action),
    "5": ("Reports", [
        ("1", "List All Books", "📚"),
        ("2", "List Available Books", "✅"),
        ("3", "List Borrowed Books", "📖"),
        ("4", "List Most Borrowed Books", "🏆"),
        ("5", "List Active Users", "👥"),
        ("6", "Statistics", "📊"),
        ("0", "Back to Main Menu", "↩️"),
    ], _report_menu_action),
}

MAIN_MENU = [
    ("1", "Book Management", "📚"),
    ("2", "User Management", "👥"),
    ("3", "Issue/Return Books", "🔁"),
    ("4", "Search", "🔎"),
    ("5", "Reports", "📊"),
    ("0", "Exit", "🚪"),
]


def run_menu() -> None:
    """Interactive menu. Data is loaded once at start and both files are saved on exit."""
    lib = Library(books_file=_state["books_file"], users_file=_state["users_file"], autosave=True)
    lib.load()
    console.print(f"[bold cyan]===== {APP_NAME} =====[/]")

    while True:
        choice = _choose(APP_NAME, MAIN_MENU)
        if choice == "0":
            console.print("Exiting the system. Saving data...")
            lib.close()
            console.print("[green]Data saved. Thank you![/]")
            break

        title, items, action = SUBMENUS[choice]
        while True:
            sub_choice = _choose(title, items)
            if sub_choice == "0":
                break
            action(lib, sub_choice)
            print()  # blank line between operations


if __name__ == "__main__":
    if len(sys.argv) > 1:
        app()
    else:
        run_menu()
