import os
import json
from typing import List, Any, Dict, Tuple
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def print_book_list(books: List[Any], title: str = "Books", empty_message: str = "No books in the library.") -> None:
    """Print books according to the current output mode.
    - plain: 'Title | Author | ISBN | Status' lines
    - json: JSON array of book records
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
        return

    if not books:
        print(empty_message)
        return

    if mode == "rich":
        table = Table(title=f"📚 {title}", show_lines=True, header_style="bold cyan")
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Status")
        for b in books:
            status = "[green]Available[/]" if b.available else "[red]Borrowed[/]"
            table.add_row(escape(b.title), escape(b.author), escape(b.isbn), status)
        _console.print(table)
    else:
        for b in books:
            print(f"{b.title} | {b.author} | {b.isbn} | {b.status}")


def print_book_detail(book: Any) -> None:
    mode = get_output_mode()
    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
        return

    lines = [
        f"ISBN: {book.isbn}",
        f"Title: {book.title}",
        f"Author: {book.author}",
        f"Genre: {book.genre}",
        f"Status: {book.status}",
        f"Times borrowed: {book.borrow_count}",
    ]
    if mode == "rich":
        _console.print(Panel.fit(escape("\n".join(lines)), title="🔍 Book Found", border_style="green"))
    else:
        print("Book Found")
        for line in lines:
            print(line)


def print_user_list(users: List[Any], title: str = "Users", empty_message: str = "No users registered in the system.") -> None:
    mode = get_output_mode()

    if mode == "json":
        payload = [u.to_dict() for u in users]
        print(json.dumps(payload, ensure_ascii=False))
        return

    if not users:
        print(empty_message)
        return

    if mode == "rich":
        table = Table(title=f"👥 {title}", header_style="bold cyan")
        table.add_column("ID", style="magenta", justify="right")
        table.add_column("Name", style="white")
        table.add_column("Books Borrowed", justify="right")
        for u in users:
            table.add_row(str(u.id), escape(u.name), str(u.borrowed_count))
        _console.print(table)
    else:
        for u in users:
            print(f"{u.id} | {u.name} | {u.borrowed_count}")


def print_user_detail(user: Any, books: List[Any]) -> None:
    """Show a user and the books they currently hold."""
    mode = get_output_mode()
    if mode == "json":
        payload = {"id": user.id, "name": user.name, "borrowed": [b.to_dict() for b in books]}
        print(json.dumps(payload, ensure_ascii=False))
        return

    lines = [f"ID: {user.id}", f"Name: {user.name}", f"Books borrowed: {user.borrowed_count}"]
    for i, b in enumerate(books, 1):
        lines.append(f"{i}. {b.title} by {b.author} (ISBN: {b.isbn})")
    if mode == "rich":
        _console.print(Panel.fit(escape("\n".join(lines)), title="👤 User Found", border_style="green"))
    else:
        print("User Found")
        for line in lines:
            print(line)


def print_borrowed_result(pairs: List[Tuple[Any, Any]]) -> None:
    mode = get_output_mode()

    if mode == "json":
        payload = [{**b.to_dict(), "user_id": u.id, "user_name": u.name} for b, u in pairs]
        print(json.dumps(payload, ensure_ascii=False))
        return

    if not pairs:
        print("No books are currently borrowed.")
        return

    if mode == "rich":
        table = Table(title="📖 Currently Borrowed Books", show_lines=True, header_style="bold cyan")
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Borrowed By")
        for b, u in pairs:
            table.add_row(escape(b.title), escape(b.author), escape(b.isbn), escape(f"{u.name} (ID: {u.id})"))
        _console.print(table)
    else:
        for b, u in pairs:
            print(f"{b.title} | {b.author} | {b.isbn} | {u.name} (ID: {u.id})")


def print_most_borrowed_result(books: List[Any]) -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
        return

    if not books:
        print("No books have been borrowed yet.")
        return

    if mode == "rich":
        table = Table(title="🏆 Most Borrowed Books", header_style="bold cyan")
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("ISBN", style="magenta", no_wrap=True)
        table.add_column("Borrows", justify="right")
        for b in books:
            table.add_row(escape(b.title), escape(b.author), escape(b.isbn), str(b.borrow_count))
        _console.print(table)
    else:
        for b in books:
            print(f"{b.title} | {b.author} | {b.isbn} | {b.borrow_count}")


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics according to the current output mode."""
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = [
        ("total_books", "Total Books"),
        ("available_books", "Available Books"),
        ("borrowed_books", "Borrowed Books"),
        ("unique_authors", "Unique Authors"),
        ("total_users", "Total Users"),
        ("active_users", "Active Users"),
    ]

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {stats.get(key, 0)}" for key, label in labels)
        _console.print(Panel.fit(content, title="📊 Stats", border_style="blue"))
    else:
        for key, label in labels:
            print(f"{label}: {stats.get(key, 0)}")


def print_message(message: str, style: str = "") -> None:
    """Print a one-line status message; styled only in rich mode."""
    if get_output_mode() == "rich" and style:
        _console.print(f"[{style}]{escape(message)}[/]")
    else:
        print(message)
