"""
In-memory indexes over the book catalog.

BookIndex  - fixed-size hash table keyed by ISBN, collisions chained per bucket.
TitleIndex - unbalanced binary search tree keyed by title. Nodes keep the
             ISBN and resolve the Book through the BookIndex when queried.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from book import Book
from exceptions import BookBorrowedError, BookNotFoundError

HASH_TABLE_SIZE = 101
_HASH_BASE = 31
_UINT32_MASK = 0xFFFFFFFF


def hash_isbn(isbn: str, table_size: int = HASH_TABLE_SIZE) -> int:
    """Polynomial hash over the ISBN bytes (base 31, unsigned 32-bit wraparound)."""
    h = 0
    for b in isbn.encode("utf-8"):
        h = (h * _HASH_BASE + b) & _UINT32_MASK
    return h % table_size


class _ChainNode:
    """Linked-list node of a bucket chain."""

    __slots__ = ("book", "next")

    def __init__(self, book: Book, next_node: Optional["_ChainNode"] = None) -> None:
        self.book = book
        self.next = next_node


class BookIndex:
    """Primary store of Book records, hash table with separate chaining.

    The table size is fixed; chains simply grow, so no resize ever happens.
    """

    def __init__(self, table_size: int = HASH_TABLE_SIZE) -> None:
        self._table_size = table_size
        self._buckets: List[Optional[_ChainNode]] = [None] * table_size
        self._size = 0

    def _index(self, isbn: str) -> int:
        return hash_isbn(isbn, self._table_size)

    def insert(self, book: Book) -> bool:
        """Prepend the book to its bucket chain. Returns False if the ISBN is already present."""
        index = self._index(book.isbn)
        node = self._buckets[index]
        while node is not None:
            if node.book.isbn == book.isbn:
                return False
            node = node.next
        self._buckets[index] = _ChainNode(book, self._buckets[index])
        self._size += 1
        return True

    def find(self, isbn: str) -> Optional[Book]:
        node = self._buckets[self._index(isbn)]
        while node is not None:
            if node.book.isbn == isbn:
                return node.book
            node = node.next
        return None

    def remove(self, isbn: str) -> Book:
        """Unlink a book from its chain. Books on loan cannot be removed."""
        index = self._index(isbn)
        node = self._buckets[index]
        prev = None
        while node is not None and node.book.isbn != isbn:
            prev = node
            node = node.next

        if node is None:
            raise BookNotFoundError(isbn)
        if not node.book.available:
            raise BookBorrowedError(isbn, node.book.title)

        if prev is None:
            self._buckets[index] = node.next
        else:
            prev.next = node.next
        self._size -= 1
        return node.book

    def longest_chain(self) -> int:
        longest = 0
        for head in self._buckets:
            length = 0
            node = head
            while node is not None:
                length += 1
                node = node.next
            longest = max(longest, length)
        return longest

    def __iter__(self) -> Iterator[Book]:
        for head in self._buckets:
            node = head
            while node is not None:
                yield node.book
                node = node.next

    def __contains__(self, isbn: object) -> bool:
        return isinstance(isbn, str) and self.find(isbn) is not None

    def __len__(self) -> int:
        return self._size


class _TreeNode:
    __slots__ = ("title", "isbn", "left", "right")

    def __init__(self, title: str, isbn: str) -> None:
        self.title = title
        self.isbn = isbn
        self.left: Optional[_TreeNode] = None
        self.right: Optional[_TreeNode] = None


class TitleIndex:
    """Secondary lookup path by title.

    Ordering invariant: left subtree < node <= right subtree. Equal titles are
    kept and routed right, so several editions can share a title.
    """

    def __init__(self, books: BookIndex) -> None:
        self._books = books
        self._root: Optional[_TreeNode] = None
        self._size = 0

    def insert(self, book: Book) -> None:
        new_node = _TreeNode(book.title, book.isbn)
        self._size += 1
        if self._root is None:
            self._root = new_node
            return

        current = self._root
        while True:
            if book.title < current.title:
                if current.left is None:
                    current.left = new_node
                    return
                current = current.left
            else:
                if current.right is None:
                    current.right = new_node
                    return
                current = current.right

    def find_exact(self, title: str) -> Optional[Book]:
        """Return the first book met on the descent whose title matches exactly."""
        current = self._root
        while current is not None:
            if title == current.title:
                return self._books.find(current.isbn)
            current = current.left if title < current.title else current.right
        return None

    def inorder(self) -> List[Book]:
        """Books in ascending title order."""
        result: List[Book] = []
        stack: List[_TreeNode] = []
        current = self._root
        while stack or current is not None:
            while current is not None:
                stack.append(current)
                current = current.left
            current = stack.pop()
            book = self._books.find(current.isbn)
            if book is not None:
                result.append(book)
            current = current.right
        return result

    def remove(self, book: Book) -> bool:
        """Excise the node holding this book's ISBN. Returns False if it is not indexed."""
        parent: Optional[_TreeNode] = None
        current = self._root
        while current is not None:
            if book.title == current.title and book.isbn == current.isbn:
                break
            parent = current
            current = current.left if book.title < current.title else current.right

        if current is None:
            return False

        if current.left is not None and current.right is not None:
            # two children: pull up the in-order successor
            succ_parent = current
            succ = current.right
            while succ.left is not None:
                succ_parent = succ
                succ = succ.left
            current.title, current.isbn = succ.title, succ.isbn
            if succ_parent is current:
                succ_parent.right = succ.right
            else:
                succ_parent.left = succ.right
        else:
            child = current.left if current.left is not None else current.right
            if parent is None:
                self._root = child
            elif parent.left is current:
                parent.left = child
            else:
                parent.right = child

        self._size -= 1
        return True

    def height(self) -> int:
        """Height of the tree, 0 when empty."""
        height = 0
        level = [self._root] if self._root is not None else []
        while level:
            height += 1
            level = [child for node in level for child in (node.left, node.right) if child is not None]
        return height

    def __len__(self) -> int:
        return self._size
