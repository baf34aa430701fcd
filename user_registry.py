from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from exceptions import HasBorrowedBooksError, UserNotFoundError
from user import User

logger = logging.getLogger(__name__)

FIRST_USER_ID = 1001


class _UserNode:
    __slots__ = ("user", "next")

    def __init__(self, user: User, next_node: Optional["_UserNode"] = None) -> None:
        self.user = user
        self.next = next_node


class UserRegistry:
    """Singly linked list of users. New users are prepended, so iteration is newest first."""

    def __init__(self) -> None:
        self._head: Optional[_UserNode] = None
        self._tail: Optional[_UserNode] = None
        self._size = 0
        self.next_user_id = FIRST_USER_ID

    def add(self, name: str) -> User:
        user = User(self.next_user_id, name)
        self.next_user_id += 1
        self._head = _UserNode(user, self._head)
        if self._tail is None:
            self._tail = self._head
        self._size += 1
        logger.info(f"User '{user.name}' added with ID {user.id}")
        return user

    def append_loaded(self, user: User) -> None:
        """Append a persisted user at the tail, keeping next_user_id above every id seen."""
        node = _UserNode(user)
        if self._tail is None:
            self._head = self._tail = node
        else:
            self._tail.next = node
            self._tail = node
        self._size += 1
        if user.id >= self.next_user_id:
            self.next_user_id = user.id + 1

    def find(self, user_id: int) -> Optional[User]:
        node = self._head
        while node is not None:
            if node.user.id == user_id:
                return node.user
            node = node.next
        return None

    def remove(self, user_id: int) -> User:
        prev = None
        node = self._head
        while node is not None and node.user.id != user_id:
            prev = node
            node = node.next

        if node is None:
            raise UserNotFoundError(user_id)
        if node.user.borrowed:
            raise HasBorrowedBooksError(user_id, node.user.name)

        if prev is None:
            self._head = node.next
        else:
            prev.next = node.next
        if self._tail is node:
            self._tail = prev
        self._size -= 1
        logger.info(f"User '{node.user.name}' (ID: {user_id}) removed")
        return node.user

    def all(self) -> List[User]:
        return list(self)

    def __iter__(self) -> Iterator[User]:
        node = self._head
        while node is not None:
            yield node.user
            node = node.next

    def __len__(self) -> int:
        return self._size
