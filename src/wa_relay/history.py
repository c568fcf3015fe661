from __future__ import annotations

import threading
from collections import OrderedDict, deque
from typing import Literal, TypedDict

Role = Literal["system", "user", "assistant"]


class Turn(TypedDict):
    role: Role
    content: str


class ConversationStore:
    """
    In-memory conversation windows, one per sender.

    Each sender keeps at most `max_turns` turns (oldest dropped first).
    At most `max_senders` senders are kept; the least recently active one
    is evicted when a new sender arrives. Nothing is persisted.
    """

    def __init__(self, max_turns: int = 10, max_senders: int = 1000) -> None:
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        if max_senders < 1:
            raise ValueError("max_senders must be at least 1")
        self.max_turns = max_turns
        self.max_senders = max_senders
        self._windows: OrderedDict[str, deque[Turn]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def __contains__(self, sender: object) -> bool:
        with self._lock:
            return sender in self._windows

    def window(self, sender: str) -> list[Turn]:
        """Return a copy of the sender's recent turns, oldest first."""
        with self._lock:
            turns = self._windows.get(sender)
            if turns is None:
                return []
            self._windows.move_to_end(sender)
            return list(turns)

    def append(self, sender: str, *turns: Turn) -> None:
        with self._lock:
            window = self._windows.get(sender)
            if window is None:
                window = deque(maxlen=self.max_turns)
                self._windows[sender] = window
                while len(self._windows) > self.max_senders:
                    self._windows.popitem(last=False)
            else:
                self._windows.move_to_end(sender)
            window.extend(turns)

    def clear(self, sender: str | None = None) -> None:
        """Forget one sender, or everyone when sender is None."""
        with self._lock:
            if sender is None:
                self._windows.clear()
            else:
                self._windows.pop(sender, None)
