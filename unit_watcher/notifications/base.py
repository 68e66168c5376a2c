"""Notification interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Abstract interface for delivering alert text, best effort."""

    @abstractmethod
    def send(self, text: str) -> bool:
        """Deliver ``text``; return ``False`` on failure instead of raising."""
        raise NotImplementedError

    def close(self) -> None:
        """Release any resources held by the notifier."""
