"""Editing-session flags that decide when default shapes may be seeded."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)


class EditorSession(QObject):
    """
    Tracks the primary query text and the session's lifecycle flags.

    The session is pristine while the query still equals its seed value,
    nothing has been submitted, no response has been received and no
    global clear has ever happened.
    """

    query_changed = pyqtSignal(str)
    seed_departed = pyqtSignal()  # Query text moved away from the seed value

    def __init__(self, seed_query: str) -> None:
        super().__init__()
        self._seed_query = seed_query
        self._query = seed_query
        self.request_submitted = False
        self.response_received = False
        self.has_been_cleared = False

    @property
    def seed_query(self) -> str:
        return self._seed_query

    @property
    def query(self) -> str:
        return self._query

    def set_query(self, text: str) -> None:
        """
        Update the primary query text.

        Emits seed_departed on the transition from the seed value to
        anything else.
        """
        if text == self._query:
            return

        previous = self._query
        self._query = text
        self.query_changed.emit(text)

        if previous == self._seed_query and text != self._seed_query:
            logger.debug(f"Query left its seed value {self._seed_query!r}")
            self.seed_departed.emit()

    def is_pristine(self) -> bool:
        """Check whether default shapes may still be synthesized."""
        return (
            self._query == self._seed_query and
            not self.request_submitted and
            not self.response_received and
            not self.has_been_cleared
        )

    def mark_submitted(self) -> None:
        """Record that a request was sent."""
        self.request_submitted = True

    def mark_response_received(self) -> None:
        self.response_received = True

    def mark_cleared(self) -> None:
        """Record a global clear. The session never becomes pristine again."""
        self.request_submitted = False
        self.response_received = False
        self.has_been_cleared = True
