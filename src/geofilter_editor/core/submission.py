"""Building the outgoing request snapshot and handling its response."""

from __future__ import annotations

import itertools
import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from .advisory import Advisory, query_required
from .exclusivity import compute_effective_request
from .memory import MemoryCache
from .models import FilterSlot, RequestSnapshot
from .origin import OriginController
from .placeholder import validate_for_submission
from .session import EditorSession
from .shape_store import ShapeStore

logger = logging.getLogger(__name__)


class SubmissionController(QObject):
    """
    Validates the editor state and produces RequestSnapshots.

    Each submission gets a guard token. Only the response for the latest
    token is applied; responses for superseded submissions are discarded.
    """

    submitted = pyqtSignal(int, object)  # token, RequestSnapshot
    response_applied = pyqtSignal(int)
    advisory_raised = pyqtSignal(object)  # Advisory

    def __init__(
        self,
        store: ShapeStore,
        memory: MemoryCache,
        session: EditorSession,
        origin: OriginController
    ) -> None:
        super().__init__()
        self._store = store
        self._memory = memory
        self._session = session
        self._origin = origin
        self._tokens = itertools.count(1)
        self._latest_token: Optional[int] = None
        self._submitted_snapshot: Optional[RequestSnapshot] = None

    @property
    def submitted_snapshot(self) -> Optional[RequestSnapshot]:
        """The snapshot of the latest submission, or None after a clear."""
        return self._submitted_snapshot

    @property
    def latest_token(self) -> Optional[int]:
        return self._latest_token

    def _raise(self, advisory: Advisory) -> None:
        self.advisory_raised.emit(advisory)

    def build_snapshot(self) -> Optional[RequestSnapshot]:
        """
        Validate the current state and derive the outgoing snapshot.

        Returns:
            The snapshot, or None if a blocking advisory was raised
        """
        if not self._session.query:
            advisory = query_required()
            logger.warning(advisory.message)
            self._raise(advisory)
            return None

        bias = self._store.get_shape(FilterSlot.BIAS)
        restriction = self._store.get_shape(FilterSlot.RESTRICTION)

        advisory = validate_for_submission(bias, restriction)
        if advisory is not None:
            logger.warning(advisory.message)
            self._raise(advisory)
            return None

        effective_bias, effective_restriction = compute_effective_request(
            bias, restriction, on_advisory=self._raise
        )
        return RequestSnapshot(
            bias=effective_bias,
            restriction=effective_restriction,
            origin=self._origin.point,
            query=self._session.query,
        )

    def submit(self) -> Optional[int]:
        """
        Submit the current state.

        Returns:
            The guard token for this submission, or None if it was rejected
        """
        snapshot = self.build_snapshot()
        if snapshot is None:
            return None

        token = next(self._tokens)
        self._latest_token = token
        self._submitted_snapshot = snapshot
        self._session.mark_submitted()
        self._origin.cancel_placing()

        logger.info(f"Submitted request #{token}")
        self.submitted.emit(token, snapshot)
        return token

    def response_received(self, token: int) -> bool:
        """
        Record a received response and apply its memory reset.

        Any response ends the pristine session; only the response for the
        latest token resets memory.

        Args:
            token: Token returned by the submit() the response belongs to

        Returns:
            False if the token is stale or no submission is pending
        """
        self._session.mark_response_received()

        if token != self._latest_token or self._submitted_snapshot is None:
            logger.info(f"Discarding stale response #{token}")
            return False

        for slot in FilterSlot:
            self._memory.apply_submission(slot, self._submitted_snapshot.shape_for(slot))

        logger.info(f"Applied response #{token}")
        self.response_applied.emit(token)
        return True

    def reset(self) -> None:
        """Forget the submitted snapshot; pending responses become stale."""
        self._latest_token = None
        self._submitted_snapshot = None
