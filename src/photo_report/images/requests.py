"""
Module: images.requests

Purpose:
    Correlation of in-flight normalization requests. Each request gets a
    generated id; the owning normalizer tracks it in a RequestTable from
    submission until completion, when the entry is removed.

Key Classes:
    - NormalizationRequest: Handle returned to the caller (id + future)
    - RequestTable: Thread-safe id -> Future table of pending requests

Dependencies:
    - concurrent.futures: Future
    - threading (std): Lock
    - uuid (std): Request ids

Used By:
    - images.provider: Both normalizer strategies
    - layout.composer: Awaits requests in document order
"""

from __future__ import annotations

import logging
import threading
import uuid
from concurrent.futures import Future
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from .normalizer import NormalizedImage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizationRequest:
    """
    Handle for one submitted normalization.

    Attributes:
        id: Generated request id
        future: Completes with a NormalizedImage or an exception
    """

    id: str
    future: Future

    @property
    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> "NormalizedImage":
        """
        Block until the normalization finishes.

        Raises:
            ImageDecodeError: If the source could not be decoded
        """
        return self.future.result(timeout=timeout)


class RequestTable:
    """
    Thread-safe table of pending normalization requests.

    Entries are inserted when a request is issued and removed as soon as
    its future completes, whether it succeeded or failed. Completion
    callbacks run on executor threads, so every access is guarded by a
    lock. One table belongs to one normalizer instance.

    Example:
        >>> table = RequestTable()
        >>> request = table.register(future)
        >>> request.id in table
        True
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: Dict[str, Future] = {}

    def register(self, future: Future) -> NormalizationRequest:
        """
        Track a future until it completes.

        Args:
            future: Future for the normalization result

        Returns:
            NormalizationRequest carrying the generated id
        """
        request_id = uuid.uuid4().hex
        with self._lock:
            self._pending[request_id] = future
        # Runs immediately when the future is already done
        future.add_done_callback(lambda f: self._complete(request_id, f))
        return NormalizationRequest(id=request_id, future=future)

    def get(self, request_id: str) -> Optional[Future]:
        """Future of a pending request, or None once it has completed."""
        with self._lock:
            return self._pending.get(request_id)

    def pending_ids(self) -> List[str]:
        with self._lock:
            return list(self._pending)

    def cancel_all(self) -> int:
        """
        Cancel every request that has not started.

        Returns:
            Number of futures cancelled
        """
        with self._lock:
            futures = list(self._pending.values())
        return sum(1 for f in futures if f.cancel())

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def __contains__(self, request_id: object) -> bool:
        with self._lock:
            return request_id in self._pending

    def _complete(self, request_id: str, future: Future) -> None:
        with self._lock:
            self._pending.pop(request_id, None)
        if future.cancelled():
            logger.debug(f"Normalization request {request_id} cancelled")
        elif future.exception() is not None:
            logger.debug(f"Normalization request {request_id} failed: {future.exception()}")
