"""
Module: images.provider

Purpose:
    Interchangeable strategies for running image normalization. The
    isolated strategy runs normalize_image() in worker processes; the
    synchronous strategy runs it in the calling thread. Both honor the
    same submit/result contract so callers never know which is active.

Key Classes:
    - ImageNormalizer: Abstract normalization capability
    - ProcessPoolNormalizer: Isolated worker processes (preferred)
    - SynchronousNormalizer: In-process fallback

Key Functions:
    - supports_isolated_workers(): Capability probe
    - create_normalizer(): Select a strategy once

Dependencies:
    - concurrent.futures: ProcessPoolExecutor, Future
    - multiprocessing (std): Worker log queue
    - images.normalizer: normalize_image
    - images.requests: RequestTable

Used By:
    - layout.composer: Requests normalization per photo
    - controller: Owns one normalizer per session
"""

from __future__ import annotations

import logging
import multiprocessing
import os
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future, ProcessPoolExecutor
from functools import lru_cache
from typing import Optional

from photo_report.core.models.report import PhotoSource
from photo_report.utils.logging_utils import (
    configure_worker_logging,
    start_log_listener,
    stop_log_listener,
)

from .normalizer import NormalizedImage, normalize_image
from .requests import NormalizationRequest, RequestTable

logger = logging.getLogger(__name__)


class ImageNormalizer(ABC):
    """
    Abstract normalization capability.

    submit() issues a request and returns immediately with a handle;
    result() waits for it. Requests are independent and may complete in
    any order. A decode failure only fails its own request.
    """

    def __init__(self) -> None:
        self._requests = RequestTable()

    @property
    def requests(self) -> RequestTable:
        """Pending request table owned by this normalizer."""
        return self._requests

    @property
    @abstractmethod
    def name(self) -> str:
        """Short strategy name for logs and reports."""

    @abstractmethod
    def submit(self, source: PhotoSource, rotation: int = 0) -> NormalizationRequest:
        """
        Issue a normalization request.

        Args:
            source: Encoded image bytes or path
            rotation: Clockwise rotation in degrees

        Returns:
            Handle whose future completes with a NormalizedImage
        """

    def result(self, request: NormalizationRequest, timeout: Optional[float] = None) -> NormalizedImage:
        """
        Wait for a request to finish.

        Raises:
            ImageDecodeError: If that source could not be decoded
        """
        return request.result(timeout=timeout)

    def normalize(self, source: PhotoSource, rotation: int = 0) -> NormalizedImage:
        """Submit and wait for a single image."""
        return self.result(self.submit(source, rotation))

    def close(self) -> None:
        """Release resources held by the strategy."""

    def __enter__(self) -> "ImageNormalizer":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class SynchronousNormalizer(ImageNormalizer):
    """
    In-process fallback strategy.

    Work happens inside submit(); the returned handle is already done.
    Failures are stored on the future, not raised from submit(), so the
    contract matches the isolated strategy exactly.
    """

    @property
    def name(self) -> str:
        return "synchronous"

    def submit(self, source: PhotoSource, rotation: int = 0) -> NormalizationRequest:
        future: Future = Future()
        request = self._requests.register(future)
        try:
            future.set_result(normalize_image(source, rotation))
        except Exception as e:
            future.set_exception(e)
        return request


class ProcessPoolNormalizer(ImageNormalizer):
    """
    Isolated strategy: one pool of worker processes per normalizer.

    The pool is created lazily on first submit and lives until close().
    Worker log records are forwarded to this process's loggers.

    Example:
        >>> with ProcessPoolNormalizer(max_workers=2) as normalizer:
        ...     request = normalizer.submit(jpeg_bytes, 90)
        ...     image = normalizer.result(request)
    """

    def __init__(self, max_workers: Optional[int] = None) -> None:
        super().__init__()
        cpu_count = os.cpu_count() or 2
        self._max_workers = max_workers or max(1, min(cpu_count - 1, 4))
        self._executor: Optional[ProcessPoolExecutor] = None
        self._log_queue: Optional[multiprocessing.Queue] = None
        self._stop_event = threading.Event()
        self._listener: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "process-pool"

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def submit(self, source: PhotoSource, rotation: int = 0) -> NormalizationRequest:
        executor = self._get_executor()
        future = executor.submit(normalize_image, source, rotation)
        return self._requests.register(future)

    def close(self) -> None:
        """Shut down workers; requests not yet started are cancelled."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is None:
            return
        cancelled = self._requests.cancel_all()
        if cancelled:
            logger.debug(f"Cancelled {cancelled} pending normalization requests")
        executor.shutdown(wait=True)
        stop_log_listener(self._log_queue, self._stop_event, self._listener)
        self._listener = None
        self._log_queue = None

    def _get_executor(self) -> ProcessPoolExecutor:
        """Lazy-start the pool and the worker log listener."""
        with self._lock:
            if self._executor is None:
                self._log_queue = multiprocessing.Queue()
                self._stop_event.clear()
                self._listener = start_log_listener(self._log_queue, self._stop_event)
                self._executor = ProcessPoolExecutor(
                    max_workers=self._max_workers,
                    initializer=configure_worker_logging,
                    initargs=(self._log_queue, logging.getLogger("photo_report").getEffectiveLevel()),
                )
                logger.debug(f"Started normalization pool with {self._max_workers} workers")
            return self._executor


@lru_cache(maxsize=1)
def supports_isolated_workers() -> bool:
    """
    Probe whether worker processes can be used on this platform.

    Process pools need working POSIX semaphores; sandboxed runtimes
    (some serverless hosts, restricted containers) lack them and fail
    when the first lock is allocated.

    Returns:
        True if a ProcessPoolExecutor can be created
    """
    try:
        import multiprocessing.synchronize  # noqa: F401  (fails without sem_open)
        multiprocessing.get_context().Lock()
    except (ImportError, OSError, NotImplementedError) as e:
        logger.info(f"Worker processes unavailable, using synchronous normalization: {e}")
        return False
    return True


def create_normalizer(
    prefer_isolated: bool = True,
    max_workers: Optional[int] = None,
) -> ImageNormalizer:
    """
    Select the normalization strategy once.

    Args:
        prefer_isolated: Use worker processes when the platform allows
        max_workers: Worker count for the isolated strategy

    Returns:
        ProcessPoolNormalizer or SynchronousNormalizer
    """
    if prefer_isolated and supports_isolated_workers():
        normalizer: ImageNormalizer = ProcessPoolNormalizer(max_workers=max_workers)
    else:
        normalizer = SynchronousNormalizer()
    logger.info(f"Using {normalizer.name} image normalization")
    return normalizer
