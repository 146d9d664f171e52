"""
Logging utilities for worker processes and the command line.

Worker processes started by the isolated normalizer send their log records
through a multiprocessing queue; a listener thread in the parent hands them
to the parent's own loggers so warnings from workers land in the same
place as everything else.
"""
from __future__ import annotations

import logging
import multiprocessing
import threading
from logging.handlers import QueueHandler
from queue import Empty
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(verbose: bool = False) -> None:
    """
    Configure root logging for command line use.

    Args:
        verbose: Log DEBUG records when True, INFO otherwise.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    # Pillow logs every plugin it probes at DEBUG level
    logging.getLogger("PIL").setLevel(logging.INFO)


# =============================================================================
# Multiprocessing Logging Support
# =============================================================================

def configure_worker_logging(mp_log_queue: multiprocessing.Queue, level: int = logging.DEBUG) -> None:
    """
    Configure logging in a child process to send logs to a multiprocessing queue.

    Call this as the initializer for ProcessPoolExecutor to enable log
    capture from worker processes.

    Args:
        mp_log_queue: Multiprocessing queue to send log records to.
        level: Minimum level forwarded from the worker.

    Example:
        >>> with ProcessPoolExecutor(
        ...     max_workers=4,
        ...     initializer=configure_worker_logging,
        ...     initargs=(mp_log_queue,),
        ... ) as executor:
        ...     # workers will send logs to mp_log_queue
    """
    # Get root logger and remove all existing handlers
    root = logging.getLogger()
    root.handlers = []

    # Add QueueHandler that sends to multiprocessing queue
    root.addHandler(QueueHandler(mp_log_queue))
    root.setLevel(level)
    logging.getLogger("PIL").setLevel(logging.INFO)


def start_log_listener(
    mp_log_queue: multiprocessing.Queue,
    stop_event: threading.Event,
) -> threading.Thread:
    """
    Start a listener thread that reads worker records and dispatches them
    to the logger of the same name in this process.

    Args:
        mp_log_queue: Multiprocessing queue that workers write to.
        stop_event: Event to signal listener to stop.

    Returns:
        The listener thread (already started).

    Example:
        >>> stop_event = threading.Event()
        >>> listener = start_log_listener(mp_queue, stop_event)
        >>> # ... do work ...
        >>> stop_event.set()
        >>> listener.join()
    """
    def _listener():
        while not stop_event.is_set():
            try:
                record = mp_log_queue.get(timeout=0.1)
            except Empty:
                continue
            except (EOFError, OSError):
                break  # Queue closed underneath us
            if record is None:  # Sentinel value
                break
            logger = logging.getLogger(record.name)
            if logger.isEnabledFor(record.levelno):
                logger.handle(record)

    thread = threading.Thread(target=_listener, name="worker-log-listener", daemon=True)
    thread.start()
    return thread


def stop_log_listener(
    mp_log_queue: multiprocessing.Queue,
    stop_event: threading.Event,
    thread: Optional[threading.Thread],
) -> None:
    """Signal the listener to drain and exit, then join it."""
    if thread is None:
        return
    try:
        mp_log_queue.put_nowait(None)
    except (ValueError, OSError):
        stop_event.set()
    thread.join(timeout=2.0)
    stop_event.set()
