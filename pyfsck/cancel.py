"""Cooperative cancellation for long walks over the object graph."""

from __future__ import annotations

import threading

from .errors import OperationCancelledError


class CancelToken:
    """Set from any thread; the walk checks it between steps."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("operation cancelled")
