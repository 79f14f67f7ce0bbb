"""Mapping from transport task ids to in-flight request handles."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from routekit.request import Request


class TaskRegistry:
    """Thread-safe ``task_id -> Request`` mapping owned by a session.

    An entry exists only while its exchange is in flight: it is added when
    the request is submitted and popped when the transport reports the
    outcome, whatever that outcome is. A handle whose completion is later
    swallowed by ``should_continue`` is therefore not retained here once its
    response has arrived.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests: dict[int, Request] = {}

    def register(self, task_id: int, request: Request) -> None:
        """Record *request* as the handle for *task_id*.

        Raises:
            ValueError: If *task_id* already maps to a live handle.
        """
        with self._lock:
            if task_id in self._requests:
                raise ValueError(f"Task {task_id} is already registered")
            self._requests[task_id] = request

    def pop(self, task_id: int) -> Optional[Request]:
        """Remove and return the handle for *task_id*, or ``None`` if unknown."""
        with self._lock:
            return self._requests.pop(task_id, None)

    def get(self, task_id: int) -> Optional[Request]:
        with self._lock:
            return self._requests.get(task_id)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._requests

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)
